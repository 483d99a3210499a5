"""Textual user interface for alltz."""
