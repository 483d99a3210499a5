"""CLI command implementations for alltz."""
