"""Zone models for alltz."""

from .zones import Candidate, ZoneEntry, ZoneRegistry, format_offset

__all__ = ["Candidate", "ZoneEntry", "ZoneRegistry", "format_offset"]
