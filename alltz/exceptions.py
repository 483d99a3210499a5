"""Exception hierarchy for alltz.

Exception Hierarchy:
    AlltzError (base)
    ├── DataError - city database could not be loaded (fatal at startup)
    ├── PersistError - config file read/write failure (warn and continue)
    ├── ZoneIndexError - zone index out of bounds (also an IndexError)
    └── NotFoundError - CLI query named an unknown city

Usage:
    from alltz.exceptions import DataError

    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise DataError("City database is not valid JSON", path=str(path)) from e
"""

from typing import Any


class AlltzError(Exception):
    """Base exception for all alltz errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., paths, indexes)
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class DataError(AlltzError):
    """The city database is unreadable or contains an invalid record."""

    def __init__(self, message: str = "City database is malformed", **context: Any) -> None:
        super().__init__(message, **context)


class PersistError(AlltzError):
    """Reading or writing the preferences file failed."""

    def __init__(self, message: str = "Could not persist configuration", **context: Any) -> None:
        super().__init__(message, **context)


class ZoneIndexError(AlltzError, IndexError):
    """A zone operation referenced an index outside the zone list."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__("Zone index out of range", index=index, size=size)


class NotFoundError(AlltzError):
    """A query named a city that is not in the database."""

    def __init__(self, city: str) -> None:
        self.city = city
        super().__init__(f"City '{city}' not found. Use 'alltz list' to see available cities.")
