"""Exception types raised by the Roster query engine."""

from typing import Optional


class RosterError(Exception):
    """Base class for engine errors."""

    pass


class UnknownFieldError(RosterError):
    """Raised by strict operator resolution when a field has no usable configuration."""

    def __init__(self, field_key: str, field_type: Optional[str] = None):
        self.field_key = field_key
        self.field_type = field_type
        if field_type is None:
            message = f"Unknown filter field: {field_key!r}"
        else:
            message = f"Filter field {field_key!r} has unrecognized type {field_type!r}"
        super().__init__(message)


class ListingRequestError(RosterError):
    """Raised when the listing endpoint cannot be reached or returns an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ColumnLimitError(RosterError):
    """Raised when showing another column would exceed the visible column cap."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"You can only show up to {limit} columns at once")
