"""
Google Sheets error types.

Every client operation either succeeds or raises one of these. Nothing is
retried automatically; the caller decides what to show the user.
"""
from typing import Optional


class SheetsError(Exception):
    """Base class for all record store errors."""


class RemoteError(SheetsError):
    """The Sheets API answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"Google Sheets API error: {message}")


class NotFoundError(SheetsError, LookupError):
    """A sheet or record expected in already-fetched data is missing."""


class DecodeError(SheetsError, ValueError):
    """The response body did not have the expected shape."""
