"""
Custom Exceptions

This module defines the error taxonomy of the shortener core.

Each failure class keeps its own type so the HTTP layer can map it
to a status code without inspecting messages:
- InvalidURLError: input rejected before touching the store
- ShortCodeNotFoundError: lookup, resolve or statistics on an unknown code
- ExhaustedRetriesError: every generated code collided, retry later
- StoreUnavailableError: the database could not complete the operation

A code collision is not an exception. The store reports it as
CreateStatus.CONFLICT and only the creator ever sees it.
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class ExhaustedRetriesError(URLShortenerException):
    """Raised when every generation attempt collided with a taken code."""

    def __init__(self, original_url: str, attempts: int):
        self.original_url = original_url
        self.attempts = attempts
        super().__init__(
            f"Failed to generate unique short code after {attempts} attempts"
        )


class StoreUnavailableError(URLShortenerException):
    """Raised when the backing database cannot complete an operation."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Store unavailable: {message}")
