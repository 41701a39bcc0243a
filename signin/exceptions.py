"""Sign-in exception hierarchy."""

from __future__ import annotations


class SignInError(Exception):
    """Base class for all sign-in specific exceptions."""


class AuthServiceUnavailableError(SignInError):
    """Raised when the auth service is temporarily unreachable."""


class AuthServiceResponseError(SignInError):
    """Raised when auth service returns malformed or unexpected data."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        """Initialize with optional HTTP status code context."""
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class InvalidCredentialsError(SignInError):
    """Raised by submitters that signal rejected credentials as an exception."""
