"""Exception classes for fbTimeCheck."""
from typing import Optional


class FreshBooksError(Exception):
    """Base class for all fbTimeCheck errors."""
    pass


class ConfigError(FreshBooksError):
    """A required setting is missing."""
    pass


class AuthenticationError(FreshBooksError):
    """Token exchange or refresh failed."""
    pass


class TokenExpiredError(AuthenticationError):
    """
    Access token is invalid or expired.

    Raised when a data call is answered with 401 so the caller can run
    the refresh / re-authorization cycle.
    """

    def __init__(self, message: str = "Access token is invalid or expired"):
        self.message = message
        super().__init__(message)


class FreshBooksAPIError(FreshBooksError):
    """Any other failed FreshBooks API request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
