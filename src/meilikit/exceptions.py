"""Client exceptions."""

from __future__ import annotations


class MeiliError(Exception):
    """Base exception for meilikit errors."""


class ApiError(MeiliError):
    """Raised when the server answers with an unexpected HTTP status.

    Attributes:
        status_code: HTTP status returned by the server.
        error_code: Machine-readable ``errorCode`` from the response body, if any.
    """

    def __init__(self, message: str, *, status_code: int, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class IndexNotFoundError(ApiError):
    """Raised when the requested index does not exist."""


class IndexAlreadyExistsError(ApiError):
    """Raised when creating an index whose uid is already taken."""


class DocumentNotFoundError(ApiError):
    """Raised when a requested document does not exist."""


class InvalidResponseError(MeiliError):
    """Raised when a server response cannot be decoded into a known shape."""
