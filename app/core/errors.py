"""
Domain-specific exceptions for the User Directory API.

Every error raised by the service layer is an ``ApiError`` tagged with an
explicit ``ErrorKind``. The status carried by the error is the HTTP status
the transport layer should use; it may be ``None`` when the underlying fault
did not carry one, in which case the API layer falls back to 500.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Discriminant for service-layer errors."""

    NOT_FOUND = "not_found"
    MALFORMED_QUERY = "malformed_query"
    STORE_FAILURE = "store_failure"
    VALIDATION = "validation"


class ApiError(Exception):
    """Base exception for all User Directory errors."""

    kind: ErrorKind = ErrorKind.STORE_FAILURE
    default_status: int | None = None

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status = status if status is not None else self.default_status
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, status={self.status!r})"


class NotFoundError(ApiError):
    """
    Raised when an existence check finds no document.

    Examples:
    - find, update or delete by an id that is not in the collection
    - an id that is not a valid ObjectId

    HTTP Status: 422 Unprocessable Entity
    """

    kind = ErrorKind.NOT_FOUND
    default_status = 422


class MalformedQueryError(ApiError):
    """
    Raised when a search query cannot be normalized.

    Examples:
    - page or limit that is not a positive integer
    - a filter value that cannot be cast to the field's type
    - a query that fails to round-trip through JSON

    HTTP Status: as carried (400 for our own validation)
    """

    kind = ErrorKind.MALFORMED_QUERY


class StoreFailureError(ApiError):
    """
    Raised when a read or write against the document store fails.

    HTTP Status: as carried, otherwise decided by the API layer
    """

    kind = ErrorKind.STORE_FAILURE


class ValidationError(ApiError):
    """
    Raised when a request payload is rejected by the service layer.

    HTTP Status: 400 Bad Request
    """

    kind = ErrorKind.VALIDATION
    default_status = 400


DEFAULT_STATUS_CODE = 500


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        The status carried by an ``ApiError``, otherwise 500
    """
    if isinstance(error, ApiError) and error.status is not None:
        return error.status
    return DEFAULT_STATUS_CODE
