"""
Application errors raised by the service layer.

Each error denotes a rejected action; none of them leaves partial state
behind. The HTTP layer renders them through the handler registered in
app.main.
"""
from http import HTTPStatus
from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human readable message shown to the caller
        status_code: HTTP status code
        details: Extra keys merged into the response body
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, **self.details}


class ForbiddenError(AppException):
    """The authorization rules denied the action."""

    def __init__(self, message: str = "This action is unauthorized."):
        super().__init__(message=message, status_code=HTTPStatus.FORBIDDEN)


class NotFoundError(AppException):
    """The referenced entity does not exist or is not publicly resolvable."""

    def __init__(self, message: str = "Not found."):
        super().__init__(message=message, status_code=HTTPStatus.NOT_FOUND)


class ConflictError(AppException):
    """The action is permitted but violates a business invariant."""

    def __init__(self, message: str, redirect_to: Optional[str] = None):
        details = {"redirect_to": redirect_to} if redirect_to else None
        super().__init__(message=message, status_code=HTTPStatus.BAD_REQUEST, details=details)


class ValidationFailure(AppException):
    """Structurally invalid input, reported per field."""

    def __init__(self, errors: Dict[str, str], message: str = "The given data was invalid."):
        self.errors = errors
        super().__init__(
            message=message,
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details={"errors": errors}
        )
