"""
Custom exceptions for PyTrack.

Provides a hierarchy of exceptions that map to HTTP status codes
and include structured error information.
"""

from typing import Any


class PyTrackException(Exception):
    """
    Base exception for all PyTrack errors.

    All custom exceptions should inherit from this class.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# HTTP 400 - Bad Request Errors
# =============================================================================


class BadRequestError(PyTrackException):
    """Invalid request parameters or payload."""

    status_code = 400


class ValidationError(BadRequestError):
    """
    Validation failed.

    ``errors`` is a list of ``{"field", "code", "message"}`` dicts, one per
    failing rule, in the order the rules ran.
    """

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"errors": errors or []},
        )

    @property
    def errors(self) -> list[dict[str, Any]]:
        """Individual field errors."""
        return self.details["errors"]

    def has_error(self, field: str, code: str | None = None) -> bool:
        """Check whether a field failed, optionally with a specific error code."""
        return any(
            error["field"] == field and (code is None or error["code"] == code)
            for error in self.errors
        )


# =============================================================================
# HTTP 404 - Not Found Errors
# =============================================================================


class NotFoundError(PyTrackException):
    """Requested resource not found."""

    status_code = 404

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
    ) -> None:
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID '{identifier}' not found"

        super().__init__(
            message=message,
            code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class CommentNotFoundError(NotFoundError):
    """Comment not found."""

    def __init__(self, comment_id: str | None = None) -> None:
        super().__init__(resource="Comment", identifier=comment_id)


class TargetNotFoundError(NotFoundError):
    """Comment target not found."""

    def __init__(self, target_type: str, target_id: str | None = None) -> None:
        super().__init__(resource=target_type, identifier=target_id)


# =============================================================================
# HTTP 422 - Unprocessable Entity
# =============================================================================


class UnprocessableEntityError(PyTrackException):
    """Request cannot be processed."""

    status_code = 422


class UnknownTargetTypeError(UnprocessableEntityError):
    """Comments cannot be attached to this kind of object."""

    def __init__(self, target_type: str) -> None:
        super().__init__(
            message=f"Unknown comment target type: {target_type}",
            code="UNKNOWN_TARGET_TYPE",
            details={"target_type": target_type},
        )
