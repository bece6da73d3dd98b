"""
Failure classification for the HTTP boundary.

Every error the core knows how to explain is a KnownError subclass. The
API layer turns these into an ApiResponse envelope with the error's own
status code; anything else becomes a fixed unknown failure.

Response types:
- KnownFailure: System knows why it failed
- UnknownFailure: System does not know why it failed
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    INVALID_SORT_FIELD = "invalid_sort_field"
    INVALID_MODIFICATION = "invalid_modification"

    # Resource failures
    NOT_FOUND = "not_found"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel):
    """
    Response envelope for failures leaving the API.

    Successful endpoints return their own response models; failures are
    always wrapped so the client can branch on `outcome`.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: Resource not found, invalid sort field.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(
        cls,
        detail: str | None = None,
    ) -> "ApiResponse":
        """
        Create an unknown failure response.

        The message is fixed; internal details never reach the client.
        """
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Something went wrong while handling the request.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidSortFieldError(KnownError):
    """Raised when a sort field name has no registered strategy."""

    def __init__(self, field: str, valid_fields: list[str]):
        self.field = field
        super().__init__(
            kind=FailureKind.INVALID_SORT_FIELD,
            message=f"Invalid order parameter '{field}'.",
            detail=f"Valid values: {', '.join(valid_fields)}",
            suggestion="Pick one of the listed sort fields.",
        )


class InvalidModificationError(KnownError):
    """
    Raised when a quantity modification batch cannot be applied.

    The whole batch is rejected; `index` points at the first bad entry.
    """

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_MODIFICATION,
            message=f"Invalid modification at position {index}: {reason}",
            suggestion="Fix the listed modification and resend the whole batch.",
        )


class InvalidPaginationError(KnownError):
    """Raised for a page length that is not a positive integer."""

    def __init__(self, page_length: int):
        self.page_length = page_length
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message="Invalid pagination parameters.",
            detail=f"page length must be at least 1, got {page_length}",
        )


class NotFoundError(KnownError):
    """Raised when a referenced collection, line item or card does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource.capitalize()} not found.",
            detail=f"No {resource} with id '{identifier}'",
            status_code=404,
        )
