"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Each error class
carries the HTTP status it maps to, so the exception handlers never need to
inspect the concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged but never returned to clients.
    """

    code: str
    field: str
    hint: str
    max_value: int
    actual_value: int
    retry_after: float
    article_id: int
    operation: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message returned to the client.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when a request field is missing, malformed or out of range."""

    status_code = 400


class NotFoundAppError(AppError):
    """Raised when a referenced article does not exist.

    The endpoint itself is valid, so this is reported as a bad request
    rather than 404.
    """

    status_code = 400


class AuthenticationAppError(AppError):
    """Raised when a GitHub login token is rejected."""

    status_code = 401


class ForbiddenAppError(AppError):
    """Raised when the article creation password is wrong."""

    status_code = 403


class RateLimitAppError(AppError):
    """Raised when a cooldown or attempt threshold is violated."""

    status_code = 429


class StorageAppError(AppError):
    """Raised when the article/comment store fails.

    The message is always generic; the underlying cause goes to the log only.
    """

    status_code = 500


STORAGE_FAILURE_MESSAGE = "Failed to access database."


def storage_error(operation: str) -> StorageAppError:
    """Build the generic storage error for a failed store operation."""
    return StorageAppError(
        code="storage_failure",
        message=STORAGE_FAILURE_MESSAGE,
        details={"operation": operation},
    )
