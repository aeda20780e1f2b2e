"""
Module 01 - Schemas
File: errors.py

Purpose: Standard error taxonomy for the empanelment engine.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every failure raised by the engine is a local validation failure: none of
them indicate a crash, and a failed transition never yields a new snapshot.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Lifecycle & Authorization Errors
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    FORBIDDEN = "FORBIDDEN"
    NO_CHANGES_SINCE_REQUEST = "NO_CHANGES_SINCE_REQUEST"

    # Payment Gate Errors
    PAYMENT_INCOMPLETE = "PAYMENT_INCOMPLETE"
    UNKNOWN_DEVICE_TYPE = "UNKNOWN_DEVICE_TYPE"
    DUPLICATE_PAYMENT = "DUPLICATE_PAYMENT"

    # Verification Gate Errors
    VERIFICATION_PENDING = "VERIFICATION_PENDING"
    VERIFICATION_NOT_REQUIRED = "VERIFICATION_NOT_REQUIRED"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    NOT_ASSIGNED = "NOT_ASSIGNED"

    # Scoring Errors
    INCOMPLETE_SCORING = "INCOMPLETE_SCORING"
    SCORE_OUT_OF_RANGE = "SCORE_OUT_OF_RANGE"
    UNKNOWN_CRITERION = "UNKNOWN_CRITERION"
    INVALID_RUBRIC = "INVALID_RUBRIC"

    # Persistence Seam Errors
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    APPLICATION_EXISTS = "APPLICATION_EXISTS"
    VERSION_CONFLICT = "VERSION_CONFLICT"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class EmpanelmentError(BaseModel):
    """
    Base error model for structured error communication.

    Used when a failure has to travel as a value (transition results,
    HTTP bodies, CLI JSON output) rather than as a raised exception.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ILLEGAL_TRANSITION],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class EmpanelmentException(Exception):
    """
    Base exception for all engine errors.

    Carries structured error information and converts to an
    EmpanelmentError model for transport.
    """

    def __init__(
        self,
        message: str,
        code: str = "EMPANELMENT_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> EmpanelmentError:
        """Convert this exception to an EmpanelmentError model."""
        return EmpanelmentError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class IllegalTransitionException(EmpanelmentException):
    """Raised when an event has no transition from the current state."""

    def __init__(self, status: str, event: str) -> None:
        super().__init__(
            message=f"Event '{event}' is not allowed while application is {status}",
            code=ErrorCodes.ILLEGAL_TRANSITION,
            details={"status": status, "event": event},
        )
        self.status = status
        self.event = event


class ForbiddenException(EmpanelmentException):
    """Raised when the acting role may not issue the event."""

    def __init__(self, role: str, event: str, allowed: list[str]) -> None:
        super().__init__(
            message=f"Role '{role}' may not issue '{event}'",
            code=ErrorCodes.FORBIDDEN,
            details={"role": role, "event": event, "allowed_roles": allowed},
        )


class NoChangesSinceRequestException(EmpanelmentException):
    """Raised when resubmitting without changing anything since the info request."""

    def __init__(self, revision: int, requested_at_revision: int | None) -> None:
        super().__init__(
            message="No changes were made since additional information was requested",
            code=ErrorCodes.NO_CHANGES_SINCE_REQUEST,
            details={"revision": revision, "requested_at_revision": requested_at_revision},
        )


class PaymentIncompleteException(EmpanelmentException):
    """Raised when submission is attempted with unsettled fees."""

    def __init__(self, message: str, outstanding: list[str] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PAYMENT_INCOMPLETE,
            details={"outstanding": outstanding or []},
        )


class UnknownDeviceTypeException(EmpanelmentException):
    """Raised for a device type that is not selected or not catalogued."""

    def __init__(self, device_type_id: str, known: list[str] | None = None) -> None:
        details: dict[str, Any] = {"device_type_id": device_type_id}
        if known is not None:
            details["known"] = known
        super().__init__(
            message=f"Unknown device type '{device_type_id}'",
            code=ErrorCodes.UNKNOWN_DEVICE_TYPE,
            details=details,
        )


class DuplicatePaymentException(EmpanelmentException):
    """Raised when a device type's fee has already been settled."""

    def __init__(self, device_type_id: str, reference: str) -> None:
        super().__init__(
            message=f"Payment for '{device_type_id}' is already settled",
            code=ErrorCodes.DUPLICATE_PAYMENT,
            details={"device_type_id": device_type_id, "existing_reference": reference},
        )


class VerificationPendingException(EmpanelmentException):
    """Raised when evaluation is blocked by outstanding field verification."""

    def __init__(self, message: str = "Field verification is required and not yet completed") -> None:
        super().__init__(message=message, code=ErrorCodes.VERIFICATION_PENDING)


class VerificationNotRequiredException(EmpanelmentException):
    """Raised when routing to field verification that nothing requires."""

    def __init__(self) -> None:
        super().__init__(
            message="Field verification is not required for this application",
            code=ErrorCodes.VERIFICATION_NOT_REQUIRED,
        )


class AlreadyAssignedException(EmpanelmentException):
    """Raised when an open verification assignment already exists."""

    def __init__(self, verifier_id: str) -> None:
        super().__init__(
            message=f"Field verification is already assigned to '{verifier_id}'",
            code=ErrorCodes.ALREADY_ASSIGNED,
            details={"verifier_id": verifier_id},
        )


class AlreadyCompletedException(EmpanelmentException):
    """Raised when a verification has already been recorded."""

    def __init__(self) -> None:
        super().__init__(
            message="Field verification has already been completed",
            code=ErrorCodes.ALREADY_COMPLETED,
        )


class NotAssignedException(EmpanelmentException):
    """Raised when recording a verification that was never assigned."""

    def __init__(self) -> None:
        super().__init__(
            message="No field verification has been assigned",
            code=ErrorCodes.NOT_ASSIGNED,
        )


class IncompleteScoringException(EmpanelmentException):
    """Raised when mandatory criteria have no recorded score."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            message=f"Missing scores for mandatory criteria: {', '.join(missing)}",
            code=ErrorCodes.INCOMPLETE_SCORING,
            details={"missing": missing},
        )
        self.missing = missing


class ScoreOutOfRangeException(EmpanelmentException):
    """Raised when a score is not finite, negative, or above the criterion maximum."""

    def __init__(self, criterion_id: str, score: float, max_score: float) -> None:
        super().__init__(
            message=f"Score {score} for '{criterion_id}' must be between 0 and {max_score}",
            code=ErrorCodes.SCORE_OUT_OF_RANGE,
            details={
                "criterion_id": criterion_id,
                # nan/inf are not valid JSON
                "score": score if math.isfinite(score) else str(score),
                "max_score": max_score,
            },
        )


class UnknownCriterionException(EmpanelmentException):
    """Raised when a score names a criterion outside the rubric."""

    def __init__(self, criterion_id: str) -> None:
        super().__init__(
            message=f"Unknown evaluation criterion '{criterion_id}'",
            code=ErrorCodes.UNKNOWN_CRITERION,
            details={"criterion_id": criterion_id},
        )


class InvalidRubricException(EmpanelmentException):
    """Raised when a rubric definition cannot be loaded."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code=ErrorCodes.INVALID_RUBRIC, details=details)


class ApplicationNotFoundException(EmpanelmentException):
    """Raised when the persistence seam has no snapshot for an id."""

    def __init__(self, application_id: str) -> None:
        super().__init__(
            message=f"Application '{application_id}' not found",
            code=ErrorCodes.APPLICATION_NOT_FOUND,
            details={"application_id": application_id},
        )


class VersionConflictException(EmpanelmentException):
    """Raised when a snapshot was saved against a stale version."""

    def __init__(self, application_id: str, expected: int, actual: int) -> None:
        super().__init__(
            message=(
                f"Application '{application_id}' changed concurrently "
                f"(expected version {expected}, found {actual})"
            ),
            code=ErrorCodes.VERSION_CONFLICT,
            details={"application_id": application_id, "expected": expected, "actual": actual},
            retryable=True,
        )


class ApplicationExistsException(EmpanelmentException):
    """Raised when creating an application under an id already in use."""

    def __init__(self, application_id: str) -> None:
        super().__init__(
            message=f"Application '{application_id}' already exists",
            code=ErrorCodes.APPLICATION_EXISTS,
            details={"application_id": application_id},
        )
