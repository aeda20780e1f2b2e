"""
Module 01 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    UnsupportedSchemaVersionError,
    assert_supported_schema_version,
)

# Error models and exceptions
from .errors import (
    AlreadyAssignedException,
    AlreadyCompletedException,
    ApplicationExistsException,
    ApplicationNotFoundException,
    DuplicatePaymentException,
    EmpanelmentError,
    EmpanelmentException,
    ErrorCodes,
    ForbiddenException,
    IllegalTransitionException,
    IncompleteScoringException,
    InvalidRubricException,
    NoChangesSinceRequestException,
    NotAssignedException,
    PaymentIncompleteException,
    ScoreOutOfRangeException,
    UnknownCriterionException,
    UnknownDeviceTypeException,
    VerificationNotRequiredException,
    VerificationPendingException,
    VersionConflictException,
)

# Rubric and scoring
from .evaluation import (
    CriterionDefinition,
    CriterionScore,
    EvaluationOutcome,
    Recommendation,
)

# Application snapshot
from .application import (
    POST_EVALUATION_STATES,
    TERMINAL_STATES,
    Actor,
    Application,
    ApplicationStatus,
    FieldResult,
    PaymentRecord,
    Role,
    ScoreEntry,
    StatusChange,
    VerificationFindings,
    VerificationRecord,
)

# Events
from .events import (
    AssignVerification,
    Event,
    EventKind,
    Finalize,
    RecordPayment,
    RecordScores,
    RecordVerification,
    ResubmitAfterInfoRequest,
    RouteForEvaluation,
    RouteForVerification,
    SelectDeviceTypes,
    Submit,
    parse_event,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "UnsupportedSchemaVersionError",
    "assert_supported_schema_version",
    # Errors
    "AlreadyAssignedException",
    "AlreadyCompletedException",
    "ApplicationExistsException",
    "ApplicationNotFoundException",
    "DuplicatePaymentException",
    "EmpanelmentError",
    "EmpanelmentException",
    "ErrorCodes",
    "ForbiddenException",
    "IllegalTransitionException",
    "IncompleteScoringException",
    "InvalidRubricException",
    "NoChangesSinceRequestException",
    "NotAssignedException",
    "PaymentIncompleteException",
    "ScoreOutOfRangeException",
    "UnknownCriterionException",
    "UnknownDeviceTypeException",
    "VerificationNotRequiredException",
    "VerificationPendingException",
    "VersionConflictException",
    # Evaluation
    "CriterionDefinition",
    "CriterionScore",
    "EvaluationOutcome",
    "Recommendation",
    # Application
    "POST_EVALUATION_STATES",
    "TERMINAL_STATES",
    "Actor",
    "Application",
    "ApplicationStatus",
    "FieldResult",
    "PaymentRecord",
    "Role",
    "ScoreEntry",
    "StatusChange",
    "VerificationFindings",
    "VerificationRecord",
    # Events
    "AssignVerification",
    "Event",
    "EventKind",
    "Finalize",
    "RecordPayment",
    "RecordScores",
    "RecordVerification",
    "ResubmitAfterInfoRequest",
    "RouteForEvaluation",
    "RouteForVerification",
    "SelectDeviceTypes",
    "Submit",
    "parse_event",
]
