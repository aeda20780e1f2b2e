"""
Module 01 - Schemas
File: application.py

Purpose: The Application snapshot and its component records.

An Application is an immutable snapshot. Every successful transition
produces a new snapshot (via evolve) with `version` incremented by one;
readers holding an older snapshot never observe a partial update.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    FiniteFloat,
    field_serializer,
    field_validator,
    model_validator,
)

from .evaluation import Recommendation
from .versioning import SCHEMA_VERSION, assert_supported_schema_version


class ApplicationStatus(str, Enum):
    """Lifecycle states of an empanelment application."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    FIELD_VERIFICATION_PENDING = "FIELD_VERIFICATION_PENDING"
    UNDER_EVALUATION = "UNDER_EVALUATION"
    NEEDS_MORE_INFO = "NEEDS_MORE_INFO"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def is_post_evaluation(self) -> bool:
        return self in POST_EVALUATION_STATES


TERMINAL_STATES: frozenset[ApplicationStatus] = frozenset(
    {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
)

# States that carry a final recommendation
POST_EVALUATION_STATES: frozenset[ApplicationStatus] = frozenset(
    {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.NEEDS_MORE_INFO,
    }
)


class Role(str, Enum):
    """Roles supplied by the auth/session collaborator."""

    APPLICANT = "APPLICANT"
    EVALUATOR = "EVALUATOR"
    FIELD_VERIFIER = "FIELD_VERIFIER"
    OFFICER = "OFFICER"
    SYSTEM = "SYSTEM"


class FieldResult(str, Enum):
    """Overall result of a completed site inspection."""

    PASS = "PASS"
    FAIL = "FAIL"
    INCONCLUSIVE = "INCONCLUSIVE"


class Actor(BaseModel):
    """Identity and role of whoever issues an event. Trusted as given."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_id: str = Field(..., min_length=1)
    role: Role


class PaymentRecord(BaseModel):
    """Settled fee for one selected device type."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    device_type_id: str
    amount: float = Field(..., ge=0)
    reference: str = Field(..., min_length=1, description="Processor or bank reference")
    settled_at: datetime | None = None


class VerificationFindings(BaseModel):
    """What the field verifier observed on site."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    overall_result: FieldResult
    apcd_operational: bool | None = None
    emission_compliant: bool | None = None
    observations: str | None = None

    @property
    def failed(self) -> bool:
        return self.overall_result == FieldResult.FAIL


class VerificationRecord(BaseModel):
    """Field verification assignment and, once visited, its findings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    verifier_id: str
    scheduled_date: date
    visit_date: date | None = None
    completed_at: datetime | None = None
    findings: VerificationFindings | None = None

    @property
    def is_completed(self) -> bool:
        return self.findings is not None


class ScoreEntry(BaseModel):
    """Score awarded for one criterion, with who awarded it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    score: FiniteFloat
    evaluator_id: str
    remarks: str | None = None
    recorded_at: datetime | None = None


class StatusChange(BaseModel):
    """One audit-trail entry; self-loops are recorded too."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    from_status: ApplicationStatus
    to_status: ApplicationStatus
    event: str
    actor_id: str
    role: Role
    remarks: str | None = None
    occurred_at: datetime | None = None


class Application(BaseModel):
    """
    One OEM's empanelment attempt.

    Invariant enforced on every construction: `recommendation` is set if and
    only if `status` is a post-evaluation state.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    id: str = Field(..., min_length=1)
    version: int = Field(default=0, ge=0, description="Optimistic concurrency stamp")
    applicant_id: str | None = None
    status: ApplicationStatus = ApplicationStatus.DRAFT
    selected_device_types: frozenset[str] = Field(default_factory=frozenset)
    payments: dict[str, PaymentRecord] = Field(default_factory=dict)
    verification: VerificationRecord | None = None
    scores: dict[str, ScoreEntry] = Field(default_factory=dict)
    provisional_recommendation: Recommendation | None = None
    recommendation: Recommendation | None = None
    revision: int = Field(default=0, ge=0, description="External revision marker")
    info_requested_at_revision: int | None = None
    history: tuple[StatusChange, ...] = Field(default_factory=tuple)

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        assert_supported_schema_version(v)
        return v

    @model_validator(mode="after")
    def check_recommendation_matches_status(self) -> "Application":
        has_recommendation = self.recommendation is not None
        if has_recommendation != self.status.is_post_evaluation:
            raise ValueError(
                f"recommendation must be set exactly when status is post-evaluation "
                f"(status={self.status.value}, recommendation={self.recommendation})"
            )
        return self

    @field_serializer("selected_device_types")
    def serialize_device_types(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    @property
    def settled_device_types(self) -> frozenset[str]:
        return frozenset(self.payments)

    def evolve(self, **changes: Any) -> "Application":
        """
        Return the next snapshot with `changes` applied and version bumped.

        Goes through model_validate so the snapshot invariants are re-checked.
        """
        data = dict(self)
        data.update(changes)
        data["version"] = self.version + 1
        return Application.model_validate(data)
