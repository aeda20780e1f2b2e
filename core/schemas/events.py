"""
Module 01 - Schemas
File: events.py

Purpose: Event payloads accepted by the application state machine.
Each event carries a `kind` discriminator so a single `Event` union can be
parsed from JSON (HTTP bodies, CLI scripts).

`occurred_at` is supplied by the caller; the state machine never reads the
clock, so replaying the same event against the same snapshot is
deterministic.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, TypeAdapter, field_validator

from .application import VerificationFindings
from .evaluation import Recommendation


class EventKind:
    """Stable event names used in the transition table and audit trail."""

    SELECT_DEVICE_TYPES = "select_device_types"
    RECORD_PAYMENT = "record_payment"
    SUBMIT = "submit"
    ROUTE_FOR_VERIFICATION = "route_for_verification"
    ASSIGN_VERIFICATION = "assign_verification"
    RECORD_VERIFICATION = "record_verification"
    ROUTE_FOR_EVALUATION = "route_for_evaluation"
    RECORD_SCORES = "record_scores"
    FINALIZE = "finalize"
    RESUBMIT_AFTER_INFO_REQUEST = "resubmit_after_info_request"


class _EventBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    remarks: str | None = None
    occurred_at: datetime | None = None


class SelectDeviceTypes(_EventBase):
    kind: Literal["select_device_types"] = EventKind.SELECT_DEVICE_TYPES
    device_types: frozenset[str]


class RecordPayment(_EventBase):
    kind: Literal["record_payment"] = EventKind.RECORD_PAYMENT
    device_type_id: str
    amount: float = Field(..., ge=0)
    reference: str = Field(..., min_length=1)


class Submit(_EventBase):
    kind: Literal["submit"] = EventKind.SUBMIT


class RouteForVerification(_EventBase):
    kind: Literal["route_for_verification"] = EventKind.ROUTE_FOR_VERIFICATION


class AssignVerification(_EventBase):
    kind: Literal["assign_verification"] = EventKind.ASSIGN_VERIFICATION
    verifier_id: str = Field(..., min_length=1)
    scheduled_date: date


class RecordVerification(_EventBase):
    kind: Literal["record_verification"] = EventKind.RECORD_VERIFICATION
    findings: VerificationFindings
    visit_date: date


class RouteForEvaluation(_EventBase):
    kind: Literal["route_for_evaluation"] = EventKind.ROUTE_FOR_EVALUATION


class RecordScores(_EventBase):
    kind: Literal["record_scores"] = EventKind.RECORD_SCORES
    scores: dict[str, FiniteFloat]
    advisory: Recommendation | None = Field(
        default=None,
        description="Evaluator's provisional recommendation, e.g. FIELD_VERIFICATION_REQUIRED",
    )

    @field_validator("scores")
    @classmethod
    def validate_not_empty(cls, v: dict[str, FiniteFloat]) -> dict[str, FiniteFloat]:
        if not v:
            raise ValueError("scores must contain at least one criterion")
        return v


class Finalize(_EventBase):
    kind: Literal["finalize"] = EventKind.FINALIZE


class ResubmitAfterInfoRequest(_EventBase):
    kind: Literal["resubmit_after_info_request"] = EventKind.RESUBMIT_AFTER_INFO_REQUEST


Event = Annotated[
    Union[
        SelectDeviceTypes,
        RecordPayment,
        Submit,
        RouteForVerification,
        AssignVerification,
        RecordVerification,
        RouteForEvaluation,
        RecordScores,
        Finalize,
        ResubmitAfterInfoRequest,
    ],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(Event)


def parse_event(data: dict) -> Event:
    """Parse a JSON-like dict into the matching event model."""
    return _EVENT_ADAPTER.validate_python(data)
