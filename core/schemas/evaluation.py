"""
Module 01 - Schemas
File: evaluation.py

Purpose: Rubric and scoring value objects.
CriterionDefinition entries are process-wide and read-only; an
EvaluationOutcome is derived fresh from an application's scores and is
never edited after creation.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Recommendation(str, Enum):
    """Disposition produced by evaluators or by the aggregator."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    NEED_MORE_INFO = "NEED_MORE_INFO"
    FIELD_VERIFICATION_REQUIRED = "FIELD_VERIFICATION_REQUIRED"


class CriterionDefinition(BaseModel):
    """One scored dimension of the evaluation rubric."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    criterion_id: str = Field(..., min_length=1, description="Stable criterion identifier")
    label: str = Field(default="", description="Short display label")
    description: str = Field(default="", description="What evaluators look for")
    max_score: float = Field(..., gt=0, description="Maximum awardable score")
    is_optional: bool = Field(default=False, description="Absent scores are not penalized")

    @field_validator("criterion_id")
    @classmethod
    def validate_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("criterion_id must not be empty or whitespace")
        return v


class CriterionScore(BaseModel):
    """Per-criterion line of an evaluation breakdown."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    criterion_id: str
    label: str = ""
    score: float | None = Field(
        default=None,
        description="Awarded score, None for an optional criterion left unscored",
    )
    max_score: float
    is_optional: bool = False
    counted: bool = Field(default=True, description="Whether this line contributes to the totals")
    evaluator_id: str | None = None


class EvaluationOutcome(BaseModel):
    """
    Composite result of aggregating an application's scores.

    The recommendation here is advisory: the state machine may override it
    (a failed field verification forces rejection regardless of score).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    total: float = Field(..., ge=0)
    max_attainable: float = Field(..., gt=0)
    ratio: float = Field(..., ge=0, le=1)
    optional_included: bool = Field(
        default=False,
        description="True when any optional criterion was scored and counted",
    )
    breakdown: tuple[CriterionScore, ...] = Field(default_factory=tuple)
    recommendation: Recommendation

    @property
    def percentage(self) -> float:
        return round(self.ratio * 100, 2)

    @property
    def is_approvable(self) -> bool:
        return self.recommendation == Recommendation.APPROVE
