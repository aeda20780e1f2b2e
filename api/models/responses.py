"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.fees import ApplicationFeeQuote
from core.schemas import Application, CriterionDefinition, EvaluationOutcome


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "apcd-empanelment-api"
    version: str = "v1"


class CriteriaResponse(BaseModel):
    """Response for GET /criteria."""

    ok: bool = True
    criteria: list[CriterionDefinition] = Field(default_factory=list)
    max_possible_score: float = Field(..., description="Maximum with optional criteria included")
    max_mandatory_score: float = Field(..., description="Maximum over mandatory criteria only")


class DeviceTypeInfo(BaseModel):
    """One selectable APCD category."""

    id: str
    label: str = ""
    always_inspect: bool = False


class DeviceTypesResponse(BaseModel):
    """Response for GET /device-types."""

    ok: bool = True
    device_types: list[DeviceTypeInfo] = Field(default_factory=list)


class ApplicationResponse(BaseModel):
    """Response carrying one application snapshot."""

    ok: bool = True
    application: Application
    allowed_events: list[str] | None = Field(
        default=None,
        description="Events the requesting role may issue from the current status",
    )


class EvaluationResponse(BaseModel):
    """Response for GET /applications/{id}/evaluation."""

    ok: bool = True
    application_id: str
    outcome: EvaluationOutcome


class FeeQuoteResponse(BaseModel):
    """Response for GET /applications/{id}/fees."""

    ok: bool = True
    application_id: str
    device_type_count: int
    quote: ApplicationFeeQuote


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = False


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
