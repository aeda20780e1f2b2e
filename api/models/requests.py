"""
API Request Models

Pydantic models for API request validation.

Event bodies are not modelled here: they are the `Event` union from
core.schemas.events and are parsed with `parse_event`.
"""

from pydantic import BaseModel, Field


class CreateApplicationRequest(BaseModel):
    """Request body for POST /applications."""

    application_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        description="Explicit application id; generated when omitted",
    )
    applicant_id: str | None = Field(
        default=None,
        description="OEM user that owns the application",
    )
