"""API request and response models."""

from api.models.requests import CreateApplicationRequest
from api.models.responses import (
    ApplicationResponse,
    CriteriaResponse,
    DeviceTypeInfo,
    DeviceTypesResponse,
    ErrorDetail,
    ErrorResponse,
    EvaluationResponse,
    FeeQuoteResponse,
    HealthResponse,
)

__all__ = [
    "CreateApplicationRequest",
    "ApplicationResponse",
    "CriteriaResponse",
    "DeviceTypeInfo",
    "DeviceTypesResponse",
    "ErrorDetail",
    "ErrorResponse",
    "EvaluationResponse",
    "FeeQuoteResponse",
    "HealthResponse",
]
