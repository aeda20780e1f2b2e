"""
Catalogue Routes

Read-only discovery of the evaluation rubric and the device-type catalogue,
so clients can render scoring sheets and selection forms.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_config, get_service
from api.models.responses import CriteriaResponse, DeviceTypeInfo, DeviceTypesResponse
from core.config.runtime import RuntimeConfig
from engine.service import ApplicationService


router = APIRouter(tags=["catalogue"])


@router.get("/criteria", response_model=CriteriaResponse)
def list_criteria(service: ApplicationService = Depends(get_service)) -> CriteriaResponse:
    """Return the active rubric in display order."""
    registry = service.context.registry
    return CriteriaResponse(
        ok=True,
        criteria=list(registry.list_criteria()),
        max_possible_score=registry.max_possible_score(include_optional=True),
        max_mandatory_score=registry.max_possible_score(include_optional=False),
    )


@router.get("/device-types", response_model=DeviceTypesResponse)
def list_device_types(config: RuntimeConfig = Depends(get_config)) -> DeviceTypesResponse:
    return DeviceTypesResponse(
        ok=True,
        device_types=[
            DeviceTypeInfo(id=d.id, label=d.label, always_inspect=d.always_inspect)
            for d in config.device_types
        ],
    )
