"""
Applications Routes

Create applications, read snapshots and drive the lifecycle one event at a
time. Engine failures propagate to the registered exception handler, which
picks the HTTP status from the error code.

Routes are plain `def` so the per-application lock is taken on a worker
thread rather than on the event loop.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError

from api.deps import get_actor, get_config, get_optional_actor, get_service
from api.errors import InvalidRequestError
from api.models.requests import CreateApplicationRequest
from api.models.responses import ApplicationResponse, EvaluationResponse, FeeQuoteResponse
from core.config.runtime import RuntimeConfig
from core.fees import calculate_application_fees
from core.schemas import Actor, parse_event
from engine.service import ApplicationService
from engine.state_machine import allowed_events


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationResponse, status_code=201)
def create_application(
    request: CreateApplicationRequest | None = None,
    service: ApplicationService = Depends(get_service),
) -> ApplicationResponse:
    """Open a new application in DRAFT."""
    request = request or CreateApplicationRequest()
    application = service.create(
        application_id=request.application_id,
        applicant_id=request.applicant_id,
    )
    return ApplicationResponse(ok=True, application=application)


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    service: ApplicationService = Depends(get_service),
    actor: Actor | None = Depends(get_optional_actor),
) -> ApplicationResponse:
    """
    Current snapshot of an application.

    When actor headers are present the response also lists the events that
    role may issue from the current status.
    """
    application = service.get(application_id)
    return ApplicationResponse(
        ok=True,
        application=application,
        allowed_events=allowed_events(application, actor.role) if actor else None,
    )


@router.post("/{application_id}/events", response_model=ApplicationResponse)
def post_event(
    application_id: str,
    payload: dict[str, Any] = Body(..., description="Event with a `kind` discriminator"),
    service: ApplicationService = Depends(get_service),
    actor: Actor = Depends(get_actor),
) -> ApplicationResponse:
    """
    Apply one event to an application.

    The body is one of the lifecycle events, selected by `kind`, e.g.
    `{"kind": "submit"}` or `{"kind": "record_scores", "scores": {...}}`.
    """
    try:
        event = parse_event(payload)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid event payload",
            details={"errors": [
                {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
            ]},
        )

    logger.info(f"{actor.role.value} {actor.user_id} -> {event.kind} on {application_id}")
    application = service.dispatch(application_id, event, actor)
    return ApplicationResponse(
        ok=True,
        application=application,
        allowed_events=allowed_events(application, actor.role),
    )


@router.post("/{application_id}/revisions", response_model=ApplicationResponse)
def mark_revised(
    application_id: str,
    service: ApplicationService = Depends(get_service),
) -> ApplicationResponse:
    """Record that the applicant changed profile data (revision marker + 1)."""
    application = service.mark_revised(application_id)
    return ApplicationResponse(ok=True, application=application)


@router.get("/{application_id}/evaluation", response_model=EvaluationResponse)
def get_evaluation(
    application_id: str,
    service: ApplicationService = Depends(get_service),
) -> EvaluationResponse:
    """Aggregate the scores recorded so far; 409 while mandatory scores are missing."""
    outcome = service.evaluate(application_id)
    return EvaluationResponse(ok=True, application_id=application_id, outcome=outcome)


@router.get("/{application_id}/fees", response_model=FeeQuoteResponse)
def get_fee_quote(
    application_id: str,
    discount_eligible: bool = Query(default=False, description="MSE / startup / local supplier"),
    service: ApplicationService = Depends(get_service),
    config: RuntimeConfig = Depends(get_config),
) -> FeeQuoteResponse:
    application = service.get(application_id)
    count = len(application.selected_device_types)
    quote = calculate_application_fees(count, discount_eligible, config.fees)
    return FeeQuoteResponse(
        ok=True,
        application_id=application_id,
        device_type_count=count,
        quote=quote,
    )
