"""
Verification Gate

Tracks whether field verification is required for an application and, if
so, whether it has been completed. Every operation takes a snapshot and
returns a new one; nothing is mutated in place.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import AbstractSet

from core.schemas.application import Application, VerificationFindings, VerificationRecord
from core.schemas.errors import (
    AlreadyAssignedException,
    AlreadyCompletedException,
    NotAssignedException,
)
from core.schemas.evaluation import Recommendation

logger = logging.getLogger(__name__)


def is_required(application: Application, inspection_types: AbstractSet[str] = frozenset()) -> bool:
    """
    True when an evaluator advised field verification, or any selected
    device type is configured as always needing a physical inspection.
    """
    if application.provisional_recommendation == Recommendation.FIELD_VERIFICATION_REQUIRED:
        return True
    return bool(application.selected_device_types & inspection_types)


def is_completed(application: Application) -> bool:
    return application.verification is not None and application.verification.is_completed


def is_satisfied(application: Application, inspection_types: AbstractSet[str] = frozenset()) -> bool:
    """Not required, or required and completed."""
    return not is_required(application, inspection_types) or is_completed(application)


def has_failed(application: Application) -> bool:
    """A completed verification whose findings are an explicit FAIL."""
    record = application.verification
    return record is not None and record.findings is not None and record.findings.failed


def assign(application: Application, verifier_id: str, scheduled_date: date) -> VerificationRecord:
    """
    Build a new assignment record.

    A completed record may be superseded by a fresh assignment (re-inspection);
    an open one may not.
    """
    current = application.verification
    if current is not None and not current.is_completed:
        raise AlreadyAssignedException(current.verifier_id)

    logger.debug(f"Assigning verification of {application.id} to {verifier_id} on {scheduled_date}")
    return VerificationRecord(verifier_id=verifier_id, scheduled_date=scheduled_date)


def record_completion(
    application: Application,
    findings: VerificationFindings,
    visit_date: date,
    completed_at: datetime | None = None,
) -> VerificationRecord:
    """Attach findings to the open assignment."""
    current = application.verification
    if current is None:
        raise NotAssignedException()
    if current.is_completed:
        raise AlreadyCompletedException()

    return current.model_copy(
        update={
            "findings": findings,
            "visit_date": visit_date,
            "completed_at": completed_at,
        }
    )
