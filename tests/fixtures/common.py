"""
Common test fixtures shared by all modules.

Provides factory functions for core empanelment data structures:
- Actor (one per role)
- Application snapshots
- CriterionRegistry / TransitionContext
- Score batches with a chosen total

plus `drive`, which pushes a fresh application through the lifecycle up to
a requested point using the real state machine.
"""

from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from core.config.runtime import RuntimeConfig
from core.criteria.registry import DEFAULT_CRITERIA, CriterionRegistry
from core.schemas.application import (
    Actor,
    Application,
    ApplicationStatus,
    FieldResult,
    Role,
    VerificationFindings,
)
from core.schemas.events import (
    AssignVerification,
    Finalize,
    RecordPayment,
    RecordScores,
    RecordVerification,
    RouteForEvaluation,
    RouteForVerification,
    SelectDeviceTypes,
    Submit,
)
from engine.state_machine import TransitionContext, apply_event


FIXED_TIME = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)

MANDATORY_IDS: tuple[str, ...] = tuple(
    c["criterion_id"] for c in DEFAULT_CRITERIA if not c.get("is_optional")
)
OPTIONAL_ID = "GLOBAL_SUPPLY"


# =============================================================================
# Actors
# =============================================================================

def make_actor(role: Role, user_id: Optional[str] = None) -> Actor:
    """Create an Actor; the user id defaults to a role-derived name."""
    return Actor(user_id=user_id or f"{role.value.lower()}-1", role=role)


APPLICANT = make_actor(Role.APPLICANT, "oem-1")
OFFICER = make_actor(Role.OFFICER, "officer-1")
EVALUATOR = make_actor(Role.EVALUATOR, "evaluator-1")
VERIFIER = make_actor(Role.FIELD_VERIFIER, "verifier-1")
SYSTEM = make_actor(Role.SYSTEM, "payments-webhook")


# =============================================================================
# Snapshots & Context
# =============================================================================

def make_application(
    application_id: str = "app_test_001",
    **overrides: Any,
) -> Application:
    """
    Create an Application snapshot for testing.

    Args:
        application_id: Snapshot id.
        **overrides: Any other Application field.

    Returns:
        A valid Application (DRAFT unless overridden).
    """
    data: dict[str, Any] = {"id": application_id, "applicant_id": APPLICANT.user_id}
    data.update(overrides)
    return Application(**data)


def make_registry(entries: Optional[Iterable[dict[str, Any]]] = None) -> CriterionRegistry:
    """Default rubric, or one built from the given dicts."""
    if entries is None:
        return CriterionRegistry.default()
    return CriterionRegistry.from_dicts(entries)


def make_context(
    registry: Optional[CriterionRegistry] = None,
    inspection_types: Iterable[str] = (),
    config: Optional[RuntimeConfig] = None,
) -> TransitionContext:
    """TransitionContext over the default catalogue and thresholds."""
    config = config or RuntimeConfig()
    context = TransitionContext.from_config(config, registry=registry or make_registry())
    if inspection_types:
        context = TransitionContext(
            registry=context.registry,
            policy=context.policy,
            device_types=context.device_types,
            inspection_types=frozenset(inspection_types),
        )
    return context


# =============================================================================
# Scores
# =============================================================================

def scores_totalling(total: int, criteria: Iterable[str] = MANDATORY_IDS) -> dict[str, float]:
    """
    Spread an integer total across the given criteria as evenly as possible.

    scores_totalling(48) -> six criteria at 7 and one at 6.
    """
    ids = list(criteria)
    base, remainder = divmod(total, len(ids))
    return {cid: float(base + (1 if i < remainder else 0)) for i, cid in enumerate(ids)}


def make_findings(result: FieldResult = FieldResult.PASS, **overrides: Any) -> VerificationFindings:
    data: dict[str, Any] = {
        "overall_result": result,
        "apcd_operational": result != FieldResult.FAIL,
        "emission_compliant": result != FieldResult.FAIL,
        "observations": f"Site visit result: {result.value}",
    }
    data.update(overrides)
    return VerificationFindings(**data)


# =============================================================================
# Lifecycle Driver
# =============================================================================

def drive(
    target: ApplicationStatus,
    context: Optional[TransitionContext] = None,
    device_types: Iterable[str] = ("ESP", "BAG_FILTER"),
    scores: Optional[dict[str, float]] = None,
    verification: Optional[FieldResult] = None,
    application: Optional[Application] = None,
) -> Application:
    """
    Drive an application from DRAFT to `target` through real events.

    Supported targets: DRAFT (types selected and paid), SUBMITTED,
    FIELD_VERIFICATION_PENDING (assigned, and completed when `verification`
    is given), UNDER_EVALUATION (scored when `scores` is given) and the
    finalized states (scores required).
    """
    types = frozenset(device_types)
    needs_visit = target == ApplicationStatus.FIELD_VERIFICATION_PENDING or verification is not None
    if context is None:
        # Routing to a site visit needs a reason; make every selected type require one
        context = make_context(inspection_types=types if needs_visit else ())
    app = application or make_application()

    app = apply_event(app, SelectDeviceTypes(device_types=types), APPLICANT, context)
    for i, type_id in enumerate(sorted(types)):
        app = apply_event(
            app,
            RecordPayment(device_type_id=type_id, amount=76700, reference=f"UTR{i:04d}"),
            OFFICER,
            context,
        )
    if target == ApplicationStatus.DRAFT:
        return app

    app = apply_event(app, Submit(), APPLICANT, context)
    if target == ApplicationStatus.SUBMITTED:
        return app

    if needs_visit:
        app = apply_event(app, RouteForVerification(), OFFICER, context)
        app = apply_event(
            app,
            AssignVerification(verifier_id=VERIFIER.user_id, scheduled_date=date(2026, 3, 10)),
            VERIFIER,
            context,
        )
        if verification is not None:
            app = apply_event(
                app,
                RecordVerification(findings=make_findings(verification), visit_date=date(2026, 3, 10)),
                VERIFIER,
                context,
            )
        if target == ApplicationStatus.FIELD_VERIFICATION_PENDING:
            return app

    app = apply_event(app, RouteForEvaluation(), OFFICER, context)
    if scores is not None:
        app = apply_event(app, RecordScores(scores=scores), EVALUATOR, context)
    if target == ApplicationStatus.UNDER_EVALUATION:
        return app

    app = apply_event(app, Finalize(), EVALUATOR, context)
    if app.status != target:
        raise AssertionError(f"drive() ended in {app.status.value}, expected {target.value}")
    return app


__all__ = [
    "FIXED_TIME",
    "MANDATORY_IDS",
    "OPTIONAL_ID",
    "APPLICANT",
    "OFFICER",
    "EVALUATOR",
    "VERIFIER",
    "SYSTEM",
    "make_actor",
    "make_application",
    "make_registry",
    "make_context",
    "scores_totalling",
    "make_findings",
    "drive",
]
