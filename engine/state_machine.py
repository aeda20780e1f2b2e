"""
Application State Machine

Explicit transition table (event -> allowed roles, source states, handler)
and a pure `apply_event` that turns (snapshot, event, actor) into the next
snapshot or raises a typed failure.

Evaluation order for every event:
  1. role guard          -> ForbiddenException
  2. source state        -> IllegalTransitionException
  3. event-specific guards (gates, aggregator)
  4. a single construction of the next snapshot

Handlers only compute; nothing is built until every guard has passed, so a
failed event is always an observable no-op.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

from core.config.runtime import RuntimeConfig
from core.criteria.registry import CriterionRegistry
from core.schemas.application import (
    Actor,
    Application,
    ApplicationStatus,
    Role,
    ScoreEntry,
    StatusChange,
)
from core.schemas.errors import (
    EmpanelmentError,
    EmpanelmentException,
    ForbiddenException,
    IllegalTransitionException,
    NoChangesSinceRequestException,
    PaymentIncompleteException,
    UnknownDeviceTypeException,
    VerificationNotRequiredException,
    VerificationPendingException,
)
from core.schemas.evaluation import EvaluationOutcome, Recommendation
from core.schemas.events import (
    AssignVerification,
    Event,
    EventKind,
    Finalize,
    RecordPayment,
    RecordScores,
    RecordVerification,
    ResubmitAfterInfoRequest,
    RouteForEvaluation,
    RouteForVerification,
    SelectDeviceTypes,
    Submit,
)

from . import payment_gate, verification_gate
from .aggregator import DEFAULT_POLICY, EvaluationPolicy, aggregate, validate_scores

logger = logging.getLogger(__name__)

S = ApplicationStatus


@dataclass(frozen=True)
class TransitionContext:
    """Read-only collaborators injected into every transition."""
    registry: CriterionRegistry
    policy: EvaluationPolicy = DEFAULT_POLICY
    # Catalogue of selectable device types; None accepts any identifier
    device_types: Optional[frozenset[str]] = None
    inspection_types: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig,
        registry: CriterionRegistry | None = None,
    ) -> "TransitionContext":
        if registry is None:
            if config.evaluation.rubric_path:
                registry = CriterionRegistry.from_yaml(config.evaluation.rubric_path)
            else:
                registry = CriterionRegistry.default()
        return cls(
            registry=registry,
            policy=EvaluationPolicy.from_config(config.evaluation),
            device_types=config.device_type_ids,
            inspection_types=config.inspection_device_types,
        )


@dataclass(frozen=True)
class Step:
    """What a handler decided: target status plus snapshot field changes."""
    to_status: ApplicationStatus
    changes: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Application, Any, Actor, TransitionContext], Step]


@dataclass(frozen=True)
class TransitionRule:
    event: str
    roles: frozenset[Role]
    sources: frozenset[ApplicationStatus]
    handler: Handler


class TransitionResult(BaseModel):
    """Result value for callers that prefer not to handle exceptions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ok: bool
    application: Application | None = None
    error: EmpanelmentError | None = None


# =============================================================================
# Handlers
# =============================================================================

def _select_device_types(app: Application, event: SelectDeviceTypes, actor: Actor, ctx: TransitionContext) -> Step:
    if ctx.device_types is not None:
        unknown = sorted(event.device_types - ctx.device_types)
        if unknown:
            raise UnknownDeviceTypeException(unknown[0], known=sorted(ctx.device_types))

    # Payments for types that are no longer selected are dropped
    payments = {k: v for k, v in app.payments.items() if k in event.device_types}
    return Step(S.DRAFT, {"selected_device_types": event.device_types, "payments": payments})


def _record_payment(app: Application, event: RecordPayment, actor: Actor, ctx: TransitionContext) -> Step:
    payments = payment_gate.record_payment(
        app,
        event.device_type_id,
        event.amount,
        event.reference,
        settled_at=event.occurred_at,
    )
    return Step(S.DRAFT, {"payments": payments})


def _submit(app: Application, event: Submit, actor: Actor, ctx: TransitionContext) -> Step:
    if not app.selected_device_types:
        raise PaymentIncompleteException("No device types selected for empanelment")
    if not payment_gate.is_satisfied(app):
        missing = payment_gate.outstanding(app)
        raise PaymentIncompleteException(
            f"Fees outstanding for: {', '.join(missing)}",
            outstanding=missing,
        )
    return Step(S.SUBMITTED)


def _route_for_verification(app: Application, event: RouteForVerification, actor: Actor, ctx: TransitionContext) -> Step:
    if not verification_gate.is_required(app, ctx.inspection_types):
        raise VerificationNotRequiredException()
    if verification_gate.is_completed(app):
        raise VerificationNotRequiredException()
    return Step(S.FIELD_VERIFICATION_PENDING)


def _assign_verification(app: Application, event: AssignVerification, actor: Actor, ctx: TransitionContext) -> Step:
    record = verification_gate.assign(app, event.verifier_id, event.scheduled_date)
    return Step(app.status, {"verification": record})


def _record_verification(app: Application, event: RecordVerification, actor: Actor, ctx: TransitionContext) -> Step:
    record = verification_gate.record_completion(
        app, event.findings, event.visit_date, completed_at=event.occurred_at
    )
    return Step(app.status, {"verification": record})


def _route_for_evaluation(app: Application, event: RouteForEvaluation, actor: Actor, ctx: TransitionContext) -> Step:
    if not verification_gate.is_satisfied(app, ctx.inspection_types):
        raise VerificationPendingException()
    return Step(S.UNDER_EVALUATION)


def _record_scores(app: Application, event: RecordScores, actor: Actor, ctx: TransitionContext) -> Step:
    # Validate the whole batch before touching anything
    validate_scores(event.scores, ctx.registry)

    scores = dict(app.scores)
    for criterion_id, value in event.scores.items():
        previous = scores.get(criterion_id)
        if previous is not None and previous.evaluator_id != actor.user_id:
            logger.debug(
                f"{app.id}: {criterion_id} score by {previous.evaluator_id} "
                f"({previous.score:g}) replaced by {actor.user_id} ({value:g})"
            )
        scores[criterion_id] = ScoreEntry(
            score=value,
            evaluator_id=actor.user_id,
            remarks=event.remarks,
            recorded_at=event.occurred_at,
        )

    changes: dict[str, Any] = {"scores": scores}
    if event.advisory is not None:
        changes["provisional_recommendation"] = event.advisory
    return Step(S.UNDER_EVALUATION, changes)


_RECOMMENDATION_TO_STATUS: dict[Recommendation, ApplicationStatus] = {
    Recommendation.APPROVE: S.APPROVED,
    Recommendation.REJECT: S.REJECTED,
    Recommendation.NEED_MORE_INFO: S.NEEDS_MORE_INFO,
}


def resolve_recommendation(app: Application, outcome: EvaluationOutcome) -> Recommendation:
    """A failed field verification forces rejection irrespective of score."""
    if verification_gate.has_failed(app):
        return Recommendation.REJECT
    return outcome.recommendation


def _finalize(app: Application, event: Finalize, actor: Actor, ctx: TransitionContext) -> Step:
    outcome = aggregate(app.scores, ctx.registry, ctx.policy)
    if not verification_gate.is_satisfied(app, ctx.inspection_types):
        raise VerificationPendingException(
            "Field verification was requested and has not been completed"
        )

    recommendation = resolve_recommendation(app, outcome)
    to_status = _RECOMMENDATION_TO_STATUS[recommendation]
    return Step(
        to_status,
        {
            "recommendation": recommendation,
            "info_requested_at_revision": app.revision if to_status == S.NEEDS_MORE_INFO else None,
        },
    )


def _resubmit_after_info_request(app: Application, event: ResubmitAfterInfoRequest, actor: Actor, ctx: TransitionContext) -> Step:
    requested_at = app.info_requested_at_revision
    if requested_at is None or app.revision <= requested_at:
        raise NoChangesSinceRequestException(app.revision, requested_at)
    return Step(S.UNDER_EVALUATION, {"recommendation": None})


# =============================================================================
# Transition Table
# =============================================================================

_REVIEWERS = frozenset({Role.OFFICER, Role.EVALUATOR})

TRANSITIONS: dict[str, TransitionRule] = {
    rule.event: rule
    for rule in (
        TransitionRule(
            EventKind.SELECT_DEVICE_TYPES,
            frozenset({Role.APPLICANT}),
            frozenset({S.DRAFT}),
            _select_device_types,
        ),
        TransitionRule(
            EventKind.RECORD_PAYMENT,
            frozenset({Role.OFFICER, Role.SYSTEM}),
            frozenset({S.DRAFT}),
            _record_payment,
        ),
        TransitionRule(
            EventKind.SUBMIT,
            frozenset({Role.APPLICANT}),
            frozenset({S.DRAFT}),
            _submit,
        ),
        TransitionRule(
            EventKind.ROUTE_FOR_VERIFICATION,
            _REVIEWERS,
            frozenset({S.SUBMITTED, S.UNDER_EVALUATION}),
            _route_for_verification,
        ),
        TransitionRule(
            EventKind.ASSIGN_VERIFICATION,
            frozenset({Role.FIELD_VERIFIER}),
            frozenset({S.FIELD_VERIFICATION_PENDING}),
            _assign_verification,
        ),
        TransitionRule(
            EventKind.RECORD_VERIFICATION,
            frozenset({Role.FIELD_VERIFIER}),
            frozenset({S.FIELD_VERIFICATION_PENDING}),
            _record_verification,
        ),
        TransitionRule(
            EventKind.ROUTE_FOR_EVALUATION,
            _REVIEWERS,
            frozenset({S.SUBMITTED, S.FIELD_VERIFICATION_PENDING}),
            _route_for_evaluation,
        ),
        TransitionRule(
            EventKind.RECORD_SCORES,
            frozenset({Role.EVALUATOR}),
            frozenset({S.UNDER_EVALUATION}),
            _record_scores,
        ),
        TransitionRule(
            EventKind.FINALIZE,
            frozenset({Role.EVALUATOR}),
            frozenset({S.UNDER_EVALUATION}),
            _finalize,
        ),
        TransitionRule(
            EventKind.RESUBMIT_AFTER_INFO_REQUEST,
            frozenset({Role.APPLICANT}),
            frozenset({S.NEEDS_MORE_INFO}),
            _resubmit_after_info_request,
        ),
    )
}


# =============================================================================
# Entry Points
# =============================================================================

def apply_event(
    application: Application,
    event: Event,
    actor: Actor,
    context: TransitionContext,
) -> Application:
    """
    Apply one event to a snapshot.

    Returns the next snapshot (version + 1, one history entry appended).
    The input snapshot is never modified.

    Raises:
        EmpanelmentException subclasses; see module docstring for order.
    """
    rule = TRANSITIONS[event.kind]
    try:
        if actor.role not in rule.roles:
            raise ForbiddenException(
                actor.role.value, rule.event, sorted(r.value for r in rule.roles)
            )
        if application.status not in rule.sources:
            raise IllegalTransitionException(application.status.value, rule.event)

        step = rule.handler(application, event, actor, context)
    except EmpanelmentException as e:
        logger.warning(
            f"Rejected {rule.event} on {application.id} "
            f"(status={application.status.value}, role={actor.role.value}): {e.code}"
        )
        raise

    entry = StatusChange(
        from_status=application.status,
        to_status=step.to_status,
        event=rule.event,
        actor_id=actor.user_id,
        role=actor.role,
        remarks=event.remarks,
        occurred_at=event.occurred_at,
    )
    changes = dict(step.changes)
    changes["status"] = step.to_status
    changes["history"] = application.history + (entry,)
    updated = application.evolve(**changes)

    logger.info(
        f"{application.id}: {rule.event} {application.status.value} -> "
        f"{updated.status.value} (version {updated.version})"
    )
    return updated


def try_apply(
    application: Application,
    event: Event,
    actor: Actor,
    context: TransitionContext,
) -> TransitionResult:
    """Like apply_event, but returns failures as a structured error value."""
    try:
        updated = apply_event(application, event, actor, context)
    except EmpanelmentException as e:
        return TransitionResult(ok=False, error=e.to_error_model())
    return TransitionResult(ok=True, application=updated)


def allowed_events(application: Application, role: Role) -> list[str]:
    """Events whose role and source-state checks pass (guards not evaluated)."""
    return [
        rule.event
        for rule in TRANSITIONS.values()
        if role in rule.roles and application.status in rule.sources
    ]
