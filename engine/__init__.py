"""
Application Evaluation & Status-Transition Engine

Gates, aggregator and state machine operate on immutable Application
snapshots; ApplicationService adds per-id serialization and persistence.

Usage:
    from engine import ApplicationService, TransitionContext, apply_event
"""

from .aggregator import (
    DEFAULT_POLICY,
    EvaluationPolicy,
    aggregate,
    validate_scores,
)
from .locks import KeyedLockArena
from .service import (
    ApplicationService,
    ApplicationStore,
    InMemoryApplicationStore,
)
from .state_machine import (
    TRANSITIONS,
    TransitionContext,
    TransitionResult,
    TransitionRule,
    allowed_events,
    apply_event,
    resolve_recommendation,
    try_apply,
)

__all__ = [
    # Aggregator
    "DEFAULT_POLICY",
    "EvaluationPolicy",
    "aggregate",
    "validate_scores",
    # Concurrency
    "KeyedLockArena",
    # Service
    "ApplicationService",
    "ApplicationStore",
    "InMemoryApplicationStore",
    # State machine
    "TRANSITIONS",
    "TransitionContext",
    "TransitionResult",
    "TransitionRule",
    "allowed_events",
    "apply_event",
    "resolve_recommendation",
    "try_apply",
]
