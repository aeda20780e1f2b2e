"""
Application Service

The load -> transition -> persist unit. Transitions on one application id
are serialized through a KeyedLockArena; reads go straight to the store
and see the last committed snapshot.

The store is the seam to the persistence collaborator. It must detect
stale writes (optimistic concurrency on `Application.version`); the
service retries the whole unit on such a conflict a bounded number of
times and otherwise surfaces it unchanged.
"""
from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional, Protocol

from core.config.runtime import RuntimeConfig
from core.criteria.registry import CriterionRegistry
from core.schemas.application import Actor, Application
from core.schemas.errors import (
    ApplicationExistsException,
    ApplicationNotFoundException,
    EmpanelmentException,
    VersionConflictException,
)
from core.schemas.evaluation import EvaluationOutcome
from core.schemas.events import Event

from .aggregator import aggregate
from .locks import KeyedLockArena
from .state_machine import TransitionContext, TransitionResult, apply_event

logger = logging.getLogger(__name__)


class ApplicationStore(Protocol):
    """Contract of the persistence collaborator."""

    def get(self, application_id: str) -> Application:
        ...

    def create(self, application: Application) -> Application:
        ...

    def save(self, application: Application, expected_version: int) -> Application:
        ...


class InMemoryApplicationStore:
    """
    Dict-backed store.

    Snapshots are immutable and replaced by a single dict assignment, so
    `get` needs no lock and never observes a half-written application.
    """

    def __init__(self) -> None:
        self._data: dict[str, Application] = {}
        self._write_lock = threading.Lock()

    def get(self, application_id: str) -> Application:
        application = self._data.get(application_id)
        if application is None:
            raise ApplicationNotFoundException(application_id)
        return application

    def create(self, application: Application) -> Application:
        with self._write_lock:
            if application.id in self._data:
                raise ApplicationExistsException(application.id)
            self._data[application.id] = application
        return application

    def save(self, application: Application, expected_version: int) -> Application:
        with self._write_lock:
            current = self._data.get(application.id)
            if current is None:
                raise ApplicationNotFoundException(application.id)
            if current.version != expected_version:
                raise VersionConflictException(application.id, expected_version, current.version)
            self._data[application.id] = application
        return application

    def list_ids(self) -> list[str]:
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)


class ApplicationService:
    """Serialized, persisted transitions over an ApplicationStore."""

    def __init__(
        self,
        store: ApplicationStore,
        context: TransitionContext,
        max_conflict_retries: int = 3,
        locks: Optional[KeyedLockArena] = None,
    ) -> None:
        self.store = store
        self.context = context
        self.max_conflict_retries = max_conflict_retries
        self.locks = locks or KeyedLockArena()

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig,
        store: Optional[ApplicationStore] = None,
        registry: Optional[CriterionRegistry] = None,
    ) -> "ApplicationService":
        return cls(
            store=store or InMemoryApplicationStore(),
            context=TransitionContext.from_config(config, registry=registry),
            max_conflict_retries=config.service.max_conflict_retries,
        )

    def create(
        self,
        application_id: str | None = None,
        applicant_id: str | None = None,
    ) -> Application:
        """Open a new DRAFT application."""
        application = Application(
            id=application_id or f"app_{uuid.uuid4().hex[:12]}",
            applicant_id=applicant_id,
        )
        self.store.create(application)
        logger.info(f"Created application {application.id}")
        return application

    def get(self, application_id: str) -> Application:
        return self.store.get(application_id)

    def dispatch(self, application_id: str, event: Event, actor: Actor) -> Application:
        """
        Run one event through the state machine and persist the result.

        Raises whatever the state machine raises; VersionConflictException
        only after the retries are exhausted.
        """
        attempt = 0
        while True:
            with self.locks.hold(application_id):
                snapshot = self.store.get(application_id)
                updated = apply_event(snapshot, event, actor, self.context)
                try:
                    return self.store.save(updated, expected_version=snapshot.version)
                except VersionConflictException:
                    if attempt >= self.max_conflict_retries:
                        logger.error(
                            f"Giving up on {event.kind} for {application_id} "
                            f"after {attempt + 1} conflicting attempts"
                        )
                        raise
                    attempt += 1
                    logger.warning(
                        f"Version conflict on {application_id} ({event.kind}), "
                        f"retry {attempt}/{self.max_conflict_retries}"
                    )

    def try_dispatch(self, application_id: str, event: Event, actor: Actor) -> TransitionResult:
        try:
            updated = self.dispatch(application_id, event, actor)
        except EmpanelmentException as e:
            return TransitionResult(ok=False, error=e.to_error_model())
        return TransitionResult(ok=True, application=updated)

    def mark_revised(self, application_id: str) -> Application:
        """
        Bump the external revision marker.

        Stand-in for the profile CRUD layer, which owns applicant-editable
        data and signals every change this way.
        """
        with self.locks.hold(application_id):
            snapshot = self.store.get(application_id)
            updated = snapshot.evolve(revision=snapshot.revision + 1)
            return self.store.save(updated, expected_version=snapshot.version)

    def evaluate(self, application_id: str) -> EvaluationOutcome:
        """Aggregate the current scores without changing anything."""
        snapshot = self.store.get(application_id)
        return aggregate(snapshot.scores, self.context.registry, self.context.policy)
