"""
API Dependencies

Dependency injection for the API: runtime config, the shared
ApplicationService, and the acting user taken from request headers.

Tests replace `get_service` / `get_config` via `app.dependency_overrides`.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import Header

from api.errors import InvalidRequestError, UnauthenticatedError
from core.config.runtime import RuntimeConfig, get_default_config
from core.schemas.application import Actor, Role
from engine.service import ApplicationService

logger = logging.getLogger(__name__)

_service: Optional[ApplicationService] = None
_service_lock = threading.Lock()


def get_config() -> RuntimeConfig:
    """Runtime config: config file (if any) with environment overrides."""
    return get_default_config()


def get_service() -> ApplicationService:
    """Process-wide service over the in-memory store, built on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                config = get_config()
                _service = ApplicationService.from_config(config)
                logger.info(
                    f"Application service ready ({len(_service.context.registry)} criteria, "
                    f"approve>={config.evaluation.approve_threshold}, "
                    f"reject<{config.evaluation.reject_threshold})"
                )
    return _service


def reset_service() -> None:
    """Drop the shared service (and with it every stored application)."""
    global _service
    with _service_lock:
        _service = None


def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """
    Build the acting user from X-User-Id / X-User-Role.

    Authentication happens upstream; the headers are trusted as given.
    """
    if not x_user_id or not x_user_role:
        raise UnauthenticatedError()
    try:
        role = Role(x_user_role.upper())
    except ValueError:
        raise InvalidRequestError(
            f"Unknown role '{x_user_role}'",
            details={"allowed_roles": [r.value for r in Role]},
        )
    return Actor(user_id=x_user_id, role=role)


def get_optional_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor | None:
    if not x_user_id and not x_user_role:
        return None
    return get_actor(x_user_id=x_user_id, x_user_role=x_user_role)
