"""
CLI Simulate Command

Replay a scripted sequence of events against an application snapshot,
stopping at the first rejected event.

Script format (JSON):
    {
      "application": {"id": "demo"},          # optional initial snapshot
      "steps": [
        {"actor": {"user_id": "oem-1", "role": "APPLICANT"},
         "event": {"kind": "select_device_types", "device_types": ["ESP"]}},
        ...
      ]
    }

A bare list is accepted as the `steps` array.

Usage:
    apcd simulate script.json [--rubric rubric.yaml] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from apcd_cli.commands.criteria import resolve_registry
from core.config.runtime import RuntimeConfig
from core.schemas import Actor, Application, EmpanelmentException, parse_event
from engine.state_machine import TransitionContext, apply_event


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


@dataclass
class SimulationSummary:
    """Outcome of a scripted run for CLI output."""
    application_id: str = ""
    applied: int = 0
    total_steps: int = 0
    status: str = ""
    version: int = 0
    recommendation: str | None = None
    history: list[dict[str, Any]] = field(default_factory=list)
    error: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["ok"] = self.ok
        if d["error"] is None:
            del d["error"]
        return d


class ScriptError(ValueError):
    """The script file itself is malformed."""


def load_script(path: Path) -> tuple[Application, list[tuple[Actor, Any]]]:
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, list):
        data = {"steps": data}
    if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
        raise ScriptError("script must be a list of steps or an object with a 'steps' list")

    try:
        application = Application.model_validate(data.get("application") or {"id": "simulation"})
        steps = [
            (Actor.model_validate(step["actor"]), parse_event(step["event"]))
            for step in data["steps"]
        ]
    except (KeyError, TypeError) as e:
        raise ScriptError(f"every step needs 'actor' and 'event': {e}") from e
    except ValidationError as e:
        raise ScriptError(str(e)) from e
    return application, steps


def run_simulation(
    application: Application,
    steps: list[tuple[Actor, Any]],
    context: TransitionContext,
) -> tuple[Application, SimulationSummary]:
    """Apply steps in order; stop at the first rejection."""
    summary = SimulationSummary(application_id=application.id, total_steps=len(steps))
    for actor, event in steps:
        try:
            application = apply_event(application, event, actor, context)
        except EmpanelmentException as e:
            error = e.to_error_model().model_dump()
            error["step"] = summary.applied + 1
            error["event"] = event.kind
            summary.error = error
            break
        summary.applied += 1

    summary.status = application.status.value
    summary.version = application.version
    summary.recommendation = application.recommendation.value if application.recommendation else None
    summary.history = [
        {
            "event": h.event,
            "from": h.from_status.value,
            "to": h.to_status.value,
            "actor": h.actor_id,
            "role": h.role.value,
        }
        for h in application.history
    ]
    return application, summary


def print_summary_human(summary: SimulationSummary) -> None:
    print(f"application: {summary.application_id}")
    for i, h in enumerate(summary.history, 1):
        print(f"  {i:>2}. {h['event']:<28} {h['from']} -> {h['to']}  [{h['role']} {h['actor']}]")
    print(f"applied: {summary.applied}/{summary.total_steps}")
    print(f"status: {summary.status} (version {summary.version})")
    if summary.recommendation:
        print(f"recommendation: {summary.recommendation}")
    if summary.error:
        print(
            f"\nrejected at step {summary.error['step']} ({summary.error['event']}): "
            f"{summary.error['code']}: {summary.error['message']}"
        )


def simulate_cmd(args: Namespace) -> int:
    """
    Execute the simulate command.

    Returns:
        Exit code (2 when a step is rejected)
    """
    script_path = Path(args.script)
    if not script_path.exists():
        print(f"Error: Script not found: {script_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        application, steps = load_script(script_path)
    except (json.JSONDecodeError, ScriptError) as e:
        print(f"Error loading script: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    config: RuntimeConfig = getattr(args, "runtime_config", None) or RuntimeConfig()
    registry = resolve_registry(args.rubric, config)
    context = TransitionContext.from_config(config, registry=registry)

    logger.info(f"Simulating {len(steps)} steps on {application.id}")
    _, summary = run_simulation(application, steps, context)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if summary.ok else EXIT_REJECTED
