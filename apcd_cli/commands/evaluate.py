"""
CLI Evaluate Command

Aggregate the scores stored in an application snapshot (JSON as returned by
the API) and print the total, ratio and recommendation.

Usage:
    apcd evaluate snapshot.json [--rubric rubric.yaml] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from pydantic import ValidationError

from apcd_cli.commands.criteria import resolve_registry
from core.schemas import Application, EmpanelmentException, EvaluationOutcome
from engine.aggregator import EvaluationPolicy, aggregate


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID = 2


def load_snapshot(path: Path) -> Application:
    """Load an application snapshot; accepts the bare snapshot or an API response."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict) and "application" in data:
        data = data["application"]
    return Application.model_validate(data)


def print_outcome_human(application: Application, outcome: EvaluationOutcome) -> None:
    print(f"application: {application.id}")
    print(f"status: {application.status.value}")
    for line in outcome.breakdown:
        score = "-" if line.score is None else f"{line.score:g}"
        note = "" if line.counted else "  (not counted)"
        print(f"  {line.criterion_id:<28} {score:>5} / {line.max_score:g}{note}")
    print(f"total: {outcome.total:g} / {outcome.max_attainable:g} ({outcome.percentage:.1f}%)")
    print(f"recommendation: {outcome.recommendation.value}")


def evaluate_cmd(args: Namespace) -> int:
    """
    Execute the evaluate command.

    Returns:
        Exit code (2 when scoring is incomplete or invalid)
    """
    snapshot_path = Path(args.snapshot)
    if not snapshot_path.exists():
        print(f"Error: Snapshot not found: {snapshot_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        application = load_snapshot(snapshot_path)
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Error loading snapshot: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    config = getattr(args, "runtime_config", None)
    policy = EvaluationPolicy.from_config(config.evaluation) if config else EvaluationPolicy()

    try:
        registry = resolve_registry(args.rubric, config)
        outcome = aggregate(application.scores, registry, policy)
    except EmpanelmentException as e:
        if args.json:
            print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INVALID

    if args.json:
        print(json.dumps(
            {"ok": True, "application_id": application.id, "outcome": outcome.model_dump(mode="json")},
            indent=2,
        ))
    else:
        print_outcome_human(application, outcome)

    return EXIT_SUCCESS
