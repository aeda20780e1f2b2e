"""
CLI Criteria Command

Print the evaluation rubric (default or loaded from a YAML file).

Usage:
    apcd criteria [--rubric rubric.yaml] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace

from core.config.runtime import RuntimeConfig
from core.criteria.registry import CriterionRegistry
from core.schemas.errors import InvalidRubricException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID = 2


def resolve_registry(rubric: str | None, config: RuntimeConfig | None) -> CriterionRegistry:
    """--rubric wins, then the configured rubric_path, then the default rubric."""
    path = rubric or (config.evaluation.rubric_path if config else None)
    if path:
        logger.info(f"Loading rubric from {path}")
        return CriterionRegistry.from_yaml(path)
    return CriterionRegistry.default()


def print_criteria_human(registry: CriterionRegistry) -> None:
    for c in registry.list_criteria():
        marker = " (optional)" if c.is_optional else ""
        print(f"{c.criterion_id:<28} {c.max_score:>5g}  {c.label}{marker}")
    print()
    print(f"max (all criteria):       {registry.max_possible_score(include_optional=True):g}")
    print(f"max (mandatory only):     {registry.max_possible_score(include_optional=False):g}")


def criteria_cmd(args: Namespace) -> int:
    """
    Execute the criteria command.

    Returns:
        Exit code
    """
    config = getattr(args, "runtime_config", None)
    try:
        registry = resolve_registry(args.rubric, config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except InvalidRubricException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INVALID

    if args.json:
        data = {
            "criteria": [c.model_dump(mode="json") for c in registry.list_criteria()],
            "max_possible_score": registry.max_possible_score(include_optional=True),
            "max_mandatory_score": registry.max_possible_score(include_optional=False),
        }
        print(json.dumps(data, indent=2))
    else:
        print_criteria_human(registry)

    return EXIT_SUCCESS
