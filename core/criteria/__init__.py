"""
Evaluation rubric.

Provides the process-wide criterion catalogue consumed by the aggregator
and the state machine.
"""

from .registry import DEFAULT_CRITERIA, CriterionRegistry

__all__ = [
    "DEFAULT_CRITERIA",
    "CriterionRegistry",
]
