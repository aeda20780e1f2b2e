"""
Score Aggregator

Maps an application's recorded scores and the rubric to an
EvaluationOutcome deterministically. Pure: nothing here mutates or
persists; the caller decides what to do with the outcome.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping

from core.config.runtime import EvaluationConfig
from core.criteria.registry import CriterionRegistry
from core.schemas.application import ScoreEntry
from core.schemas.errors import (
    IncompleteScoringException,
    ScoreOutOfRangeException,
    UnknownCriterionException,
)
from core.schemas.evaluation import CriterionScore, EvaluationOutcome, Recommendation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationPolicy:
    """Ratio cutoffs for the provisional recommendation."""
    approve_threshold: float = 0.6
    reject_threshold: float = 0.4

    def __post_init__(self):
        if not 0.0 <= self.reject_threshold <= self.approve_threshold <= 1.0:
            raise ValueError(
                f"invalid thresholds: reject={self.reject_threshold}, approve={self.approve_threshold}"
            )

    @classmethod
    def from_config(cls, config: EvaluationConfig) -> "EvaluationPolicy":
        return cls(
            approve_threshold=config.approve_threshold,
            reject_threshold=config.reject_threshold,
        )

    def recommend(self, ratio: float) -> Recommendation:
        if ratio >= self.approve_threshold:
            return Recommendation.APPROVE
        if ratio < self.reject_threshold:
            return Recommendation.REJECT
        return Recommendation.NEED_MORE_INFO


DEFAULT_POLICY = EvaluationPolicy()


def _score_value(entry: ScoreEntry | float) -> float:
    return entry.score if isinstance(entry, ScoreEntry) else float(entry)


def validate_scores(
    scores: Mapping[str, ScoreEntry | float],
    registry: CriterionRegistry,
) -> None:
    """
    Check every entry names a rubric criterion and is a finite value in [0, max].

    Raises on the first offending entry in rubric order (unknown criteria
    are reported before range errors), so the result does not depend on the
    mapping's insertion order.
    """
    unknown = sorted(cid for cid in scores if cid not in registry)
    if unknown:
        raise UnknownCriterionException(unknown[0])

    for definition in registry.list_criteria():
        if definition.criterion_id not in scores:
            continue
        value = _score_value(scores[definition.criterion_id])
        if not math.isfinite(value) or value < 0 or value > definition.max_score:
            raise ScoreOutOfRangeException(definition.criterion_id, value, definition.max_score)


def aggregate(
    scores: Mapping[str, ScoreEntry | float],
    registry: CriterionRegistry,
    policy: EvaluationPolicy = DEFAULT_POLICY,
) -> EvaluationOutcome:
    """
    Combine per-criterion scores into a composite outcome.

    Absent optional criteria are ignored; present ones are counted and raise
    the attainable maximum to include every optional criterion.

    Raises:
        UnknownCriterionException: score for a criterion outside the rubric.
        ScoreOutOfRangeException: negative score or above the maximum.
        IncompleteScoringException: a mandatory criterion has no score.
    """
    validate_scores(scores, registry)

    missing = [c.criterion_id for c in registry.mandatory() if c.criterion_id not in scores]
    if missing:
        raise IncompleteScoringException(missing)

    optional_included = any(c.criterion_id in scores for c in registry.optional())

    breakdown: list[CriterionScore] = []
    total = 0.0
    for definition in registry.list_criteria():
        entry = scores.get(definition.criterion_id)
        if entry is None:
            breakdown.append(CriterionScore(
                criterion_id=definition.criterion_id,
                label=definition.label,
                score=None,
                max_score=definition.max_score,
                is_optional=definition.is_optional,
                counted=False,
            ))
            continue

        value = _score_value(entry)
        total += value
        breakdown.append(CriterionScore(
            criterion_id=definition.criterion_id,
            label=definition.label,
            score=value,
            max_score=definition.max_score,
            is_optional=definition.is_optional,
            counted=True,
            evaluator_id=entry.evaluator_id if isinstance(entry, ScoreEntry) else None,
        ))

    max_attainable = registry.max_possible_score(include_optional=optional_included)
    ratio = total / max_attainable
    recommendation = policy.recommend(ratio)

    logger.debug(
        f"Aggregated {len(scores)} scores: total={total} max={max_attainable} "
        f"ratio={ratio:.3f} -> {recommendation.value}"
    )

    return EvaluationOutcome(
        total=total,
        max_attainable=max_attainable,
        ratio=ratio,
        optional_included=optional_included,
        breakdown=tuple(breakdown),
        recommendation=recommendation,
    )
