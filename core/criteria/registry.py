"""
Criterion Registry

Fixed, ordered catalogue of evaluation criteria. A registry is built once at
startup and never patched: to change the rubric, build a new registry and
inject it in place of the old one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator

from pydantic import ValidationError

from core.schemas.errors import InvalidRubricException
from core.schemas.evaluation import CriterionDefinition

logger = logging.getLogger(__name__)


# Eight criteria of the empanelment SOP, 10 points each; GLOBAL_SUPPLY is optional.
DEFAULT_CRITERIA: tuple[dict[str, Any], ...] = (
    {
        "criterion_id": "EXPERIENCE_SCOPE",
        "label": "Experience & Scope of Supply",
        "description": (
            "Minimum 3 installations in last 5 years in design, manufacturing, "
            "supply & installation of APCDs for industrial Boiler/Furnaces/TFH"
        ),
        "max_score": 10,
    },
    {
        "criterion_id": "TECHNICAL_SPECIFICATION",
        "label": "Technical Specification of APCDs",
        "description": (
            "Equipment type, design capacity, material of construction, pollution "
            "control efficiency, compliance standards, warranty & service, innovation"
        ),
        "max_score": 10,
    },
    {
        "criterion_id": "TECHNICAL_TEAM",
        "label": "Technical Team & Capability",
        "description": (
            "Min 2 Engineers (B.Tech/M.Tech), Technicians (Diploma/ITI), "
            "Service team (>=2yr exp)"
        ),
        "max_score": 10,
    },
    {
        "criterion_id": "FINANCIAL_STANDING",
        "label": "Financial Standing",
        "description": "Minimum average annual turnover from APCD business (last 3 years) > Rs 1 crore",
        "max_score": 10,
    },
    {
        "criterion_id": "LEGAL_QUALITY_COMPLIANCE",
        "label": "Legal & Quality Compliance",
        "description": "ISO/BIS certifications (ISO 9001/14001), no ongoing legal disputes",
        "max_score": 10,
    },
    {
        "criterion_id": "COMPLAINT_HANDLING",
        "label": "Customer Complaint Handling",
        "description": (
            "Documented grievance redressal, complaint response within 48 hrs, "
            "resolution within 15 days"
        ),
        "max_score": 10,
    },
    {
        "criterion_id": "CLIENT_FEEDBACK",
        "label": "Client Feedback",
        "description": "Minimum 3 testimonials from APCD projects in last 3 years (1 from NCR preferred)",
        "max_score": 10,
    },
    {
        "criterion_id": "GLOBAL_SUPPLY",
        "label": "Global Supply (Optional)",
        "description": "Details of APCD projects abroad (Country, Year, Type, CE/ISO/EU compliance)",
        "max_score": 10,
        "is_optional": True,
    },
)


class CriterionRegistry:
    """Immutable, ordered set of CriterionDefinition entries."""

    __slots__ = ("_criteria", "_by_id")

    def __init__(self, criteria: Iterable[CriterionDefinition]) -> None:
        ordered = tuple(criteria)
        if not ordered:
            raise InvalidRubricException("Rubric must define at least one criterion")

        by_id: dict[str, CriterionDefinition] = {}
        for definition in ordered:
            if definition.criterion_id in by_id:
                raise InvalidRubricException(
                    f"Duplicate criterion '{definition.criterion_id}'",
                    details={"criterion_id": definition.criterion_id},
                )
            by_id[definition.criterion_id] = definition

        if all(definition.is_optional for definition in ordered):
            raise InvalidRubricException(
                "Rubric must define at least one mandatory criterion",
                details={"criteria": list(by_id)},
            )

        object.__setattr__(self, "_criteria", ordered)
        object.__setattr__(self, "_by_id", by_id)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("CriterionRegistry is read-only")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_dicts(cls, entries: Iterable[dict[str, Any]]) -> "CriterionRegistry":
        """Build a registry from plain dicts (config files, tests)."""
        definitions = []
        for index, entry in enumerate(entries):
            try:
                definitions.append(CriterionDefinition.model_validate(entry))
            except ValidationError as e:
                raise InvalidRubricException(
                    f"Invalid criterion at position {index}: {e.errors()[0]['msg']}",
                    details={"index": index},
                ) from e
        return cls(definitions)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "CriterionRegistry":
        """
        Load a rubric from YAML.

        Accepts either a top-level list of criteria or a mapping with a
        `criteria` key.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Rubric file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if isinstance(data, dict):
            data = data.get("criteria")
        if not isinstance(data, list):
            raise InvalidRubricException(
                f"Rubric file {path} must contain a list of criteria",
                details={"path": str(path)},
            )

        registry = cls.from_dicts(data)
        logger.info(f"Loaded rubric with {len(registry)} criteria from {path}")
        return registry

    @classmethod
    def default(cls) -> "CriterionRegistry":
        """The SOP rubric: seven mandatory criteria and one optional."""
        return cls.from_dicts(DEFAULT_CRITERIA)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_criteria(self) -> tuple[CriterionDefinition, ...]:
        return self._criteria

    def get(self, criterion_id: str) -> CriterionDefinition | None:
        return self._by_id.get(criterion_id)

    def mandatory(self) -> tuple[CriterionDefinition, ...]:
        return tuple(c for c in self._criteria if not c.is_optional)

    def optional(self) -> tuple[CriterionDefinition, ...]:
        return tuple(c for c in self._criteria if c.is_optional)

    def max_possible_score(self, include_optional: bool = True) -> float:
        """Sum of maxima, leaving out optional criteria unless asked."""
        return sum(
            c.max_score for c in self._criteria
            if include_optional or not c.is_optional
        )

    def __contains__(self, criterion_id: object) -> bool:
        return criterion_id in self._by_id

    def __iter__(self) -> Iterator[CriterionDefinition]:
        return iter(self._criteria)

    def __len__(self) -> int:
        return len(self._criteria)

    def __repr__(self) -> str:
        return f"CriterionRegistry({[c.criterion_id for c in self._criteria]!r})"
