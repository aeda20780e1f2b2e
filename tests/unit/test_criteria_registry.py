"""
Criterion Registry Tests

1. Default rubric: eight criteria, seven mandatory, GLOBAL_SUPPLY optional
2. max_possible_score with and without optional criteria
3. Duplicate ids / empty rubric / bad entries -> InvalidRubric
4. YAML loading (list form and mapping form)
5. Registry is read-only
"""

import pytest

from core.criteria.registry import DEFAULT_CRITERIA, CriterionRegistry
from core.schemas.errors import ErrorCodes, InvalidRubricException


class TestDefaultRubric:
    """Tests for the built-in SOP rubric."""

    def test_lists_all_criteria_in_order(self, registry):
        ids = [c.criterion_id for c in registry.list_criteria()]
        assert ids == [c["criterion_id"] for c in DEFAULT_CRITERIA]
        assert len(registry) == 8

    def test_global_supply_is_the_only_optional_criterion(self, registry):
        assert [c.criterion_id for c in registry.optional()] == ["GLOBAL_SUPPLY"]
        assert len(registry.mandatory()) == 7

    def test_max_possible_score(self, registry):
        """Optional criteria are left out of the maximum unless asked for."""
        assert registry.max_possible_score(include_optional=True) == 80
        assert registry.max_possible_score(include_optional=False) == 70

    def test_lookup(self, registry):
        assert "FINANCIAL_STANDING" in registry
        assert registry.get("FINANCIAL_STANDING").max_score == 10
        assert registry.get("NOT_A_CRITERION") is None
        assert "NOT_A_CRITERION" not in registry

    def test_default_is_stable_across_calls(self):
        a = CriterionRegistry.default()
        b = CriterionRegistry.default()
        assert a.list_criteria() == b.list_criteria()


class TestRubricValidation:
    """Tests for rejecting malformed rubrics."""

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidRubricException) as exc_info:
            CriterionRegistry.from_dicts([
                {"criterion_id": "A", "max_score": 5},
                {"criterion_id": "A", "max_score": 10},
            ])
        assert exc_info.value.code == ErrorCodes.INVALID_RUBRIC
        assert exc_info.value.details["criterion_id"] == "A"

    def test_empty_rubric_rejected(self):
        with pytest.raises(InvalidRubricException):
            CriterionRegistry.from_dicts([])

    def test_all_optional_rubric_rejected(self):
        with pytest.raises(InvalidRubricException) as exc_info:
            CriterionRegistry.from_dicts([
                {"criterion_id": "X", "max_score": 10, "is_optional": True},
                {"criterion_id": "Y", "max_score": 5, "is_optional": True},
            ])
        assert exc_info.value.details["criteria"] == ["X", "Y"]

    def test_all_optional_yaml_rubric_rejected(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text("- criterion_id: X\n  max_score: 10\n  is_optional: true\n")
        with pytest.raises(InvalidRubricException):
            CriterionRegistry.from_yaml(path)

    def test_non_positive_max_score_rejected(self):
        with pytest.raises(InvalidRubricException) as exc_info:
            CriterionRegistry.from_dicts([{"criterion_id": "A", "max_score": 0}])
        assert exc_info.value.details["index"] == 0

    def test_registry_is_read_only(self, registry):
        with pytest.raises(AttributeError):
            registry._criteria = ()


class TestYamlLoading:
    """Tests for loading alternate rubrics from YAML."""

    def test_load_list_form(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text(
            "- criterion_id: SAFETY\n"
            "  label: Safety\n"
            "  max_score: 20\n"
            "- criterion_id: EXPORTS\n"
            "  max_score: 5\n"
            "  is_optional: true\n"
        )
        registry = CriterionRegistry.from_yaml(path)
        assert [c.criterion_id for c in registry] == ["SAFETY", "EXPORTS"]
        assert registry.max_possible_score(include_optional=False) == 20
        assert registry.max_possible_score() == 25

    def test_load_mapping_form(self, tmp_path):
        path = tmp_path / "rubric.yml"
        path.write_text("criteria:\n  - criterion_id: ONLY\n    max_score: 4\n")
        registry = CriterionRegistry.from_yaml(path)
        assert len(registry) == 1

    def test_non_list_yaml_rejected(self, tmp_path):
        path = tmp_path / "rubric.yaml"
        path.write_text("just: a mapping\n")
        with pytest.raises(InvalidRubricException):
            CriterionRegistry.from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CriterionRegistry.from_yaml(tmp_path / "nope.yaml")
