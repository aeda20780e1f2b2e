"""
CLI Tests

Tests for the apcd command-line entry point:
1. criteria / fees print the rubric and fee quote
2. evaluate aggregates a snapshot file (exit 2 when scoring is incomplete)
3. simulate replays a script and stops at the first rejection
4. config --init / --show
"""

import json

import pytest

from apcd_cli.main import main
from core.schemas.application import ApplicationStatus

from fixtures import drive, scores_totalling


def _run_json(capsys, argv: list[str]) -> tuple[int, dict]:
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out)


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    """Run every command from an empty directory so no apcd.json is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(path, data) -> str:
    path.write_text(json.dumps(data))
    return str(path)


class TestCriteriaAndFees:
    """Tests for the read-only commands."""

    def test_criteria_json(self, capsys):
        code, data = _run_json(capsys, ["criteria", "--json"])
        assert code == 0
        assert len(data["criteria"]) == 8
        assert data["max_possible_score"] == 80
        assert data["max_mandatory_score"] == 70

    def test_criteria_human(self, capsys):
        assert main(["criteria"]) == 0
        assert "GLOBAL_SUPPLY" in capsys.readouterr().out

    def test_criteria_missing_rubric(self, tmp_path):
        assert main(["criteria", "--rubric", str(tmp_path / "nope.yaml")]) == 1

    def test_fees_json(self, capsys):
        code, data = _run_json(capsys, ["fees", "--types", "5", "--json"])
        assert code == 0
        assert data["grand_total"] == 413000

    def test_fees_human_uses_indian_grouping(self, capsys):
        assert main(["fees", "-n", "5"]) == 0
        assert "4,13,000" in capsys.readouterr().out

    def test_fees_negative(self):
        assert main(["fees", "--types", "-1"]) == 1


class TestEvaluate:
    """Tests for snapshot aggregation."""

    def test_complete_snapshot(self, capsys, tmp_path):
        app = drive(ApplicationStatus.UNDER_EVALUATION, scores=scores_totalling(48))
        path = _write(tmp_path / "snap.json", app.model_dump(mode="json"))

        code, data = _run_json(capsys, ["evaluate", path, "--json"])

        assert code == 0
        assert data["ok"] is True
        assert data["outcome"]["total"] == 48
        assert data["outcome"]["recommendation"] == "APPROVE"

    def test_api_response_wrapper_accepted(self, capsys, tmp_path):
        app = drive(ApplicationStatus.UNDER_EVALUATION, scores=scores_totalling(20))
        path = _write(tmp_path / "resp.json", {"ok": True, "application": app.model_dump(mode="json")})

        code, data = _run_json(capsys, ["evaluate", path, "--json"])

        assert code == 0
        assert data["outcome"]["recommendation"] == "REJECT"

    def test_incomplete_snapshot(self, capsys, tmp_path):
        app = drive(ApplicationStatus.UNDER_EVALUATION)
        path = _write(tmp_path / "snap.json", app.model_dump(mode="json"))

        code, data = _run_json(capsys, ["evaluate", path, "--json"])

        assert code == 2
        assert data["ok"] is False
        assert data["error"]["code"] == "INCOMPLETE_SCORING"

    def test_missing_snapshot(self, tmp_path):
        assert main(["evaluate", str(tmp_path / "nope.json")]) == 1

    def test_malformed_snapshot(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert main(["evaluate", str(path)]) == 1


class TestSimulate:
    """Tests for scripted lifecycle replay."""

    def _steps(self):
        applicant = {"user_id": "oem-1", "role": "APPLICANT"}
        officer = {"user_id": "officer-1", "role": "OFFICER"}
        evaluator = {"user_id": "evaluator-1", "role": "EVALUATOR"}
        return [
            {"actor": applicant, "event": {"kind": "select_device_types", "device_types": ["ESP"]}},
            {"actor": officer, "event": {
                "kind": "record_payment", "device_type_id": "ESP", "amount": 76700, "reference": "UTR1",
            }},
            {"actor": applicant, "event": {"kind": "submit"}},
            {"actor": officer, "event": {"kind": "route_for_evaluation"}},
            {"actor": evaluator, "event": {"kind": "record_scores", "scores": scores_totalling(30)}},
            {"actor": evaluator, "event": {"kind": "finalize"}},
        ]

    def test_script_runs_to_completion(self, capsys, tmp_path):
        path = _write(tmp_path / "script.json", {"application": {"id": "demo"}, "steps": self._steps()})

        code, data = _run_json(capsys, ["simulate", path, "--json"])

        assert code == 0
        assert data["ok"] is True
        assert data["applied"] == 6
        assert data["status"] == "NEEDS_MORE_INFO"
        assert data["recommendation"] == "NEED_MORE_INFO"
        assert data["history"][-1]["to"] == "NEEDS_MORE_INFO"

    def test_bare_list_script(self, capsys, tmp_path):
        path = _write(tmp_path / "script.json", self._steps()[:3])

        code, data = _run_json(capsys, ["simulate", path, "--json"])

        assert code == 0
        assert data["application_id"] == "simulation"
        assert data["status"] == "SUBMITTED"

    def test_rejected_step_stops_replay(self, capsys, tmp_path):
        steps = self._steps()
        # submit before paying
        script = [steps[0], steps[2], steps[3]]
        path = _write(tmp_path / "script.json", script)

        code, data = _run_json(capsys, ["simulate", path, "--json"])

        assert code == 2
        assert data["ok"] is False
        assert data["applied"] == 1
        assert data["status"] == "DRAFT"
        assert data["error"]["code"] == "PAYMENT_INCOMPLETE"
        assert data["error"]["step"] == 2
        assert data["error"]["event"] == "submit"

    def test_malformed_script(self, tmp_path):
        path = _write(tmp_path / "script.json", {"steps": [{"event": {"kind": "submit"}}]})
        assert main(["simulate", path]) == 1

    def test_missing_script(self, tmp_path):
        assert main(["simulate", str(tmp_path / "nope.json")]) == 1


class TestConfigCommand:
    """Tests for config --init / --show."""

    def test_init_then_show(self, capsys, _workdir):
        assert main(["config", "--init"]) == 0
        created = _workdir / "apcd.json"
        assert created.exists()
        capsys.readouterr()

        data = json.loads(created.read_text())
        data["evaluation"]["approve_threshold"] = 0.7
        created.write_text(json.dumps(data))

        code, shown = _run_json(capsys, ["config", "--show"])
        assert code == 0
        assert shown["evaluation"]["approve_threshold"] == 0.7

    def test_init_refuses_to_overwrite(self, _workdir):
        (_workdir / "apcd.json").write_text("{}")
        assert main(["config", "--init"]) == 1

    def test_show_reflects_env(self, capsys, monkeypatch):
        monkeypatch.setenv("APCD_REJECT_THRESHOLD", "0.3")
        code, shown = _run_json(capsys, ["config", "--show"])
        assert code == 0
        assert shown["evaluation"]["reject_threshold"] == 0.3

    def test_explicit_config_file(self, capsys, tmp_path):
        path = _write(tmp_path / "custom.json", {"log_level": "WARNING"})
        code, shown = _run_json(capsys, ["--config", path, "config", "--show"])
        assert code == 0
        assert shown["log_level"] == "WARNING"


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()
