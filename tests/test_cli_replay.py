import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from partcredit.cli.replay import app, replay_scenario
from partcredit.core.config import load_scenario
from partcredit.core.modes import BEHAVIOUR_ENV
from partcredit.core.provenance import ProvenanceLogger

RUNNER = CliRunner()

QUESTION = """
name: pair
penalty: 0.1
parts:
  p1:
    answers: {a: "1"}
  p2:
    answers: {b: "2"}
"""

SCENARIO = """
question: question.yaml
steps:
  - action: submit
    response: {a: "0"}
  - action: submit
    response: {a: "1", b: "2"}
  - action: finish
  - action: finish
"""


@pytest.fixture()
def scenario_path(tmp_path: Path) -> Path:
    (tmp_path / "question.yaml").write_text(QUESTION, encoding="utf-8")
    path = tmp_path / "scenario.yaml"
    path.write_text(SCENARIO, encoding="utf-8")
    return path


def test_replay_scenario_rows(scenario_path: Path) -> None:
    rows = replay_scenario(load_scenario(scenario_path))

    assert [row["verdict"] for row in rows] == ["keep", "keep", "keep", "discard"]
    assert rows[0]["tries"] == {"p1": 1}
    assert rows[1]["tries"] == {"p1": 2, "p2": 1}
    assert rows[1]["state"] == "complete"
    assert rows[1]["fraction"] == pytest.approx((0.8 + 0.9) / 2)
    assert rows[2]["state"] == "gradedright"
    assert rows[3]["state"] == "gradedright"


def test_replay_command_outputs_json(scenario_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BEHAVIOUR_ENV, raising=False)
    result = RUNNER.invoke(app, ["replay", str(scenario_path), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["behaviour"] == "adaptive"
    assert payload["steps"][0]["state"] == "todo"
    assert payload["steps"][-1]["verdict"] == "discard"


def test_replay_command_behaviour_override(scenario_path: Path) -> None:
    result = RUNNER.invoke(app, ["replay", str(scenario_path), "--json", "--behaviour", "adaptivenopenalty"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["behaviour"] == "adaptivenopenalty"
    assert payload["steps"][1]["fraction"] == pytest.approx(1.0)


def test_replay_command_honors_env(scenario_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BEHAVIOUR_ENV, "adaptivenopenalty")
    result = RUNNER.invoke(app, ["replay", str(scenario_path), "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["behaviour"] == "adaptivenopenalty"


def test_replay_command_rejects_unknown_behaviour(scenario_path: Path) -> None:
    result = RUNNER.invoke(app, ["replay", str(scenario_path), "--behaviour", "deferred"])

    assert result.exit_code != 0
    assert "unknown behaviour" in result.output.lower()


def test_replay_command_writes_provenance(scenario_path: Path, tmp_path: Path) -> None:
    log_path = tmp_path / "out" / "decisions.jsonl"
    result = RUNNER.invoke(app, ["replay", str(scenario_path), "--provenance", str(log_path)])

    assert result.exit_code == 0, result.output
    records = ProvenanceLogger(log_path).read()
    assert [record.action for record in records] == ["submit", "submit", "finish", "finish"]
    assert records[-1].verdict == "discard"
    assert records[0].parts["p1"]["tries"] == 1


def test_replay_command_table_output(scenario_path: Path) -> None:
    result = RUNNER.invoke(app, ["replay", str(scenario_path)])

    assert result.exit_code == 0, result.output
    assert "pair" in result.stdout


def test_replay_missing_file_errors(tmp_path: Path) -> None:
    missing = tmp_path / "missing.yaml"
    result = RUNNER.invoke(app, ["replay", str(missing)])

    assert result.exit_code != 0
    assert "not found" in result.output.lower()


def test_replay_invalid_scenario_errors(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("question:\n  parts: {}\nsteps: []\n", encoding="utf-8")
    result = RUNNER.invoke(app, ["replay", str(path)])

    assert result.exit_code == 1
    assert "invalid scenario" in result.output.lower()
    assert "question.parts" in result.output


def test_check_command_lists_parts(scenario_path: Path) -> None:
    question_path = scenario_path.parent / "question.yaml"
    result = RUNNER.invoke(app, ["check", str(question_path), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["compatible"] is True
    assert payload["parts"]["p1"] == {"weight": 1.0, "share": 0.5, "inputs": ["a"]}
