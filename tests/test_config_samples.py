from pathlib import Path

from partcredit.core.config import load_question_definition, load_scenario
from partcredit.cli.replay import replay_scenario


def test_question_sample_loads() -> None:
    """Ensure the shipped question YAML matches the QuestionDefinition schema."""

    repo_root = Path(__file__).resolve().parents[1]
    question = load_question_definition(repo_root / "config" / "question_sample.yaml")

    assert question.name == "projectile"
    assert question.parts["time"].weight == 2.0
    assert question.parts["height"].numeric_inputs == ["h_peak"]


def test_scenario_sample_replays() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    scenario = load_scenario(repo_root / "config" / "scenario_sample.yaml")

    rows = replay_scenario(scenario)

    assert [row["action"] for row in rows] == ["submit", "save", "submit", "finish"]
    assert rows[-1]["state"] == "gradedpartial"
    assert rows[-1]["tries"] == {"time": 2, "height": 1}
    assert round(rows[-1]["fraction"], 3) == 0.667
