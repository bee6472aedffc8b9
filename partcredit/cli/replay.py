"""CLI helpers for replaying learner actions against a multi-part question."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from partcredit.behaviour import Action, QuestionAttempt, SubmissionStateMachine, Verdict, is_compatible_question
from partcredit.core.config import BehaviourConfig, ScenarioConfig, ScenarioStep, load_question_definition, load_scenario
from partcredit.core.modes import parse_behaviour_mode
from partcredit.core.provenance import ProvenanceLogger
from partcredit.questions import KeyedAnswerQuestion

app = typer.Typer(help="Replay learner actions and inspect multi-part grading decisions.")
console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_or_exit(loader: Any, path: Path) -> Any:
    if not path.exists():
        raise typer.BadParameter(f"File not found at {path}")
    try:
        return loader(path)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        if exc.__cause__ is not None:
            console.print(str(exc.__cause__), markup=False)
        raise typer.Exit(code=1) from exc


def _apply_step(attempt: QuestionAttempt, step: ScenarioStep) -> Verdict:
    action = Action(step.action)
    if action is Action.FINISH:
        return attempt.finish(step.response or None)
    if action is Action.COMMENT:
        return attempt.comment(step.comment or "")
    return attempt.process(action, step.response)


def replay_scenario(
    scenario: ScenarioConfig,
    *,
    config: BehaviourConfig | None = None,
    provenance: ProvenanceLogger | None = None,
    label: str = "attempt",
) -> List[Dict[str, Any]]:
    """Run every scenario step and return one row per step."""
    question = KeyedAnswerQuestion(scenario.question)
    machine = SubmissionStateMachine.for_question(question, config or scenario.behaviour)
    attempt = QuestionAttempt(machine, label=label, provenance=provenance)

    rows: List[Dict[str, Any]] = []
    for index, step in enumerate(scenario.steps, start=1):
        verdict = _apply_step(attempt, step)
        latest = attempt.latest
        rows.append(
            {
                "step": index,
                "action": step.action,
                "verdict": verdict.value,
                "state": attempt.state.value,
                "fraction": attempt.fraction,
                "tries": attempt.part_tries(),
                "summary": latest.summary if latest is not None else None,
            }
        )
    return rows


def _render_rows(rows: List[Dict[str, Any]], title: str) -> None:
    table = Table(title=title)
    for column in ("Step", "Action", "Verdict", "State", "Fraction", "Tries", "Summary"):
        table.add_column(column)
    for row in rows:
        fraction = "-" if row["fraction"] is None else f"{row['fraction']:.3f}"
        tries = ", ".join(f"{name}={count}" for name, count in sorted(row["tries"].items())) or "-"
        table.add_row(
            str(row["step"]),
            row["action"],
            row["verdict"],
            row["state"],
            fraction,
            tries,
            row["summary"] or "",
        )
    console.print(table)


@app.command()
def replay(
    scenario_path: Path = typer.Argument(..., help="Scenario YAML with question, behaviour and steps."),
    behaviour: Optional[str] = typer.Option(None, "--behaviour", help="Override the scenario behaviour (adaptive, adaptivenopenalty)."),
    provenance: Optional[Path] = typer.Option(None, "--provenance", help="Append one JSONL record per processed action."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Replay a scenario and show how each action was graded."""
    _configure_logging(log_level)
    scenario = _load_or_exit(load_scenario, scenario_path.expanduser().resolve())
    if behaviour is not None:
        try:
            config = BehaviourConfig(preferred_behaviour=parse_behaviour_mode(behaviour))
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    else:
        config = BehaviourConfig.from_env(scenario.behaviour.preferred_behaviour)

    logger = ProvenanceLogger(provenance.expanduser().resolve()) if provenance else None
    rows = replay_scenario(scenario, config=config, provenance=logger, label=scenario.question.name)

    if json_output:
        typer.echo(json.dumps({"behaviour": config.preferred_behaviour.value, "steps": rows}, indent=2))
        return
    _render_rows(rows, f"{scenario.question.name} ({config.preferred_behaviour.describe()})")


@app.command()
def check(
    question_path: Path = typer.Argument(..., help="Question definition YAML."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
) -> None:
    """Validate a question definition and list its parts and weights."""
    definition = _load_or_exit(load_question_definition, question_path.expanduser().resolve())
    question = KeyedAnswerQuestion(definition)
    weights = question.get_parts_and_weights()
    total = sum(weights.values())
    payload = {
        "name": question.name,
        "compatible": is_compatible_question(question),
        "penalty": question.penalty,
        "parts": {
            name: {"weight": weight, "share": round(weight / total, 3), "inputs": definition.parts[name].inputs}
            for name, weight in weights.items()
        },
    }
    if json_output:
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=f"{question.name}: penalty {question.penalty}")
    table.add_column("Part")
    table.add_column("Weight")
    table.add_column("Share")
    table.add_column("Inputs")
    for name, info in payload["parts"].items():
        table.add_row(name, f"{info['weight']:g}", f"{info['share']:.3f}", ", ".join(info["inputs"]))
    console.print(table)


if __name__ == "__main__":
    app()
