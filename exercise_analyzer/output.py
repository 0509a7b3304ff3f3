"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from exercise_analyzer import __version__
from exercise_analyzer.decision import Result, Status

_STATUS_COLORS = {
    Status.APPROVE_AS_OPTIMAL: "green",
    Status.APPROVE_WITH_COMMENT: "green",
    Status.DISAPPROVE_WITH_COMMENT: "red",
    Status.REFER_TO_MENTOR: "yellow",
}


def render_human(result: Result) -> str:
    """Render a compact colorized summary."""
    lines: list[str] = [
        click.style(
            f"Status: {result.status.value} (severity {result.severity})",
            fg=_STATUS_COLORS[result.status],
            bold=True,
        )
    ]

    if result.comments:
        lines.append(click.style("Comments:", bold=True))
        for index, comment in enumerate(result.comments, start=1):
            line = f"{index}. {comment.code}"
            if comment.params:
                params = ", ".join(f"{key}={value}" for key, value in comment.params.items())
                line += f" ({params})"
            lines.append(line)

    if result.errors:
        lines.append(click.style("Errors:", bold=True, fg="yellow"))
        for error in result.errors:
            lines.append(f"- {error}")
    return "\n".join(lines)


def render_json(result: Result, *, exercise: str, solution: str | None) -> str:
    """Render stable JSON output for tooling."""
    payload = build_json_payload(result, exercise=exercise, solution=solution)
    return json.dumps(payload, sort_keys=True)


def build_json_payload(
    result: Result, *, exercise: str, solution: str | None
) -> dict[str, Any]:
    """Build the analysis payload with run metadata."""
    payload = result.to_dict()
    payload["meta"] = {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "exercise": exercise,
        "solution": solution,
        "version": __version__,
    }
    return payload
