"""Output rendering tests."""

from __future__ import annotations

import json

import click

from exercise_analyzer import __version__
from exercise_analyzer.decision import Result, Status
from exercise_analyzer.output import render_human, render_json
from exercise_analyzer.suggestions import Comment


def test_render_human_lists_comments_with_params_and_errors() -> None:
    result = Result(
        status=Status.REFER_TO_MENTOR,
        comments=(Comment("python.two-fer.plus_used"), Comment("extra", {"name": "tmp"})),
        severity=1,
        errors=("unexpected f-string docstring at line 5",),
    )

    output = click.unstyle(render_human(result))
    assert "Status: refer_to_mentor (severity 1)" in output
    assert "1. python.two-fer.plus_used" in output
    assert "2. extra (name=tmp)" in output
    assert "Errors:" in output
    assert "- unexpected f-string docstring at line 5" in output


def test_render_human_omits_empty_sections() -> None:
    output = click.unstyle(render_human(Result(status=Status.APPROVE_AS_OPTIMAL)))
    assert output == "Status: approve_as_optimal (severity 0)"


def test_render_json_has_stable_schema_keys() -> None:
    result = Result(
        status=Status.DISAPPROVE_WITH_COMMENT,
        comments=(Comment("a"), Comment("b", {"name": "x"})),
        severity=3,
    )

    payload = json.loads(render_json(result, exercise="two-fer", solution="two_fer.py"))
    assert set(payload.keys()) == {"status", "comments", "severity", "errors", "meta"}
    assert payload["status"] == "disapprove_with_comment"
    assert payload["comments"] == ["a", {"comment": "b", "params": {"name": "x"}}]
    assert payload["severity"] == 3
    assert payload["errors"] == []
    assert payload["meta"]["exercise"] == "two-fer"
    assert payload["meta"]["solution"] == "two_fer.py"
    assert payload["meta"]["version"] == __version__
    assert payload["meta"]["generated_at"].endswith("Z")
