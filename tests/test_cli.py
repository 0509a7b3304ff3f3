"""CLI tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from exercise_analyzer import __version__
from exercise_analyzer.cli import app
from exercise_analyzer.rules import two_fer

runner = CliRunner()

OPTIMAL = (
    '"""Two-fer."""\n\n\n'
    'def two_fer(name="you"):\n'
    '    """Share one with ``name``."""\n'
    '    return f"One for {name}, one for me."\n'
)
PLUS = (
    '"""Two-fer."""\n\n\n'
    'def two_fer(name="you"):\n'
    '    """Share one with ``name``."""\n'
    '    return "One for " + name + ", one for me."\n'
)


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_analyze_json_optimal(tmp_path: Path) -> None:
    solution = _write(tmp_path, OPTIMAL)

    result = runner.invoke(
        app,
        [
            "analyze",
            str(solution),
            "--exercise",
            "two-fer",
            "--goodness",
            "1",
            "--root",
            str(tmp_path),
            "--format",
            "json",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["status"] == "approve_as_optimal"
    assert payload["comments"] == []
    assert payload["meta"]["exercise"] == "two-fer"


def test_analyze_human_and_writes_analysis_file(tmp_path: Path) -> None:
    solution = _write(tmp_path, PLUS)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "analyze",
            str(solution),
            "--exercise",
            "two-fer",
            "--root",
            str(tmp_path),
            "--output-dir",
            str(out_dir),
        ],
    )
    assert result.exit_code == 0
    assert "disapprove_with_comment" in result.stdout
    assert two_fer.PLUS_USED in result.stdout

    payload = json.loads((out_dir / "analysis.json").read_text(encoding="utf-8"))
    assert payload["status"] == "disapprove_with_comment"
    assert payload["comments"] == [two_fer.PLUS_USED]
    assert payload["severity"] == 1


def test_analyze_uses_config_and_fail_on(tmp_path: Path) -> None:
    (tmp_path / ".exercise-analyzer.toml").write_text(
        "\n".join(
            [
                'format = "json"',
                'exercise = "two-fer"',
                'fail_on = ["disapprove_with_comment"]',
            ]
        ),
        encoding="utf-8",
    )
    solution = _write(tmp_path, PLUS)

    result = runner.invoke(app, ["analyze", str(solution), "--root", str(tmp_path)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["status"] == "disapprove_with_comment"


def test_analyze_severity_override_changes_verdict(tmp_path: Path) -> None:
    (tmp_path / ".exercise-analyzer.toml").write_text(
        "\n".join(
            [
                'exercise = "two-fer"',
                "",
                "[severity]",
                f'"{two_fer.PLUS_USED}" = 0',
            ]
        ),
        encoding="utf-8",
    )
    solution = _write(tmp_path, PLUS)

    result = runner.invoke(
        app,
        ["analyze", str(solution), "--root", str(tmp_path), "--goodness", "1", "--format", "json"],
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout)["status"] == "approve_with_comment"


def test_analyze_unparsable_solution_refers_to_mentor(tmp_path: Path) -> None:
    solution = _write(tmp_path, "def two_fer(:\n")

    result = runner.invoke(
        app,
        [
            "analyze",
            str(solution),
            "--exercise",
            "two-fer",
            "--goodness",
            "1",
            "--root",
            str(tmp_path),
            "--format",
            "json",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["status"] == "refer_to_mentor"
    assert len(payload["errors"]) == 1


def test_analyze_rejects_bad_input(tmp_path: Path) -> None:
    solution = _write(tmp_path, OPTIMAL)

    missing_exercise = runner.invoke(app, ["analyze", str(solution), "--root", str(tmp_path)])
    assert missing_exercise.exit_code == 2

    unknown_exercise = runner.invoke(
        app, ["analyze", str(solution), "--exercise", "leap", "--root", str(tmp_path)]
    )
    assert unknown_exercise.exit_code == 2

    missing_file = runner.invoke(
        app,
        ["analyze", str(tmp_path / "nope.py"), "--exercise", "two-fer", "--root", str(tmp_path)],
    )
    assert missing_file.exit_code == 2


def test_analyze_rejects_solution_that_is_not_utf8(tmp_path: Path) -> None:
    solution = tmp_path / "two_fer.py"
    solution.write_bytes(b'def two_fer(name="you"):\n    return "\xff"\n')

    result = runner.invoke(
        app, ["analyze", str(solution), "--exercise", "two-fer", "--root", str(tmp_path)]
    )
    assert result.exit_code == 2


def test_rules_command_json_reflects_config(tmp_path: Path) -> None:
    (tmp_path / ".exercise-analyzer.toml").write_text(
        '[rules]\ndisable = ["exam_strip"]\n', encoding="utf-8"
    )

    result = runner.invoke(app, ["rules", "--root", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    exercise = payload["exercises"][0]
    assert exercise["exercise"] == "two-fer"
    enabled = {rule["name"]: rule["enabled"] for rule in exercise["rules"]}
    assert enabled["exam_strip"] is False
    assert enabled["exam_main_func"] is True
    assert exercise["severity"][two_fer.MISSING_MAIN_FUNC] == 5


def test_rules_command_human_lists_rules(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rules", "--root", str(tmp_path), "--exercise", "two-fer"])
    assert result.exit_code == 0
    assert "two-fer:" in result.stdout
    assert "- exam_main_func [enabled]" in result.stdout


def test_config_commands(tmp_path: Path) -> None:
    config_path = tmp_path / ".exercise-analyzer.toml"

    init = runner.invoke(app, ["config-init", "--out", str(config_path)])
    assert init.exit_code == 0
    assert config_path.exists()

    again = runner.invoke(app, ["config-init", "--out", str(config_path)])
    assert again.exit_code == 2

    shown = runner.invoke(app, ["config", "--root", str(tmp_path), "--format", "json"])
    assert shown.exit_code == 0
    payload = json.loads(shown.stdout)
    assert payload["exercise"] == "two-fer"
    assert "exam_stub_leftover" not in payload["active_rules"]

    validated = runner.invoke(
        app, ["config-validate", "--root", str(tmp_path), "--format", "json"]
    )
    assert validated.exit_code == 0
    assert json.loads(validated.stdout)["ok"] is True


def test_config_validate_reports_unknown_rules(tmp_path: Path) -> None:
    (tmp_path / ".exercise-analyzer.toml").write_text(
        'exercise = "two-fer"\n\n[rules]\nenable = ["exam_bogus"]\n', encoding="utf-8"
    )

    result = runner.invoke(app, ["config-validate", "--root", str(tmp_path)])
    assert result.exit_code == 2


def _write(directory: Path, source: str) -> Path:
    path = directory / "two_fer.py"
    path.write_text(source, encoding="utf-8")
    return path


def test_config_validate_reports_unknown_format(tmp_path: Path) -> None:
    (tmp_path / ".exercise-analyzer.toml").write_text('format = "xml"\n', encoding="utf-8")

    result = runner.invoke(app, ["config-validate", "--root", str(tmp_path)])
    assert result.exit_code == 2
