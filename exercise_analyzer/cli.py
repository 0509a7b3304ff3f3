"""CLI entrypoint for exercise-analyzer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from exercise_analyzer import __version__
from exercise_analyzer.analysis import analyze_file
from exercise_analyzer.config import AppConfig, default_config_template, load_app_config
from exercise_analyzer.output import build_json_payload, render_human, render_json
from exercise_analyzer.rules import build_registry, list_exercise_info
from exercise_analyzer.rules.base import RuleRegistry

ANALYSIS_FILENAME = "analysis.json"

app = typer.Typer(
    name="exercise-analyzer",
    no_args_is_help=True,
    help="Review exercise submissions and decide a first-pass verdict.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("analyze")
def analyze_command(
    solution: Annotated[Path, typer.Argument(help="Path to the solution source file.")],
    exercise: Annotated[str | None, typer.Option(help="Exercise slug, e.g. two-fer.")] = None,
    goodness: Annotated[
        float, typer.Option(help="Structural goodness score; 1.0 means optimal.")
    ] = 0.0,
    root: Annotated[Path, typer.Option(help="Directory to search for config files.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", help=f"Also write {ANALYSIS_FILENAME} into this directory."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Analyze one solution and print the review result."""
    app_config = _load_config_or_raise(root, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    exercise_slug = exercise or app_config.exercise
    if exercise_slug is None:
        raise typer.BadParameter("Provide --exercise or set exercise in config.")
    if not solution.is_file():
        raise typer.BadParameter(f"Solution file does not exist: {solution}", param_hint="SOLUTION")

    registry = _build_configured_registry_or_raise(exercise_slug, app_config)
    try:
        result = analyze_file(registry, solution, goodness)
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(
            f"Cannot read solution file {solution}: {exc}", param_hint="SOLUTION"
        ) from exc

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        payload = build_json_payload(result, exercise=registry.exercise, solution=str(solution))
        (output_dir / ANALYSIS_FILENAME).write_text(
            json.dumps(payload, sort_keys=True, indent=2) + "\n", encoding="utf-8"
        )

    if output_format == "json":
        typer.echo(render_json(result, exercise=registry.exercise, solution=str(solution)))
    else:
        typer.echo(render_human(result))

    if result.status.value in app_config.fail_on:
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    exercise: Annotated[str | None, typer.Option(help="Only show this exercise.")] = None,
    root: Annotated[Path, typer.Option(help="Directory to search for config files.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List exercises, their rule functions and severity tables."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    infos = list_exercise_info()
    if exercise is not None:
        infos = [info for info in infos if info.exercise == exercise.lower()]
        if not infos:
            raise typer.BadParameter(f"Unknown exercise '{exercise}'", param_hint="--exercise")

    entries = []
    for info in infos:
        registry = _build_configured_registry_or_raise(info.exercise, app_config)
        active = set(registry.rule_names())
        entries.append(
            {
                "exercise": info.exercise,
                "rules": [
                    {"name": name, "description": description, "enabled": name in active}
                    for name, description in zip(info.rule_names, info.descriptions)
                ],
                "severity": dict(registry.severity),
            }
        )

    if output_format == "json":
        payload = {"exercises": entries, "meta": {"config_source": app_config.source}}
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines: list[str] = []
    for entry in entries:
        lines.append(f"{entry['exercise']}:")
        for rule in entry["rules"]:
            status = "enabled" if rule["enabled"] else "disabled"
            lines.append(f"- {rule['name']} [{status}] - {rule['description']}")
        lines.append("  severity:")
        for code, weight in sorted(entry["severity"].items()):
            lines.append(f"  {code} = {weight}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: Annotated[Path, typer.Option(help="Directory to search for config files.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    payload = app_config.to_dict()
    if app_config.exercise is not None:
        registry = _build_configured_registry_or_raise(app_config.exercise, app_config)
        payload["active_rules"] = registry.rule_names()

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- exercise: {payload['exercise']}",
        f"- fail_on: {payload['fail_on']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- severity: {payload['severity']}",
    ]
    if "active_rules" in payload:
        lines.append(f"- active_rules: {payload['active_rules']}")
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".exercise-analyzer.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    root: Annotated[Path, typer.Option(help="Directory to search for config files.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".exercise-analyzer.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file against the known exercises and rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_rules: list[str] = []
    if app_config.exercise is not None:
        registry = _build_configured_registry_or_raise(app_config.exercise, app_config)
        active_rules = registry.rule_names()
    payload = {"ok": True, "source": app_config.source, "active_rules": active_rules}
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rules: {payload['active_rules']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_registry_or_raise(exercise: str, app_config: AppConfig) -> RuleRegistry:
    try:
        return build_registry(
            exercise,
            enabled_rules=app_config.rule_enable,
            disabled_rules=app_config.rule_disable,
            severity=app_config.severity,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc
