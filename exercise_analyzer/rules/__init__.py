"""Rules package."""

from collections.abc import Mapping
from dataclasses import dataclass

from exercise_analyzer.rules import two_fer
from exercise_analyzer.rules.base import RuleFunc, RuleRegistry

EXERCISES: dict[str, RuleRegistry] = {
    two_fer.REGISTRY.exercise: two_fer.REGISTRY,
}


@dataclass(frozen=True, slots=True)
class ExerciseInfo:
    """Exercise metadata for listing and selection."""

    exercise: str
    rule_names: tuple[str, ...]
    descriptions: tuple[str, ...]
    severity: dict[str, int]


def get_registry(exercise: str) -> RuleRegistry:
    """Return the default registry for an exercise slug."""
    registry = EXERCISES.get(exercise.lower())
    if registry is None:
        choices = ", ".join(sorted(EXERCISES))
        raise ValueError(f"Unknown exercise '{exercise}'. Expected one of: {choices}")
    return registry


def build_registry(
    exercise: str,
    *,
    enabled_rules: list[str] | None = None,
    disabled_rules: list[str] | None = None,
    severity: Mapping[str, int] | None = None,
) -> RuleRegistry:
    """Build a registry applying enable/disable filters and severity overrides."""
    base = get_registry(exercise)
    by_name = {func.__name__: func for func in base.funcs}
    requested = set(enabled_rules or []) | set(disabled_rules or [])

    unknown = [name for name in requested if name not in by_name]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rules for exercise '{base.exercise}': {joined}")

    disabled = set(disabled_rules or [])
    if enabled_rules is None:
        selected = [func for func in base.funcs if func.__name__ not in disabled]
    else:
        selected = [
            by_name[name] for name in _dedupe(enabled_rules) if name not in disabled
        ]

    merged = dict(base.severity)
    for code, weight in (severity or {}).items():
        if weight < 0:
            raise ValueError(f"Severity for '{code}' must be non-negative, got {weight}.")
        merged[code] = weight

    return RuleRegistry(exercise=base.exercise, funcs=tuple(selected), severity=merged)


def list_exercise_info() -> list[ExerciseInfo]:
    """Return metadata for all known exercises."""
    info: list[ExerciseInfo] = []
    for slug in sorted(EXERCISES):
        registry = EXERCISES[slug]
        info.append(
            ExerciseInfo(
                exercise=slug,
                rule_names=tuple(registry.rule_names()),
                descriptions=tuple(_describe(func) for func in registry.funcs),
                severity=dict(registry.severity),
            )
        )
    return info


def _describe(func: RuleFunc) -> str:
    doc = (func.__doc__ or "").strip()
    return doc.splitlines()[0] if doc else ""


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output


__all__ = [
    "EXERCISES",
    "ExerciseInfo",
    "RuleFunc",
    "RuleRegistry",
    "build_registry",
    "get_registry",
    "list_exercise_info",
]
