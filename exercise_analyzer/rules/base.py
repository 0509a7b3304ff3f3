"""Rule function protocol and per-exercise registry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from exercise_analyzer.suggestions import Suggestions
from exercise_analyzer.tree import TreeQuery


class RuleFunc(Protocol):
    """A check that inspects a submission and may append suggestions."""

    __name__: str

    def __call__(self, tree: TreeQuery, suggs: Suggestions) -> None:
        """Inspect ``tree`` and record findings on ``suggs``."""


@dataclass(frozen=True, slots=True)
class RuleRegistry:
    """Ordered rule functions and default severities for one exercise."""

    exercise: str
    funcs: tuple[RuleFunc, ...]
    severity: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "funcs", tuple(self.funcs))
        object.__setattr__(self, "severity", MappingProxyType(dict(self.severity)))

    def rule_names(self) -> list[str]:
        return [func.__name__ for func in self.funcs]
