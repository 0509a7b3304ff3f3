"""Suggestion aggregation for a single analysis run."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Comment:
    """A comment code with optional placeholder params for rendering."""

    code: str
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self) -> int:
        return hash((self.code, tuple(sorted(self.params.items()))))

    def to_dict(self) -> str | dict[str, Any]:
        if not self.params:
            return self.code
        return {"comment": self.code, "params": dict(self.params)}


class Suggestions:
    """Ordered, deduplicated comment codes plus severity weights and captured errors.

    One instance belongs to one analysis run. Rule functions append to it,
    ``decide`` reads it once the run is finished.
    """

    def __init__(self, severity: Mapping[str, int] | None = None) -> None:
        self._comments: dict[str, Comment] = {}
        self._severity: dict[str, int] = {}
        self._errors: list[BaseException] = []
        if severity:
            self.append_severity(severity)

    def append_unique(self, code: str) -> None:
        """Add a comment code unless it was already added."""
        if code in self._comments:
            return
        self._comments[code] = Comment(code)

    def append_unique_ph(self, code: str, params: Mapping[str, str]) -> None:
        """Add a comment code with placeholder params; the first payload for a code wins."""
        if code in self._comments:
            return
        self._comments[code] = Comment(code, params)

    def append_severity(self, severity: Mapping[str, int]) -> None:
        """Merge severity weights; later entries for the same code overwrite."""
        for code, weight in severity.items():
            if isinstance(weight, bool) or not isinstance(weight, int):
                raise ValueError(f"severity for '{code}' must be an integer")
            if weight < 0:
                raise ValueError(f"severity for '{code}' must be non-negative, got {weight}")
            self._severity[code] = weight

    def report_error(self, err: BaseException | None) -> None:
        """Capture an unexpected condition raised inside a rule function."""
        if err is None:
            return
        self._errors.append(err)

    def contains(self, code: str) -> bool:
        return code in self._comments

    def __contains__(self, code: object) -> bool:
        return code in self._comments

    def __len__(self) -> int:
        return len(self._comments)

    def comments(self) -> tuple[Comment, ...]:
        return tuple(self._comments.values())

    def errors(self) -> tuple[BaseException, ...]:
        return tuple(self._errors)

    def severity_table(self) -> dict[str, int]:
        return dict(self._severity)

    def severity(self) -> int:
        """Sum the weights of the current comments; unknown codes weigh 0."""
        return sum(self._severity.get(code, 0) for code in self._comments)


def contains(comments: Iterable[Comment], comment: Comment | str) -> bool:
    """Check whether a comment code appears in a comment sequence."""
    code = comment.code if isinstance(comment, Comment) else comment
    return any(item.code == code for item in comments)
