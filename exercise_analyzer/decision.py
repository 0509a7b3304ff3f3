"""Final verdict for an analysis run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from exercise_analyzer.suggestions import Comment, Suggestions


class Status(str, Enum):
    """Terminal review status."""

    APPROVE_AS_OPTIMAL = "approve_as_optimal"
    APPROVE_WITH_COMMENT = "approve_with_comment"
    DISAPPROVE_WITH_COMMENT = "disapprove_with_comment"
    REFER_TO_MENTOR = "refer_to_mentor"


@dataclass(frozen=True, slots=True)
class Result:
    """Review outcome handed back to the caller."""

    status: Status
    comments: tuple[Comment, ...] = ()
    severity: int = 0
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "comments": [comment.to_dict() for comment in self.comments],
            "severity": self.severity,
            "errors": list(self.errors),
        }


def decide(goodness: float, suggestions: Suggestions) -> Result:
    """Turn a goodness score and finished suggestions into a Result.

    Only ``goodness == 1`` counts as structurally optimal. Positive severity
    always disapproves, and any captured error refers the solution to a
    mentor whatever the other signals say.
    """
    comments = suggestions.comments()
    severity = suggestions.severity()
    errors = suggestions.errors()

    status = _base_status(goodness, has_comments=bool(comments), severity=severity)
    if errors:
        status = Status.REFER_TO_MENTOR

    return Result(
        status=status,
        comments=comments,
        severity=severity,
        errors=tuple(str(err) for err in errors),
    )


def _base_status(goodness: float, *, has_comments: bool, severity: int) -> Status:
    optimal = goodness == 1
    if not has_comments:
        return Status.APPROVE_AS_OPTIMAL if optimal else Status.REFER_TO_MENTOR
    if severity > 0:
        return Status.DISAPPROVE_WITH_COMMENT
    return Status.APPROVE_WITH_COMMENT if optimal else Status.REFER_TO_MENTOR
