"""Analysis orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from exercise_analyzer.decision import Result, decide
from exercise_analyzer.rules.base import RuleRegistry
from exercise_analyzer.suggestions import Suggestions
from exercise_analyzer.tree import PythonTree, SourceParseError, TreeQuery

FAILED_TO_PARSE = "python.general.failed_to_parse"

logger = logging.getLogger(__name__)


def run_rules(registry: RuleRegistry, tree: TreeQuery, suggs: Suggestions) -> None:
    """Invoke every registered rule once, in registration order.

    A rule that raises is recorded as an error on ``suggs`` and the loop
    moves on to the next rule.
    """
    for func in registry.funcs:
        try:
            func(tree, suggs)
        except Exception as exc:
            logger.warning(
                "Rule %s failed for exercise %s: %s",
                getattr(func, "__name__", repr(func)),
                registry.exercise,
                exc,
                exc_info=True,
            )
            suggs.report_error(exc)


def analyze(registry: RuleRegistry, tree: TreeQuery, goodness: float) -> Result:
    """Run all rules of ``registry`` against ``tree`` and decide the verdict."""
    suggs = Suggestions(registry.severity)
    run_rules(registry, tree, suggs)
    result = decide(goodness, suggs)
    logger.debug(
        "Analyzed %s: status=%s severity=%d comments=%d errors=%d",
        registry.exercise,
        result.status.value,
        result.severity,
        len(result.comments),
        len(result.errors),
    )
    return result


def analyze_source(
    registry: RuleRegistry,
    source: str,
    goodness: float,
    filename: str = "<solution>",
) -> Result:
    """Parse submission source and analyze it.

    Source that does not parse is referred to a mentor with the
    ``python.general.failed_to_parse`` comment.
    """
    try:
        tree = PythonTree.parse(source, filename=filename)
    except SourceParseError as exc:
        logger.info("Could not parse %s: %s", filename, exc)
        suggs = Suggestions(registry.severity)
        suggs.append_unique_ph(FAILED_TO_PARSE, {"line": str(exc.lineno or 0)})
        suggs.report_error(exc)
        return decide(goodness, suggs)
    return analyze(registry, tree, goodness)


def analyze_file(registry: RuleRegistry, path: Path, goodness: float) -> Result:
    """Read a solution file and analyze it."""
    source = path.read_text(encoding="utf-8")
    return analyze_source(registry, source, goodness, filename=str(path))
