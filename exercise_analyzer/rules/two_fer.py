"""Rules for the two-fer exercise.

The canonical solution::

    '''Two-fer: share one with a friend.'''


    def two_fer(name="you"):
        '''Return "One for name, one for me." with name defaulting to you.'''
        return f"One for {name}, one for me."
"""

from __future__ import annotations

import ast
import re
from collections.abc import Sequence

from exercise_analyzer.rules.base import RuleRegistry
from exercise_analyzer.suggestions import Suggestions
from exercise_analyzer.tree import TreeQuery

MAIN_FUNC = "two_fer"
DEFAULT_NAME = "you"

MISSING_MAIN_FUNC = "python.two-fer.missing_main_function"
FUNC_SIGNATURE_CHANGED = "python.two-fer.signature_changed"
MISSING_DEFAULT = "python.two-fer.missing_default_argument"
DEFAULT_NONE = "python.two-fer.default_none"
PLUS_USED = "python.two-fer.plus_used"
PERCENT_FORMATTING = "python.two-fer.percent_formatting"
STR_FORMAT = "python.two-fer.str_format"
GENERALIZE_NAME = "python.two-fer.generalize_name"
MINIMAL_CONDITIONAL = "python.two-fer.minimal_conditional"
STR_JOIN = "python.two-fer.str_join"
STRIP = "python.two-fer.strip"
EXTRA_NAME_VAR = "python.two-fer.extra_name_variable"
EXTRA_VAR = "python.two-fer.extra_variable"
EXTRA_FUNCTION = "python.two-fer.extra_function"
STUB_LEFTOVER = "python.two-fer.stub_leftover"
MISSING_MODULE_DOCSTRING = "python.two-fer.missing_module_docstring"
MISSING_FUNCTION_DOCSTRING = "python.two-fer.missing_function_docstring"
WRONG_FUNCTION_DOCSTRING = "python.two-fer.wrong_function_docstring"
STUB_DOCSTRING = "python.two-fer.stub_docstring"
DOCSTRING_SECTION = "python.two-fer.docstring_section"

SEVERITY = {
    MISSING_MAIN_FUNC: 5,
    FUNC_SIGNATURE_CHANGED: 5,
    MISSING_DEFAULT: 5,
    GENERALIZE_NAME: 5,
    MINIMAL_CONDITIONAL: 3,
    PLUS_USED: 1,
    PERCENT_FORMATTING: 1,
    STR_JOIN: 1,
    STRIP: 1,
    EXTRA_NAME_VAR: 1,
    EXTRA_VAR: 1,
    DEFAULT_NONE: 0,
    STR_FORMAT: 0,
    EXTRA_FUNCTION: 0,
    STUB_LEFTOVER: 0,
    MISSING_MODULE_DOCSTRING: 0,
    MISSING_FUNCTION_DOCSTRING: 0,
    WRONG_FUNCTION_DOCSTRING: 0,
    STUB_DOCSTRING: 0,
    DOCSTRING_SECTION: 0,
}

_OUTPUT_PART = re.compile(r", one for me\.")
_HARDCODED_NAMES = ("Alice", "Bob")
_STUB_TEXT = re.compile(r"^\s*(todo|fixme|write your (code|docstring) here)\b", re.IGNORECASE)
_DESCRIBES_TWO_FER = re.compile(r"one for|shar(e|ing)|two[-_ ]?fer", re.IGNORECASE)


def exam_main_func(tree: TreeQuery, suggs: Suggestions) -> None:
    """Checks that two_fer exists with a single parameter defaulting to 'you'."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        suggs.append_unique(MISSING_MAIN_FUNC)
        return

    params = tree.params(main)
    if len(params) != 1:
        suggs.append_unique(FUNC_SIGNATURE_CHANGED)
        return

    defaults = [*main.args.defaults, *(d for d in main.args.kw_defaults if d is not None)]
    if not defaults:
        suggs.append_unique(MISSING_DEFAULT)
        return

    default = defaults[-1]
    if isinstance(default, ast.Constant) and default.value is None:
        suggs.append_unique(DEFAULT_NONE)
    elif not (isinstance(default, ast.Constant) and default.value == DEFAULT_NAME):
        suggs.append_unique(FUNC_SIGNATURE_CHANGED)


def exam_plus_used(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags string building with + inside two_fer."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        suggs.append_unique(MISSING_MAIN_FUNC)
        return

    for node in tree.find_by_node_type(ast.BinOp, ast.AugAssign, root=main):
        if isinstance(node.op, ast.Add):
            suggs.append_unique(PLUS_USED)
            return


def exam_format(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags %-formatting and str.format where an f-string reads better."""
    for node in tree.find_by_node_type(ast.BinOp):
        if isinstance(node.op, ast.Mod) and _is_str_literal(node.left):
            suggs.append_unique(PERCENT_FORMATTING)
            break

    format_calls = [
        node
        for node in tree.find_by_node_type(ast.Call)
        if isinstance(node.func, ast.Attribute) and node.func.attr == "format"
    ]
    if format_calls:
        suggs.append_unique(STR_FORMAT)
    if len(format_calls) > 1:
        suggs.append_unique(MINIMAL_CONDITIONAL)


def exam_generalize_names(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags names from the test cases hard-coded into the solution."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        suggs.append_unique(MISSING_MAIN_FUNC)
        return

    source = tree.get_source(main)
    if any(name in source for name in _HARDCODED_NAMES):
        suggs.append_unique(GENERALIZE_NAME)


def exam_conditional(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags the output sentence being spelled out more than once."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        suggs.append_unique(MISSING_MAIN_FUNC)
        return

    if len(_OUTPUT_PART.findall(tree.get_source(main))) > 1:
        suggs.append_unique(MINIMAL_CONDITIONAL)


def exam_str_join(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags str.join used to assemble the sentence."""
    if tree.find_first_by_name("join") is not None:
        suggs.append_unique(STR_JOIN)


def exam_strip(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags stripping of the input name."""
    if any(tree.find_by_name(name) for name in ("strip", "lstrip", "rstrip")):
        suggs.append_unique(STRIP)


def exam_extra_variable(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags variables that only rename the parameter or hold intermediate strings."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        return

    params = tree.params(main)
    if len(params) != 1:
        suggs.append_unique(FUNC_SIGNATURE_CHANGED)
        return
    param_name = params[0].arg

    for node in tree.find_by_node_type(ast.Assign, ast.AnnAssign, root=main):
        targets = node.targets if isinstance(node, ast.Assign) else [node.target]
        value = node.value

        if isinstance(value, ast.Name) and value.id == param_name:
            suggs.append_unique(EXTRA_NAME_VAR)

        for target in targets:
            for name in _target_names(target):
                if name != param_name:
                    suggs.append_unique_ph(EXTRA_VAR, {"name": name})


def exam_extra_function(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags helper functions next to two_fer."""
    funcs = [
        node
        for node in tree.children()
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
    ]
    extra = [node.name for node in funcs if node.name != MAIN_FUNC]
    if extra and tree.func_def_by_name(MAIN_FUNC) is not None:
        suggs.append_unique(EXTRA_FUNCTION)


def exam_stub_leftover(tree: TreeQuery, suggs: Suggestions) -> None:
    """Flags a leftover pass statement from the exercise stub."""
    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        return

    body = main.body
    if tree.docstring(main) is not None:
        body = body[1:]
    if len(body) > 1 and any(isinstance(stmt, ast.Pass) for stmt in body):
        suggs.append_unique(STUB_LEFTOVER)


def exam_docstrings(tree: TreeQuery, suggs: Suggestions) -> None:
    """Checks the module and two_fer docstrings are present and describe the exercise."""
    _check_docstring(tree, suggs, None, tree.children(), MISSING_MODULE_DOCSTRING)

    main = tree.func_def_by_name(MAIN_FUNC)
    if main is None:
        suggs.append_unique(MISSING_MAIN_FUNC)
        return

    text = _check_docstring(tree, suggs, main, main.body, MISSING_FUNCTION_DOCSTRING)
    if text is None:
        return

    params = tree.params(main)
    mentions_param = bool(params) and params[0].arg in text
    if not (mentions_param or _DESCRIBES_TWO_FER.search(text)):
        suggs.append_unique(WRONG_FUNCTION_DOCSTRING)
        suggs.append_unique(DOCSTRING_SECTION)


def _check_docstring(
    tree: TreeQuery,
    suggs: Suggestions,
    node: ast.AST | None,
    body: Sequence[ast.AST],
    missing_code: str,
) -> str | None:
    """Return the usable docstring of ``node``, flagging missing and stub text."""
    text = tree.docstring(node)
    if text is None:
        first = body[0] if body else None
        if isinstance(first, ast.Expr) and isinstance(first.value, ast.JoinedStr):
            suggs.report_error(
                ValueError(f"unexpected f-string docstring at line {first.lineno}")
            )
            return None
        suggs.append_unique(missing_code)
        suggs.append_unique(DOCSTRING_SECTION)
        return None

    if not text.strip() or _STUB_TEXT.search(text):
        suggs.append_unique(STUB_DOCSTRING)
        return None
    return text


def _target_names(target: ast.AST) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, ast.Starred):
        return _target_names(target.value)
    if isinstance(target, (ast.Tuple, ast.List)):
        return [name for elt in target.elts for name in _target_names(elt)]
    # attribute and subscript targets bind no new local name
    return []


def _is_str_literal(node: ast.AST) -> bool:
    return isinstance(node, ast.JoinedStr) or (
        isinstance(node, ast.Constant) and isinstance(node.value, str)
    )


REGISTRY = RuleRegistry(
    exercise="two-fer",
    funcs=(
        exam_main_func,
        exam_plus_used,
        exam_generalize_names,
        exam_format,
        exam_conditional,
        exam_str_join,
        exam_strip,
        exam_extra_variable,
        exam_extra_function,
        exam_stub_leftover,
        exam_docstrings,
    ),
    severity=SEVERITY,
)
