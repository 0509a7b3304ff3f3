"""Tree queries over a parsed Python submission."""

from __future__ import annotations

import ast
from typing import Protocol

_NAMED_NODES = (
    ast.Name,
    ast.Attribute,
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.arg,
    ast.alias,
)


class SourceParseError(ValueError):
    """Raised when submission source cannot be parsed."""

    def __init__(self, filename: str, error: SyntaxError) -> None:
        self.filename = filename
        self.lineno = error.lineno
        self.msg = error.msg
        super().__init__(f"{filename}:{error.lineno}: {error.msg}")


class TreeQuery(Protocol):
    """Read-only queries rule functions run against a submission.

    The ``root`` keyword scopes a search to the subtree under that node.
    """

    def find_by_name(self, name: str, root: ast.AST | None = None) -> list[ast.AST]:
        """Return every node named ``name``."""

    def find_first_by_name(self, name: str, root: ast.AST | None = None) -> ast.AST | None:
        """Return the first node named ``name``."""

    def find_by_node_type(
        self, *node_types: type[ast.AST], root: ast.AST | None = None
    ) -> list[ast.AST]:
        """Return every node of the given types."""

    def func_def_by_name(self, name: str) -> ast.FunctionDef | ast.AsyncFunctionDef | None:
        """Return the top-level function called ``name``."""

    def get_source(self, node: ast.AST | None = None) -> str:
        """Return the source text of ``node`` or of the whole unit."""

    def params(self, func: ast.FunctionDef | ast.AsyncFunctionDef) -> list[ast.arg]:
        """Return the parameters of ``func`` in declaration order."""

    def children(self, node: ast.AST | None = None) -> list[ast.AST]:
        """Return the direct children of ``node`` or of the module."""

    def docstring(self, node: ast.AST | None = None) -> str | None:
        """Return the docstring of ``node`` or of the module."""


class PythonTree:
    """TreeQuery implementation backed by the stdlib ``ast`` module."""

    def __init__(self, module: ast.Module, source: str, filename: str = "<solution>") -> None:
        self.module = module
        self.source = source
        self.filename = filename

    @classmethod
    def parse(cls, source: str, filename: str = "<solution>") -> PythonTree:
        try:
            module = ast.parse(source, filename=filename)
        except SyntaxError as exc:
            raise SourceParseError(filename, exc) from exc
        return cls(module, source, filename)

    def find_by_name(self, name: str, root: ast.AST | None = None) -> list[ast.AST]:
        return [
            node
            for node in ast.walk(root or self.module)
            if isinstance(node, _NAMED_NODES) and node_name(node) == name
        ]

    def find_first_by_name(self, name: str, root: ast.AST | None = None) -> ast.AST | None:
        matches = self.find_by_name(name, root=root)
        return matches[0] if matches else None

    def find_by_node_type(
        self, *node_types: type[ast.AST], root: ast.AST | None = None
    ) -> list[ast.AST]:
        return [node for node in ast.walk(root or self.module) if isinstance(node, node_types)]

    def func_def_by_name(self, name: str) -> ast.FunctionDef | ast.AsyncFunctionDef | None:
        for node in self.module.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and node.name == name:
                return node
        return None

    def get_source(self, node: ast.AST | None = None) -> str:
        if node is None:
            return self.source
        return ast.get_source_segment(self.source, node) or ""

    def params(self, func: ast.FunctionDef | ast.AsyncFunctionDef) -> list[ast.arg]:
        args = func.args
        params = [*args.posonlyargs, *args.args]
        if args.vararg is not None:
            params.append(args.vararg)
        params.extend(args.kwonlyargs)
        if args.kwarg is not None:
            params.append(args.kwarg)
        return params

    def children(self, node: ast.AST | None = None) -> list[ast.AST]:
        return list(ast.iter_child_nodes(node or self.module))

    def docstring(self, node: ast.AST | None = None) -> str | None:
        target = node or self.module
        if not isinstance(
            target, (ast.Module, ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)
        ):
            return None
        return ast.get_docstring(target)


def node_name(node: ast.AST) -> str | None:
    """Return the identifier a node introduces or refers to, if any."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
        return node.name
    if isinstance(node, ast.arg):
        return node.arg
    if isinstance(node, ast.alias):
        return node.asname or node.name
    return None
