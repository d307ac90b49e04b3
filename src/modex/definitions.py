"""
Definition collector: indexes the functions and class methods of a module.

The current-class context is threaded through every level of nesting, so a
``def`` nested inside a method is recorded as a method of that class and a
``def`` nested inside a module-level function is recorded as a module-level
function (possibly replacing an earlier definition of the same name).
"""

from __future__ import annotations

import ast
from typing import Dict

from .node_types import FunctionNode


class DefinitionCollector(ast.NodeVisitor):
    def __init__(self) -> None:
        self.functions: Dict[str, FunctionNode] = {}
        self.classes: Dict[str, Dict[str, FunctionNode]] = {}
        self._current_class = ""

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        name = node.name or ""
        if name:
            self.classes.setdefault(name, {})
        outer = self._current_class
        self._current_class = name
        for child in node.body:
            self.visit(child)
        self._current_class = outer

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._handle_func(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._handle_func(node)

    def _handle_func(self, node: FunctionNode) -> None:
        name = node.name or ""
        if name:
            if self._current_class:
                self.classes.setdefault(self._current_class, {})[name] = node
            else:
                self.functions[name] = node
        # decorators are skipped; only the body can hold further definitions
        for child in node.body:
            self.visit(child)


def collect_definitions(tree: ast.AST) -> DefinitionCollector:
    collector = DefinitionCollector()
    collector.visit(tree)
    return collector
