"""
Usage and call-target extraction over a single function/method definition.

Only the definition itself is walked: its signature (annotations, defaults),
return annotation and body. The decorators wrapping the analysed definition are
not part of it; decorators of nested definitions are.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .node_types import CallSite, FunctionNode


def _definition_parts(node: FunctionNode) -> Iterable[ast.AST]:
    yield node.args
    if node.returns is not None:
        yield node.returns
    yield from node.body


@dataclass
class Usage:
    # dicts used as insertion-ordered sets
    names: Dict[str, None] = field(default_factory=dict)
    attrs: Dict[Tuple[str, str], None] = field(default_factory=dict)


class UsageExtractor(ast.NodeVisitor):
    """Identifier reads and ``base.attr`` reads where both sides are simple names.

    The member identifier of any attribute access (``User`` in ``obj.User``) is an
    identifier read as well.

    Parameter names, definition names, import targets and keyword-argument keywords
    are plain strings in the tree, never ``ast.Name`` nodes, so they are never
    recorded.
    """

    def __init__(self) -> None:
        self.usage = Usage()

    def visit_Name(self, node: ast.Name) -> None:
        self.usage.names[node.id] = None

    def visit_Attribute(self, node: ast.Attribute) -> None:
        self.usage.names[node.attr] = None
        if isinstance(node.value, ast.Name):
            self.usage.attrs[(node.value.id, node.attr)] = None
        self.generic_visit(node)


class CallExtractor(ast.NodeVisitor):
    def __init__(self) -> None:
        self.calls: List[CallSite] = []

    def visit_Call(self, node: ast.Call) -> None:
        fn = node.func
        if isinstance(fn, ast.Name):
            self.calls.append(CallSite(kind="name", name=fn.id))
        elif isinstance(fn, ast.Attribute) and isinstance(fn.value, ast.Name):
            self.calls.append(CallSite(kind="attr", base=fn.value.id, attr=fn.attr))
        self.generic_visit(node)


def collect_usage(function_node: FunctionNode) -> Usage:
    extractor = UsageExtractor()
    for part in _definition_parts(function_node):
        extractor.visit(part)
    return extractor.usage


def collect_calls(function_node: FunctionNode) -> List[CallSite]:
    extractor = CallExtractor()
    for part in _definition_parts(function_node):
        extractor.visit(part)
    return extractor.calls
