"""
Import table builder: plain and from-imports of a scope, with relative-import
arithmetic resolved against the enclosing module.
"""

from __future__ import annotations

import ast
from typing import Optional

from .node_types import ImportFromTarget, ImportTables


def resolve_relative_import(
    current_module: str, module: str, level: int, is_package: bool
) -> Optional[str]:
    """Return the absolute module path of an import, or None if it walks above the root.

    ``level`` is the number of leading dots. The base is the module itself for a
    package initializer, its parent otherwise; ``level - 1`` trailing components
    are then stripped from the base.
    """
    if level == 0:
        return module or None

    if is_package:
        base = current_module
    else:
        base = current_module.rpartition(".")[0]
    base_parts = base.split(".") if base else []

    drop = level - 1
    if drop > len(base_parts):
        return None
    base_parts = base_parts[: len(base_parts) - drop]
    if module:
        base_parts.extend(module.split("."))
    if not base_parts:
        return None
    return ".".join(base_parts)


class ImportCollector(ast.NodeVisitor):
    """Collects every import statement in a subtree, nested blocks included."""

    def __init__(self, module_path: str, is_package: bool):
        self.module_path = module_path
        self.is_package = is_package
        self.tables = ImportTables()

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            self.tables.modules[alias.asname or alias.name] = alias.name

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        resolved = resolve_relative_import(
            self.module_path, node.module or "", node.level or 0, self.is_package
        )
        if resolved is None:
            return
        for alias in node.names:
            if alias.name == "*":
                continue
            self.tables.from_imports[alias.asname or alias.name] = ImportFromTarget(
                module=resolved, name=alias.name
            )


def collect_imports(scope: ast.AST, module_path: str, is_package: bool) -> ImportTables:
    collector = ImportCollector(module_path, is_package)
    collector.visit(scope)
    return collector.tables


def function_import_tables(function_node: ast.AST, module_info) -> ImportTables:
    """Module tables with the function's own imports merged on top."""
    local = collect_imports(function_node, module_info.module_path, module_info.is_package)
    return module_info.imports.merged(local)
