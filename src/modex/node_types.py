"""
Core data types shared by the indexing, resolution and traversal passes.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


@dataclass(frozen=True)
class ImportFromTarget:
    """Target of a ``from X import Y [as Z]`` alias: absolute module + original name."""

    module: str
    name: str


@dataclass(frozen=True, order=True)
class ModelRef:
    module: str
    name: str

    def __str__(self) -> str:
        return f"{self.module}.{self.name}"


@dataclass(frozen=True)
class CallSite:
    """One call expression: ``name(...)`` (kind="name") or ``base.attr(...)`` (kind="attr")."""

    kind: str
    name: str = ""
    base: str = ""
    attr: str = ""


@dataclass(frozen=True, order=True)
class ResolvedTarget:
    """A call-graph node. ``cls`` is empty for module-level functions."""

    module: str
    cls: str
    func: str

    @property
    def usage_key(self) -> str:
        prefix = f"{self.cls}." if self.cls else ""
        return f"{self.module}:{prefix}{self.func}"


@dataclass
class ImportTables:
    modules: Dict[str, str] = field(default_factory=dict)  # alias -> module path
    from_imports: Dict[str, ImportFromTarget] = field(default_factory=dict)

    def merged(self, local: "ImportTables") -> "ImportTables":
        """Flat merge: entries of ``local`` override entries of self for the same alias."""
        return ImportTables(
            modules={**self.modules, **local.modules},
            from_imports={**self.from_imports, **local.from_imports},
        )


@dataclass
class ModuleInfo:
    module_path: str
    file_path: str
    is_package: bool
    source: str
    tree: ast.Module
    imports: ImportTables = field(default_factory=ImportTables)
    functions: Dict[str, FunctionNode] = field(default_factory=dict)
    classes: Dict[str, Dict[str, FunctionNode]] = field(default_factory=dict)

    def find_function(self, cls: str, func: str) -> Optional[FunctionNode]:
        if cls:
            return self.classes.get(cls, {}).get(func)
        return self.functions.get(func)


@dataclass
class EntrypointSpec:
    raw: str
    module: str
    obj: str = ""
    cls: str = ""
    method: str = ""

    @property
    def label(self) -> str:
        if self.cls:
            return f"{self.cls}::{self.method}" if self.method else self.cls
        return self.obj or "(module)"


@dataclass
class TraceResult:
    """Outcome of one trace run. ``errors`` non-empty means the run failed as a whole."""

    entrypoint: str
    models: Set[ModelRef] = field(default_factory=set)
    usage: Dict[ModelRef, Set[str]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    visited: List[str] = field(default_factory=list)
    call_edges: Set[Tuple[str, str]] = field(default_factory=set)

    @property
    def ok(self) -> bool:
        return not self.errors

    def sorted_models(self) -> List[ModelRef]:
        return sorted(self.models)

    def usages_of(self, model: ModelRef) -> List[str]:
        return sorted(self.usage.get(model, set()))
