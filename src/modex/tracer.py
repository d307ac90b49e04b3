"""
Traversal engine: from an entrypoint, walk the statically resolvable call graph
breadth-first and collect every model class referenced along the way.

All run state (module cache, visited set, queue, accumulators) lives on one
``TraceContext``; nothing is shared between runs.
"""

from __future__ import annotations

import ast
import re
from collections import deque
from pathlib import Path
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set

from loguru import logger

from .config_loader import ModexConfig
from .definitions import collect_definitions
from .errors import EntrypointNotFound, ModexError, ModuleLoadError, ModuleNotFoundInIndex
from .imports import collect_imports, function_import_tables
from .module_index import ModuleIndex, is_package_file
from .node_types import EntrypointSpec, ModuleInfo, ResolvedTarget, TraceResult
from .resolver import (
    DEFAULT_MARKER,
    DEFAULT_SELF_NAMES,
    ResolutionContext,
    resolve_call,
    resolve_models,
)
from .usage import collect_calls, collect_usage

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:[\\/]")


def parse_entrypoint(spec: str) -> EntrypointSpec:
    """Split ``<module-or-path>[:<name> | :<Class>::<method>]``."""
    start = 2 if _DRIVE_PREFIX.match(spec) else 0
    sep = spec.find(":", start)
    if sep < 0:
        return EntrypointSpec(raw=spec, module=spec)
    module, obj = spec[:sep], spec[sep + 1 :]
    if "::" in obj:
        cls, _, method = obj.partition("::")
        return EntrypointSpec(raw=spec, module=module, cls=cls, method=method)
    return EntrypointSpec(raw=spec, module=module, obj=obj)


def load_module(module_path: str, file_path: str) -> ModuleInfo:
    """Read, parse and index one module. Raises ModuleLoadError."""
    is_package = is_package_file(file_path)
    try:
        source = Path(file_path).read_text(encoding="utf-8")
        tree = ast.parse(source, filename=file_path)
        defs = collect_definitions(tree)
        imports = collect_imports(tree, module_path, is_package)
    except (OSError, SyntaxError, ValueError, RecursionError, MemoryError) as e:
        # deeply nested source overflows both the parser and the visitors
        raise ModuleLoadError(module_path, str(e)) from e

    return ModuleInfo(
        module_path=module_path,
        file_path=file_path,
        is_package=is_package,
        source=source,
        tree=tree,
        imports=imports,
        functions=defs.functions,
        classes=defs.classes,
    )


def entry_seeds(info: ModuleInfo, entry: EntrypointSpec) -> List[ResolvedTarget]:
    mod = info.module_path
    if entry.cls:
        methods = info.classes.get(entry.cls)
        if methods is None:
            return []
        if entry.method:
            return [ResolvedTarget(mod, entry.cls, entry.method)] if entry.method in methods else []
        return [ResolvedTarget(mod, entry.cls, m) for m in methods]

    if not entry.obj:
        # whole-module trace
        seeds = [ResolvedTarget(mod, "", fn) for fn in info.functions]
        for cls, methods in info.classes.items():
            seeds.extend(ResolvedTarget(mod, cls, m) for m in methods)
        return seeds

    if entry.obj in info.functions:
        return [ResolvedTarget(mod, "", entry.obj)]
    if entry.obj in info.classes:
        return [ResolvedTarget(mod, entry.obj, m) for m in info.classes[entry.obj]]
    return []


class TraceContext:
    def __init__(
        self,
        index: ModuleIndex,
        marker: str = DEFAULT_MARKER,
        self_names: Iterable[str] = DEFAULT_SELF_NAMES,
    ):
        self.index = index
        self.marker = marker
        self.self_names: FrozenSet[str] = frozenset(self_names)
        self.module_cache: Dict[str, ModuleInfo] = {}
        self.visited: Set[ResolvedTarget] = set()
        self.queue: Deque[ResolvedTarget] = deque()

    def get_module(self, module_path: str) -> ModuleInfo:
        info = self.module_cache.get(module_path)
        if info is None:
            file_path = self.index.file_of(module_path)
            if file_path is None:
                raise ModuleNotFoundInIndex(module_path)
            logger.debug("Loading {} from {}", module_path, file_path)
            info = load_module(module_path, file_path)
            self.module_cache[module_path] = info
        return info

    def seed(self, entry: EntrypointSpec) -> List[ResolvedTarget]:
        module_path = self.index.resolve_entrypoint_module(entry.module) or entry.module
        if module_path not in self.index:
            raise ModuleNotFoundInIndex(entry.module)
        info = self.get_module(module_path)
        seeds = entry_seeds(info, entry)
        if not seeds:
            raise EntrypointNotFound(entry.label, module_path)
        logger.debug("Seeds: {}", ", ".join(s.usage_key for s in seeds))
        self.queue.extend(seeds)
        return seeds

    def run(self, result: TraceResult) -> None:
        while self.queue:
            current = self.queue.popleft()
            if not current.func or current in self.visited:
                continue
            self.visited.add(current)
            self.step(current, result)

    def step(self, current: ResolvedTarget, result: TraceResult) -> None:
        if current.module not in self.index:
            # third-party or otherwise outside the source root
            return
        try:
            info = self.get_module(current.module)
        except ModexError as e:
            logger.warning("{}", e)
            result.errors.append(str(e))
            return

        node = info.find_function(current.cls, current.func)
        key = current.usage_key
        if node is None:
            result.errors.append(f"Function not found: {key}")
            return

        logger.debug("Visiting {}", key)
        result.visited.append(key)
        try:
            tables = function_import_tables(node, info)
            usage = collect_usage(node)
            calls = collect_calls(node)
        except (RecursionError, MemoryError) as e:
            err = ModuleLoadError(current.module, f"{key}: {e}")
            logger.warning("{}", err)
            result.errors.append(str(err))
            return

        ctx = ResolutionContext(
            module=info,
            tables=tables,
            known_modules=self.index,
            current_class=current.cls,
            marker=self.marker,
            self_names=self.self_names,
        )

        for model in resolve_models(usage, ctx):
            result.models.add(model)
            result.usage.setdefault(model, set()).add(key)

        for call in calls:
            target = resolve_call(call, ctx)
            if target is None or not target.func or target.module not in self.index:
                continue
            result.call_edges.add((key, target.usage_key))
            self.queue.append(target)


def trace_entrypoint(
    entrypoint: str,
    root: Optional[str] = None,
    config: Optional[ModexConfig] = None,
    index: Optional[ModuleIndex] = None,
) -> TraceResult:
    """Trace one entrypoint. Never raises for analysis failures; see ``TraceResult.errors``.

    ``root`` overrides ``config.root``; marker, receiver names and exclude globs
    come from ``config`` (defaults when omitted). A prebuilt ``index`` skips the
    filesystem walk.
    """
    config = config or ModexConfig()
    result = TraceResult(entrypoint=entrypoint)
    if index is None:
        index = ModuleIndex.build(root or config.root or ".", exclude=config.exclude)
    ctx = TraceContext(index, marker=config.marker, self_names=config.self_names)
    entry = parse_entrypoint(entrypoint)
    try:
        ctx.seed(entry)
    except ModexError as e:
        logger.warning("{}", e)
        result.errors.append(str(e))
        return result
    ctx.run(result)
    logger.debug(
        "Visited {} nodes, found {} models, {} errors",
        len(result.visited),
        len(result.models),
        len(result.errors),
    )
    return result
