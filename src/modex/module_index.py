"""
Module index: dotted module path <-> source file mapping for one source root.
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from loguru import logger

SOURCE_SUFFIX = ".py"
PACKAGE_INIT = "__init__.py"

DEFAULT_EXCLUDE: List[str] = [
    "**/.git/**",
    "**/.venv/**",
    "**/venv/**",
    "**/.tox/**",
    "**/__pycache__/**",
    "**/node_modules/**",
]


def _is_excluded(rel: str, patterns: List[str]) -> bool:
    # patterns are written against "./<rel>" so that "**/x/**" also hits top-level dirs
    probe = "./" + rel
    return any(fnmatch.fnmatch(probe, pat) for pat in patterns)


def _module_path_for(rel_path: str) -> Optional[str]:
    parts = Path(rel_path).parts
    if not parts:
        return None
    if parts[-1] == PACKAGE_INIT:
        parts = parts[:-1]
    else:
        parts = parts[:-1] + (parts[-1][: -len(SOURCE_SUFFIX)],)
    if not parts:
        return None
    return ".".join(parts)


def is_package_file(file_path: str) -> bool:
    return os.path.basename(file_path) == PACKAGE_INIT


class ModuleIndex:
    """Read-only after construction."""

    def __init__(self, root: str, modules: Dict[str, str]):
        self.root = os.path.abspath(root)
        self.modules = dict(modules)
        self.path_to_module: Dict[str, str] = {
            os.path.normpath(path): mod for mod, path in self.modules.items()
        }

    @classmethod
    def build(cls, root: str, exclude: Optional[List[str]] = None) -> "ModuleIndex":
        root = os.path.abspath(root)
        patterns = DEFAULT_EXCLUDE if exclude is None else list(exclude)
        modules: Dict[str, str] = {}

        def _skip_unreadable(err: OSError) -> None:
            logger.warning("Skipping unreadable directory {}: {}", err.filename, err.strerror)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_skip_unreadable):
            rel_dir = os.path.relpath(dirpath, root)
            rel_dir = "" if rel_dir == "." else Path(rel_dir).as_posix() + "/"
            # prune excluded dirs, keep traversal order stable
            dirnames[:] = sorted(
                d for d in dirnames if not _is_excluded(f"{rel_dir}{d}/", patterns)
            )
            for fn in sorted(filenames):
                if not fn.endswith(SOURCE_SUFFIX):
                    continue
                rel = f"{rel_dir}{fn}"
                if _is_excluded(rel, patterns):
                    continue
                mod = _module_path_for(rel)
                if mod:
                    modules[mod] = os.path.join(dirpath, fn)

        logger.debug("Indexed {} modules under {}", len(modules), root)
        return cls(root, modules)

    def __contains__(self, module_path: object) -> bool:
        return module_path in self.modules

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self) -> Iterator[str]:
        return iter(self.modules)

    def file_of(self, module_path: str) -> Optional[str]:
        return self.modules.get(module_path)

    def module_of_file(self, file_path: str) -> Optional[str]:
        return self.path_to_module.get(os.path.normpath(os.path.abspath(file_path)))

    def resolve_entrypoint_module(self, spec: str) -> Optional[str]:
        """Resolve a dotted module path or a filesystem path (absolute or root-relative)."""
        if not spec:
            return None
        if spec in self.modules:
            return spec

        clean = os.path.normpath(spec)
        if os.path.isabs(clean):
            candidates = [clean]
        else:
            candidates = [
                os.path.normpath(os.path.join(self.root, clean)),
                os.path.abspath(clean),
            ]
        for candidate in candidates:
            found = self.module_of_file(candidate)
            if found:
                return found
            if not candidate.endswith(SOURCE_SUFFIX):
                found = self.module_of_file(candidate + SOURCE_SUFFIX)
                if found:
                    return found
        return None
