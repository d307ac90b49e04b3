from __future__ import annotations

import os
from pathlib import Path

from modex.module_index import ModuleIndex


def _w(p: Path, rel: str, content: str = "") -> Path:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


def test_package_init_maps_to_directory_path(tmp_path: Path) -> None:
    _w(tmp_path, "pkg/__init__.py")
    _w(tmp_path, "pkg/sub/__init__.py")
    _w(tmp_path, "pkg/sub/mod.py")
    _w(tmp_path, "top.py")

    index = ModuleIndex.build(str(tmp_path))

    assert set(index) == {"pkg", "pkg.sub", "pkg.sub.mod", "top"}
    assert index.file_of("pkg") == str(tmp_path / "pkg" / "__init__.py")
    assert index.file_of("pkg.sub.mod") == str(tmp_path / "pkg" / "sub" / "mod.py")


def test_non_source_files_and_root_init_are_ignored(tmp_path: Path) -> None:
    _w(tmp_path, "__init__.py")
    _w(tmp_path, "notes.txt", "hello")
    _w(tmp_path, "pkg/data.json", "{}")
    _w(tmp_path, "pkg/mod.py")

    index = ModuleIndex.build(str(tmp_path))

    assert set(index) == {"pkg.mod"}


def test_default_exclude_skips_virtualenv_and_caches(tmp_path: Path) -> None:
    _w(tmp_path, ".venv/lib/site.py")
    _w(tmp_path, "pkg/venv/inner.py")
    _w(tmp_path, "pkg/__pycache__/mod.py")
    _w(tmp_path, "pkg/mod.py")

    index = ModuleIndex.build(str(tmp_path))

    assert set(index) == {"pkg.mod"}


def test_custom_exclude_patterns(tmp_path: Path) -> None:
    _w(tmp_path, "pkg/mod.py")
    _w(tmp_path, "pkg/tests/test_mod.py")

    index = ModuleIndex.build(str(tmp_path), exclude=["**/tests/**"])

    assert "pkg.mod" in index
    assert "pkg.tests.test_mod" not in index


def test_unreadable_directory_is_skipped(tmp_path: Path, monkeypatch) -> None:
    _w(tmp_path, "ok/mod.py")
    _w(tmp_path, "locked/hidden.py")
    real_scandir = os.scandir

    def _scandir(path="."):
        if os.path.basename(os.fspath(path)) == "locked":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", _scandir)
    index = ModuleIndex.build(str(tmp_path))

    assert "ok.mod" in index
    assert "locked.hidden" not in index


def test_resolve_entrypoint_module_by_dotted_path_and_file_path(tmp_path: Path) -> None:
    f = _w(tmp_path, "app/service.py")
    index = ModuleIndex.build(str(tmp_path))

    assert index.resolve_entrypoint_module("app.service") == "app.service"
    assert index.resolve_entrypoint_module("app/service.py") == "app.service"
    assert index.resolve_entrypoint_module("app/service") == "app.service"
    assert index.resolve_entrypoint_module(str(f)) == "app.service"
    assert index.module_of_file(str(f)) == "app.service"


def test_resolve_entrypoint_module_unknown(tmp_path: Path) -> None:
    _w(tmp_path, "app/service.py")
    index = ModuleIndex.build(str(tmp_path))

    assert index.resolve_entrypoint_module("app.missing") is None
    assert index.resolve_entrypoint_module("app/missing.py") is None
    assert index.resolve_entrypoint_module("") is None


def test_module_of_file_normalises_paths(tmp_path: Path) -> None:
    f = _w(tmp_path, "app/service.py")
    index = ModuleIndex.build(str(tmp_path))

    assert index.module_of_file(str(tmp_path / "app" / ".." / "app" / "service.py")) == "app.service"
    assert index.module_of_file(str(f) + "x") is None
