from __future__ import annotations

from pathlib import Path

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from modex.graphviz_render import build_usage_graph, render_usage_graph
from modex.node_types import ModelRef, TraceResult

USER = ModelRef("app.models.user", "User")


def _result() -> TraceResult:
    return TraceResult(
        entrypoint="app.api:Handler::get",
        models={USER},
        usage={USER: {"app.service:load"}},
        visited=["app.api:Handler.get", "app.service:load"],
        call_edges={("app.api:Handler.get", "app.service:load"), ("app.service:load", "requests:get")},
    )


def test_graph_nodes_and_edges() -> None:
    src = build_usage_graph(_result()).source

    assert "n0" in src and "n1" in src and "m0" in src
    assert "Handler.get" in src
    assert "#FFC107" in src
    # one dashed call edge (the unvisited target is dropped) and one usage edge
    assert src.count("style=dashed") == 1
    assert "n0 -> n1" in src
    assert "n1 -> m0" in src


def test_render_without_graphviz_binary_keeps_dot(tmp_path: Path, monkeypatch) -> None:
    def _no_dot(self, *args, **kwargs):
        raise ExecutableNotFound(["dot"])

    monkeypatch.setattr(Digraph, "render", _no_dot)
    base = str(tmp_path / "usage")

    dot_path, rendered = render_usage_graph(_result(), base, fmt="png")

    assert rendered == ""
    assert Path(dot_path).exists()
    assert "digraph" in Path(dot_path).read_text(encoding="utf-8")
