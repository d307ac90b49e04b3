from __future__ import annotations

from typing import Dict, Tuple

from graphviz import Digraph
from graphviz.backend import ExecutableNotFound

from .node_types import TraceResult


def _get_short_name(usage_key: str) -> str:
    """``pkg.mod:Class.func`` -> ``Class.func``"""
    if not usage_key:
        return "root"
    return usage_key.split(":", 1)[-1]


def build_usage_graph(result: TraceResult) -> Digraph:
    dot = Digraph(
        "modex",
        graph_attr={"rankdir": "LR", "splines": "spline", "label": result.entrypoint, "labelloc": "t"},
        node_attr={"shape": "box", "style": "rounded,filled", "fontname": "Helvetica"},
        edge_attr={"arrowhead": "vee"},
    )

    # usage keys contain ":" which DOT reads as a port separator, so nodes get plain ids
    ids: Dict[str, str] = {}
    for i, key in enumerate(result.visited):
        ids[key] = f"n{i}"
        module = key.split(":", 1)[0]
        dot.node(ids[key], label=f"{_get_short_name(key)}\n{module}", fillcolor="#FFFFFF")

    models = result.sorted_models()
    for i, model in enumerate(models):
        ids[str(model)] = f"m{i}"
        dot.node(ids[str(model)], label=f"{model.name}\n{model.module}", shape="ellipse", fillcolor="#FFC107")

    # call edges: dashed, only between nodes that were actually located
    for src, dst in sorted(result.call_edges):
        if src in ids and dst in ids:
            dot.edge(ids[src], ids[dst], color="#9E9E9E", style="dashed")

    # usage edges: solid
    for model in models:
        for key in result.usages_of(model):
            if key in ids:
                dot.edge(ids[key], ids[str(model)], color="black", style="solid")

    return dot


def render_usage_graph(result: TraceResult, output_base: str, fmt: str = "svg") -> Tuple[str, str]:
    """Write ``<base>.dot`` and, when the Graphviz executable is present, ``<base>.<fmt>``."""
    dot = build_usage_graph(result)
    dot_path = f"{output_base}.dot"
    rendered_path = f"{output_base}.{fmt}"
    dot.save(dot_path)

    try:
        dot.render(output_base, format=fmt, cleanup=True)
    except ExecutableNotFound:
        # Only DOT written; caller should inform user
        rendered_path = ""
    return dot_path, rendered_path
