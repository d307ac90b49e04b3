"""
Presentation of a trace result: text lines and JSON report.

Any diagnostic suppresses every model line (all-or-nothing).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .node_types import TraceResult

REPORT_VERSION = "1.0"


def format_errors(result: TraceResult) -> List[str]:
    return [f"ERROR: {err}" for err in result.errors]


def format_text(result: TraceResult, explain: bool = False) -> List[str]:
    if result.errors:
        return format_errors(result)

    lines: List[str] = []
    for model in result.sorted_models():
        lines.append(str(model))
        if not explain:
            continue
        usages = result.usages_of(model)
        if not usages:
            lines.append("  - (unknown)")
        for item in usages:
            lines.append(f"  - {item}")
    return lines


def build_json_report(result: TraceResult) -> Dict[str, Any]:
    models = [] if result.errors else result.sorted_models()
    return {
        "version": REPORT_VERSION,
        "entrypoint": result.entrypoint,
        "summary": {
            "models": len(models),
            "visited": len(result.visited),
            "errors": len(result.errors),
        },
        "models": [
            {"module": m.module, "name": m.name, "usages": result.usages_of(m)}
            for m in models
        ],
        "errors": list(result.errors),
    }


def save_json_report(result: TraceResult, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    out = output_dir / "modex_report.json"
    out.write_text(
        json.dumps(build_json_report(result), ensure_ascii=False, indent=2), encoding="utf-8"
    )
    return out
