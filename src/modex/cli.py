#!/usr/bin/env python3
"""
modex CLI entrypoint

Traces a Python entrypoint and lists the model classes it references, from
static analysis only.

  modex --entrypoint <module-or-path[:object]> [--root <path>] [--explain]
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

EXIT_OK = 0
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modex",
        description="modex traces a Python entrypoint and lists referenced models from static analysis.",
    )
    parser.add_argument(
        "--entrypoint",
        help="Entrypoint like 'pkg.module:MyClass' or 'src/path/file.py:MyClass::method'",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Python source root (base directory containing package roots). Default: current directory",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        default=None,
        help="Print where each model is used (module:function)",
    )
    parser.add_argument("--config", default=None, help="Path to config file (YAML or pyproject.toml)")
    parser.add_argument("--format", choices=["text", "json"], default=None, help="Output format")
    parser.add_argument("--graph", default=None, metavar="BASE", help="Write usage graph to BASE.dot (+ rendered file)")
    parser.add_argument("--graph-format", default="svg", help="Rendered graph format (default: svg)")
    parser.add_argument("--output", default=None, metavar="DIR", help="Also write DIR/modex_report.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--init", action="store_true", help="Generate an example modex.yaml and exit")
    parser.add_argument("--force", action="store_true", help="With --init: overwrite an existing modex.yaml")
    parser.add_argument("--show-config", action="store_true", help="Print the effective configuration and exit")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")
    logger.enable("modex")


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = _build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        return EXIT_ERROR
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.version:
        from . import __version__

        print(__version__)
        return EXIT_OK

    if args.init:
        from .config_loader import save_example_config

        try:
            path = save_example_config(force=args.force)
        except FileExistsError as e:
            print(f"ERROR: {e} (use --force to overwrite)", file=sys.stderr)
            return EXIT_ERROR
        print(f"Config written: {path}")
        return EXIT_OK

    from .config_loader import load_config

    try:
        config = load_config(
            Path(args.config) if args.config else None,
            cwd=Path(args.root) if args.root else None,
        )
    except (OSError, ValueError, ImportError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR
    _apply_overrides(config, args)

    if args.show_config:
        from dataclasses import asdict

        print(json.dumps(asdict(config), indent=2))
        return EXIT_OK

    if not args.entrypoint:
        print("ERROR: --entrypoint is required", file=sys.stderr)
        return EXIT_ERROR

    return _run(args, config)


def _apply_overrides(config, args: argparse.Namespace) -> None:
    if args.root:
        config.root = args.root
    if args.explain is not None:
        config.explain = args.explain
    if args.format:
        config.format = args.format
    if not config.root:
        config.root = os.getcwd()


def _run(args: argparse.Namespace, config) -> int:
    from .report import build_json_report, format_text, save_json_report
    from .tracer import trace_entrypoint

    result = trace_entrypoint(args.entrypoint, config=config)

    if config.format == "json":
        print(json.dumps(build_json_report(result), ensure_ascii=False, indent=2))
    else:
        for line in format_text(result, explain=config.explain):
            print(line)

    if args.output:
        report_path = save_json_report(result, Path(args.output))
        logger.info("Report written: {}", report_path)

    if not result.ok:
        return EXIT_ERROR

    if args.graph:
        from .graphviz_render import render_usage_graph

        dot_path, rendered = render_usage_graph(result, args.graph, fmt=args.graph_format)
        logger.info("Graph written: {}", dot_path)
        if not rendered:
            logger.warning("Graphviz executable not found; only {} was written", dot_path)
    return EXIT_OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
