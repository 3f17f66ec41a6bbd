#!/usr/bin/env python3
"""CLI: Serve an image layer analysis as a JSON API plus the bundled viewer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the package is importable when running as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

import uvicorn

from diveweb import config
from diveweb.analysis.loader import AnalysisLoadError, load_analysis
from diveweb.api.server import create_app
from diveweb.index.errors import IndexBuildError
from diveweb.index.flatten import SortOrder


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve an image layer analysis")
    parser.add_argument(
        "analysis",
        type=Path,
        nargs="?",
        default=None,
        help=f"Path to the analysis JSON document (default: ANALYSIS_PATH={config.ANALYSIS_PATH})",
    )
    parser.add_argument("--host", type=str, default=config.HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to listen on")
    parser.add_argument(
        "--sort-order",
        choices=[o.value for o in SortOrder],
        default=None,
        help="Child ordering used when flattening file trees (default: SORT_ORDER or 'name')",
    )
    parser.add_argument(
        "--dist-dir",
        type=Path,
        default=None,
        help="Directory with the built viewer (default: DIST_DIR)",
    )
    args = parser.parse_args()

    analysis_path = args.analysis or config.ANALYSIS_PATH
    try:
        sort_order = SortOrder.parse(args.sort_order) if args.sort_order else config.get_sort_order()
        analysis, raw_doc = load_analysis(analysis_path)
        app = create_app(analysis, raw_doc=raw_doc, dist_dir=args.dist_dir, sort_order=sort_order)
    except (AnalysisLoadError, IndexBuildError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Serving {analysis.image!r} on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
