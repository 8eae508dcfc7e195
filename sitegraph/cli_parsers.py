"""Argument parser construction for CLI commands."""

from __future__ import annotations

import argparse
from typing import List, Optional


def _build_check_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitegraph",
        description=(
            "Index a Markdown documentation tree, check its internal links "
            "and report orphan pages."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Check a docs tree (JSON report to stdout)
  sitegraph ./docs

  # Use README.md as the navigation root
  sitegraph ./docs --root-document README.md

  # Markdown summary written to a file
  sitegraph ./docs --format markdown -o report.md

  # Nested categories and a time budget
  sitegraph ./docs --category-depth 2 --timeout 30

Exit status is 0 when no relative link is broken, 1 otherwise,
2 when the time budget is exceeded.

Environment Variables:
  SITEGRAPH_INDEX_NAME      Directory index file name (default: index.md)
  SITEGRAPH_EXTENSIONS      Comma-separated document extensions
  SITEGRAPH_CATEGORY_DEPTH  Directory segments forming a category
  SITEGRAPH_CONCURRENCY     Parallel file reads
""",
    )

    parser.add_argument(
        "root",
        help="Root directory of the Markdown tree",
    )
    parser.add_argument(
        "--root-document",
        type=str,
        default=None,
        help="Document orphan detection starts from (default: the index file)",
    )
    parser.add_argument(
        "--index-name",
        type=str,
        default=None,
        help="File name that stands for a directory (default: index.md)",
    )
    parser.add_argument(
        "--extension",
        dest="extensions",
        action="append",
        default=None,
        help="Document extension to include; repeatable (default: .md, .markdown)",
    )
    parser.add_argument(
        "--category-depth",
        type=int,
        default=None,
        help="Leading directory segments forming a category, 0 for all (default: 1)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum parallel file reads (default: 8)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Fail the run when it takes longer than this many seconds",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["json", "markdown"],
        default="json",
        help="Report format (default: json)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_check_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = _build_check_parser()
    return parser.parse_args(argv)
