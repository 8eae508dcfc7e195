"""MCP Server for the Markdown site checker.

Provides tools for:
- Checking a documentation tree for broken links and orphan pages
- Listing the table of contents derived from titles and categories

Supports both STDIO and HTTP transports.

Usage:
    # STDIO (for desktop MCP clients)
    python -m sitegraph.mcp_server

    # HTTP (for remote access)
    python -m sitegraph.mcp_server --transport http --port 8000

    # Or via FastMCP CLI
    fastmcp run sitegraph/mcp_server.py:mcp --transport http --port 8000

Environment Variables:
    SITEGRAPH_INDEX_NAME: Directory index file name (default: index.md)
    SITEGRAPH_EXTENSIONS: Comma-separated document extensions
    SITEGRAPH_CATEGORY_DEPTH: Directory segments forming a category
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from .config import SiteCheckOptions
from .loader import AccessError
from .report import format_report_markdown
from .site import PipelineTimeoutError

LOGGER = logging.getLogger(__name__)

# Create the MCP server
mcp = FastMCP(
    name="Site Graph",
    instructions="""
    A documentation site checker that provides:

    1. check_site: Index a Markdown tree, report broken relative links,
       orphan pages and skipped files.
    2. table_of_contents: Titles grouped by category with their distance
       from the root document.

    Output formats for check_site:
    - json: Full report (default)
    - markdown: Human-readable summary
    """,
)


class OutputFormat(str, Enum):
    """Output format for check results."""

    markdown = "markdown"
    json = "json"


def _format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _options(
    root_document: Optional[str], category_depth: Optional[int]
) -> SiteCheckOptions:
    return SiteCheckOptions.from_env().with_overrides(
        root_document=root_document,
        category_depth=category_depth,
    )


def _error(message: str, root: str) -> str:
    LOGGER.error(message)
    return json.dumps({"error": message, "root": root}, ensure_ascii=False)


@mcp.tool
async def check_site(
    root: str,
    root_document: Optional[str] = None,
    category_depth: Optional[int] = None,
    output_format: str = "json",
    timeout: Optional[float] = None,
):
    """
    Check a Markdown documentation tree for broken links and orphan pages.

    Args:
        root: Directory holding the Markdown files
        root_document: Document orphan detection starts from (default: index.md)
        category_depth: Leading directory segments forming a category (default: 1)
        output_format: "json" (default) or "markdown"
        timeout: Optional time budget in seconds

    Returns:
        The report in the requested format, or a JSON error object.

    Examples:
        check_site(root="./docs")
        check_site(root="./docs", root_document="README.md", output_format="markdown")
    """
    from . import check_site_async

    try:
        fmt = OutputFormat(output_format.lower())
    except ValueError:
        fmt = OutputFormat.json

    LOGGER.info("Checking site: %s", root)
    try:
        result = await check_site_async(
            root, options=_options(root_document, category_depth), timeout=timeout
        )
    except AccessError as exc:
        return _error(f"Cannot read site: {exc}", root)
    except PipelineTimeoutError as exc:
        return _error(f"Timeout: {exc}", root)

    report = result.report
    if fmt == OutputFormat.markdown:
        return format_report_markdown(report)

    payload = report.to_dict()
    payload["checked_at"] = _format_timestamp()
    return json.dumps(payload, indent=2, ensure_ascii=False)


@mcp.tool
async def table_of_contents(
    root: str,
    root_document: Optional[str] = None,
    category_depth: Optional[int] = None,
):
    """
    List documents grouped by category.

    Args:
        root: Directory holding the Markdown files
        root_document: Document depths are measured from (default: index.md)
        category_depth: Leading directory segments forming a category (default: 1)

    Returns:
        JSON object mapping each category to entries with path, title and
        depth (null for orphans).
    """
    from . import check_site_async

    try:
        result = await check_site_async(
            root, options=_options(root_document, category_depth)
        )
    except AccessError as exc:
        return _error(f"Cannot read site: {exc}", root)

    return json.dumps(result.report.toc, indent=2, ensure_ascii=False)


# =============================================================================
# CLI ENTRY POINT
# =============================================================================


def main():
    """CLI entry point for running the MCP server."""
    parser = argparse.ArgumentParser(
        description="Run the site graph MCP server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # STDIO transport (default)
    python -m sitegraph.mcp_server

    # HTTP transport (for remote access)
    python -m sitegraph.mcp_server --transport http --port 8000

    # Custom index file name
    SITEGRAPH_INDEX_NAME=README.md python -m sitegraph.mcp_server
""",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to for HTTP transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to for HTTP transport (default: 8000)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    # Load .env before reading environment variables
    load_dotenv()
    LOGGER.info("Index name: %s", SiteCheckOptions.from_env().index_name)

    if args.transport == "http":
        LOGGER.info("Starting MCP server on http://%s:%d/mcp", args.host, args.port)
        mcp.run(transport="http", host=args.host, port=args.port)
    else:
        LOGGER.info("Starting MCP server with STDIO transport")
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
