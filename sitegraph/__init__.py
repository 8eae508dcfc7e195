"""Content indexing and link checking for Markdown documentation sites.

This module provides a clean API for walking a tree of Markdown documents
and checking how they link together. It supports:

- Title and category extraction (front matter, headings, file names)
- Relative link resolution with directory index and extension fallbacks
- Orphan detection from a root document (BFS strategy)
- A structured report suitable for a CI gate

Example usage:

    from sitegraph import check_site, SiteCheckOptions

    result = check_site("./docs")
    print(result.report.to_dict()["brokenLinks"])

    # Custom root document and category depth
    options = SiteCheckOptions(root_document="README.md", category_depth=2)
    result = check_site("./docs", options=options, timeout=30)
    for path in result.report.orphans:
        print(f"orphan: {path}")

    # Inside an event loop
    result = await check_site_async("./docs")
"""

from __future__ import annotations

from .config import SiteCheckOptions
from .document import (
    BrokenLinkWarning,
    Document,
    LinkReference,
    LinkStatus,
    LinkWarning,
    SkippedFile,
    SkippedFileWarning,
)
from .graph import SiteGraph, build_site_graph
from .loader import AccessError, iter_documents, load_documents_async
from .metadata import extract_metadata
from .references import parse_references, resolve_link
from .report import SiteReport, build_report, format_report_markdown
from .site import (
    PipelineTimeoutError,
    SiteCheckResult,
    check_site,
    check_site_async,
)

__all__ = [
    # Document types
    "Document",
    "LinkReference",
    "LinkStatus",
    "LinkWarning",
    "SkippedFile",
    # Errors and warning categories
    "AccessError",
    "PipelineTimeoutError",
    "SkippedFileWarning",
    "BrokenLinkWarning",
    # Pipeline stages
    "iter_documents",
    "load_documents_async",
    "extract_metadata",
    "parse_references",
    "resolve_link",
    "build_site_graph",
    "SiteGraph",
    "build_report",
    "format_report_markdown",
    "SiteReport",
    # Site check
    "SiteCheckOptions",
    "SiteCheckResult",
    "check_site",
    "check_site_async",
    # MCP Server
    "mcp",
]


def get_mcp_server():
    """Get the MCP server instance (lazy import to avoid dependency if not needed)."""
    from .mcp_server import mcp

    return mcp


# Lazy import for mcp to avoid requiring fastmcp if not used
def __getattr__(name):
    if name == "mcp":
        from .mcp_server import mcp

        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
