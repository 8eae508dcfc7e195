"""Two-phase site check: index every document, then resolve and report."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from .config import SiteCheckOptions
from .document import Document, LinkWarning, LoadedFile, SkippedFile
from .graph import SiteGraph, build_site_graph
from .loader import LoadResult, load_documents_async
from .metadata import extract_metadata
from .references import parse_references, resolve_references
from .report import SiteReport, build_report

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PipelineTimeoutError(TimeoutError):
    """Raised when a run exceeds the caller's time budget."""


@dataclass
class SiteCheckResult:
    """Result of a site check operation."""

    documents: List[Document] = field(default_factory=list)
    graph: Optional[SiteGraph] = None
    report: Optional[SiteReport] = None


def index_document(
    loaded: LoadedFile, options: SiteCheckOptions
) -> Tuple[Document, List[LinkWarning]]:
    """Build a Document with metadata and unresolved links from raw text."""
    meta = extract_metadata(
        loaded.content, loaded.path, category_depth=options.category_depth
    )
    links, warnings = parse_references(
        meta["body"], source=loaded.path, line_offset=meta["body_line_offset"]
    )
    document = Document(
        path=loaded.path,
        content=loaded.content,
        title=meta["title"],
        category=meta["category"],
        metadata={
            "title_source": meta["title_source"],
            "front_matter": meta["front_matter"],
        },
        links=links,
    )
    return document, warnings


def _index_all(
    loaded: Sequence[LoadResult], options: SiteCheckOptions
) -> Tuple[List[Document], List[SkippedFile], List[LinkWarning]]:
    documents: List[Document] = []
    skipped: List[SkippedFile] = []
    warnings: List[LinkWarning] = []
    for item in loaded:
        if isinstance(item, SkippedFile):
            skipped.append(item)
            continue
        document, doc_warnings = index_document(item, options)
        documents.append(document)
        warnings.extend(doc_warnings)
    return documents, skipped, warnings


async def _run(root: Path, options: SiteCheckOptions) -> SiteCheckResult:
    # Phase 1: every document is loaded and indexed before any link is resolved.
    loaded = await load_documents_async(root, options)
    documents, skipped, warnings = _index_all(loaded, options)

    # Phase 2: resolve against the frozen path set, then build graph and report.
    known_paths: FrozenSet[str] = frozenset(document.path for document in documents)
    for document in documents:
        resolve_references(document, known_paths, options)

    graph = build_site_graph(documents, options.root_path)
    report = build_report(documents, graph, skipped, warnings)
    return SiteCheckResult(documents=documents, graph=graph, report=report)


async def check_site_async(
    root: PathLike,
    *,
    options: Optional[SiteCheckOptions] = None,
    timeout: Optional[float] = None,
) -> SiteCheckResult:
    """
    Index a documentation tree and check its internal links.

    Args:
        root: Directory holding the Markdown tree.
        options: Run options; defaults to ``SiteCheckOptions()``.
        timeout: Optional budget in seconds for the whole run.

    Returns:
        SiteCheckResult with documents, graph and report.

    Raises:
        AccessError: If the root directory cannot be read.
        PipelineTimeoutError: If the run exceeds ``timeout``. No partial
            report is returned.
    """
    opts = options or SiteCheckOptions()
    root_path = Path(root)
    LOGGER.info(
        "Checking site: %s (root document=%s, extensions=%s)",
        root_path,
        opts.root_path,
        ",".join(opts.extensions),
    )
    if timeout is None:
        return await _run(root_path, opts)
    try:
        return await asyncio.wait_for(_run(root_path, opts), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise PipelineTimeoutError(
            f"Site check of {root_path} exceeded {timeout:g}s"
        ) from exc


def check_site(
    root: PathLike,
    *,
    options: Optional[SiteCheckOptions] = None,
    timeout: Optional[float] = None,
) -> SiteCheckResult:
    """Synchronous wrapper for check_site_async."""
    return asyncio.run(check_site_async(root, options=options, timeout=timeout))
