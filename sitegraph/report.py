"""Structured summary of a site check run."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import tldextract

from .document import BrokenLinkWarning, Document, LinkStatus, LinkWarning, SkippedFile
from .graph import SiteGraph, table_of_contents

LOGGER = logging.getLogger(__name__)

# Bundled public suffix snapshot only; a check run never touches the network.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


@dataclass(frozen=True)
class BrokenLink:
    source: str
    target: str
    line: int = 0

    def to_warning(self) -> BrokenLinkWarning:
        return BrokenLinkWarning(f"Broken link: {self.source}:{self.line} -> {self.target}")


@dataclass
class SiteReport:
    """Result of a site check, ready for JSON serialization."""

    root: str
    document_count: int
    broken_links: List[BrokenLink] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)
    warnings: List[LinkWarning] = field(default_factory=list)
    external_links: int = 0
    external_domains: Dict[str, int] = field(default_factory=dict)
    components: List[Dict[str, Any]] = field(default_factory=list)
    toc: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no relative link is broken."""
        return not self.broken_links

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON report contract."""
        return {
            "root": self.root,
            "documentCount": self.document_count,
            "brokenLinks": [
                {"source": link.source, "target": link.target, "line": link.line}
                for link in self.broken_links
            ],
            "orphans": list(self.orphans),
            "skipped": [
                {"path": item.path, "reason": item.reason} for item in self.skipped
            ],
            "warnings": [
                {"source": item.source, "line": item.line, "message": item.message}
                for item in self.warnings
            ],
            "externalLinks": self.external_links,
            "externalDomains": dict(self.external_domains),
            "components": [dict(component) for component in self.components],
            "toc": {
                category: [dict(entry) for entry in entries]
                for category, entries in self.toc.items()
            },
            "stats": dict(self.stats),
        }


@lru_cache(maxsize=512)
def external_domain(target: str) -> Optional[str]:
    """Registrable domain of an external link, or None when it has no usable host."""
    try:
        parsed = urlparse(target if not target.startswith("//") else f"http:{target}")
        host = (parsed.hostname or "").lower()
    except ValueError as exc:
        LOGGER.debug("Cannot parse host of %s: %s", target, exc)
        return None
    if not host:
        return None
    extracted = _EXTRACT(host)
    if not extracted.domain or not extracted.suffix:
        return host
    return f"{extracted.domain}.{extracted.suffix}"


def build_report(
    documents: Sequence[Document],
    graph: SiteGraph,
    skipped: Sequence[SkippedFile] = (),
    warnings: Sequence[LinkWarning] = (),
) -> SiteReport:
    """
    Summarize a run.

    The report does not decide pass or fail; callers apply their own
    policy on top of ``broken_links`` and ``orphans``.
    """
    broken: List[BrokenLink] = []
    domains: Counter = Counter()
    counts: Counter = Counter()
    for document in documents:
        for link in document.links:
            counts[link.status.value] += 1
            if link.status is LinkStatus.broken:
                broken.append(
                    BrokenLink(source=document.path, target=link.target, line=link.line)
                )
            elif link.status is LinkStatus.external:
                domain = external_domain(link.target)
                if domain:
                    domains[domain] += 1

    components = [
        {"nodes": list(component.nodes), "hasCycle": component.has_cycle}
        for component in graph.components
    ]
    stats = {
        "total_links": sum(counts.values()),
        "valid_links": counts[LinkStatus.valid.value],
        "broken_links": counts[LinkStatus.broken.value],
        "external_links": counts[LinkStatus.external.value],
        "edges": graph.edge_count,
        "orphan_count": len(graph.orphans),
        "skipped_count": len(skipped),
        "warning_count": len(warnings),
        "root_found": graph.has_root,
        "has_cycle": graph.has_cycle,
    }

    report = SiteReport(
        root=graph.root,
        document_count=len(documents),
        broken_links=broken,
        orphans=list(graph.orphans),
        skipped=list(skipped),
        warnings=list(warnings),
        external_links=counts[LinkStatus.external.value],
        external_domains=dict(sorted(domains.items())),
        components=components,
        toc=table_of_contents(graph, documents),
        stats=stats,
    )
    LOGGER.info(
        "Checked %d documents: %d broken links, %d orphans, %d skipped",
        report.document_count,
        len(report.broken_links),
        len(report.orphans),
        len(report.skipped),
    )
    return report


def format_report_markdown(report: SiteReport) -> str:
    """Format a report as a Markdown summary."""
    lines = [
        "# Site check",
        f"_Root: {report.root} | {report.document_count} documents_",
        "",
    ]

    lines.append(f"## Broken links ({len(report.broken_links)})")
    for link in report.broken_links:
        lines.append(f"- {link.source}:{link.line} -> `{link.target}`")
    lines.append("")

    lines.append(f"## Orphans ({len(report.orphans)})")
    for path in report.orphans:
        lines.append(f"- {path}")
    lines.append("")

    if report.skipped:
        lines.append(f"## Skipped files ({len(report.skipped)})")
        for item in report.skipped:
            lines.append(f"- {item.path}: {item.reason}")
        lines.append("")

    if report.warnings:
        lines.append(f"## Warnings ({len(report.warnings)})")
        for item in report.warnings:
            lines.append(f"- {item.source}:{item.line}: {item.message}")
        lines.append("")

    if report.external_domains:
        domains = ", ".join(
            f"{domain} ({count})" for domain, count in report.external_domains.items()
        )
        lines.append(f"**External domains:** {domains}")
        lines.append("")

    return "\n".join(lines)
