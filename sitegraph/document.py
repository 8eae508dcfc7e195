"""Data structures representing indexed documents and their links."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LinkStatus(str, Enum):
    """Classification of an outbound link after resolution."""

    pending = "pending"
    valid = "valid"
    broken = "broken"
    external = "external"


class SkippedFileWarning(UserWarning):
    """A file under the root could not be read and was left out of the run."""


class BrokenLinkWarning(UserWarning):
    """A relative link does not resolve to any known document."""


@dataclass(slots=True)
class LinkReference:
    """Outgoing link reference found in a document body."""

    target: str
    label: str = ""
    line: int = 0
    kind: str = "link"  # link, definition, autolink
    status: LinkStatus = LinkStatus.pending
    resolved: Optional[str] = None


@dataclass(slots=True)
class LinkWarning:
    """Malformed link syntax that was skipped during extraction."""

    source: str
    line: int
    message: str


@dataclass(slots=True)
class SkippedFile:
    """File that was discovered but could not be loaded."""

    path: str
    reason: str

    def to_warning(self) -> SkippedFileWarning:
        return SkippedFileWarning(f"Skipping {self.path}: {self.reason}")


@dataclass(slots=True)
class LoadedFile:
    """Raw text of a discovered file, keyed by its path relative to the root."""

    path: str
    content: str


@dataclass(slots=True)
class Document:
    """Container for one content file and its derived metadata."""

    path: str
    content: str
    title: str
    category: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    links: List[LinkReference] = field(default_factory=list)

    @property
    def valid_targets(self) -> List[str]:
        """Resolved targets of valid links, in body order."""
        return [
            link.resolved
            for link in self.links
            if link.status is LinkStatus.valid and link.resolved
        ]
