"""Options for a site check run."""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)

DEFAULT_INDEX_NAME = "index.md"
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".md", ".markdown")
DEFAULT_CATEGORY_DEPTH = 1
DEFAULT_CONCURRENCY = 8
UNCATEGORIZED = "uncategorized"

ENV_INDEX_NAME = "SITEGRAPH_INDEX_NAME"
ENV_EXTENSIONS = "SITEGRAPH_EXTENSIONS"
ENV_CATEGORY_DEPTH = "SITEGRAPH_CATEGORY_DEPTH"
ENV_CONCURRENCY = "SITEGRAPH_CONCURRENCY"


@dataclass(frozen=True)
class SiteCheckOptions:
    """Options for indexing a documentation tree.

    Attributes:
        index_name: File name that stands for a directory when a link
            points at the directory itself.
        root_document: Path of the document orphan detection starts from.
            Defaults to ``index_name`` at the top of the tree.
        extensions: File extensions that count as documents. Also tried,
            in order, when a link omits its extension.
        category_depth: Number of leading directory segments that form a
            document's category. ``0`` uses the full directory path.
        concurrency: Maximum number of files read at the same time.
    """

    index_name: str = DEFAULT_INDEX_NAME
    root_document: Optional[str] = None
    extensions: Tuple[str, ...] = field(default=DEFAULT_EXTENSIONS)
    category_depth: int = DEFAULT_CATEGORY_DEPTH
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self) -> None:
        extensions = tuple(_normalize_extension(ext) for ext in self.extensions if ext)
        object.__setattr__(self, "extensions", extensions or DEFAULT_EXTENSIONS)
        object.__setattr__(self, "category_depth", max(0, int(self.category_depth)))
        object.__setattr__(self, "concurrency", max(1, int(self.concurrency)))

    @property
    def root_path(self) -> str:
        """Root document path relative to the site root, normalized."""
        raw = (self.root_document or self.index_name).replace("\\", "/")
        normalized = posixpath.normpath(raw.strip("/") or ".")
        return "" if normalized == "." else normalized

    def with_overrides(self, **changes) -> "SiteCheckOptions":
        """Return a copy with every non-None keyword applied."""
        applied = {key: value for key, value in changes.items() if value is not None}
        if not applied:
            return self
        return replace(self, **applied)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SiteCheckOptions":
        """Build options from ``SITEGRAPH_*`` environment variables."""
        env = os.environ if environ is None else environ
        index_name = env.get(ENV_INDEX_NAME, "").strip() or DEFAULT_INDEX_NAME
        raw_extensions = env.get(ENV_EXTENSIONS, "")
        extensions = tuple(
            part.strip() for part in raw_extensions.split(",") if part.strip()
        ) or DEFAULT_EXTENSIONS
        return cls(
            index_name=index_name,
            extensions=extensions,
            category_depth=_int_from_env(env, ENV_CATEGORY_DEPTH, DEFAULT_CATEGORY_DEPTH),
            concurrency=_int_from_env(env, ENV_CONCURRENCY, DEFAULT_CONCURRENCY),
        )


def _normalize_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%r; falling back to %d.", name, raw, default)
        return default
