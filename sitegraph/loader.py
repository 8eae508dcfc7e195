"""Discover and read the content files of a site tree."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from .config import SiteCheckOptions
from .document import LoadedFile, SkippedFile

LOGGER = logging.getLogger(__name__)

LoadResult = Union[LoadedFile, SkippedFile]


class AccessError(OSError):
    """Raised when the site root cannot be read."""


def discover_files(root: Path, extensions: Sequence[str]) -> List[str]:
    """
    List content files under ``root`` as sorted relative POSIX paths.

    Hidden directories and files (leading ``.``) are not descended into.

    Raises:
        AccessError: If ``root`` is missing, not a directory, or unreadable.
    """
    root = Path(root)
    if not root.is_dir():
        raise AccessError(f"Site root is not a readable directory: {root}")

    wanted = tuple(ext.lower() for ext in extensions)
    found: List[str] = []

    def _on_error(exc: OSError) -> None:
        if Path(exc.filename or "") == root:
            raise AccessError(f"Cannot read site root {root}: {exc.strerror}") from exc
        LOGGER.warning("Cannot list %s: %s", exc.filename, exc.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = [name for name in dirnames if not name.startswith(".")]
        base = Path(dirpath)
        for name in filenames:
            if name.startswith(".") or not name.lower().endswith(wanted):
                continue
            found.append((base / name).relative_to(root).as_posix())

    return sorted(found)


def read_file(root: Path, relative: str) -> LoadResult:
    """Read one file, turning read and decode failures into a skip record."""
    try:
        content = (Path(root) / relative).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        skipped = SkippedFile(path=relative, reason=f"not valid UTF-8: {exc.reason}")
    except OSError as exc:
        skipped = SkippedFile(path=relative, reason=exc.strerror or str(exc))
    else:
        return LoadedFile(path=relative, content=content.lstrip("\ufeff"))
    LOGGER.warning("%s", skipped.to_warning())
    return skipped


def iter_documents(
    root: Path, options: Optional[SiteCheckOptions] = None
) -> Iterator[LoadResult]:
    """
    Lazily yield loaded or skipped files in lexicographic path order.

    Each call starts a fresh walk of the tree.
    """
    opts = options or SiteCheckOptions()
    for relative in discover_files(root, opts.extensions):
        yield read_file(root, relative)


async def load_documents_async(
    root: Path, options: Optional[SiteCheckOptions] = None
) -> List[LoadResult]:
    """
    Read every content file on worker threads.

    Args:
        root: Site root directory.
        options: Run options; ``concurrency`` bounds simultaneous reads.

    Returns:
        Loaded and skipped records in the same order as ``discover_files``.

    Raises:
        AccessError: If the root cannot be read.
    """
    opts = options or SiteCheckOptions()
    paths = await asyncio.to_thread(discover_files, root, opts.extensions)
    if not paths:
        return []

    semaphore = asyncio.Semaphore(opts.concurrency)

    async def _load(relative: str) -> LoadResult:
        async with semaphore:
            return await asyncio.to_thread(read_file, root, relative)

    results = await asyncio.gather(*(_load(relative) for relative in paths))
    LOGGER.debug("Loaded %d files from %s", len(results), root)
    return list(results)


def load_documents(
    root: Path, options: Optional[SiteCheckOptions] = None
) -> List[LoadResult]:
    """Synchronous wrapper for load_documents_async."""
    return asyncio.run(load_documents_async(root, options))
