"""Helpers for extracting and resolving links in Markdown bodies."""

from __future__ import annotations

import logging
import posixpath
import re
from bisect import bisect_right
from typing import AbstractSet, Callable, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import unquote

from .config import SiteCheckOptions
from .document import Document, LinkReference, LinkStatus, LinkWarning
from .metadata import iter_prose_lines

LOGGER = logging.getLogger(__name__)

INLINE_LINK = re.compile(
    r"(?P<bang>!?)\[(?P<label>(?:[^\[\]]|\[[^\[\]]*\])*)\]"
    r"\(\s*(?P<target><[^<>\n]*>|[^\s()]*(?:\([^\s()]*\)[^\s()]*)*)"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^()]*\)))?\s*\)"
)
REFERENCE_DEFINITION = re.compile(
    r"^ {0,3}\[(?P<label>[^\]^\n][^\]\n]*)\]:[ \t]*\n?[ \t]*(?P<target><[^<>\n]*>|\S+)",
    re.MULTILINE,
)
AUTOLINK = re.compile(r"<(?P<target>[A-Za-z][A-Za-z0-9+.-]{1,31}:[^<>\s]*)>")
CODE_SPAN = re.compile(r"(`+)(?:(?!\1).)+?\1")
UNBALANCED = re.compile(r"\]\(")
SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")

Paragraph = List[Tuple[int, str]]


def iter_paragraphs(body: str) -> Iterator[Paragraph]:
    """Group prose lines into runs of consecutive non-blank lines."""
    block: Paragraph = []
    for number, line in iter_prose_lines(body):
        if block and (not line.strip() or number != block[-1][0] + 1):
            yield block
            block = []
        if line.strip():
            block.append((number, line))
    if block:
        yield block


def parse_references(
    body: str, *, source: str = "", line_offset: int = 0
) -> Tuple[List[LinkReference], List[LinkWarning]]:
    """
    Collect outbound links from a Markdown body.

    Inline links, reference definitions and autolinks are collected in
    reading order. Image embeds, fenced code blocks and inline code spans
    are ignored. Link labels may wrap across lines within a paragraph. A
    link opener without its closing parenthesis becomes a warning instead
    of a reference.

    Args:
        body: Markdown text (front matter already removed).
        source: Path of the document the body belongs to, for warnings.
        line_offset: Lines preceding ``body`` in the original file.

    Returns:
        Tuple of (references, warnings).
    """
    references: List[LinkReference] = []
    warnings: List[LinkWarning] = []
    for paragraph in iter_paragraphs(body or ""):
        starts: List[int] = []
        position = 0
        for _, line in paragraph:
            starts.append(position)
            position += len(line) + 1

        def line_at(offset: int) -> int:
            return paragraph[bisect_right(starts, offset) - 1][0] + line_offset

        text = "\n".join(_mask_code_spans(line) for _, line in paragraph)
        found, text = _parse_inline_links(text, line_at)

        for definition in list(REFERENCE_DEFINITION.finditer(text)):
            found.append(
                (
                    definition.start(),
                    LinkReference(
                        target=_unwrap_target(definition.group("target")),
                        label=definition.group("label").strip(),
                        line=line_at(definition.start()),
                        kind="definition",
                    ),
                )
            )
            text = _blank(text, definition.start(), definition.end())

        for match in AUTOLINK.finditer(text):
            found.append(
                (
                    match.start(),
                    LinkReference(
                        target=match.group("target"),
                        label=match.group("target"),
                        line=line_at(match.start()),
                        kind="autolink",
                    ),
                )
            )

        flagged = sorted({line_at(match.start()) for match in UNBALANCED.finditer(text)})
        for line_no in flagged:
            message = "unbalanced link syntax"
            LOGGER.warning("%s:%d: %s", source or "<body>", line_no, message)
            warnings.append(LinkWarning(source=source, line=line_no, message=message))

        references.extend(ref for _, ref in sorted(found, key=lambda item: item[0]))
    return references, warnings


def _parse_inline_links(
    text: str, line_at: Callable[[int], int]
) -> Tuple[List[Tuple[int, LinkReference]], str]:
    found: List[Tuple[int, LinkReference]] = []
    for match in INLINE_LINK.finditer(text):
        if match.group("bang"):
            continue
        found.append(
            (
                match.start(),
                LinkReference(
                    target=_unwrap_target(match.group("target")),
                    label=" ".join(match.group("label").split()),
                    line=line_at(match.start()),
                ),
            )
        )
    # Blank out images too so the unbalanced check only sees leftovers.
    return found, INLINE_LINK.sub(lambda m: _blank(m.group(0), 0, len(m.group(0))), text)


def _mask_code_spans(line: str) -> str:
    return CODE_SPAN.sub(lambda m: " " * len(m.group(0)), line)


def _blank(text: str, start: int, end: int) -> str:
    return text[:start] + re.sub(r"[^\n]", " ", text[start:end]) + text[end:]


def _unwrap_target(target: str) -> str:
    target = target.strip()
    if target.startswith("<") and target.endswith(">"):
        return target[1:-1].strip()
    return target


def is_external(target: str) -> bool:
    """Return True for scheme-qualified or protocol-relative targets."""
    target = target.strip()
    return target.startswith("//") or bool(SCHEME.match(target))


def candidate_paths(normalized: str, options: SiteCheckOptions) -> List[str]:
    """Document paths a normalized link path may refer to, in lookup order."""
    candidates: List[str] = []
    if normalized:
        candidates.append(normalized)
        candidates.extend(normalized + ext for ext in options.extensions)
    candidates.append(posixpath.join(normalized, options.index_name) if normalized else options.index_name)
    return candidates


def resolve_link(
    source: str,
    target: str,
    known_paths: AbstractSet[str],
    options: Optional[SiteCheckOptions] = None,
) -> Tuple[LinkStatus, Optional[str]]:
    """
    Classify one link target relative to the document that contains it.

    Args:
        source: Path of the referencing document.
        target: Link target as written.
        known_paths: Complete set of document paths for the run.
        options: Run options (index name and default extensions).

    Returns:
        Tuple of (status, resolved path). The path is set only for
        ``LinkStatus.valid``.
    """
    opts = options or SiteCheckOptions()
    raw = target.strip()
    if is_external(raw):
        return LinkStatus.external, None

    path = raw.split("#", 1)[0].split("?", 1)[0]
    if not path:
        return LinkStatus.valid, source

    path = unquote(path)
    if path.startswith("/"):
        joined = path.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(source), path)

    normalized = posixpath.normpath(joined) if joined else "."
    if normalized == ".." or normalized.startswith("../"):
        return LinkStatus.broken, None
    if normalized == ".":
        normalized = ""

    if path.endswith("/"):
        candidates = [posixpath.join(normalized, opts.index_name) if normalized else opts.index_name]
    else:
        candidates = candidate_paths(normalized, opts)

    for candidate in candidates:
        if candidate in known_paths:
            return LinkStatus.valid, candidate
    return LinkStatus.broken, None


def resolve_references(
    document: Document,
    known_paths: AbstractSet[str],
    options: Optional[SiteCheckOptions] = None,
) -> Document:
    """Classify every link of ``document`` in place and return it."""
    for link in document.links:
        link.status, link.resolved = resolve_link(
            document.path, link.target, known_paths, options
        )
        if link.status is LinkStatus.broken:
            LOGGER.debug(
                "Broken link in %s:%d -> %s", document.path, link.line, link.target
            )
    return document


def broken_links(documents: Iterable[Document]) -> List[Tuple[str, LinkReference]]:
    """Return ``(source, link)`` pairs for broken links in document order."""
    return [
        (document.path, link)
        for document in documents
        for link in document.links
        if link.status is LinkStatus.broken
    ]
