"""Title and category extraction for content files.

Titles are picked by an ordered list of named strategies. Each strategy
returns a title or ``None`` and the first hit wins; the filename strategy
always produces a value, so every document ends up with a non-empty title.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from .config import DEFAULT_CATEGORY_DEPTH, UNCATEGORIZED

LOGGER = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL)
ATX_H1_RE = re.compile(r"^ {0,3}#[ \t]+(?P<title>.+?)(?:[ \t]+#+)?[ \t]*$")
SETEXT_H1_RE = re.compile(r"^ {0,3}=+[ \t]*$")
FENCE_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")

TitleStrategy = Callable[[str, Dict[str, Any], str], Optional[str]]


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a leading YAML front-matter block from the body.

    Malformed or non-mapping front matter is treated as empty; the body
    still starts after the closing delimiter.
    """
    match = FRONT_MATTER_RE.match(text or "")
    if not match:
        return {}, text or ""
    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        LOGGER.debug("Ignoring malformed front matter: %s", exc)
        return {}, body
    if not isinstance(data, dict):
        return {}, body
    return data, body


def iter_prose_lines(body: str):
    """Yield ``(line_number, line)`` pairs outside fenced code blocks.

    Fences may be indented, as they are inside list items. A fence closes
    on a bare run of the same character at least as long as the opener.
    """
    fence: Optional[str] = None
    for number, line in enumerate(body.splitlines(), start=1):
        match = FENCE_RE.match(line)
        if fence is None:
            # A backtick info string may not contain backticks.
            if match and not (match.group("fence")[0] == "`" and "`" in match.group("info")):
                fence = match.group("fence")
                continue
            yield number, line
        elif (
            match
            and match.group("fence")[0] == fence[0]
            and len(match.group("fence")) >= len(fence)
            and not match.group("info").strip()
        ):
            fence = None


def _from_front_matter(body: str, front_matter: Dict[str, Any], path: str) -> Optional[str]:
    title = front_matter.get("title")
    if title is None:
        return None
    title = str(title).strip()
    return title or None


def _from_atx_heading(body: str, front_matter: Dict[str, Any], path: str) -> Optional[str]:
    for _, line in iter_prose_lines(body):
        match = ATX_H1_RE.match(line)
        if match:
            title = match.group("title").strip()
            if title:
                return title
    return None


def _from_setext_heading(body: str, front_matter: Dict[str, Any], path: str) -> Optional[str]:
    previous = ""
    for _, line in iter_prose_lines(body):
        if SETEXT_H1_RE.match(line) and previous.strip():
            return previous.strip()
        previous = line
    return None


def _from_filename(body: str, front_matter: Dict[str, Any], path: str) -> Optional[str]:
    name = posixpath.basename(path.rstrip("/")) or path or "untitled"
    stem, _ = posixpath.splitext(name)
    title = re.sub(r"[-_]+", " ", stem or name).strip()
    return title or name


TITLE_STRATEGIES: List[Tuple[str, TitleStrategy]] = [
    ("front_matter", _from_front_matter),
    ("atx_heading", _from_atx_heading),
    ("setext_heading", _from_setext_heading),
    ("filename", _from_filename),
]


def extract_title(
    body: str, path: str, front_matter: Optional[Dict[str, Any]] = None
) -> Tuple[str, str]:
    """Return ``(title, strategy_name)`` for a document."""
    front_matter = front_matter or {}
    for name, strategy in TITLE_STRATEGIES:
        title = strategy(body or "", front_matter, path)
        if title:
            return title, name
    return path or "untitled", "filename"


def derive_category(path: str, depth: int = DEFAULT_CATEGORY_DEPTH) -> str:
    """
    Derive a category from the directory part of ``path``.

    Args:
        path: Document path relative to the site root.
        depth: Leading directory segments to keep; ``0`` keeps them all.

    Returns:
        Segments joined by ``/``, or ``uncategorized`` at the root.
    """
    directory = posixpath.dirname(path.strip("/"))
    if not directory:
        return UNCATEGORIZED
    segments = directory.split("/")
    if depth > 0:
        segments = segments[:depth]
    return "/".join(segments)


def extract_metadata(
    content: str, path: str, *, category_depth: int = DEFAULT_CATEGORY_DEPTH
) -> Dict[str, Any]:
    """Extract title, category and front matter from raw file content."""
    content = content or ""
    front_matter, body = split_front_matter(content)
    title, strategy = extract_title(body, path, front_matter)
    category = front_matter.get("category")
    if isinstance(category, str) and category.strip():
        category = category.strip().strip("/")
    else:
        category = derive_category(path, category_depth)
    return {
        "title": title,
        "title_source": strategy,
        "category": category,
        "front_matter": front_matter,
        "body": body,
        "body_line_offset": content[: len(content) - len(body)].count("\n"),
    }
