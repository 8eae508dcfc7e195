"""Output and formatting helpers for CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .report import SiteReport, format_report_markdown


def render_report(report: SiteReport, output_format: str = "json") -> str:
    """Render a report as JSON or Markdown text."""
    if output_format == "markdown":
        return format_report_markdown(report)
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def write_report(
    report: SiteReport,
    output: Optional[str],
    output_format: str = "json",
) -> None:
    """Write the report to ``output`` or stdout."""
    text = render_report(report, output_format)
    if output is None:
        print(text)
        return

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    logging.info("Wrote %s", path)
