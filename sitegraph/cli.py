"""Command-line interface for the site checker."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .cli_config import CONFIG_DIR, CONFIG_ENV_FILE, load_config
from .cli_output import write_report
from .cli_parsers import parse_check_args
from .config import SiteCheckOptions
from .loader import AccessError
from .site import PipelineTimeoutError, check_site

EXIT_OK = 0
EXIT_BROKEN = 1
EXIT_TIMEOUT = 2
EXIT_INTERRUPTED = 130


def _load_config() -> None:
    load_config(
        config_dir=CONFIG_DIR,
        config_env_file=CONFIG_ENV_FILE,
        cwd=Path.cwd(),
        load_env=load_dotenv,
        copy_file=shutil.copy,
    )


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def build_options(args: argparse.Namespace) -> SiteCheckOptions:
    """Merge command-line flags over environment-derived options."""
    options = SiteCheckOptions.from_env()
    return options.with_overrides(
        index_name=args.index_name,
        root_document=args.root_document,
        extensions=tuple(args.extensions) if args.extensions else None,
        category_depth=args.category_depth,
        concurrency=args.concurrency,
    )


def _run_check(args: argparse.Namespace) -> int:
    options = build_options(args)
    result = check_site(args.root, options=options, timeout=args.timeout)
    report = result.report

    for link in report.broken_links:
        logging.warning("%s", link.to_warning())

    write_report(report, args.output, args.output_format)
    return EXIT_OK if report.ok else EXIT_BROKEN


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the sitegraph command."""
    args = parse_check_args(argv)
    _setup_logging(args.verbose)
    _load_config()

    try:
        return _run_check(args)
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return EXIT_INTERRUPTED
    except PipelineTimeoutError as exc:
        logging.error("Timeout: %s", exc)
        return EXIT_TIMEOUT
    except AccessError as exc:
        logging.error("Cannot read site: %s", exc)
        return EXIT_BROKEN
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return EXIT_BROKEN


if __name__ == "__main__":
    sys.exit(main())
