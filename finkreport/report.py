#!/usr/bin/env python3
"""Fink build-log results reporter.

Walks the results tree written by the build-log analysis tool, counts the
packages listed in each category file and writes linked text and HTML
reports (overall, by package and by maintainer) next to the results.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Sequence

from finkreport.report_core.aggregator import aggregate_results
from finkreport.report_core.config import (
    ANALYZE_MARKER,
    DEFAULT_LOG_DIR,
    ENV_LOG_DIR,
    RESULTS_DEPTH,
    RESULTS_DIRNAME,
)
from finkreport.report_core.fink import FinkEnvironmentError, MaintainerDirectory, bootstrap_fink
from finkreport.report_core.inputs import (
    CategoryDescriptionError,
    load_category_descriptions,
    load_comment,
)
from finkreport.report_core.renderer import open_report_writers, render, report_paths
from finkreport.report_core.reporting.formatters import ColoredFormatter, stream_supports_color
from finkreport.report_core.reporting.json_output import print_json_output
from finkreport.report_core.reporting.summary import log_summary

LOGGER = logging.getLogger("finkreport")


def setup_logging(log_dir: Path, level: str, color: bool = True) -> Path:
    """Initialise console and file logging for the current execution."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"finkreport_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    LOGGER.handlers.clear()
    LOGGER.setLevel(numeric_level)
    LOGGER.propagate = False

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    LOGGER.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    use_color = color and stream_supports_color(console_handler.stream)
    console_handler.setFormatter(ColoredFormatter("%(levelname)s: %(message)s", use_color=use_color))
    LOGGER.addHandler(console_handler)

    return log_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise fink build-log analysis results as text and HTML reports."
    )
    parser.add_argument(
        "--comments",
        help="File of free text inserted at the top of every report.",
    )
    parser.add_argument(
        "--catdescs",
        help="File of 'category: description' lines, one per line.",
    )
    parser.add_argument(
        "--outdir",
        required=True,
        help=f"Analysis output directory holding logs/ and {RESULTS_DIRNAME}/.",
    )
    parser.add_argument(
        "--finkdir",
        required=True,
        help="Fink installation directory (must contain etc/fink.conf).",
    )
    parser.add_argument(
        "--log-dir",
        default=os.environ.get(ENV_LOG_DIR, DEFAULT_LOG_DIR),
        help=f"Directory where timestamped run logs are written (default: ${ENV_LOG_DIR} or {DEFAULT_LOG_DIR}).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console/log verbosity (default: INFO).",
    )
    parser.add_argument("--json", action="store_true", dest="json_output", help="Print the aggregated tree as JSON.")
    parser.add_argument("--no-color", action="store_false", dest="color", help="Disable colored console output.")
    return parser


def _existing_file(parser: argparse.ArgumentParser, flag: str, raw: Optional[str]) -> Optional[Path]:
    if raw is None:
        return None
    path = Path(raw).expanduser().resolve()
    if not path.is_file():
        parser.error(f"{flag}: file {path} does not exist")
    return path


def _existing_dir(parser: argparse.ArgumentParser, flag: str, raw: str) -> Path:
    path = Path(raw).expanduser().resolve()
    if not path.is_dir():
        parser.error(f"{flag}: directory {path} does not exist")
    return path


def run(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    comments_path = _existing_file(parser, "--comments", args.comments)
    catdescs_path = _existing_file(parser, "--catdescs", args.catdescs)
    outdir = _existing_dir(parser, "--outdir", args.outdir)
    finkdir = _existing_dir(parser, "--finkdir", args.finkdir)

    results_dir = outdir / RESULTS_DIRNAME
    if not results_dir.is_dir():
        parser.error(f"--outdir: {outdir} has no {RESULTS_DIRNAME}/ directory")

    log_path = setup_logging(Path(args.log_dir).expanduser().resolve(), args.log_level, color=args.color)
    LOGGER.info("Detailed execution log: %s", log_path)

    try:
        fink_env = bootstrap_fink(finkdir)
    except FinkEnvironmentError as exc:
        parser.error(f"--finkdir: {exc}")

    descriptions: Dict[str, str] = {}
    if catdescs_path:
        try:
            descriptions = load_category_descriptions(catdescs_path)
        except CategoryDescriptionError as exc:
            parser.error(f"--catdescs: {exc}")
        except UnicodeDecodeError as exc:
            parser.error(f"--catdescs: {catdescs_path} is not valid UTF-8 text ({exc})")
    comment = None
    if comments_path:
        try:
            comment = load_comment(comments_path)
        except UnicodeDecodeError as exc:
            parser.error(f"--comments: {comments_path} is not valid UTF-8 text ({exc})")

    if not (outdir / ANALYZE_MARKER).exists():
        LOGGER.warning("%s not found in %s; has the analysis been run?", ANALYZE_MARKER, outdir)

    try:
        directory = MaintainerDirectory.from_environment(fink_env)
        LOGGER.info("Aggregating results in %s", results_dir)
        result = aggregate_results(results_dir, RESULTS_DEPTH)
        with open_report_writers(results_dir) as writers:
            render(
                result.tree,
                result.categories,
                descriptions,
                comment,
                directory,
                writers,
                depth=RESULTS_DEPTH,
            )
    except OSError as exc:
        LOGGER.error("Report generation failed: %s", exc)
        return 1

    if args.json_output:
        print_json_output(result)
    log_summary(result, report_paths(results_dir))
    LOGGER.info("Report completed successfully. Log retained at %s", log_path)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
