"""Rewrite category files into linked HTML pages."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from finkreport.report_core.config import CATEGORY_PAGE_SUFFIX, LOGS_DIRNAME
from finkreport.report_core.logparse import parse_log_line
from finkreport.report_core.models import LogLine, Transformed, Unparsed
from finkreport.report_core.templating import get_environment

LOGGER = logging.getLogger("finkreport")


def log_link_prefix(depth: int) -> str:
    """Return the relative prefix from a page ``depth`` levels down to the logs directory."""
    return "../" * depth + f"{LOGS_DIRNAME}/"


def transform(file_path: Path, depth: int, category: str = "") -> Transformed:
    """Render ``file_path`` as ``<file_path>.html`` and return the packages it lists.

    Every line counts toward the line count, including lines that do not
    name a log file. Those are copied to the page as-is and reported.
    """
    category = category or file_path.name
    with file_path.open(encoding="utf-8", errors="replace") as handle:
        # Only newlines end a line; form feeds and other separators stay in the text.
        lines = [line.rstrip("\n") for line in handle]

    parsed: List[LogLine] = []
    packages: List[str] = []
    unparsed: List[int] = []
    for lineno, line in enumerate(lines, start=1):
        entry = parse_log_line(line)
        parsed.append(entry)
        if isinstance(entry, Unparsed):
            if entry.raw.strip():
                LOGGER.warning("Unrecognised line %s in %s: %r", lineno, category, entry.raw)
                unparsed.append(lineno)
            continue
        packages.append(entry.logname)

    page = get_environment().get_template("category.html").render(
        category=category,
        lines=parsed,
        log_prefix=log_link_prefix(depth),
    )
    output_path = file_path.with_name(file_path.name + CATEGORY_PAGE_SUFFIX)
    output_path.write_text(page, encoding="utf-8")
    LOGGER.debug("Wrote %s (%s lines, %s packages)", output_path, len(lines), len(packages))

    return Transformed(packages=packages, line_count=len(lines), unparsed=unparsed)
