"""Compact run summary using logger output."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from finkreport.report_core.models import AggregateResult

LOGGER = logging.getLogger("finkreport")


def log_summary(result: AggregateResult, written: Dict[str, Path]) -> None:
    """Log the totals of a report run."""
    tree = result.tree
    LOGGER.info(
        "Total weight %s across %s categories and %s packages",
        tree.weight,
        result.leaf_count(),
        len(result.categories),
    )
    for node in tree.children:
        LOGGER.info("  %4d %s", node.weight, node.name)

    if result.unparsed:
        LOGGER.warning("%s unrecognised lines were counted but not linked", len(result.unparsed))
    if result.duplicates:
        LOGGER.warning("%s packages appear in more than one category", len(result.duplicates))
        for duplicate in result.duplicates:
            LOGGER.warning("- %s: %s -> %s", duplicate.package, duplicate.dropped, duplicate.kept)

    for path in written.values():
        LOGGER.info("Wrote %s", path)
