"""Recursive aggregation of a results directory into a weighted tree."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from finkreport.report_core.config import EXCLUDED_SUFFIXES
from finkreport.report_core.models import (
    AggregateResult,
    CategoryMap,
    Discoveries,
    DuplicatePackage,
    Node,
)
from finkreport.report_core.transformer import transform

LOGGER = logging.getLogger("finkreport")


def is_report_artifact(name: str) -> bool:
    """Return True for entries produced by previous report runs."""
    return name.endswith(EXCLUDED_SUFFIXES)


def list_entries(directory: Path) -> List[str]:
    """List aggregatable entries of ``directory`` in name order."""
    return sorted(name for name in os.listdir(directory) if not is_report_artifact(name))


def _relative(path: Path, root: Path) -> str:
    relative = path.relative_to(root)
    if relative == Path("."):
        return ""
    return relative.as_posix()


def aggregate(directory: Path, depth: int, root: Optional[Path] = None) -> Tuple[Node, Discoveries]:
    """Build the weighted subtree rooted at ``directory``.

    ``depth`` is the number of levels between ``directory`` and the folder
    holding ``logs/``; category pages written inside ``directory`` link to
    their logs with that many ``../`` segments. Returns the node together
    with the package/category associations found beneath it, in visit order.
    Unreadable entries raise ``OSError``.
    """
    root = root or directory
    parent_path = _relative(directory.parent, root) if directory != root else ""
    discoveries = Discoveries()
    children: List[Node] = []

    for name in list_entries(directory):
        entry = directory / name
        if entry.is_dir():
            child, found = aggregate(entry, depth + 1, root)
            discoveries.merge(found)
            children.append(child)
            continue

        category = _relative(entry, root)
        transformed = transform(entry, depth, category)
        discoveries.associations.extend((package, category) for package in transformed.packages)
        discoveries.unparsed.extend((category, lineno) for lineno in transformed.unparsed)
        children.append(
            Node(name=name, parent_path=_relative(directory, root), weight=transformed.line_count)
        )

    children.sort(key=lambda node: node.weight, reverse=True)
    node = Node(
        name=directory.name,
        parent_path=parent_path,
        weight=sum(child.weight for child in children),
        children=tuple(children),
        is_dir=True,
    )
    return node, discoveries


def merge_categories(associations: List[Tuple[str, str]]) -> Tuple[CategoryMap, List[DuplicatePackage]]:
    """Fold ordered associations into a map; later categories win."""
    categories: CategoryMap = {}
    duplicates: List[DuplicatePackage] = []
    for package, category in associations:
        previous = categories.get(package)
        if previous is not None and previous != category:
            LOGGER.warning(
                "Package %s listed in both %s and %s; keeping %s",
                package,
                previous,
                category,
                category,
            )
            duplicates.append(DuplicatePackage(package=package, dropped=previous, kept=category))
        categories[package] = category
    return categories, duplicates


def aggregate_results(results_dir: Path, depth: int) -> AggregateResult:
    """Aggregate a whole results tree and merge what it discovered."""
    tree, discoveries = aggregate(results_dir, depth)
    categories, duplicates = merge_categories(discoveries.associations)
    LOGGER.info(
        "Aggregated %s lines across %s packages in %s",
        tree.weight,
        len(categories),
        results_dir,
    )
    return AggregateResult(
        tree=tree,
        categories=categories,
        unparsed=discoveries.unparsed,
        duplicates=duplicates,
    )
