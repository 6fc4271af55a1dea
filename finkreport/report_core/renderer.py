"""Render the aggregated tree into text and HTML reports."""
from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Set, TextIO, Tuple

from finkreport.report_core.config import (
    MAINTAINER_INDEX,
    PACKAGE_INDEX,
    REPORT_HTML,
    REPORT_TEXT,
)
from finkreport.report_core.fink import MaintainerDirectory
from finkreport.report_core.models import CategoryMap, Node
from finkreport.report_core.templating import get_environment
from finkreport.report_core.transformer import log_link_prefix

LOGGER = logging.getLogger("finkreport")

REPORT_TITLE = "Build results"
PACKAGE_INDEX_TITLE = "Build results by package"
MAINTAINER_INDEX_TITLE = "Build results by maintainer"


@dataclass
class ReportWriters:
    """One open text stream per report artifact."""

    text: TextIO
    html: TextIO
    package_index: TextIO
    maintainer_index: TextIO


@dataclass(frozen=True)
class MaintainerSection:
    identifier: str
    display_name: str
    packages: List[Tuple[str, str]]


def report_paths(results_dir: Path) -> Dict[str, Path]:
    return {
        "text": results_dir / REPORT_TEXT,
        "html": results_dir / REPORT_HTML,
        "package_index": results_dir / PACKAGE_INDEX,
        "maintainer_index": results_dir / MAINTAINER_INDEX,
    }


@contextmanager
def open_report_writers(results_dir: Path) -> Iterator[ReportWriters]:
    """Open all four report files for writing; every one is closed on exit."""
    with ExitStack() as stack:
        handles = {
            key: stack.enter_context(path.open("w", encoding="utf-8"))
            for key, path in report_paths(results_dir).items()
        }
        yield ReportWriters(**handles)


def package_rows(categories: CategoryMap) -> List[Tuple[str, str]]:
    """Packages sorted by name, each paired with its category."""
    return sorted(categories.items())


def maintainer_sections(
    categories: CategoryMap,
    maintainers: Mapping[str, Set[str]],
    directory: MaintainerDirectory,
) -> List[MaintainerSection]:
    sections: List[MaintainerSection] = []
    for identifier in sorted(maintainers):
        packages = [(package, categories[package]) for package in sorted(maintainers[identifier])]
        sections.append(MaintainerSection(identifier, directory.label(identifier), packages))
    return sections


def _comment_block(comment: Optional[str]) -> str:
    if not comment:
        return ""
    return comment.rstrip("\n")


def render(
    tree: Node,
    categories: CategoryMap,
    descriptions: Mapping[str, str],
    comment: Optional[str],
    directory: MaintainerDirectory,
    writers: ReportWriters,
    depth: int = 1,
) -> None:
    """Write the category report (text and HTML) plus both flat indexes.

    ``depth`` is the distance from the results root to the folder holding
    ``logs/``, used for the log links in the indexes.
    """
    env = get_environment()
    common = {
        "comment": _comment_block(comment),
        "descriptions": descriptions,
        "log_prefix": log_link_prefix(depth),
        "report_html": REPORT_HTML,
        "package_index": PACKAGE_INDEX,
        "maintainer_index": MAINTAINER_INDEX,
    }
    nodes = list(tree.children)

    writers.text.write(env.get_template("report.txt.j2").render(nodes=nodes, **common))
    writers.html.write(env.get_template("report.html").render(nodes=nodes, title=REPORT_TITLE, **common))

    writers.package_index.write(
        env.get_template("pkgindex.html").render(
            packages=package_rows(categories),
            title=PACKAGE_INDEX_TITLE,
            **common,
        )
    )

    maintainers = directory.maintainers_for(categories)
    writers.maintainer_index.write(
        env.get_template("maintindex.html").render(
            sections=maintainer_sections(categories, maintainers, directory),
            title=MAINTAINER_INDEX_TITLE,
            **common,
        )
    )
    LOGGER.debug("Rendered reports for %s packages and %s maintainers", len(categories), len(maintainers))
