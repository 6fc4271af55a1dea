"""Loaders for the optional comment and category description files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

LOGGER = logging.getLogger("finkreport")


class CategoryDescriptionError(ValueError):
    """A category description line could not be parsed."""

    def __init__(self, path: Path, lineno: int, line: str) -> None:
        super().__init__(f"{path}: line {lineno} is not of the form 'category: description': {line!r}")
        self.path = path
        self.lineno = lineno
        self.line = line


def load_comment(path: Path) -> str:
    """Return the comment block to embed in every report."""
    return path.read_text(encoding="utf-8")


def parse_category_descriptions(text: str, path: Path) -> Dict[str, str]:
    descriptions: Dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        category, sep, description = line.partition(":")
        if not sep:
            raise CategoryDescriptionError(path, lineno, line)
        descriptions[category.strip()] = description.strip()
    return descriptions


def load_category_descriptions(path: Path) -> Dict[str, str]:
    """Load ``category: description`` lines from ``path``.

    Every line must contain a colon; the first line that does not raises
    ``CategoryDescriptionError`` with its 1-based line number.
    """
    descriptions = parse_category_descriptions(path.read_text(encoding="utf-8"), path)
    LOGGER.debug("Loaded %s category descriptions from %s", len(descriptions), path)
    return descriptions
