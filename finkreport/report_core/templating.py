"""Jinja2 environment shared by the category pages and the reports."""
from __future__ import annotations

from functools import lru_cache
from typing import Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from finkreport.report_core.config import CATEGORY_PAGE_SUFFIX, NBSP, TEMPLATE_DIR, WEIGHT_WIDTH
from finkreport.report_core.models import Node


def pad_weight(weight: int) -> str:
    """Right-align a weight in a fixed-width field."""
    return str(weight).rjust(WEIGHT_WIDTH)


def nbsp_weight(weight: int) -> Markup:
    """Right-align a weight using non-breaking spaces for HTML output."""
    text = str(weight)
    padding = max(WEIGHT_WIDTH - len(text), 0)
    return Markup(NBSP * padding) + text


def category_href(node: Node) -> str:
    return node.relative_path + CATEGORY_PAGE_SUFFIX


def description_suffix(node: Node, descriptions: Mapping[str, str]) -> str:
    """Return ``": <description>"`` for a described leaf, else an empty string."""
    if not node.is_leaf:
        return ""
    description = descriptions.get(node.name)
    if not description:
        return ""
    return f": {description}"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Build the template environment once per process."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["pad_weight"] = pad_weight
    env.filters["nbsp_weight"] = nbsp_weight
    env.filters["category_href"] = category_href
    env.filters["description_suffix"] = description_suffix
    return env
