"""Data models for the aggregated results tree and parsed log lines."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

# package name -> category identifier (leaf path relative to the results root)
CategoryMap = Dict[str, str]


@dataclass(frozen=True)
class Node:
    """One file or directory under the results root."""

    name: str
    parent_path: str
    weight: int
    children: Tuple["Node", ...] = ()
    is_dir: bool = False

    @property
    def is_leaf(self) -> bool:
        """True for category files; directories are never leaves, even when empty."""
        return not self.is_dir

    @property
    def relative_path(self) -> str:
        """Path of this entry relative to the results root, '/'-separated."""
        if not self.parent_path:
            return self.name
        return f"{self.parent_path}/{self.name}"

    def to_dict(self) -> Dict[str, object]:
        """Convert the subtree to dictionary format."""
        return {
            "name": self.name,
            "path": self.relative_path,
            "weight": self.weight,
            "kind": "directory" if self.is_dir else "category",
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class WithReason:
    """A log reference followed by a free-text reason."""

    logname: str
    reason: str


@dataclass(frozen=True)
class WithoutReason:
    """A log reference with no reason."""

    logname: str


@dataclass(frozen=True)
class Unparsed:
    """A line that does not name a log file."""

    raw: str


LogLine = Union[WithReason, WithoutReason, Unparsed]


@dataclass
class Transformed:
    """Outcome of rewriting one category file."""

    packages: List[str]
    line_count: int
    unparsed: List[int] = field(default_factory=list)


@dataclass
class Discoveries:
    """Package/category associations found under a subtree, in visit order."""

    associations: List[Tuple[str, str]] = field(default_factory=list)
    unparsed: List[Tuple[str, int]] = field(default_factory=list)

    def merge(self, other: "Discoveries") -> None:
        """Append discoveries from another subtree."""
        self.associations.extend(other.associations)
        self.unparsed.extend(other.unparsed)


@dataclass(frozen=True)
class DuplicatePackage:
    """A package listed in more than one category; ``kept`` wins."""

    package: str
    dropped: str
    kept: str


@dataclass
class AggregateResult:
    """Everything the aggregation pass learned about a results tree."""

    tree: Node
    categories: CategoryMap = field(default_factory=dict)
    unparsed: List[Tuple[str, int]] = field(default_factory=list)
    duplicates: List[DuplicatePackage] = field(default_factory=list)

    def leaf_count(self) -> int:
        """Return the number of category files in the tree."""
        def count(node: Node) -> int:
            if node.is_leaf:
                return 1
            return sum(count(child) for child in node.children)

        return sum(count(child) for child in self.tree.children)

    def to_dict(self) -> Dict[str, object]:
        return {
            "tree": self.tree.to_dict(),
            "categories": dict(sorted(self.categories.items())),
            "unparsed": [{"category": path, "line": lineno} for path, lineno in self.unparsed],
            "duplicates": [
                {"package": dup.package, "dropped": dup.dropped, "kept": dup.kept}
                for dup in self.duplicates
            ],
        }
