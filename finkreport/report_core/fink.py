"""Fink installation bootstrap and package maintainer lookup."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from finkreport.report_core.config import (
    EMAIL_AT_REPLACEMENT,
    FINK_CONFIG_MARKER,
    FINK_DISTS_DIR,
    INFO_FILE_SUFFIX,
    UNKNOWN_MAINTAINER,
)

LOGGER = logging.getLogger("finkreport")

FIELD_PATTERN = re.compile(r"^(?P<indent>\s*)(?P<key>[A-Za-z][A-Za-z0-9-]*)\s*:\s*(?P<value>.*?)\s*$")
MAINTAINER_PATTERN = re.compile(r"^(?P<name>[^<]*?)\s*<(?P<email>[^>]+)>\s*$")
LOG_VERSION_SUFFIX = re.compile(r"^(?P<name>.+?)-[^-]+-[^-]+$")


class FinkEnvironmentError(ValueError):
    """The fink directory is not a usable installation."""


@dataclass
class FinkEnvironment:
    """Settings read from ``etc/fink.conf`` of a fink installation."""

    basepath: Path
    trees: List[str] = field(default_factory=list)

    @property
    def dists_dir(self) -> Path:
        return self.basepath / FINK_DISTS_DIR

    def info_roots(self) -> List[Path]:
        """Return the directories holding package descriptions, in tree order."""
        if not self.trees:
            return [self.dists_dir]
        return [self.dists_dir / tree for tree in self.trees]


def parse_fink_conf(text: str) -> Dict[str, str]:
    settings: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = FIELD_PATTERN.match(line)
        if match:
            settings[match.group("key")] = match.group("value")
    return settings


def bootstrap_fink(finkdir: Path) -> FinkEnvironment:
    """Validate ``finkdir`` and read its configuration."""
    config_path = finkdir / FINK_CONFIG_MARKER
    if not config_path.is_file():
        raise FinkEnvironmentError(f"{finkdir} is not a fink installation: {config_path} not found")

    settings = parse_fink_conf(config_path.read_text(encoding="utf-8", errors="replace"))
    basepath = Path(settings.get("Basepath") or finkdir)
    if not basepath.is_dir():
        LOGGER.warning("Basepath %s from %s does not exist; using %s", basepath, config_path, finkdir)
        basepath = finkdir
    trees = settings.get("Trees", "").split()
    LOGGER.debug("Fink basepath %s with trees: %s", basepath, ", ".join(trees) or "(all)")
    return FinkEnvironment(basepath=basepath, trees=trees)


@dataclass(frozen=True)
class InfoPackage:
    """Maintainer-relevant fields of one package description."""

    name: str
    version: str
    revision: str
    maintainer: str

    @property
    def fullname(self) -> str:
        return f"{self.name}-{self.version}-{self.revision}"


def parse_info(text: str) -> List[InfoPackage]:
    """Extract the main package and its split-offs from a ``.info`` description."""
    fields: Dict[str, str] = {}
    splitoff_names: List[str] = []
    for line in text.splitlines():
        match = FIELD_PATTERN.match(line)
        if not match:
            continue
        key = match.group("key").lower()
        if match.group("indent"):
            if key == "package":
                splitoff_names.append(match.group("value"))
            continue
        fields.setdefault(key, match.group("value"))

    name = fields.get("package")
    if not name:
        return []
    version = fields.get("version", "")
    revision = fields.get("revision", "")
    maintainer = fields.get("maintainer", UNKNOWN_MAINTAINER)

    packages = [InfoPackage(name, version, revision, maintainer)]
    for raw in splitoff_names:
        splitoff = raw.replace("%N", name).replace("%n", name)
        packages.append(InfoPackage(splitoff, version, revision, maintainer))
    return packages


def iter_info_files(roots: Iterable[Path]) -> Iterator[Path]:
    for root in roots:
        if not root.is_dir():
            LOGGER.warning("Package description tree %s not found; skipping.", root)
            continue
        yield from sorted(root.rglob(f"*{INFO_FILE_SUFFIX}"))


def split_maintainer(identifier: str) -> Tuple[Optional[str], Optional[str]]:
    """Split ``Full Name <user@host>`` into its name and email parts."""
    match = MAINTAINER_PATTERN.match(identifier.strip())
    if match:
        return match.group("name") or None, match.group("email")
    if "@" in identifier:
        return None, identifier.strip()
    return identifier.strip() or None, None


def obfuscate_email(email: str) -> str:
    return email.replace("@", EMAIL_AT_REPLACEMENT)


class MaintainerDirectory:
    """Package -> maintainer lookups backed by fink package descriptions."""

    def __init__(self, packages: Iterable[InfoPackage] = ()) -> None:
        self._by_name: Dict[str, str] = {}
        self._by_fullname: Dict[str, str] = {}
        for package in packages:
            self.add(package)

    @classmethod
    def from_environment(cls, env: FinkEnvironment) -> "MaintainerDirectory":
        directory = cls()
        count = 0
        for info_path in iter_info_files(env.info_roots()):
            try:
                text = info_path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                LOGGER.warning("Unable to read package description %s: %s", info_path, exc)
                continue
            for package in parse_info(text):
                directory.add(package)
            count += 1
        LOGGER.info("Indexed %s package descriptions for maintainer lookup.", count)
        return directory

    def add(self, package: InfoPackage) -> None:
        self._by_name.setdefault(package.name, package.maintainer)
        self._by_fullname.setdefault(package.fullname, package.maintainer)

    def maintainer_of(self, package: str) -> Optional[str]:
        """Resolve a package or log name to its maintainer identifier."""
        if package in self._by_name:
            return self._by_name[package]
        if package in self._by_fullname:
            return self._by_fullname[package]
        match = LOG_VERSION_SUFFIX.match(package)
        if match:
            return self._by_name.get(match.group("name"))
        return None

    def maintainers_for(self, packages: Iterable[str]) -> Dict[str, Set[str]]:
        """Group ``packages`` by maintainer identifier."""
        index: Dict[str, Set[str]] = {}
        for package in packages:
            maintainer = self.maintainer_of(package) or UNKNOWN_MAINTAINER
            index.setdefault(maintainer, set()).add(package)
        return index

    def display_name(self, identifier: str) -> Optional[str]:
        name, _email = split_maintainer(identifier)
        return name

    def email(self, identifier: str) -> Optional[str]:
        _name, email = split_maintainer(identifier)
        return email

    def label(self, identifier: str) -> str:
        """Return the name to show for a maintainer in reports."""
        name = self.display_name(identifier)
        if name:
            return name
        email = self.email(identifier)
        if email:
            return obfuscate_email(email)
        return identifier
