"""Name- and capability-indexed lookup over a flat package catalog."""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple
from urllib.parse import urlparse

from .constants import REPOSITORY_MARKERS
from .constraints import EcosystemLike, parse_provide
from .ecosystems import get_ecosystem
from .models import PackageInfo

Provider = Tuple[PackageInfo, str]


def repository_of(url: str) -> str:
    """Return the repository base of a package URL, or "" for relative URLs."""

    if not url:
        return ""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    for marker in REPOSITORY_MARKERS:
        index = url.find(marker)
        if index > 0:
            return url[:index]
    return f"{parsed.scheme}://{parsed.netloc}"


def provided_capabilities(package: PackageInfo, ecosystem: EcosystemLike = None) -> List[Tuple[str, str]]:
    """Every ``(capability, version)`` *package* satisfies, its own name first."""

    eco = get_ecosystem(ecosystem)
    capabilities: List[Tuple[str, str]] = [(package.name, package.version)]
    for entry in package.provides:
        parsed = parse_provide(entry, eco)
        if parsed is None:
            continue
        capability, version = parsed
        capabilities.append((capability, version or package.version))
    for path in package.files:
        if path:
            capabilities.append((path, package.version))
    return capabilities


class CatalogIndex:
    """Immutable index built once per resolution call; the input is never modified."""

    def __init__(self, packages: Iterable[PackageInfo], ecosystem: EcosystemLike = None):
        self.ecosystem = get_ecosystem(ecosystem)
        self.by_name: Dict[str, List[PackageInfo]] = {}
        self.by_provides: Dict[str, List[Provider]] = {}
        self._positions: Dict[int, int] = {}
        for position, package in enumerate(packages):
            self._positions[id(package)] = position
            self.by_name.setdefault(package.name, []).append(package)
            for capability, version in provided_capabilities(package, self.ecosystem):
                self.by_provides.setdefault(capability, []).append((package, version))

    def __len__(self) -> int:
        return len(self._positions)

    def versions(self, name: str) -> Sequence[PackageInfo]:
        return self.by_name.get(name, ())

    def providers(self, capability: str) -> Sequence[Provider]:
        return self.by_provides.get(capability, ())

    def lookup(self, capability: str) -> Sequence[Provider]:
        """Exact name matches first; otherwise every provider of *capability*."""

        if capability in self.by_name:
            return [(package, package.version) for package in self.by_name[capability]]
        return self.providers(capability)

    def position(self, package: PackageInfo) -> int:
        return self._positions.get(id(package), len(self._positions))
