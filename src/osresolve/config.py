"""Parse user configuration for the resolver."""
from __future__ import annotations

import configparser
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from .constants import DEFAULT_ECOSYSTEM
from .ecosystems import get_ecosystem


@dataclass
class ProjectOptions:
    prefer_same_repository: bool = True
    dot_file: Optional[str] = None
    cache_root: Optional[str] = None
    cache_max_age: Optional[float] = None


@dataclass
class RepoConfig:
    section: str = ""
    name: str = ""
    url: str = ""
    gpgcheck: bool = False
    repo_gpgcheck: bool = False
    enabled: bool = True
    gpgkey: str = ""


@dataclass
class CatalogSource:
    path: Optional[Path] = None
    url: Optional[str] = None
    name: Optional[str] = None
    repository: Optional[str] = None


@dataclass
class RequestedPackage:
    name: str
    version: Optional[str] = None


@dataclass
class ProjectConfig:
    name: str
    ecosystem: str
    catalogs: List[CatalogSource]
    packages: List[RequestedPackage]
    options: ProjectOptions
    repositories: List[RepoConfig] = field(default_factory=list)

    def enabled_catalogs(self) -> List[CatalogSource]:
        disabled = {repo.name for repo in self.repositories if not repo.enabled}
        return [source for source in self.catalogs if not source.repository or source.repository not in disabled]


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_repo_file(text: str) -> RepoConfig:
    """Parse the first section of a yum/dnf ``.repo`` file."""

    parser = configparser.ConfigParser(interpolation=None, comment_prefixes=("#", ";"))
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        raise ValueError(f"Invalid repo file: {exc}") from exc
    sections = parser.sections()
    if not sections:
        raise ValueError("Repo file contains no section")
    section = parser[sections[0]]
    return RepoConfig(
        section=sections[0],
        name=section.get("name", sections[0]),
        url=section.get("baseurl", ""),
        gpgcheck=_as_bool(section.get("gpgcheck", "0")),
        repo_gpgcheck=_as_bool(section.get("repo_gpgcheck", "0")),
        enabled=_as_bool(section.get("enabled", "1")),
        gpgkey=section.get("gpgkey", ""),
    )


def _normalize_package(entry: object) -> RequestedPackage:
    if isinstance(entry, str):
        if not entry.strip():
            raise ValueError("Package entry must not be empty")
        return RequestedPackage(name=entry.strip())
    if not isinstance(entry, dict):
        raise ValueError(f"Unsupported package entry: {entry!r}")
    name = entry.get("name") or entry.get("package")
    if not name:
        raise ValueError("Package entry missing 'name'")
    version = entry.get("version")
    return RequestedPackage(name=str(name), version=str(version) if version is not None else None)


def _normalize_catalog(entry: object, base_dir: Path) -> CatalogSource:
    if isinstance(entry, str):
        entry = {"url": entry} if entry.startswith(("http://", "https://")) else {"path": entry}
    if not isinstance(entry, dict):
        raise ValueError(f"Unsupported catalog entry: {entry!r}")
    url = entry.get("url")
    path = entry.get("path")
    if not url and not path:
        raise ValueError("Catalog entry needs a 'path' or 'url'")
    resolved_path = None
    if path:
        resolved_path = Path(path)
        if not resolved_path.is_absolute():
            resolved_path = base_dir / resolved_path
    return CatalogSource(path=resolved_path, url=url, name=entry.get("name"), repository=entry.get("repository"))


def _normalize_repository(entry: object, base_dir: Path) -> RepoConfig:
    if not isinstance(entry, dict):
        raise ValueError(f"Unsupported repository entry: {entry!r}")
    repo_file = entry.get("repo_file")
    if repo_file:
        path = Path(repo_file)
        if not path.is_absolute():
            path = base_dir / path
        repo = parse_repo_file(path.read_text(encoding="utf-8"))
        if entry.get("name"):
            repo.name = entry["name"]
        return repo
    name = entry.get("name")
    if not name:
        raise ValueError("Repository entry missing 'name'")
    return RepoConfig(
        section=name,
        name=name,
        url=entry.get("url", ""),
        gpgcheck=_as_bool(entry.get("gpgcheck", False)),
        repo_gpgcheck=_as_bool(entry.get("repo_gpgcheck", False)),
        enabled=_as_bool(entry.get("enabled", True)),
        gpgkey=entry.get("gpgkey", ""),
    )


def load_config(path: Path) -> ProjectConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping")

    project_name = data.get("project", {}).get("name") if isinstance(data.get("project"), dict) else data.get("project")
    if not project_name:
        project_name = path.stem

    ecosystem = data.get("ecosystem") or DEFAULT_ECOSYSTEM
    ecosystem = get_ecosystem(str(ecosystem)).name

    options_raw = data.get("options") or {}
    options = ProjectOptions(
        prefer_same_repository=_as_bool(options_raw.get("prefer_same_repository", True)),
        dot_file=options_raw.get("dot_file"),
        cache_root=options_raw.get("cache_root"),
        cache_max_age=float(options_raw["cache_max_age"]) if options_raw.get("cache_max_age") is not None else None,
    )

    base_dir = path.parent
    catalogs_data = data.get("catalogs")
    if not isinstance(catalogs_data, list) or not catalogs_data:
        raise ValueError("Configuration must include a non-empty 'catalogs' list")
    packages_data = data.get("packages")
    if not isinstance(packages_data, list) or not packages_data:
        raise ValueError("Configuration must include a non-empty 'packages' list")

    return ProjectConfig(
        name=project_name,
        ecosystem=ecosystem,
        catalogs=[_normalize_catalog(entry, base_dir) for entry in catalogs_data],
        packages=[_normalize_package(entry) for entry in packages_data],
        options=options,
        repositories=[_normalize_repository(entry, base_dir) for entry in data.get("repositories") or []],
    )
