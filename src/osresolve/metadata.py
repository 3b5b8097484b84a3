"""Convert catalog snapshots into normalized package records."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests
import yaml

from .cache import MetadataCache
from .config import CatalogSource
from .exceptions import MetadataFetchError
from .fetchers import fetch_catalog_snapshot
from .models import PackageInfo

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "name": ("name", "Name", "Package"),
    "version": ("version", "Version"),
    "url": ("url", "URL", "Filename"),
    "arch": ("arch", "Arch", "Architecture"),
    "type": ("type", "Type"),
    "checksum": ("checksum", "Checksum", "SHA256"),
    "provides": ("provides", "Provides"),
    "requires": ("requires", "Requires"),
    "requires_ver": ("requires_ver", "RequiresVer", "requiresVer"),
    "files": ("files", "Files"),
}

_LIST_FIELDS = ("provides", "requires", "requires_ver", "files")


def _lookup(record: Dict[str, Any], field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        if key in record:
            return record[key]
    return None


def _list_field(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        # Debian control style: "a, b (>= 1) | c"
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Iterable):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def normalize_record(record: Dict[str, Any]) -> PackageInfo:
    if not isinstance(record, dict):
        raise MetadataFetchError(f"Catalog entry is not a mapping: {record!r}")
    name = _lookup(record, "name")
    if not name:
        raise MetadataFetchError(f"Catalog entry missing package name: {record!r}")
    scalars = {
        field: str(_lookup(record, field) or "")
        for field in ("version", "url", "arch", "type", "checksum")
    }
    lists = {field: _list_field(_lookup(record, field)) for field in _LIST_FIELDS}
    return PackageInfo(name=str(name), **scalars, **lists)


def package_to_record(package: PackageInfo) -> Dict[str, Any]:
    return {
        "name": package.name,
        "version": package.version,
        "url": package.url,
        "arch": package.arch,
        "type": package.type,
        "checksum": package.checksum,
        "provides": list(package.provides),
        "requires": list(package.requires),
        "requires_ver": list(package.requires_ver),
        "files": list(package.files),
    }


def normalize_records(records: Sequence[Dict[str, Any]]) -> List[PackageInfo]:
    return [normalize_record(record) for record in records]


def load_catalog_file(path: Path | str) -> List[PackageInfo]:
    """Read a JSON or YAML snapshot from disk."""

    path = Path(path)
    if not path.exists():
        raise MetadataFetchError(f"Catalog file {path} does not exist")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise MetadataFetchError(f"Failed to parse catalog file {path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("packages")
    if not isinstance(data, list):
        raise MetadataFetchError(f"Catalog file {path} does not contain a package list")
    return normalize_records(data)


class CatalogProvider:
    def __init__(
        self,
        cache_root: Path | str = "cache",
        session: Optional[requests.Session] = None,
        max_age: Optional[float] = None,
    ):
        self.cache = MetadataCache(Path(cache_root), max_age=max_age)
        self.cache.ensure()
        self.session = session or requests.Session()
        self._loaded: Dict[str, List[PackageInfo]] = {}

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------

    def load(self, source: CatalogSource) -> List[PackageInfo]:
        key = source.url or str(source.path)
        if key in self._loaded:
            return self._loaded[key]
        if source.url:
            packages = self._load_remote(source.url)
        elif source.path:
            packages = load_catalog_file(source.path)
        else:
            raise MetadataFetchError(f"Catalog source {source.name or '(unnamed)'} has neither path nor url")
        logger.info("Loaded %d packages from %s", len(packages), key)
        self._loaded[key] = packages
        return packages

    def load_all(self, sources: Sequence[CatalogSource]) -> List[PackageInfo]:
        packages: List[PackageInfo] = []
        for source in sources:
            packages.extend(self.load(source))
        return packages

    def refresh(self, source: CatalogSource) -> int:
        """Re-download a remote snapshot into the cache; returns its package count."""

        if not source.url:
            return len(self.load(source))
        raw = fetch_catalog_snapshot(source.url, session=self.session)
        self.cache.store(source.url, raw)
        self._loaded.pop(source.url, None)
        return len(raw)

    # ------------------------------------------------------------------

    def _load_remote(self, url: str) -> List[PackageInfo]:
        raw = self.cache.load(url)
        if raw is None:
            logger.debug("Cache miss for %s", url)
            raw = fetch_catalog_snapshot(url, session=self.session)
            path = self.cache.store(url, raw)
            logger.debug("Cached %d records from %s at %s", len(raw), url, path)
        return normalize_records(raw)
