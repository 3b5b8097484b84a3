"""On-disk store of downloaded catalog snapshots, one JSON file per URL."""
from __future__ import annotations

import hashlib
import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

SNAPSHOT_DIR = "catalogs"


class MetadataCache:
    """Snapshots live under ``<root>/catalogs/<sha256(url)[:16]>.json``.

    A ``max_age`` (seconds) makes older files count as missing; ``None`` keeps
    them forever.
    """

    def __init__(self, root: Path | str, max_age: Optional[float] = None):
        self.root = Path(root)
        self.max_age = max_age

    def ensure(self) -> None:
        (self.root / SNAPSHOT_DIR).mkdir(parents=True, exist_ok=True)

    def path_for(self, url: str) -> Path:
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        return self.root / SNAPSHOT_DIR / f"{digest}.json"

    def is_fresh(self, url: str) -> bool:
        path = self.path_for(url)
        if not path.exists():
            return False
        if self.max_age is None:
            return True
        return time.time() - path.stat().st_mtime <= self.max_age

    def load(self, url: str) -> Optional[List[Dict[str, Any]]]:
        if not self.is_fresh(url):
            return None
        with self.path_for(url).open("r", encoding="utf-8") as handle:
            envelope = json.load(handle)
        # written by an older layout or by hand
        if not isinstance(envelope, dict) or envelope.get("url") != url:
            return None
        return envelope.get("packages")

    def store(self, url: str, records: List[Dict[str, Any]]) -> Path:
        path = self.path_for(url)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump({"url": url, "packages": records}, handle, ensure_ascii=True, indent=2, sort_keys=True)
        return path

    def drop(self, url: str) -> None:
        path = self.path_for(url)
        if path.exists():
            path.unlink()
