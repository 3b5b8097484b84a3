"""Functions that download prepared catalog snapshots."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .exceptions import MetadataFetchError

DEFAULT_TIMEOUT = 30
USER_AGENT = "osresolve/0.1"


def _request_json(url: str, session: Optional[requests.Session] = None) -> Any:
    sess = session or requests.Session()
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    try:
        response = sess.get(url, headers=headers, timeout=DEFAULT_TIMEOUT)
    except requests.RequestException as exc:
        raise MetadataFetchError(f"Failed to fetch {url}: {exc}") from exc
    if response.status_code >= 400:
        raise MetadataFetchError(f"Failed to fetch {url}: HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise MetadataFetchError(f"Invalid JSON from {url}") from exc


def fetch_catalog_snapshot(url: str, session: Optional[requests.Session] = None) -> List[Dict[str, Any]]:
    """Return the package records of a JSON snapshot (a list, or ``{"packages": [...]}``)."""

    data = _request_json(url, session=session)
    if isinstance(data, dict):
        data = data.get("packages")
    if not isinstance(data, list):
        raise MetadataFetchError(f"Catalog snapshot {url} does not contain a package list")
    return data
