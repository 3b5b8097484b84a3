"""Dataclasses shared across resolver components."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PackageInfo:
    """One catalog entry: everything needed to fetch and install an artifact."""

    name: str
    version: str = ""
    url: str = ""
    arch: str = ""
    type: str = ""
    checksum: str = ""
    provides: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    requires_ver: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)


@dataclass
class ResolvedPackage:
    package: PackageInfo
    direct: bool
    required_by: List[str] = field(default_factory=list)


@dataclass
class ResolutionReport:
    project: str
    ecosystem: str
    requested: List[str]
    packages: List[PackageInfo] = field(default_factory=list)
    error: Optional[str] = None
