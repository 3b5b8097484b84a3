"""Custom exceptions raised by the resolver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


class MetadataFetchError(RuntimeError):
    """Raised when a catalog snapshot cannot be retrieved."""


class MalformedConstraintError(ValueError):
    """Raised for a dependency clause that cannot be parsed."""


@dataclass
class ResolutionError(Exception):
    package: str
    required_by: List[str]
    message: str
    candidates: Optional[List[str]] = None

    def __str__(self) -> str:  # type: ignore[override]
        return f"{self.package}: {self.message}"


class MissingDependencyError(ResolutionError):
    """A capability is unsatisfiable anywhere in the catalog or its alternatives."""


class ConflictingRequirementError(ResolutionError):
    """Requesters impose mutually exclusive constraints on one capability."""
