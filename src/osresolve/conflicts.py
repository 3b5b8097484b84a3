"""Bookkeeping of version demands placed on each capability."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .constraints import EcosystemLike, VersionConstraint, satisfies_all
from .ecosystems import get_ecosystem
from .exceptions import ConflictingRequirementError


@dataclass(frozen=True)
class Demand:
    constraint: VersionConstraint
    requester: str
    direct: bool


class ConflictDetector:
    """Rejects mutually unsatisfiable constraints from independent requesters.

    Two direct requesters pinning different exact versions of one capability
    fail immediately. Ranges are intersected against the versions that
    actually exist; an empty intersection is reported through
    :meth:`conflict_error`.
    """

    def __init__(self, ecosystem: EcosystemLike = None):
        self.ecosystem = get_ecosystem(ecosystem)
        # insertion-ordered sets of demands
        self._demands: Dict[str, Dict[Demand, None]] = {}
        # direct exact pins per capability, grouped by version: [(ver, {requester: None})]
        self._pins: Dict[str, List[Tuple[str, Dict[str, None]]]] = {}

    def record(
        self,
        capability: str,
        constraints: Iterable[VersionConstraint],
        requester: str,
        direct: bool,
    ) -> None:
        demands = self._demands.setdefault(capability, {})
        for constraint in constraints:
            if not constraint.op:
                continue
            if direct and constraint.op == "=":
                self._pin(capability, constraint.ver, requester)
            demands.setdefault(Demand(constraint=constraint, requester=requester, direct=direct), None)

    def _pin(self, capability: str, version: str, requester: str) -> None:
        groups = self._pins.setdefault(capability, [])
        matching = None
        for pinned, requesters in groups:
            if self.ecosystem.compare(pinned, version) == 0:
                matching = requesters
                continue
            other = next((name for name in requesters if name != requester), None)
            if other is not None:
                raise ConflictingRequirementError(
                    package=capability,
                    required_by=[other, requester],
                    message=(
                        f"conflicting exact versions: {other} requires = {pinned}, "
                        f"{requester} requires = {version}"
                    ),
                    candidates=[pinned, version],
                )
        if matching is None:
            groups.append((version, {requester: None}))
        else:
            matching.setdefault(requester, None)

    def demands(self, capability: str) -> List[Demand]:
        return list(self._demands.get(capability, ()))

    def constraints(self, capability: str, direct_only: bool = False) -> List[VersionConstraint]:
        return [
            demand.constraint
            for demand in self._demands.get(capability, ())
            if demand.direct or not direct_only
        ]

    def intersection(self, capability: str, versions: Sequence[str], direct_only: bool = False) -> List[str]:
        """Versions from *versions* satisfying every recorded demand."""

        constraints = self.constraints(capability, direct_only=direct_only)
        return [version for version in versions if satisfies_all(version, constraints, self.ecosystem)]

    def conflict_error(
        self,
        capability: str,
        direct_only: bool = False,
        candidates: Sequence[str] = (),
    ) -> ConflictingRequirementError:
        demands = [demand for demand in self._demands.get(capability, ()) if demand.direct or not direct_only]
        described = ", ".join(f"{demand.constraint.describe()} ({demand.requester})" for demand in demands)
        return ConflictingRequirementError(
            package=capability,
            required_by=sorted({demand.requester for demand in demands}),
            message=f"conflicting requirements with no common version: {described or 'none recorded'}",
            candidates=list(candidates),
        )
