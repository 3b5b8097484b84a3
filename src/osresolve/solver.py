"""Dependency resolution engine."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Sequence, Set, Tuple

from .catalog import CatalogIndex, provided_capabilities, repository_of
from .conflicts import ConflictDetector
from .constants import REQUESTED_BY_USER
from .constraints import Alternative, EcosystemLike, VersionConstraint, parse_clause, satisfies_all
from .ecosystems import Ecosystem, get_ecosystem
from .exceptions import ConflictingRequirementError, MalformedConstraintError, MissingDependencyError
from .models import PackageInfo, ResolvedPackage

logger = logging.getLogger(__name__)


@dataclass
class ResolverOptions:
    prefer_same_repository: bool = True


@dataclass
class WorkItem:
    capability: str
    constraints: Tuple[VersionConstraint, ...]
    requirer: str
    direct: bool
    fallbacks: Tuple[Alternative, ...] = ()
    origin: str = ""


@dataclass
class ResolutionState:
    catalog: CatalogIndex
    conflicts: ConflictDetector
    resolved: Dict[str, ResolvedPackage] = field(default_factory=dict)
    providers: Dict[str, List[Tuple[str, str]]] = field(default_factory=dict)
    worklist: Deque[WorkItem] = field(default_factory=deque)
    # (package, requirer) pairs already listed in required_by
    edges: Set[Tuple[str, str]] = field(default_factory=set)


class DependencySolver:
    """Worklist closure over a catalog for one package ecosystem.

    Each capability moves from unresolved to resolved, or aborts the whole
    call as missing or conflicting. Nothing is kept between :meth:`solve`
    calls, so one solver may be shared between threads.
    """

    def __init__(self, ecosystem: EcosystemLike = None, options: Optional[ResolverOptions] = None):
        self.ecosystem: Ecosystem = get_ecosystem(ecosystem)
        self.options = options or ResolverOptions()

    # ------------------------------------------------------------------

    def solve(self, requested: Sequence[PackageInfo], all_packages: Sequence[PackageInfo]) -> List[PackageInfo]:
        state = ResolutionState(
            catalog=CatalogIndex(all_packages, self.ecosystem),
            conflicts=ConflictDetector(self.ecosystem),
        )
        logger.info(
            "Resolving dependencies for %d requested packages against %d %s catalog entries",
            len(requested),
            len(state.catalog),
            self.ecosystem.name,
        )
        try:
            for root in requested:
                self._seed(root, state)
            while state.worklist:
                self._process(state.worklist.popleft(), state)
        except (MissingDependencyError, ConflictingRequirementError) as error:
            logger.error("Dependency resolution failed: %s", error)
            raise

        packages = [record.package for record in state.resolved.values()]
        logger.info("Resolved %d packages (including dependencies)", len(packages))
        return packages

    # ------------------------------------------------------------------

    def _seed(self, root: PackageInfo, state: ResolutionState) -> None:
        entries = state.catalog.versions(root.name)
        if not entries:
            raise MissingDependencyError(
                package=root.name,
                required_by=[REQUESTED_BY_USER],
                message="requested package not found in catalog",
            )

        chosen = next((entry for entry in entries if root.version and entry.version == root.version), None)
        if chosen is not None:
            state.conflicts.record(root.name, [VersionConstraint(op="=", ver=root.version)], REQUESTED_BY_USER, True)
        else:
            chosen = self._highest(entries)
            if root.version:
                logger.warning(
                    "Requested %s %s is not in the catalog; using %s",
                    root.name,
                    root.version,
                    chosen.version,
                )

        existing = state.resolved.get(root.name)
        if existing is not None:
            if self.ecosystem.compare(existing.package.version, chosen.version) != 0:
                raise ConflictingRequirementError(
                    package=root.name,
                    required_by=[REQUESTED_BY_USER],
                    message=(
                        f"conflicting requested versions {existing.package.version} and {chosen.version}"
                    ),
                    candidates=[existing.package.version, chosen.version],
                )
            existing.direct = True
            return
        self._select(chosen, True, REQUESTED_BY_USER, state)

    def _process(self, item: WorkItem, state: ResolutionState) -> None:
        if self.ecosystem.is_implicit(item.capability):
            return
        state.conflicts.record(item.capability, item.constraints, item.requirer, item.direct)

        existing = state.resolved.get(item.capability)
        if existing is not None:
            self._revisit(item, existing, state)
            return

        if item.capability not in state.catalog.by_name:
            provider = self._resolved_provider(item, state)
            if provider is not None:
                provider.direct = provider.direct or item.direct
                return

        candidates = self._candidates(item, state)
        if candidates:
            self._select(self._pick(candidates, item.requirer, state), item.direct, item.requirer, state)
            return
        self._fallback_or_fail(item, state)

    def _revisit(self, item: WorkItem, existing: ResolvedPackage, state: ResolutionState) -> None:
        version = existing.package.version
        edge = (existing.package.name, item.requirer)
        if edge not in state.edges:
            state.edges.add(edge)
            existing.required_by.append(item.requirer)

        if item.direct and not existing.direct:
            # A direct requirement overrides constraints seen only through alternatives.
            replacement = self._reselect(item, True, state)
            if replacement is None:
                raise state.conflicts.conflict_error(item.capability, direct_only=True, candidates=[version])
            existing.direct = True
            if replacement is not existing.package:
                logger.debug(
                    "Re-resolving %s %s -> %s: direct requirement from %s overrides alternative path",
                    item.capability,
                    version,
                    replacement.version,
                    item.requirer,
                )
                self._replace(existing, replacement, state)
            else:
                # its requirements were queued through an alternative; queue them again as direct
                self._expand(existing.package, True, state)
            return

        if satisfies_all(version, item.constraints, self.ecosystem):
            return

        if existing.direct and not item.direct:
            logger.debug(
                "Keeping %s %s: direct requirement wins over %s reached through an alternative of %s",
                item.capability,
                version,
                ", ".join(constraint.describe() for constraint in item.constraints),
                item.requirer,
            )
            return

        replacement = self._reselect(item, item.direct, state)
        if replacement is None:
            if not item.direct and item.fallbacks:
                self._fallback_or_fail(item, state)
                return
            raise state.conflicts.conflict_error(item.capability, direct_only=item.direct, candidates=[version])
        logger.debug(
            "Re-resolving %s %s -> %s to satisfy every requester",
            item.capability,
            version,
            replacement.version,
        )
        self._replace(existing, replacement, state)

    def _fallback_or_fail(self, item: WorkItem, state: ResolutionState) -> None:
        origin = item.origin or item.capability
        if item.fallbacks:
            alternative = item.fallbacks[0]
            logger.debug(
                "%s is not installable for %s; trying alternative %s",
                item.capability,
                item.requirer,
                alternative.name,
            )
            state.worklist.appendleft(
                WorkItem(
                    capability=alternative.name,
                    constraints=(alternative.constraint,) if alternative.op else (),
                    requirer=item.requirer,
                    direct=False,
                    fallbacks=item.fallbacks[1:],
                    origin=origin,
                )
            )
            return

        available = [version for _, version in state.catalog.lookup(item.capability)]
        via = f"required by {item.requirer}"
        if origin != item.capability:
            via += f" as alternative for {origin}"
        if available:
            wanted = ", ".join(constraint.describe() for constraint in item.constraints)
            message = f"no version matching {wanted} found; dependency not found ({via})"
        else:
            message = f"dependency not found ({via})"
        raise MissingDependencyError(
            package=item.capability,
            required_by=[item.requirer],
            message=message,
            candidates=available,
        )

    # ------------------------------------------------------------------

    def _candidates(self, item: WorkItem, state: ResolutionState) -> List[PackageInfo]:
        result: List[PackageInfo] = []
        for package, version in state.catalog.lookup(item.capability):
            if not satisfies_all(version, item.constraints, self.ecosystem):
                continue
            current = state.resolved.get(package.name)
            if current is not None and current.package is not package:
                continue
            result.append(package)
        return result

    def _reselect(self, item: WorkItem, direct_only: bool, state: ResolutionState) -> Optional[PackageInfo]:
        pool = state.catalog.versions(item.capability)
        allowed = set(state.conflicts.intersection(item.capability, [package.version for package in pool], direct_only))
        candidates = [package for package in pool if package.version in allowed]
        if not candidates:
            return None
        return self._pick(candidates, item.requirer, state)

    def _pick(self, candidates: Sequence[PackageInfo], requirer: str, state: ResolutionState) -> PackageInfo:
        repo = ""
        if self.options.prefer_same_repository:
            record = state.resolved.get(requirer)
            if record is not None:
                repo = repository_of(record.package.url)
        version_key = self.ecosystem.sort_key()

        def rank(package: PackageInfo):
            same_repo = bool(repo) and repository_of(package.url) == repo
            return (same_repo, version_key(package.version), package.name, -state.catalog.position(package))

        return max(candidates, key=rank)

    def _highest(self, entries: Sequence[PackageInfo]) -> PackageInfo:
        best = entries[0]
        for entry in entries[1:]:
            if self.ecosystem.compare(entry.version, best.version) > 0:
                best = entry
        return best

    def _resolved_provider(self, item: WorkItem, state: ResolutionState) -> Optional[ResolvedPackage]:
        for name, version in state.providers.get(item.capability, ()):
            if satisfies_all(version, item.constraints, self.ecosystem):
                return state.resolved[name]
        return None

    # ------------------------------------------------------------------

    def _select(self, package: PackageInfo, direct: bool, requirer: str, state: ResolutionState) -> None:
        state.resolved[package.name] = ResolvedPackage(package=package, direct=direct, required_by=[requirer])
        state.edges.add((package.name, requirer))
        self._register(package, state)
        logger.debug("Selected %s %s for %s", package.name, package.version, requirer)
        self._expand(package, direct, state)

    def _replace(self, record: ResolvedPackage, package: PackageInfo, state: ResolutionState) -> None:
        old = record.package
        for capability, _ in provided_capabilities(old, self.ecosystem):
            entries = state.providers.get(capability, [])
            state.providers[capability] = [entry for entry in entries if entry[0] != old.name]
        record.package = package
        self._register(package, state)
        self._expand(package, record.direct, state)

    def _register(self, package: PackageInfo, state: ResolutionState) -> None:
        for capability, version in provided_capabilities(package, self.ecosystem):
            state.providers.setdefault(capability, []).append((package.name, version))

    def _expand(self, package: PackageInfo, direct: bool, state: ResolutionState) -> None:
        literal: List[str] = []
        clauses: List[List[Alternative]] = []
        for entry in package.requires:
            if not entry or not entry.strip():
                continue
            if self.ecosystem.is_plain(entry):
                literal.append(entry.strip())
            else:
                self._append_clause(entry, package, clauses)
        for raw in package.requires_ver:
            self._append_clause(raw, package, clauses)

        literal_names = set(literal)
        for name in literal:
            if self.ecosystem.is_implicit(name):
                continue
            constraints: List[VersionConstraint] = []
            fallbacks: Tuple[Alternative, ...] = ()
            for alternatives in clauses:
                primary = alternatives[0]
                if primary.name != name:
                    continue
                if primary.op:
                    constraints.append(primary.constraint)
                if not fallbacks:
                    fallbacks = tuple(alternatives[1:])
            state.worklist.append(WorkItem(name, tuple(constraints), package.name, direct, fallbacks))

        for alternatives in clauses:
            if any(alt.name in literal_names or self.ecosystem.is_implicit(alt.name) for alt in alternatives):
                continue
            primary = alternatives[0]
            state.worklist.append(
                WorkItem(
                    capability=primary.name,
                    constraints=(primary.constraint,) if primary.op else (),
                    requirer=package.name,
                    direct=direct,
                    fallbacks=tuple(alternatives[1:]),
                )
            )

    def _append_clause(self, raw: str, package: PackageInfo, clauses: List[List[Alternative]]) -> None:
        try:
            clauses.append(parse_clause(raw, self.ecosystem))
        except MalformedConstraintError as exc:
            logger.debug("Skipping malformed requirement %r of %s: %s", raw, package.name, exc)


# ----------------------------------------------------------------------


def resolve(
    requested: Sequence[PackageInfo],
    all_packages: Sequence[PackageInfo],
    ecosystem: EcosystemLike = None,
    options: Optional[ResolverOptions] = None,
) -> List[PackageInfo]:
    """Return the transitive closure of *requested* over *all_packages*.

    Roots come first, then packages in the order they were pulled in. Raises
    MissingDependencyError or ConflictingRequirementError; there is never a
    partial result.
    """

    return DependencySolver(ecosystem, options).solve(requested, all_packages)


def resolve_top_package_conflicts(
    name: str,
    candidates: Sequence[PackageInfo],
    ecosystem: EcosystemLike = None,
) -> Tuple[Optional[PackageInfo], bool]:
    """Pick the highest version named *name* without computing a closure."""

    eco = get_ecosystem(ecosystem)
    best: Optional[PackageInfo] = None
    for candidate in candidates:
        if candidate.name != name:
            continue
        if best is None or eco.compare(candidate.version, best.version) > 0:
            best = candidate
    return best, best is not None


def match_requested(
    names: Sequence[str],
    all_packages: Sequence[PackageInfo],
    ecosystem: EcosystemLike = None,
) -> List[PackageInfo]:
    """Map template package names onto catalog entries."""

    eco = get_ecosystem(ecosystem)
    by_name: Dict[str, List[PackageInfo]] = {}
    for package in all_packages:
        by_name.setdefault(package.name, []).append(package)

    matched: List[PackageInfo] = []
    for want in names:
        exact = by_name.get(want) or by_name.get(f"{want}.{eco.name}")
        if exact:
            best, _ = resolve_top_package_conflicts(exact[0].name, exact, eco)
            matched.append(best)  # type: ignore[arg-type]
            continue
        prefixed = sorted(
            (name for name in by_name if name.startswith(f"{want}-") or name.startswith(f"{want}.")),
            reverse=True,
        )
        if not prefixed:
            raise MissingDependencyError(
                package=want,
                required_by=[REQUESTED_BY_USER],
                message="requested package not found in catalog",
            )
        best, _ = resolve_top_package_conflicts(prefixed[0], by_name[prefixed[0]], eco)
        matched.append(best)  # type: ignore[arg-type]
    return matched
