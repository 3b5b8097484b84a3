"""Parsing of raw dependency clauses into structured version constraints."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .ecosystems import Ecosystem, get_ecosystem
from .exceptions import MalformedConstraintError

logger = logging.getLogger(__name__)

EcosystemLike = Union[str, Ecosystem, None]


@dataclass(frozen=True)
class VersionConstraint:
    """A comparator-based constraint bound to one alternative of a clause."""

    op: str = ""
    ver: str = ""
    alternative: str = ""

    def is_satisfied_by(self, candidate: str, ecosystem: EcosystemLike = None) -> bool:
        return get_ecosystem(ecosystem).satisfies(candidate, self.op, self.ver)

    def describe(self) -> str:
        if not self.op:
            return "any version"
        return f"{self.op} {self.ver}"


@dataclass(frozen=True)
class Alternative:
    name: str
    op: str = ""
    ver: str = ""

    @property
    def constraint(self) -> VersionConstraint:
        return VersionConstraint(op=self.op, ver=self.ver)


def parse_clause(clause: str, ecosystem: EcosystemLike = None) -> List[Alternative]:
    """Split a raw clause into its ordered alternatives.

    Raises MalformedConstraintError when any alternative cannot be parsed.
    """

    eco = get_ecosystem(ecosystem)
    if not clause or not clause.strip():
        raise MalformedConstraintError("Empty dependency clause")
    alternatives: List[Alternative] = []
    for token in eco.split_alternatives(clause):
        if not token:
            raise MalformedConstraintError(f"Empty alternative in {clause!r}")
        name, op, ver = eco.parse_token(token)
        alternatives.append(Alternative(name=name, op=op, ver=ver))
    return alternatives


def satisfies_all(
    candidate: str,
    constraints: Iterable[VersionConstraint],
    ecosystem: EcosystemLike = None,
) -> bool:
    eco = get_ecosystem(ecosystem)
    return all(eco.satisfies(candidate, constraint.op, constraint.ver) for constraint in constraints)


def extract_version_requirement(
    clauses: Sequence[str],
    dep_name: str,
    ecosystem: EcosystemLike = None,
) -> Tuple[List[VersionConstraint], bool]:
    """Collect the constraints *clauses* place on *dep_name*.

    A version clause binds only to the alternative it is written against; the
    other alternatives of the group are reported ``|``-joined in
    ``alternative``. Clauses that do not mention *dep_name* are ignored and
    unparseable clauses are skipped.
    """

    eco = get_ecosystem(ecosystem)
    constraints: List[VersionConstraint] = []
    for clause in clauses:
        try:
            alternatives = parse_clause(clause, eco)
        except MalformedConstraintError as exc:
            logger.debug("Skipping malformed clause %r: %s", clause, exc)
            continue
        for index, alt in enumerate(alternatives):
            if alt.name != dep_name:
                continue
            others = "|".join(other.name for pos, other in enumerate(alternatives) if pos != index)
            constraints.append(VersionConstraint(op=alt.op, ver=alt.ver, alternative=others))
            break
    return constraints, bool(constraints)


def clean_dependency_name(raw: str, ecosystem: EcosystemLike = None) -> str:
    """Return the bare name of the first alternative of *raw*."""

    if not raw or not raw.strip():
        return ""
    eco = get_ecosystem(ecosystem)
    try:
        return eco.parse_token(eco.split_alternatives(raw)[0])[0]
    except MalformedConstraintError:
        # Fall back to everything before the first separator.
        head = raw.split("|", 1)[0].replace("(", " ").split()
        return head[0] if head else ""


def parse_provide(entry: str, ecosystem: EcosystemLike = None) -> Optional[Tuple[str, str]]:
    """Return ``(capability, provided_version)`` for a ``provides`` entry."""

    eco = get_ecosystem(ecosystem)
    try:
        name, op, ver = eco.parse_token(entry)
    except MalformedConstraintError as exc:
        logger.debug("Skipping malformed provides entry %r: %s", entry, exc)
        return None
    return name, ver if op == "=" else ""
