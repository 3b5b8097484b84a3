"""Per-ecosystem strategies: version ordering and dependency clause syntax."""
from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Callable, Dict, List, Tuple, Union

from .constants import DEBIAN_OPERATOR_ALIASES, ECOSYSTEM_ALIASES, RPM_OPERATOR_ALIASES
from .debversion import compare_deb_versions
from .exceptions import MalformedConstraintError
from .rpmversion import compare_rpm_for_constraint, compare_rpm_versions

_DEB_TOKEN_RE = re.compile(
    r"^(?P<name>[^\s(\[<|]+)"
    r"\s*(?:\(\s*(?P<op><<|<=|>=|>>|=|<|>)\s*(?P<ver>[^)\s]+)\s*\))?"
    r"\s*(?:\[[^\]]*\])?"
    r"\s*(?:<[^>]*>\s*)*$"
)

_RPM_TOKEN_RE = re.compile(r"^(?P<name>\S+?)(?:\s+(?P<op><=|>=|==|=|<|>)\s+(?P<ver>\S+))?$")

_RPM_RICH_OR_RE = re.compile(r"\s+or\s+")
_RPM_RICH_OTHER_RE = re.compile(r"\s(?:and|if|unless|with|without|else)\s")

# (name, canonical operator or "", version or "")
Token = Tuple[str, str, str]


class Ecosystem:
    """Ordering and clause syntax for one package format."""

    name = ""
    operator_aliases: Dict[str, str] = {}

    def compare(self, a: str, b: str) -> int:
        raise NotImplementedError

    def _constraint_compare(self, candidate: str, target: str) -> int:
        return self.compare(candidate, target)

    def sort_key(self) -> Callable[[str], object]:
        return cmp_to_key(self.compare)

    def satisfies(self, version: str, op: str, target: str) -> bool:
        if not op:
            return True
        cmp = self._constraint_compare(version, target)
        if op == "<<":
            return cmp < 0
        if op == "<=":
            return cmp <= 0
        if op == "=":
            return cmp == 0
        if op == ">=":
            return cmp >= 0
        if op == ">>":
            return cmp > 0
        raise MalformedConstraintError(f"Unsupported operator: {op}")

    def split_alternatives(self, clause: str) -> List[str]:
        return [token.strip() for token in clause.split("|")]

    def parse_token(self, token: str) -> Token:
        raise NotImplementedError

    def is_plain(self, entry: str) -> bool:
        """True when *entry* is a bare capability name with no clause syntax."""

        try:
            alternatives = self.split_alternatives(entry)
        except MalformedConstraintError:
            return False
        if len(alternatives) != 1:
            return False
        try:
            name, op, _ = self.parse_token(alternatives[0])
        except MalformedConstraintError:
            return False
        return not op and name == entry.strip()

    def is_implicit(self, capability: str) -> bool:
        """Capabilities supplied by the package manager itself."""

        return False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class DebianEcosystem(Ecosystem):
    name = "deb"
    operator_aliases = DEBIAN_OPERATOR_ALIASES

    def compare(self, a: str, b: str) -> int:
        return compare_deb_versions(a, b)

    def parse_token(self, token: str) -> Token:
        match = _DEB_TOKEN_RE.match(token.strip())
        if not match:
            raise MalformedConstraintError(f"Cannot parse dependency {token!r}")
        # multiarch qualifiers: python3:any, gcc:arm64
        name = match.group("name").split(":", 1)[0]
        if not name:
            raise MalformedConstraintError(f"Empty package name in {token!r}")
        op = match.group("op") or ""
        return name, self.operator_aliases.get(op, op), match.group("ver") or ""


class RpmEcosystem(Ecosystem):
    name = "rpm"
    operator_aliases = RPM_OPERATOR_ALIASES

    def compare(self, a: str, b: str) -> int:
        return compare_rpm_versions(a, b)

    def _constraint_compare(self, candidate: str, target: str) -> int:
        return compare_rpm_for_constraint(candidate, target)

    def split_alternatives(self, clause: str) -> List[str]:
        clause = clause.strip()
        if clause.startswith("(") and clause.endswith(")"):
            inner = clause[1:-1].strip()
            if _RPM_RICH_OTHER_RE.search(inner):
                raise MalformedConstraintError(f"Unsupported rich dependency {clause!r}")
            return [token.strip() for token in _RPM_RICH_OR_RE.split(inner)]
        return super().split_alternatives(clause)

    def parse_token(self, token: str) -> Token:
        match = _RPM_TOKEN_RE.match(token.strip())
        if not match:
            raise MalformedConstraintError(f"Cannot parse dependency {token!r}")
        op = match.group("op") or ""
        return match.group("name"), self.operator_aliases.get(op, op), match.group("ver") or ""

    def is_implicit(self, capability: str) -> bool:
        return capability.startswith("rpmlib(")


DEBIAN = DebianEcosystem()
RPM = RpmEcosystem()

_REGISTRY: Dict[str, Ecosystem] = {DEBIAN.name: DEBIAN, RPM.name: RPM}


def get_ecosystem(ecosystem: Union[str, Ecosystem, None] = None) -> Ecosystem:
    if isinstance(ecosystem, Ecosystem):
        return ecosystem
    if not ecosystem:
        return DEBIAN
    key = ECOSYSTEM_ALIASES.get(ecosystem.strip().lower())
    if key is None:
        raise ValueError(f"Unsupported ecosystem: {ecosystem}")
    return _REGISTRY[key]
