"""Helpers for dealing with Debian-style version strings."""
from __future__ import annotations

import string
from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple

_DIGITS = frozenset(string.digits)
_LETTERS = frozenset(string.ascii_letters)


def _split(version: str) -> Tuple[int, str, str]:
    """Split ``[epoch:]upstream[-revision]`` without ever rejecting input."""

    version = (version or "").strip()
    epoch = 0
    if ":" in version:
        head, tail = version.split(":", 1)
        if head and all(ch in _DIGITS for ch in head):
            epoch = int(head)
            version = tail
    if "-" in version:
        upstream, revision = version.rsplit("-", 1)
    else:
        upstream, revision = version, ""
    return epoch, upstream, revision


def _order(ch: str) -> int:
    if ch in _DIGITS:
        return 0
    if ch in _LETTERS:
        return ord(ch)
    if ch == "~":
        return -1
    return ord(ch) + 256


def _verrevcmp(left: str, right: str) -> int:
    i = j = 0
    len_left, len_right = len(left), len(right)
    while i < len_left or j < len_right:
        first_diff = 0
        while (i < len_left and left[i] not in _DIGITS) or (j < len_right and right[j] not in _DIGITS):
            left_order = _order(left[i]) if i < len_left else 0
            right_order = _order(right[j]) if j < len_right else 0
            if left_order != right_order:
                return -1 if left_order < right_order else 1
            i += 1
            j += 1
        while i < len_left and left[i] == "0":
            i += 1
        while j < len_right and right[j] == "0":
            j += 1
        while i < len_left and left[i] in _DIGITS and j < len_right and right[j] in _DIGITS:
            if not first_diff:
                first_diff = ord(left[i]) - ord(right[j])
            i += 1
            j += 1
        if i < len_left and left[i] in _DIGITS:
            return 1
        if j < len_right and right[j] in _DIGITS:
            return -1
        if first_diff:
            return -1 if first_diff < 0 else 1
    return 0


@total_ordering
@dataclass(frozen=True)
class DebVersion:
    """Comparable representation of a Debian package version string."""

    raw: str
    epoch: int
    upstream: str
    revision: str

    def __init__(self, raw: str):
        object.__setattr__(self, "raw", raw)
        epoch, upstream, revision = _split(raw)
        object.__setattr__(self, "epoch", epoch)
        object.__setattr__(self, "upstream", upstream)
        object.__setattr__(self, "revision", revision)

    def __lt__(self, other: "DebVersion") -> bool:  # type: ignore[override]
        return self._compare(other) < 0

    def __eq__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, DebVersion):
            return NotImplemented
        return self._compare(other) == 0

    def _compare(self, other: "DebVersion") -> int:
        if self.epoch != other.epoch:
            return -1 if self.epoch < other.epoch else 1
        result = _verrevcmp(self.upstream, other.upstream)
        if result:
            return result
        return _verrevcmp(self.revision, other.revision)

    def __str__(self) -> str:  # type: ignore[override]
        return self.raw

    def __hash__(self) -> int:  # type: ignore[override]
        # "1.0" and "1.00" compare equal, so hash on the epoch alone.
        return hash(self.epoch)


def compare_deb_versions(a: str, b: str) -> int:
    """Return -1, 0, or 1 comparing two Debian version strings."""

    return DebVersion(a)._compare(DebVersion(b))
