"""Helpers for dealing with RPM ``[epoch:]version[-release]`` strings."""
from __future__ import annotations

import string
from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple

_DIGITS = frozenset(string.digits)
_ALNUM = frozenset(string.ascii_letters + string.digits)


def split_evr(evr: str) -> Tuple[int, str, str]:
    evr = (evr or "").strip()
    epoch = 0
    if ":" in evr:
        head, tail = evr.split(":", 1)
        if head and all(ch in _DIGITS for ch in head):
            epoch = int(head)
            evr = tail
    if "-" in evr:
        version, release = evr.rsplit("-", 1)
    else:
        version, release = evr, ""
    return epoch, version, release


def _segment(text: str, start: int, charset: frozenset) -> int:
    end = start
    while end < len(text) and text[end] in charset:
        end += 1
    return end


def rpmvercmp(left: str, right: str) -> int:
    """Segment-wise comparison following rpm's ``rpmvercmp``."""

    if left == right:
        return 0
    i = j = 0
    len_left, len_right = len(left), len(right)
    while i < len_left or j < len_right:
        while i < len_left and left[i] not in _ALNUM and left[i] not in "~^":
            i += 1
        while j < len_right and right[j] not in _ALNUM and right[j] not in "~^":
            j += 1

        left_char = left[i] if i < len_left else ""
        right_char = right[j] if j < len_right else ""

        if left_char == "~" or right_char == "~":
            if left_char != "~":
                return 1
            if right_char != "~":
                return -1
            i += 1
            j += 1
            continue

        if left_char == "^" or right_char == "^":
            if not left_char:
                return -1
            if not right_char:
                return 1
            if left_char != "^":
                return 1
            if right_char != "^":
                return -1
            i += 1
            j += 1
            continue

        if not left_char or not right_char:
            break

        numeric = left_char in _DIGITS
        charset = _DIGITS if numeric else frozenset(string.ascii_letters)
        left_end = _segment(left, i, charset)
        right_end = _segment(right, j, charset)
        left_seg = left[i:left_end]
        right_seg = right[j:right_end]

        if not right_seg:
            # numeric segments are newer than alphabetic ones
            return 1 if numeric else -1

        if numeric:
            left_seg = left_seg.lstrip("0")
            right_seg = right_seg.lstrip("0")
            if len(left_seg) != len(right_seg):
                return -1 if len(left_seg) < len(right_seg) else 1
        if left_seg != right_seg:
            return -1 if left_seg < right_seg else 1
        i = left_end
        j = right_end

    if i >= len_left and j >= len_right:
        return 0
    return -1 if i >= len_left else 1


@total_ordering
@dataclass(frozen=True)
class RpmVersion:
    """Comparable EVR; a missing release sorts below any present release."""

    raw: str
    epoch: int
    version: str
    release: str

    def __init__(self, raw: str):
        object.__setattr__(self, "raw", raw)
        epoch, version, release = split_evr(raw)
        object.__setattr__(self, "epoch", epoch)
        object.__setattr__(self, "version", version)
        object.__setattr__(self, "release", release)

    def __lt__(self, other: "RpmVersion") -> bool:  # type: ignore[override]
        return self._compare(other) < 0

    def __eq__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, RpmVersion):
            return NotImplemented
        return self._compare(other) == 0

    def _compare(self, other: "RpmVersion", ignore_release: bool = False) -> int:
        if self.epoch != other.epoch:
            return -1 if self.epoch < other.epoch else 1
        result = rpmvercmp(self.version, other.version)
        if result or ignore_release:
            return result
        return rpmvercmp(self.release, other.release)

    def __str__(self) -> str:  # type: ignore[override]
        return self.raw

    def __hash__(self) -> int:  # type: ignore[override]
        return hash(self.epoch)


def compare_rpm_versions(a: str, b: str) -> int:
    """Return -1, 0, or 1 comparing two RPM EVR strings."""

    return RpmVersion(a)._compare(RpmVersion(b))


def compare_rpm_for_constraint(candidate: str, target: str) -> int:
    """Compare for constraint matching: a target without a release matches any release."""

    target_evr = RpmVersion(target)
    return RpmVersion(candidate)._compare(target_evr, ignore_release=not target_evr.release)
