"""Tests for the conflict detector."""

import pytest

from osresolve.conflicts import ConflictDetector
from osresolve.constraints import VersionConstraint
from osresolve.exceptions import ConflictingRequirementError


def exact(version):
    return VersionConstraint(op="=", ver=version)


def test_distinct_direct_exact_versions_conflict():
    detector = ConflictDetector()
    detector.record("shared-lib", [exact("1.0")], "pkg-a", True)
    with pytest.raises(ConflictingRequirementError) as excinfo:
        detector.record("shared-lib", [exact("2.0")], "pkg-b", True)
    assert "conflicting" in str(excinfo.value)
    assert excinfo.value.package == "shared-lib"
    assert excinfo.value.required_by == ["pkg-a", "pkg-b"]
    assert "1.0" in str(excinfo.value) and "2.0" in str(excinfo.value)


def test_equal_exact_versions_do_not_conflict():
    detector = ConflictDetector()
    detector.record("lib", [exact("1.0")], "pkg-a", True)
    detector.record("lib", [exact("1.00")], "pkg-b", True)
    assert len(detector.demands("lib")) == 2


def test_alternative_paths_never_conflict_immediately():
    detector = ConflictDetector()
    detector.record("lib", [exact("1.0")], "pkg-a", True)
    detector.record("lib", [exact("2.0")], "pkg-b", False)
    assert detector.constraints("lib", direct_only=True) == [exact("1.0")]
    assert len(detector.constraints("lib")) == 2


def test_unconstrained_demands_are_not_recorded():
    detector = ConflictDetector()
    detector.record("lib", [VersionConstraint()], "pkg-a", True)
    assert detector.demands("lib") == []


def test_range_intersection():
    detector = ConflictDetector()
    detector.record("lib", [VersionConstraint(">=", "1.0")], "pkg-a", True)
    detector.record("lib", [VersionConstraint("<<", "2.0")], "pkg-b", True)
    assert detector.intersection("lib", ["0.9", "1.0", "1.5", "3.0"]) == ["1.0", "1.5"]


def test_conflict_error_describes_every_demand():
    detector = ConflictDetector()
    detector.record("lib", [VersionConstraint(">=", "3.0")], "pkg-a", True)
    detector.record("lib", [VersionConstraint("<<", "1.0")], "pkg-b", True)
    assert detector.intersection("lib", ["1.0", "2.0"]) == []
    error = detector.conflict_error("lib", direct_only=True, candidates=["2.0"])
    assert str(error) == "lib: conflicting requirements with no common version: >= 3.0 (pkg-a), << 1.0 (pkg-b)"
    assert error.required_by == ["pkg-a", "pkg-b"]


def test_many_matching_pins_then_one_conflict():
    detector = ConflictDetector()
    for i in range(3000):
        detector.record("libc6", [exact("2.36-9"), VersionConstraint(">=", "2.31")], f"pkg-{i}", True)
    assert len(detector.demands("libc6")) == 6000
    with pytest.raises(ConflictingRequirementError) as excinfo:
        detector.record("libc6", [exact("2.40-1")], "late", True)
    assert excinfo.value.required_by == ["pkg-0", "late"]
    assert str(excinfo.value) == (
        "libc6: conflicting exact versions: pkg-0 requires = 2.36-9, late requires = 2.40-1"
    )


def test_repeated_demand_is_recorded_once():
    detector = ConflictDetector()
    detector.record("lib", [exact("1.0")], "pkg-a", True)
    detector.record("lib", [exact("1.0")], "pkg-a", True)
    assert detector.demands("lib") == [detector.demands("lib")[0]]
