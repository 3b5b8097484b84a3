"""Tests for RPM EVR ordering."""

import itertools

import pytest

from osresolve.rpmversion import (
    RpmVersion,
    compare_rpm_for_constraint,
    compare_rpm_versions,
    rpmvercmp,
    split_evr,
)


@pytest.mark.parametrize(
    "left, right, expected",
    [
        ("1.0", "1.0", 0),
        ("1.0", "1.1", -1),
        ("1.10", "1.9", 1),
        ("1.01", "1.1", 0),
        ("1.0~rc1", "1.0", -1),
        ("1.0^git1", "1.0", 1),
        ("1.0^git1", "1.0.1", -1),
        ("1a", "1.1", -1),
        ("2.0", "2_0", 0),
        ("abc", "abd", -1),
    ],
)
def test_rpmvercmp(left, right, expected):
    assert rpmvercmp(left, right) == expected
    assert rpmvercmp(right, left) == -expected


def test_split_evr():
    assert split_evr("1:2.34-100.azl3") == (1, "2.34", "100.azl3")
    assert split_evr("2.34") == (0, "2.34", "")
    assert split_evr("x:1.0") == (0, "x:1.0", "")


def test_epoch_dominates():
    assert compare_rpm_versions("1:1.0-1", "2.0-1") == 1


def test_missing_release_sorts_lower():
    assert compare_rpm_versions("1.0-1", "1.0") == 1
    assert RpmVersion("1.0") < RpmVersion("1.0-1")


def test_constraint_comparison_ignores_release_when_target_has_none():
    assert compare_rpm_for_constraint("1.0-3", "1.0") == 0
    assert compare_rpm_for_constraint("1.0-3", "1.0-2") == 1


SAMPLE = ["", "0", "1.0", "1.0-1", "1.0-2", "1.0~rc1", "1.0^post", "1.1", "1:0.1", "2.0a", "2.0"]


def test_total_order_properties():
    for a, b in itertools.product(SAMPLE, repeat=2):
        assert compare_rpm_versions(a, b) == -compare_rpm_versions(b, a)
    for a, b, c in itertools.product(SAMPLE, repeat=3):
        if compare_rpm_versions(a, b) <= 0 and compare_rpm_versions(b, c) <= 0:
            assert compare_rpm_versions(a, c) <= 0
