"""Tests for the catalog index."""

import copy

import pytest

from osresolve.catalog import CatalogIndex, provided_capabilities, repository_of
from osresolve.models import PackageInfo


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://deb.debian.org/debian/pool/main/g/glibc/libc6_2.36-9_amd64.deb", "http://deb.debian.org/debian"),
        (
            "https://packages.microsoft.com/azurelinux/3.0/prod/base/x86_64/Packages/a/acl-2.3.1-2.azl3.x86_64.rpm",
            "https://packages.microsoft.com/azurelinux/3.0/prod/base/x86_64",
        ),
        ("http://repo1.com/child_1.0_amd64.deb", "http://repo1.com"),
        ("pool/main/p/pkg/pkg_1.0_amd64.deb", ""),
        ("", ""),
    ],
)
def test_repository_of(url, expected):
    assert repository_of(url) == expected


@pytest.fixture
def packages():
    return [
        PackageInfo(name="libc6", version="2.31-13+deb11u4"),
        PackageInfo(name="libc6", version="2.31-13+deb11u5"),
        PackageInfo(name="libssl3", version="3.0.7-1", provides=["libssl", "libssl-abi (= 3)"]),
        PackageInfo(name="bash", version="5.2.15-1", files=["/bin/sh", "/usr/bin/bash"]),
    ]


def test_index_by_name_keeps_catalog_order(packages):
    index = CatalogIndex(packages)
    assert [p.version for p in index.versions("libc6")] == ["2.31-13+deb11u4", "2.31-13+deb11u5"]
    assert index.versions("missing") == ()
    assert len(index) == 4


def test_index_by_provides(packages):
    index = CatalogIndex(packages)
    assert [(p.name, v) for p, v in index.providers("libssl")] == [("libssl3", "3.0.7-1")]
    assert [(p.name, v) for p, v in index.providers("libssl-abi")] == [("libssl3", "3")]
    assert [p.name for p, _ in index.providers("/bin/sh")] == ["bash"]
    # a package always provides its own name
    assert [p.name for p, _ in index.providers("libssl3")] == ["libssl3"]


def test_lookup_prefers_exact_names(packages):
    index = CatalogIndex(packages)
    assert {p.version for p, _ in index.lookup("libc6")} == {"2.31-13+deb11u4", "2.31-13+deb11u5"}
    assert [p.name for p, _ in index.lookup("libssl")] == ["libssl3"]
    assert index.lookup("nothing") == ()


def test_position(packages):
    index = CatalogIndex(packages)
    assert index.position(packages[2]) == 2
    assert index.position(PackageInfo(name="stranger")) == len(packages)


def test_index_does_not_modify_input(packages):
    before = copy.deepcopy(packages)
    CatalogIndex(packages)
    assert packages == before


def test_provided_capabilities_skips_malformed_entries():
    package = PackageInfo(name="odd", version="1.0", provides=["good", "bad (>= "])
    assert provided_capabilities(package) == [("odd", "1.0"), ("good", "1.0")]
