"""Tests for the package/role model helpers."""

import os

from rolepack.model import Package, Role, RoleJob, sorted_packages, unique_packages


def test_unique_packages_first_occurrence_wins(roles, packages):
    found = unique_packages(roles)

    assert [p.fingerprint for p in found] == ["aaa111", "bbb222", "ccc333"]
    assert found == packages


def test_unique_packages_keeps_first_of_duplicate_fingerprint():
    first = Package(name="a", fingerprint="fp", sha1="1")
    second = Package(name="a-again", fingerprint="fp", sha1="1")
    roles = [
        Role(name="r1", jobs=[RoleJob(name="j", packages=[first])]),
        Role(name="r2", jobs=[RoleJob(name="j", packages=[second])]),
    ]

    assert unique_packages(roles) == [first]


def test_unique_packages_empty_jobs():
    assert unique_packages([Role(name="r", jobs=[RoleJob(name="j")])]) == []


def test_sorted_packages_by_fingerprint():
    pkgs = [Package(name=n, fingerprint=f, sha1="x") for n, f in [("z", "03"), ("a", "01"), ("m", "02")]]

    assert [p.fingerprint for p in sorted_packages(pkgs)] == ["01", "02", "03"]


def test_compiled_dir_default_layout():
    pkg = Package(name="ruby", fingerprint="abc", sha1="x")

    assert pkg.compiled_dir("/data/compiled") == os.path.join("/data/compiled", "abc", "compiled")


def test_compiled_dir_explicit_path_wins():
    pkg = Package(name="ruby", fingerprint="abc", sha1="x", compiled_path="/elsewhere/ruby")

    assert pkg.compiled_dir("/data/compiled") == "/elsewhere/ruby"


def test_fingerprint_label():
    assert Package(name="ruby", fingerprint="abc", sha1="x").fingerprint_label == "fingerprint.abc"
