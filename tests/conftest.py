"""Pytest configuration and fixtures for rolepack tests."""

import os
from pathlib import Path

import pytest

from rolepack.catalog import MemoryImageCatalog
from rolepack.model import Package, Role, RoleJob
from rolepack.ui.console import Console, set_console

STEMCELL = "stemcell/base:1.0"
STEMCELL_ID = "sha256:stemcell"
VERSION = "0.1.0+dev"
VERSION_LABEL = "version.generator.rolepack=0.1.0_dev"


@pytest.fixture(autouse=True)
def quiet_console():
    """Fresh non-debug console for every test."""
    set_console(Console())
    yield


def make_compiled_package(root: Path, fingerprint: str) -> Path:
    """
    Lay out <root>/<fingerprint>/compiled with a binary, a library and a
    symlink to the library.
    """
    compiled = root / fingerprint / "compiled"
    (compiled / "bin").mkdir(parents=True)
    (compiled / "lib").mkdir()

    tool = compiled / "bin" / "tool"
    tool.write_text(f"#!/bin/sh\necho {fingerprint}\n")
    tool.chmod(0o755)

    lib = compiled / "lib" / "libx.so"
    lib.write_bytes(bytes(range(256)) * 4)
    lib.chmod(0o644)

    os.symlink("libx.so", compiled / "lib" / "libx.so.1")
    return compiled


@pytest.fixture
def compiled_root(tmp_path):
    root = tmp_path / "compiled"
    root.mkdir()
    return root


@pytest.fixture
def packages(compiled_root):
    """Three packages with compiled trees on disk."""
    out = []
    for name, fp in [("ruby", "aaa111"), ("nginx", "bbb222"), ("golang", "ccc333")]:
        make_compiled_package(compiled_root, fp)
        out.append(Package(name=name, fingerprint=fp, sha1=f"sha-{fp}"))
    return out


@pytest.fixture
def roles(packages):
    ruby, nginx, golang = packages
    return [
        Role(
            name="api",
            jobs=[
                RoleJob(name="web", packages=[ruby, nginx]),
                RoleJob(name="worker", packages=[ruby]),
            ],
        ),
        Role(name="router", jobs=[RoleJob(name="proxy", packages=[nginx, golang])]),
    ]


@pytest.fixture
def catalog():
    catalog = MemoryImageCatalog()
    catalog.add(STEMCELL, STEMCELL_ID)
    return catalog
