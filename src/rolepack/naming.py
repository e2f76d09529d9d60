# naming.py
from __future__ import annotations

import hashlib
import re
from typing import Iterable, Sequence

from .model import Package, Role, iter_role_packages, sorted_packages, unique_by_fingerprint

_INVALID_DOCKER_NAME_CHARS = re.compile(r"[^a-z0-9_.-]")


def sanitize_docker_name(name: str) -> str:
    """Lower-case and replace characters Docker rejects in names/tags with '-'."""
    return _INVALID_DOCKER_NAME_CHARS.sub("-", name.lower())


def packages_digest(version: str, base_identity: str, packages: Iterable[Package]) -> str:
    """
    SHA-1 over "<version>:<base identity>" then "\\0fp\\0name\\0sha1" per package,
    packages in fingerprint order.
    """
    h = hashlib.sha1()
    h.update(f"{version}:{base_identity}".encode("utf-8"))
    for pkg in sorted_packages(packages):
        h.update("\0".join(["", pkg.fingerprint, pkg.name, pkg.sha1]).encode("utf-8"))
    return h.hexdigest()


def image_reference(
    repository: str,
    version: str,
    base_identity: str,
    packages: Iterable[Package],
) -> str:
    """name:tag for the packages layer holding exactly these packages."""
    distinct = unique_by_fingerprint(packages)
    name = sanitize_docker_name(f"{repository}-role-packages")
    tag = sanitize_docker_name(packages_digest(version, base_identity, distinct))
    return f"{name}:{tag}"


class ImageNameComputer:
    def __init__(self, repository: str, version: str, base_identity: str):
        self.repository = repository
        self.version = version
        self.base_identity = base_identity

    def compute(self, roles: Sequence[Role]) -> str:
        return image_reference(
            self.repository,
            self.version,
            self.base_identity,
            iter_role_packages(roles),
        )
