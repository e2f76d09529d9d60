# model.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class Package:
    """
    A compiled package, as produced by the release/fingerprinting collaborator.

    Equal fingerprints imply byte-identical compiled content; nothing in this
    package re-validates that.
    """
    name: str
    fingerprint: str
    sha1: str  # content hash of the compiled artifact
    compiled_path: Optional[str] = None  # overrides the layout under compiled_packages_path

    def compiled_dir(self, compiled_packages_path: str | os.PathLike) -> str:
        """Directory holding the compiled artifact for this package."""
        if self.compiled_path:
            return os.fspath(self.compiled_path)
        return os.path.join(os.fspath(compiled_packages_path), self.fingerprint, "compiled")

    @property
    def fingerprint_label(self) -> str:
        return f"fingerprint.{self.fingerprint}"


@dataclass
class RoleJob:
    """A job inside a role; only its package references matter here."""
    name: str
    packages: List[Package] = field(default_factory=list)


@dataclass
class Role:
    """A deployable unit made of jobs."""
    name: str
    jobs: List[RoleJob] = field(default_factory=list)


def iter_role_packages(roles: Iterable[Role]) -> Iterator[Package]:
    for role in roles:
        for role_job in role.jobs:
            yield from role_job.packages


def unique_by_fingerprint(packages: Iterable[Package]) -> List[Package]:
    """One package per fingerprint; the first occurrence wins, order is kept."""
    seen: set[str] = set()
    out: List[Package] = []
    for pkg in packages:
        if pkg.fingerprint in seen:
            # Already found (possibly via a different role)
            continue
        seen.add(pkg.fingerprint)
        out.append(pkg)
    return out


def unique_packages(roles: Iterable[Role]) -> List[Package]:
    """Collect packages across all roles and jobs, keyed by fingerprint."""
    return unique_by_fingerprint(iter_role_packages(roles))


def sorted_packages(packages: Iterable[Package]) -> List[Package]:
    """Total order over fingerprints."""
    return sorted(packages, key=lambda p: p.fingerprint)
