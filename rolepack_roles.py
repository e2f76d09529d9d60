# rolepack_roles.py
# Example roles file: `rolepack context --roles rolepack_roles.py --stemcell <image>`
from __future__ import annotations

from rolepack.model import Package, Role, RoleJob

# Fingerprints and hashes come from the release compilation step
RUBY = Package(name="ruby-3.2", fingerprint="4c0e61b6a1a0c5a4f0e8", sha1="a3b1c9f00e7d")
NGINX = Package(name="nginx", fingerprint="9d1f3ae27b55c0a61e2c", sha1="1f0e2d7c44aa")
POSTGRES = Package(name="postgres-15", fingerprint="e7a0b3c9d2f14e5a6b70", sha1="77c0de5b31f2")


def roles():
    return [
        Role(
            name="api",
            jobs=[
                RoleJob(name="web", packages=[RUBY, NGINX]),
                RoleJob(name="scheduler", packages=[RUBY]),
            ],
        ),
        Role(name="database", jobs=[RoleJob(name="postgres", packages=[POSTGRES])]),
    ]
