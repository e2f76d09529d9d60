# context.py
from __future__ import annotations

import os
import posixpath
import tarfile
from typing import Callable, List, Sequence

from .catalog import base_label
from .dockerfile import DockerfileRenderer
from .errors import UsageError
from .matcher import LayerMatcher
from .model import Package, Role, unique_packages
from .tarstream import copy_tree, write_bytes
from .ui.console import get_console

DOCKERFILE_NAME = "Dockerfile"
PAYLOAD_ROOT = "packages-src"

Populator = Callable[[tarfile.TarFile], None]


class ContextPopulator:
    """
    Fills a tar stream with the docker build context of the packages layer:

      Dockerfile
      packages-src/
      packages-src/<fingerprint>/...   (one tree per package not yet in the base image)
    """

    def __init__(
        self,
        matcher: LayerMatcher,
        renderer: DockerfileRenderer,
        stemcell_image_name: str,
        compiled_packages_path: str | os.PathLike,
    ):
        self.matcher = matcher
        self.renderer = renderer
        self.stemcell_image_name = stemcell_image_name
        self.compiled_packages_path = compiled_packages_path

    def populator(self, roles: Sequence[Role], force_build_all: bool = False) -> Populator:
        """Return a function which populates a tar stream for these roles."""
        def populate(tar: tarfile.TarFile) -> None:
            self.populate(tar, roles, force_build_all=force_build_all)
        return populate

    def resolve(self, roles: Sequence[Role], force_build_all: bool = False) -> tuple[str, List[Package]]:
        """Returns (base image, packages to copy into the context)."""
        if not roles:
            raise UsageError("No roles to build")

        packages = unique_packages(roles)
        if force_build_all:
            # canonical from-scratch image
            return self.stemcell_image_name, packages
        return self.matcher.determine_base_image(packages)

    def populate(self, tar: tarfile.TarFile, roles: Sequence[Role], force_build_all: bool = False) -> None:
        base_image, packages = self.resolve(roles, force_build_all)
        get_console().print_base_image(base_image, len(packages), len(unique_packages(roles)))

        # the chain root is what later matches are restricted to
        root = self.stemcell_image_name if force_build_all else self.matcher.base_image_name
        dockerfile = self.renderer.render(
            base_image, packages, self.matcher.version_label, base_label(root)
        )
        write_bytes(tar, dockerfile.encode("utf-8"), DOCKERFILE_NAME)

        # The Dockerfile ADDs this directory even when there is nothing to add
        write_bytes(tar, b"", PAYLOAD_ROOT, mode=0o755, type=tarfile.DIRTYPE)

        for pkg in packages:
            get_console().print_debug(f"adding package {pkg.name} ({pkg.fingerprint})")
            copy_tree(
                tar,
                pkg.compiled_dir(self.compiled_packages_path),
                posixpath.join(PAYLOAD_ROOT, pkg.fingerprint),
            )
