# builder.py
from __future__ import annotations

import os
import tarfile
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Tuple

from . import __version__
from .catalog import ImageCatalog
from .context import ContextPopulator, Populator
from .dockerfile import DockerfileRenderer
from .errors import FilesystemError, StreamError
from .matcher import LayerMatcher
from .model import Package, Role
from .naming import ImageNameComputer
from .ui.console import get_console


class PackagesImageBuilder:
    """
    Builder of the shared packages layer docker image.

    Wires layer matching, Dockerfile rendering and tar population together for
    one repository/stemcell pair.
    """

    def __init__(
        self,
        repository: str,
        stemcell_image_name: str,
        compiled_packages_path: str | os.PathLike,
        target_path: str | os.PathLike,
        catalog: ImageCatalog,
        *,
        version: str = __version__,
        stemcell_image_id: Optional[str] = None,
        base_image_override: Optional[str] = None,
        renderer: Optional[DockerfileRenderer] = None,
    ):
        """
        Args:
            stemcell_image_id: identity of the stemcell used in the image name;
                looked up once in the catalog when not given.
            base_image_override: image to match layers against instead of the
                stemcell (pins the base in tests).
        """
        self.target_path = Path(target_path)
        try:
            self.target_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"cannot create {self.target_path}", {"error": e}) from e

        if not stemcell_image_id:
            stemcell_image_id = catalog.find_image(stemcell_image_name)

        self.repository = repository
        self.stemcell_image_name = stemcell_image_name
        self.stemcell_image_id = stemcell_image_id
        self.compiled_packages_path = compiled_packages_path
        self.version = version
        self.catalog = catalog

        self.matcher = LayerMatcher(
            catalog,
            base_image_override or stemcell_image_name,
            self.version_label(),
        )
        self.populator = ContextPopulator(
            self.matcher,
            renderer or DockerfileRenderer(),
            stemcell_image_name,
            compiled_packages_path,
        )
        self.namer = ImageNameComputer(repository, version, stemcell_image_id)

    def version_label(self) -> str:
        return "version.generator.rolepack={}".format(self.version.replace("+", "_"))

    def determine_base_image(self, packages: Sequence[Package]) -> Tuple[str, List[Package]]:
        return self.matcher.determine_base_image(packages)

    def new_populator(self, roles: Sequence[Role], force_build_all: bool = False) -> Populator:
        return self.populator.populator(roles, force_build_all)

    def image_name(self, roles: Sequence[Role]) -> str:
        """Docker image name for the amalgamation of all packages used by roles."""
        return self.namer.compute(roles)

    def write_context(self, roles: Sequence[Role], fileobj: BinaryIO, force_build_all: bool = False) -> None:
        """Write the build context as an uncompressed tar into fileobj."""
        populate = self.new_populator(roles, force_build_all)
        try:
            with tarfile.open(fileobj=fileobj, mode="w|") as tar:
                populate(tar)
        except (OSError, tarfile.TarError) as e:
            raise StreamError("failed writing build context", {"error": e}) from e

    def write_context_tarball(self, roles: Sequence[Role], force_build_all: bool = False) -> Path:
        """
        Write the build context to <target_path>/<name>-<tag>.tar.
        Nothing is left behind if any step fails.
        """
        name, tag = self.image_name(roles).split(":", 1)
        out = self.target_path / f"{name}-{tag}.tar"
        tmp = out.with_suffix(".tar.tmp")
        try:
            # Build in tmp, then atomic rename
            with tmp.open("wb") as f:
                self.write_context(roles, f, force_build_all)
            tmp.replace(out)
        except OSError as e:
            raise StreamError(f"failed writing {out}", {"error": e}) from e
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)

        get_console().print_debug(f"wrote build context {out}")
        return out
