# tarstream.py
from __future__ import annotations

import io
import os
import posixpath
import tarfile
import time
from typing import List

from .errors import FilesystemError, StreamError


# ---------------------------------------------------------------------
# In-memory entries
# ---------------------------------------------------------------------

def write_bytes(
    tar: tarfile.TarFile,
    data: bytes,
    name: str,
    *,
    mode: int = 0o644,
    type: bytes = tarfile.REGTYPE,
) -> None:
    """
    Write an in-memory entry into the tar stream.
    Directory entries (type=DIRTYPE) carry no payload.
    """
    info = tarfile.TarInfo(name=name)
    info.type = type
    info.mode = mode
    info.mtime = int(time.time())
    info.size = len(data) if type == tarfile.REGTYPE else 0
    fileobj = io.BytesIO(data) if info.size else None
    try:
        tar.addfile(info, fileobj=fileobj)
    except (OSError, tarfile.TarError) as e:
        raise StreamError(f"failed writing {name} to build context", {"error": e}) from e


# ---------------------------------------------------------------------
# Directory subtree copy
# ---------------------------------------------------------------------

class TarWalker:
    """
    Copies a directory subtree into a tar stream:
      root/   -> prefix
      root/a  -> prefix/a

    Symlinks are stored as links (targets preserved, never followed).
    """

    def __init__(self, tar: tarfile.TarFile, root: str | os.PathLike, prefix: str):
        self.tar = tar  # the stream to copy the files into
        self.root = os.fspath(root)  # where the walk starts on disk
        self.prefix = prefix.rstrip("/")  # name prefix inside the tar

    def walk(self) -> None:
        self._add(self.root, self.prefix)
        if os.path.islink(self.root) or not os.path.isdir(self.root):
            return

        def _raise(err: OSError) -> None:
            raise err

        try:
            for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
                # deterministic traversal
                dirnames.sort()
                rel_dir = os.path.relpath(dirpath, self.root)
                for name in self._entries(dirnames, filenames):
                    rel = name if rel_dir == os.curdir else os.path.join(rel_dir, name)
                    arcname = posixpath.join(self.prefix, *rel.split(os.sep))
                    self._add(os.path.join(dirpath, name), arcname)
        except OSError as e:
            raise FilesystemError(
                f"failed walking {self.root}",
                {"path": getattr(e, "filename", None) or self.root, "error": e},
            ) from e

    @staticmethod
    def _entries(dirnames: List[str], filenames: List[str]) -> List[str]:
        return sorted(dirnames + filenames)

    def _add(self, path: str, arcname: str) -> None:
        try:
            info = self.tar.gettarinfo(path, arcname=arcname)
        except OSError as e:
            raise FilesystemError(f"cannot stat {path}", {"error": e}) from e
        if info is None:
            raise FilesystemError(f"unsupported file type: {path}", {"path": path})

        if not info.isreg():
            self._write(info, None)
            return

        try:
            f = open(path, "rb")
        except OSError as e:
            raise FilesystemError(f"cannot read {path}", {"error": e}) from e
        with f:
            self._write(info, f)

    def _write(self, info: tarfile.TarInfo, fileobj) -> None:
        try:
            self.tar.addfile(info, fileobj=fileobj)
        except (OSError, tarfile.TarError) as e:
            raise StreamError(f"failed writing {info.name} to build context", {"error": e}) from e


def copy_tree(tar: tarfile.TarFile, root: str | os.PathLike, prefix: str) -> None:
    """Recursively copy root into tar under prefix."""
    TarWalker(tar, root, prefix).walk()
