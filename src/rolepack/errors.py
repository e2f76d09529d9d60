# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict


@dataclass
class PackError(Exception):
    """
    Structured packaging error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    message: str
    details: Dict[str, object] = field(default_factory=dict)

    kind: ClassVar[str] = "error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class UsageError(PackError):
    """Nothing to build, or the caller handed us unusable input."""
    kind = "usage"


class DependencyError(PackError):
    """The image catalog could not be queried."""
    kind = "dependency"


class FilesystemError(PackError):
    """A package directory could not be walked or read."""
    kind = "filesystem"


class TemplateError(PackError):
    """The Dockerfile template failed to load or render."""
    kind = "template"


class StreamError(PackError):
    """Writing the build-context archive failed."""
    kind = "stream"
