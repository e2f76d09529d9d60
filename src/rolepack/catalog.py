# catalog.py
from __future__ import annotations

import json
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from .errors import DependencyError

FINGERPRINT_LABEL_PREFIX = "fingerprint."
BASE_LABEL_KEY = "base.generator.rolepack"

DOCKER_HINT = "Install Docker and ensure the daemon is running."


@dataclass(frozen=True)
class ImageRecord:
    """An existing image known to a catalog."""
    reference: str  # name:tag
    image_id: str
    labels: Dict[str, str] = field(default_factory=dict)


def label_matches(labels: Mapping[str, str], label: str) -> bool:
    """
    "key=value" matches when the image label `key` equals `value`;
    a bare "key" matches when the label is present at all.
    """
    if "=" in label:
        key, value = label.split("=", 1)
        return key in labels and labels[key] == value
    return label in labels


def base_label(base_name: str) -> str:
    """Label every packages layer carries for the image its chain starts FROM."""
    return f"{BASE_LABEL_KEY}={base_name}"


# ---------------------------------------------------------------------
# Catalog capability
# ---------------------------------------------------------------------

class ImageCatalog(ABC):
    """
    Lists labels of existing images. One adapter per backend; the
    best-match search is shared.
    """

    @abstractmethod
    def list_images(self) -> List[ImageRecord]:
        ...

    @abstractmethod
    def find_image(self, name: str) -> str:
        """Return the image ID for name; DependencyError if unknown."""

    def find_best_image(
        self,
        base_name: str,
        candidate_labels: Sequence[str],
        mandatory_labels: Sequence[str],
    ) -> Tuple[str, Set[str]]:
        """
        Find the image covering the most candidate labels.

        An image qualifies when it was built on base_name (it carries
        base_label(base_name)), carries every mandatory label and has no
        fingerprint label outside the candidates. Ties go to the smallest
        reference. Returns (base_name, empty set) when nothing qualifies.
        """
        candidates = set(candidate_labels)
        best_ref = base_name
        best_labels: Set[str] = set()
        required = [base_label(base_name), *mandatory_labels]

        for image in sorted(self.list_images(), key=lambda i: i.reference):
            if not all(label_matches(image.labels, m) for m in required):
                continue
            if any(
                key.startswith(FINGERPRINT_LABEL_PREFIX) and key not in candidates
                for key in image.labels
            ):
                # image bakes in packages nobody asked for
                continue

            matched = {label for label in candidates if label_matches(image.labels, label)}
            if len(matched) > len(best_labels):
                best_ref = image.reference
                best_labels = matched

        if not best_labels:
            return base_name, set()
        return best_ref, best_labels | set(mandatory_labels)


# ---------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------

class MemoryImageCatalog(ImageCatalog):
    """In-memory catalog (tests, offline runs)."""

    def __init__(self, images: Iterable[ImageRecord] = ()):
        self.images: List[ImageRecord] = list(images)

    def add(self, reference: str, image_id: str, labels: Mapping[str, str] | None = None) -> ImageRecord:
        record = ImageRecord(reference=reference, image_id=image_id, labels=dict(labels or {}))
        self.images.append(record)
        return record

    def list_images(self) -> List[ImageRecord]:
        return list(self.images)

    def find_image(self, name: str) -> str:
        for image in self.images:
            if name in (image.reference, image.image_id) or image.reference == f"{name}:latest":
                return image.image_id
        raise DependencyError(f"image not found: {name}", {"catalog": "memory"})


class DockerImageCatalog(ImageCatalog):
    """Catalog backed by the local Docker daemon, via the docker CLI."""

    def __init__(self, docker_bin: str = "docker"):
        self.docker_bin = docker_bin

    def _run(self, *args: str) -> str:
        cmd = [self.docker_bin, *args]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise DependencyError(
                "Docker is not available",
                {"command": " ".join(cmd), "hint": DOCKER_HINT},
            ) from e
        if proc.returncode != 0:
            raise DependencyError(
                f"docker {args[0]} {args[1]} failed",
                {
                    "command": " ".join(cmd),
                    "exit_code": proc.returncode,
                    "stderr": (proc.stderr or "").strip(),
                },
            )
        return proc.stdout

    def list_images(self) -> List[ImageRecord]:
        ids: List[str] = []
        for line in self._run("image", "ls", "--quiet", "--no-trunc").split():
            if line not in ids:
                ids.append(line)
        if not ids:
            return []

        try:
            inspected = json.loads(self._run("image", "inspect", *ids))
        except json.JSONDecodeError as e:
            raise DependencyError("could not parse docker image inspect output", {"error": e}) from e

        images: List[ImageRecord] = []
        for item in inspected:
            tags = item.get("RepoTags") or []
            if not tags:
                # dangling layers cannot be built FROM by name
                continue
            labels = (item.get("Config") or {}).get("Labels") or {}
            images.append(ImageRecord(reference=tags[0], image_id=item.get("Id", ""), labels=dict(labels)))
        return images

    def find_image(self, name: str) -> str:
        image_id = self._run("image", "inspect", "--format", "{{.Id}}", name).strip()
        if not image_id:
            raise DependencyError(f"image not found: {name}", {"catalog": "docker"})
        return image_id
