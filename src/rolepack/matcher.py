# matcher.py
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .catalog import FINGERPRINT_LABEL_PREFIX, ImageCatalog
from .errors import DependencyError, PackError
from .model import Package
from .ui.console import get_console


def fingerprint_of_label(label: str) -> str | None:
    """'fingerprint.<fp>' -> '<fp>'; None for any other label shape."""
    parts = label.split(".")
    if len(parts) != 2 or parts[0] + "." != FINGERPRINT_LABEL_PREFIX:
        return None
    return parts[1]


class LayerMatcher:
    """
    Picks the base image for the packages layer.

    Given the packages the roles need, finds the most specific existing image
    (by fingerprint labels) and reports which packages it does not cover yet.
    """

    def __init__(self, catalog: ImageCatalog, base_image_name: str, version_label: str):
        self.catalog = catalog
        self.base_image_name = base_image_name  # stemcell, or a pinned override
        self.version_label = version_label

    @property
    def mandatory_labels(self) -> List[str]:
        return [self.version_label]

    def determine_base_image(self, packages: Sequence[Package]) -> Tuple[str, List[Package]]:
        """
        Returns (base image to build FROM, packages still to be added).
        """
        if not packages:
            return self.base_image_name, []

        remaining: Dict[str, Package] = {}
        labels: List[str] = []
        for pkg in packages:
            labels.append(pkg.fingerprint_label)
            remaining[pkg.fingerprint] = pkg

        try:
            matched_image, found_labels = self.catalog.find_best_image(
                self.base_image_name, labels, self.mandatory_labels
            )
        except PackError:
            raise
        except Exception as e:
            raise DependencyError(
                "image catalog lookup failed",
                {"base_image": self.base_image_name, "error": e},
            ) from e

        for label in found_labels:
            fingerprint = fingerprint_of_label(label)
            if fingerprint is None:
                # mandatory labels, i.e. the tool version
                continue
            remaining.pop(fingerprint, None)

        residual = list(remaining.values())
        get_console().print_debug(
            f"layer match: base={matched_image} covered={len(packages) - len(residual)} "
            f"residual={len(residual)}"
        )
        return matched_image, residual
