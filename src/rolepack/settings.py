from __future__ import annotations
import os

REPOSITORY = os.environ.get("ROLEPACK_REPOSITORY", "rolepack")
STEMCELL = os.environ.get("ROLEPACK_STEMCELL")
COMPILED_PACKAGES = os.environ.get("ROLEPACK_COMPILED_PACKAGES", ".rolepack/compiled")
OUTPUT_DIR = os.environ.get("ROLEPACK_OUTPUT_DIR", ".rolepack/contexts")
DOCKER_BIN = os.environ.get("ROLEPACK_DOCKER_BIN", "docker")
