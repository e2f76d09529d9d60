"""Tests for image catalogs and best-image matching."""

import json
import subprocess
from types import SimpleNamespace

import pytest

from rolepack.catalog import DockerImageCatalog, ImageRecord, MemoryImageCatalog, base_label, label_matches
from rolepack.errors import DependencyError

VERSION = "version.generator.rolepack=1.0"
BASE = {"base.generator.rolepack": "stemcell:1"}


def test_label_matches_key_value_and_bare_key():
    labels = {"version.generator.rolepack": "1.0", "fingerprint.a": "ruby"}

    assert label_matches(labels, "version.generator.rolepack=1.0")
    assert not label_matches(labels, "version.generator.rolepack=2.0")
    assert label_matches(labels, "fingerprint.a")
    assert not label_matches(labels, "fingerprint.b")


class TestFindBestImage:
    @pytest.fixture
    def catalog(self):
        catalog = MemoryImageCatalog()
        catalog.add("stemcell:1", "sha256:s")
        catalog.add("layer:one", "sha256:1", {**BASE, "fingerprint.a": "ruby", "version.generator.rolepack": "1.0"})
        catalog.add(
            "layer:two",
            "sha256:2",
            {**BASE, "fingerprint.a": "ruby", "fingerprint.b": "nginx", "version.generator.rolepack": "1.0"},
        )
        return catalog

    def test_most_specific_image_wins(self, catalog):
        ref, labels = catalog.find_best_image(
            "stemcell:1", ["fingerprint.a", "fingerprint.b", "fingerprint.c"], [VERSION]
        )

        assert ref == "layer:two"
        assert labels == {"fingerprint.a", "fingerprint.b", VERSION}

    def test_no_match_returns_base(self, catalog):
        ref, labels = catalog.find_best_image("stemcell:1", ["fingerprint.z"], [VERSION])

        assert ref == "stemcell:1"
        assert labels == set()

    def test_mandatory_label_mismatch_excludes_image(self, catalog):
        ref, labels = catalog.find_best_image(
            "stemcell:1", ["fingerprint.a", "fingerprint.b"], ["version.generator.rolepack=2.0"]
        )

        assert ref == "stemcell:1"
        assert labels == set()

    def test_image_with_unrequested_fingerprint_is_skipped(self, catalog):
        ref, labels = catalog.find_best_image("stemcell:1", ["fingerprint.a"], [VERSION])

        assert ref == "layer:one"
        assert labels == {"fingerprint.a", VERSION}

    def test_layer_built_on_another_stemcell_is_skipped(self, catalog):
        catalog.add(
            "other-role-packages:x",
            "sha256:x",
            {"base.generator.rolepack": "stemcell:2", "fingerprint.a": "ruby", "version.generator.rolepack": "1.0"},
        )
        catalog.add("stemcell:2", "sha256:s2")

        ref, labels = catalog.find_best_image("stemcell:2", ["fingerprint.a", "fingerprint.b"], [VERSION])
        assert ref == "other-role-packages:x"
        assert labels == {"fingerprint.a", VERSION}

        ref, _ = catalog.find_best_image("stemcell:1", ["fingerprint.a"], [VERSION])
        assert ref == "layer:one"

    def test_unlabeled_layer_never_matches(self):
        catalog = MemoryImageCatalog()
        catalog.add("stemcell-b:1", "sha256:b")
        catalog.add("other-role-packages:x", "sha256:x", {"fingerprint.a": "ruby", "version.generator.rolepack": "1.0"})

        ref, labels = catalog.find_best_image("stemcell-b:1", ["fingerprint.a"], [VERSION])

        assert ref == "stemcell-b:1"
        assert labels == set()

    def test_base_label(self):
        assert base_label("stemcell:1") == "base.generator.rolepack=stemcell:1"

    def test_ties_go_to_smallest_reference(self):
        catalog = MemoryImageCatalog(
            [
                ImageRecord("zz:1", "sha256:z", {"base.generator.rolepack": "base", "fingerprint.a": "ruby"}),
                ImageRecord("aa:1", "sha256:a", {"base.generator.rolepack": "base", "fingerprint.a": "ruby"}),
            ]
        )

        ref, _ = catalog.find_best_image("base", ["fingerprint.a"], [])

        assert ref == "aa:1"


class TestMemoryImageCatalog:
    def test_find_image_by_reference_id_and_implicit_latest(self):
        catalog = MemoryImageCatalog()
        catalog.add("stemcell:latest", "sha256:s")

        assert catalog.find_image("stemcell:latest") == "sha256:s"
        assert catalog.find_image("stemcell") == "sha256:s"
        assert catalog.find_image("sha256:s") == "sha256:s"

    def test_find_image_missing(self):
        with pytest.raises(DependencyError):
            MemoryImageCatalog().find_image("nope")


class FakeDocker:
    """Stands in for subprocess.run, answering docker CLI calls."""

    def __init__(self, inspect=None, ids="", returncode=0, stderr=""):
        self.inspect = inspect or []
        self.ids = ids
        self.returncode = returncode
        self.stderr = stderr
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.returncode:
            return SimpleNamespace(returncode=self.returncode, stdout="", stderr=self.stderr)
        if cmd[1:3] == ["image", "ls"]:
            out = self.ids
        elif "--format" in cmd:
            out = "sha256:stemcell\n"
        else:
            out = json.dumps(self.inspect)
        return SimpleNamespace(returncode=0, stdout=out, stderr="")


class TestDockerImageCatalog:
    def test_list_images_reads_tags_and_labels(self, monkeypatch):
        fake = FakeDocker(
            ids="sha256:1\nsha256:2\nsha256:1\nsha256:3\n",
            inspect=[
                {"Id": "sha256:1", "RepoTags": ["layer:one"], "Config": {"Labels": {"fingerprint.a": "ruby"}}},
                {"Id": "sha256:2", "RepoTags": [], "Config": {"Labels": {"fingerprint.b": "x"}}},
                {"Id": "sha256:3", "RepoTags": ["stemcell:1"], "Config": {"Labels": None}},
            ],
        )
        monkeypatch.setattr(subprocess, "run", fake)

        images = DockerImageCatalog("docker").list_images()

        assert images == [
            ImageRecord("layer:one", "sha256:1", {"fingerprint.a": "ruby"}),
            ImageRecord("stemcell:1", "sha256:3", {}),
        ]
        assert fake.calls[1] == ["docker", "image", "inspect", "sha256:1", "sha256:2", "sha256:3"]

    def test_list_images_empty(self, monkeypatch):
        fake = FakeDocker(ids="")
        monkeypatch.setattr(subprocess, "run", fake)

        assert DockerImageCatalog().list_images() == []
        assert len(fake.calls) == 1

    def test_find_image(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeDocker())

        assert DockerImageCatalog().find_image("stemcell:1") == "sha256:stemcell"

    def test_command_failure_is_dependency_error(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeDocker(returncode=1, stderr="Cannot connect to the Docker daemon"))

        with pytest.raises(DependencyError) as excinfo:
            DockerImageCatalog().find_best_image("stemcell:1", ["fingerprint.a"], [VERSION])

        assert excinfo.value.details["exit_code"] == 1
        assert "Cannot connect" in excinfo.value.details["stderr"]

    def test_missing_binary_is_dependency_error(self, monkeypatch):
        def boom(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(subprocess, "run", boom)

        with pytest.raises(DependencyError) as excinfo:
            DockerImageCatalog("no-such-docker").find_image("stemcell:1")

        assert "hint" in excinfo.value.details
