"""
Tests for container image publishing.

This module tests layer deduplication, config generation and manifest
upload against a recording target double.
"""

import hashlib
import json
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from migrate_packages.exceptions import DescriptorError
from migrate_packages.models import TransferSpec
from migrate_packages.transfer import ContainerPublisher, DigestLocks
from migrate_packages.transfer.container import build_image_config, build_manifest, diff_id, is_layer_file
from migrate_packages.utils.constants import CONTAINER_MANIFEST_MEDIA_TYPE


class RecordingRegistry:
    """Target double that stores blobs and manifests in memory."""

    def __init__(self, organization="target-org"):
        self.organization = organization
        self.blobs = {}
        self.uploads = []
        self.manifests = {}
        self._lock = threading.Lock()

    def blob_exists(self, repository, digest):
        with self._lock:
            return (repository, digest) in self.blobs

    def upload_blob(self, repository, digest, content):
        data = content.read_bytes() if hasattr(content, "read_bytes") else content
        with self._lock:
            self.uploads.append((repository, digest))
            self.blobs[(repository, digest)] = data

    def put_manifest(self, repository, reference, manifest):
        with self._lock:
            self.manifests[(repository, reference)] = manifest


@pytest.fixture
def registry():
    """In-memory container registry."""
    return RecordingRegistry()


def _spec(tmp_path, version, layers):
    directory = tmp_path / version
    directory.mkdir()
    files = []
    for name, content in layers:
        path = directory / name
        path.write_bytes(content)
        files.append(path)
    return TransferSpec(
        organization="target-org",
        package_name="api",
        version=version,
        package_type="container",
        files=tuple(files),
        metadata={"summary": "API server", "pre_release": False},
    )


class TestHelpers:
    """Test layer and config helpers."""

    def test_is_layer_file(self, tmp_path):
        """Test layer detection by suffix."""
        assert is_layer_file(tmp_path / "layer.tar.gz")
        assert is_layer_file(tmp_path / "layer.tar")
        assert not is_layer_file(tmp_path / "metadata.json")

    def test_diff_id_of_compressed_layer(self, tmp_path, artifacts):
        """Test diff IDs hash the uncompressed content."""
        path = tmp_path / "layer.tar.gz"
        path.write_bytes(artifacts.layer(b"uncompressed tar"))

        assert diff_id(path) == "sha256:" + hashlib.sha256(b"uncompressed tar").hexdigest()

    def test_diff_id_of_plain_layer(self, tmp_path):
        """Test uncompressed layers are their own diff ID."""
        path = tmp_path / "layer.tar"
        path.write_bytes(b"plain tar")

        assert diff_id(path) == "sha256:" + hashlib.sha256(b"plain tar").hexdigest()

    def test_build_image_config(self):
        """Test the config lists diff IDs in order."""
        config = json.loads(build_image_config(["sha256:a", "sha256:b"], datetime(2024, 1, 1, tzinfo=timezone.utc)))

        assert config["rootfs"] == {"type": "layers", "diff_ids": ["sha256:a", "sha256:b"]}
        assert config["os"] == "linux"

    def test_build_manifest_annotations(self):
        """Test only string metadata becomes annotations."""
        manifest = build_manifest("sha256:c", 10, [], {"summary": "API", "pre_release": False})

        assert manifest["mediaType"] == CONTAINER_MANIFEST_MEDIA_TYPE
        assert manifest["config"]["digest"] == "sha256:c"
        assert manifest["annotations"] == {"summary": "API"}

    def test_build_manifest_without_annotations(self):
        """Test no annotations key without string metadata."""
        assert "annotations" not in build_manifest("sha256:c", 10, [], {})


class TestContainerPublisher:
    """Test publishing versions."""

    def test_publish(self, registry, fast_retry, tmp_path, artifacts):
        """Test layers, config and manifest are uploaded."""
        spec = _spec(tmp_path, "1.0.0", [("base.tar.gz", artifacts.layer(b"base")), ("metadata.json", b"{}")])

        manifest = ContainerPublisher(registry, fast_retry).publish(spec)

        assert len(manifest["layers"]) == 1
        assert manifest["layers"][0]["mediaType"].endswith("tar.gzip")
        assert registry.manifests[("api", "1.0.0")] == manifest
        assert ("api", manifest["config"]["digest"]) in registry.blobs
        assert len(registry.uploads) == 2

    def test_existing_blob_skipped(self, registry, fast_retry, tmp_path, artifacts):
        """Test blobs already in the target are not uploaded."""
        publisher = ContainerPublisher(registry, fast_retry)

        assert publisher.ensure_blob("api", "sha256:abc", b"data")
        assert not publisher.ensure_blob("api", "sha256:abc", b"data")
        assert registry.uploads == [("api", "sha256:abc")]

    def test_no_layers(self, registry, fast_retry, tmp_path):
        """Test versions without layer files are rejected."""
        spec = _spec(tmp_path, "1.0.0", [("metadata.json", b"{}")])

        with pytest.raises(DescriptorError, match="no layer files"):
            ContainerPublisher(registry, fast_retry).publish(spec)

    def test_shared_layer_uploaded_once(self, registry, fast_retry, tmp_path, artifacts):
        """Test concurrent versions sharing a layer push it exactly once."""
        shared = artifacts.layer(b"shared base layer")
        specs = [
            _spec(tmp_path, f"1.{i}.0", [("base.tar.gz", shared), ("app.tar.gz", artifacts.layer(f"app {i}".encode()))])
            for i in range(4)
        ]
        publisher = ContainerPublisher(registry, fast_retry, DigestLocks())

        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(publisher.publish, specs))

        shared_digest = "sha256:" + hashlib.sha256(shared).hexdigest()
        assert registry.uploads.count(("api", shared_digest)) == 1
        assert len(registry.manifests) == 4

    def test_digest_locks_are_per_repository(self):
        """Test the same digest in different repositories uses different locks."""
        locks = DigestLocks()

        assert locks.get("api", "sha256:a") is locks.get("api", "sha256:a")
        assert locks.get("api", "sha256:a") is not locks.get("web", "sha256:a")
