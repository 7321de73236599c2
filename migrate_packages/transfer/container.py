"""
Container image publishing.

Layers are content addressed: each layer digest is probed at the target
before upload and skipped when already present. Uploads of the same digest
into the same repository are serialized, so concurrent versions sharing a
layer push it once and the later ones find it through the probe. A Docker
image config is generated from the layers and uploaded the same way, then
a schema 2 manifest referencing config and layers is put under the
version tag.
"""

import gzip
import hashlib
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..api.target_client import TargetRegistryClient
from ..exceptions import DescriptorError
from ..models.transfer import TransferSpec
from ..utils.checksums import HASH_CHUNK_SIZE, file_digest, sha256_digest
from ..utils.constants import (
    CONTAINER_CONFIG_MEDIA_TYPE,
    CONTAINER_HISTORY_COMMENT,
    CONTAINER_LAYER_MEDIA_TYPE,
    CONTAINER_LAYER_SUFFIXES,
    CONTAINER_MANIFEST_MEDIA_TYPE,
)
from .retry import RetryPolicy

# Media type of uncompressed tar layers
UNCOMPRESSED_LAYER_MEDIA_TYPE = "application/vnd.docker.image.rootfs.diff.tar"

GZIP_MAGIC = b"\x1f\x8b"


class DigestLocks:
    """One lock per (repository, digest), created on first use."""

    def __init__(self) -> None:
        self._locks: Dict[Tuple[str, str], threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, repository: str, digest: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault((repository, digest), threading.Lock())


def is_layer_file(path: Path) -> bool:
    """Check whether a file is an image layer."""
    return path.name.endswith(CONTAINER_LAYER_SUFFIXES)


def _is_gzip(path: Path) -> bool:
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


def diff_id(path: Path) -> str:
    """Digest of the uncompressed layer tar, as listed in the image config rootfs."""
    if not _is_gzip(path):
        return file_digest(str(path))

    sha256 = hashlib.sha256()
    with gzip.open(path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            sha256.update(chunk)
    return f"sha256:{sha256.hexdigest()}"


def build_image_config(diff_ids: List[str], created: datetime) -> bytes:
    """
    Generate a minimal Docker image config for the given layers.

    Args:
        diff_ids: Uncompressed layer digests in layer order
        created: Creation timestamp recorded in the history

    Returns:
        Canonical JSON bytes of the config
    """
    config = {
        "architecture": "amd64",
        "os": "linux",
        "rootfs": {"type": "layers", "diff_ids": diff_ids},
        "history": [{"created": created.isoformat(), "comment": CONTAINER_HISTORY_COMMENT}],
    }
    return json.dumps(config, sort_keys=True, separators=(",", ":")).encode("utf-8")


def build_manifest(
    config_digest: str, config_size: int, layers: List[Dict[str, Any]], metadata: Dict[str, Any]
) -> Dict[str, Any]:
    """Build a schema 2 manifest; string metadata values become annotations."""
    manifest: Dict[str, Any] = {
        "schemaVersion": 2,
        "mediaType": CONTAINER_MANIFEST_MEDIA_TYPE,
        "config": {"mediaType": CONTAINER_CONFIG_MEDIA_TYPE, "size": config_size, "digest": config_digest},
        "layers": layers,
    }
    annotations = {k: v for k, v in metadata.items() if isinstance(v, str)}
    if annotations:
        manifest["annotations"] = annotations
    return manifest


class ContainerPublisher:
    """Publish container image versions to the target registry."""

    def __init__(self, target: TargetRegistryClient, retry: RetryPolicy, locks: Optional[DigestLocks] = None) -> None:
        self.target = target
        self.retry = retry
        self.locks = locks or DigestLocks()

    def ensure_blob(self, repository: str, digest: str, content: Union[Path, bytes]) -> bool:
        """
        Upload a blob unless the target already has it.

        Returns:
            True if the blob was uploaded, False if it already existed
        """
        with self.locks.get(repository, digest):
            exists = self.retry.run(f"check blob {digest}", lambda: self.target.blob_exists(repository, digest))
            if exists:
                logging.debug("Blob %s already present in %s, skipping", digest, repository)
                return False

            self.retry.run(f"upload blob {digest}", lambda: self.target.upload_blob(repository, digest, content))
            logging.info("Uploaded blob %s to %s", digest, repository)
            return True

    def publish(self, spec: TransferSpec) -> Dict[str, Any]:
        """
        Upload layers, config and manifest for one version.

        Returns:
            The manifest that was uploaded

        Raises:
            DescriptorError: If the version contains no layer files
            TransferError: If any upload fails after all attempts
        """
        layer_files = [p for p in spec.files if is_layer_file(p)]
        if not layer_files:
            raise DescriptorError(f"no layer files found for {spec.package_name} {spec.version}")

        layers = []
        diff_ids = []
        for path in layer_files:
            digest = file_digest(str(path))
            self.ensure_blob(spec.package_name, digest, path)
            compressed = _is_gzip(path)
            layers.append(
                {
                    "mediaType": CONTAINER_LAYER_MEDIA_TYPE if compressed else UNCOMPRESSED_LAYER_MEDIA_TYPE,
                    "size": path.stat().st_size,
                    "digest": digest,
                }
            )
            diff_ids.append(diff_id(path))

        config = build_image_config(diff_ids, datetime.now(timezone.utc))
        config_digest = sha256_digest(config)
        self.ensure_blob(spec.package_name, config_digest, config)

        manifest = build_manifest(config_digest, len(config), layers, spec.metadata)
        self.retry.run(
            f"upload manifest {spec.package_name}:{spec.version}",
            lambda: self.target.put_manifest(spec.package_name, spec.version, manifest),
        )
        logging.info("Uploaded manifest %s:%s with %d layers", spec.package_name, spec.version, len(layers))
        return manifest


__all__ = [
    "DigestLocks",
    "ContainerPublisher",
    "is_layer_file",
    "diff_id",
    "build_image_config",
    "build_manifest",
]
