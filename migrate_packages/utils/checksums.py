"""
Checksum helpers for uploaded artifacts.

Maven uploads need MD5, SHA-1 and SHA-256 sidecar files, npm publish
documents carry a SHA-1 shasum and a SHA-512 integrity string, and
container layers are addressed by their SHA-256 digest.
"""

import base64
import hashlib
import os
from typing import Dict, Iterable

# Read size for hashing
HASH_CHUNK_SIZE = 65536


def calculate_checksums(file_path: str, algorithms: Iterable[str] = ("md5", "sha1", "sha256")) -> Dict[str, str]:
    """
    Calculate several checksums of a file in one pass.

    Args:
        file_path: Path to the file to hash
        algorithms: hashlib algorithm names

    Returns:
        Mapping of algorithm name to hexadecimal digest

    Raises:
        FileNotFoundError: If the file does not exist
        IOError: If there's an error reading the file
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    hashers = {name: hashlib.new(name) for name in algorithms}

    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                for hasher in hashers.values():
                    hasher.update(chunk)
    except IOError as e:
        raise IOError(f"Error reading file {file_path}: {e}") from e

    return {name: hasher.hexdigest() for name, hasher in hashers.items()}


def calculate_sha256_checksum(file_path: str) -> str:
    """Calculate the hexadecimal SHA-256 checksum of a file."""
    return calculate_checksums(file_path, ("sha256",))["sha256"]


def sha256_digest(data: bytes) -> str:
    """Content address of an in-memory blob, in ``sha256:<hex>`` form."""
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def file_digest(file_path: str) -> str:
    """Content address of a file, in ``sha256:<hex>`` form."""
    return f"sha256:{calculate_sha256_checksum(file_path)}"


def sri_integrity(file_path: str) -> str:
    """Subresource integrity string (``sha512-<base64>``) used by npm."""
    sha512 = hashlib.sha512()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            sha512.update(chunk)
    return "sha512-" + base64.b64encode(sha512.digest()).decode("ascii")


__all__ = [
    "calculate_checksums",
    "calculate_sha256_checksum",
    "sha256_digest",
    "file_digest",
    "sri_integrity",
]
