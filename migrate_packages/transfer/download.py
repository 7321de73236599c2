"""
Download operations for package versions.

Files are laid out as ``<root>/<type>/<package>/<version>/<file>``. A file
that already exists with the size reported by the catalog is not
downloaded again.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..api.source_client import SourceRegistryClient
from ..models.packages import Package, Version
from ..utils.constants import VERSION_METADATA_FILENAME
from ..utils.path_utils import file_has_size, get_version_directory, safe_path_component
from .retry import RetryPolicy


def download_version(
    source: SourceRegistryClient,
    package: Package,
    version: Version,
    root: Path,
    retry: RetryPolicy,
    cancel_event: Optional[threading.Event] = None,
) -> List[Path]:
    """
    Download every file of a version.

    Each file download is retried independently.

    Args:
        source: Source registry client
        package: Package owning the version
        version: Version to download
        root: Download root directory
        retry: Retry policy applied per file
        cancel_event: Cancellation event checked while streaming

    Returns:
        Local paths in catalog file order

    Raises:
        TransferError: If a file could not be downloaded after all attempts
        TransferCancelledError: If the run was cancelled
    """
    directory = get_version_directory(root, package.package_type, package.name, version.name)
    paths = []

    for package_file in version.files:
        destination = directory / safe_path_component(package_file.name)
        paths.append(destination)

        if package_file.size and file_has_size(destination, package_file.size):
            logging.debug("Skipping existing file %s", destination)
            continue
        if not package_file.url:
            raise ValueError(f"file {package_file.name} of {package.name} {version.name} has no download URL")

        retry.run(
            f"download {package.name} {version.name}/{package_file.name}",
            lambda f=package_file, d=destination: source.download_file(f.url, d, cancel_event),
        )

    logging.debug("Downloaded %d files of %s %s to %s", len(paths), package.name, version.name, directory)
    return paths


def write_version_metadata(directory: Path, package: Package, version: Version) -> Path:
    """
    Write a ``metadata.json`` describing the version next to its files.

    Args:
        directory: Version directory
        package: Package owning the version
        version: Version described

    Returns:
        Path of the metadata file
    """
    directory.mkdir(parents=True, exist_ok=True)
    document = {
        "package": {
            "id": package.id,
            "name": package.name,
            "type": package.package_type,
            "visibility": package.visibility,
            "repository": package.repository.model_dump(),
            "statistics": {"downloads_total_count": package.downloads_total_count},
        },
        "version": {
            "id": version.id,
            "name": version.name,
            "created_at": version.created_at.isoformat() if version.created_at else None,
            "updated_at": version.updated_at.isoformat() if version.updated_at else None,
            "metadata": version.metadata,
            "files": [f.model_dump() for f in version.files],
        },
        "exported_at": datetime.now(timezone.utc).isoformat(),
    }
    path = directory / VERSION_METADATA_FILENAME
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    return path


__all__ = ["download_version", "write_version_metadata"]
