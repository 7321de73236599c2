"""
Export service: catalog CSVs and optional artifact download.

Writes ``<prefix>_packages.csv`` and ``<prefix>_versions.csv`` for an
organization and, when requested, downloads every version's files into
``<download_path>/<type>/<package>/<version>/`` together with a
``metadata.json`` describing the version.
"""

import csv
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Tuple

import httpx

from ..api import SourceRegistryClient
from ..exceptions import MigrationError
from ..models.context import ExportContext
from ..models.packages import Package, Version
from ..models.results import ExportResult
from ..transfer import RetryPolicy, download_version, write_version_metadata
from ..utils import format_file_size, get_version_directory, log_operation_complete, log_progress
from ..utils.constants import PACKAGES_CSV_HEADER, VERSIONS_CSV_HEADER


def write_packages_csv(path: str, packages: List[Package]) -> None:
    """Write one row per package."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(PACKAGES_CSV_HEADER)
        for package in packages:
            writer.writerow(
                [
                    package.id,
                    package.name,
                    package.package_type,
                    package.repository.name,
                    package.repository.url,
                    package.downloads_total_count,
                    package.version_count,
                ]
            )


def write_versions_csv(path: str, packages: List[Package]) -> None:
    """Write one row per version."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(VERSIONS_CSV_HEADER)
        for package in packages:
            for version in package.versions:
                writer.writerow(
                    [
                        package.id,
                        package.name,
                        version.id,
                        version.name,
                        version.created_at.isoformat() if version.created_at else "",
                        version.updated_at.isoformat() if version.updated_at else "",
                        len(version.files),
                        version.total_size,
                    ]
                )


class ExportService:
    """High-level service for export operations."""

    def __init__(
        self,
        context: ExportContext,
        *,
        source: Optional[SourceRegistryClient] = None,
        retry: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.context = context
        self.cancel_event = cancel_event or threading.Event()
        self.source = source or SourceRegistryClient(context.token, context.hostname)
        self.retry = retry or RetryPolicy(cancel_event=self.cancel_event)

    def run(self) -> ExportResult:
        """
        Export the organization's catalog.

        Returns:
            ExportResult with counts and CSV paths

        Raises:
            FetchError: If the catalog could not be fetched
            OSError: If a CSV file cannot be written
        """
        packages = self.source.fetch_packages(self.context.organization, self.context.package_type)

        packages_csv = f"{self.context.prefix}_packages.csv"
        versions_csv = f"{self.context.prefix}_versions.csv"
        write_packages_csv(packages_csv, packages)
        write_versions_csv(versions_csv, packages)

        result = ExportResult(
            packages_count=len(packages),
            versions_count=sum(p.version_count for p in packages),
            packages_csv=packages_csv,
            versions_csv=versions_csv,
        )
        log_operation_complete("CSV export", packages=result.packages_count, versions=result.versions_count)

        if self.context.download:
            self.download_all(packages, result)

        return result

    def _download_one(self, package: Package, version: Version) -> int:
        root = Path(self.context.download_path)
        write_version_metadata(
            get_version_directory(root, package.package_type, package.name, version.name), package, version
        )
        download_version(self.source, package, version, root, self.retry, self.cancel_event)
        return version.total_size

    def download_all(self, packages: List[Package], result: ExportResult) -> None:
        """
        Download every version, at most ``max_workers`` at a time.

        Failures are counted per version and never stop other downloads.
        """
        tasks: List[Tuple[Package, Version]] = [(p, v) for p in packages for v in p.versions]
        total = len(tasks)
        logging.info("Downloading %d versions to %s", total, self.context.download_path)

        with ThreadPoolExecutor(max_workers=self.context.max_workers, thread_name_prefix="download") as executor:
            futures = {executor.submit(self._download_one, p, v): (p, v) for p, v in tasks}
            for done, future in enumerate(as_completed(futures), start=1):
                package, version = futures[future]
                try:
                    result.bytes_downloaded += future.result()
                    result.downloads_completed += 1
                except (MigrationError, httpx.HTTPError, OSError, ValueError) as e:
                    logging.error("Failed to download %s %s: %s", package.name, version.name, e)
                    result.downloads_failed += 1
                log_progress(done, total, "Versions downloaded")

        log_operation_complete(
            "download",
            complete=result.downloads_completed,
            failed=result.downloads_failed,
            size=format_file_size(result.bytes_downloaded),
        )

    def close(self) -> None:
        """Close the source client."""
        self.source.close()


__all__ = ["ExportService", "write_packages_csv", "write_versions_csv"]
