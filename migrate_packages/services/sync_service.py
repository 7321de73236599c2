"""
Sync service for migrating packages between organizations.

This module wires the catalog fetch, the concurrency controller, the
transfer pipeline and the result aggregator into one run. Only fetch and
configuration errors abort a run; every package that was fetched gets
exactly one TransferReport.
"""

import logging
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from ..api import SourceRegistryClient, TargetRegistryClient
from ..exceptions import UnsupportedPackageTypeError, ValidationError, VisibilityPropagationError
from ..models.context import SyncContext
from ..models.packages import Package
from ..models.results import MigrationSummary, TransferReport, VersionResult
from ..transfer import ResultAggregator, RetryPolicy, TransferPipeline, build_upload_strategies
from ..transfer.container import DigestLocks
from ..utils import ConcurrencyController, NameMappingResolver, log_operation_start, log_progress
from ..utils.validation import get_validator


class SyncService:
    """
    High-level service for sync operations.

    Collaborators can be injected for testing; by default they are built
    from the SyncContext.
    """

    def __init__(
        self,
        context: SyncContext,
        *,
        source: Optional[SourceRegistryClient] = None,
        target: Optional[TargetRegistryClient] = None,
        mapping: Optional[NameMappingResolver] = None,
        aggregator: Optional[ResultAggregator] = None,
        cancel_event: Optional[threading.Event] = None,
        retry: Optional[RetryPolicy] = None,
    ) -> None:
        self.context = context
        self.cancel_event = cancel_event or threading.Event()
        self.source = source or SourceRegistryClient(context.source_token, context.source_hostname)
        self.target = target or TargetRegistryClient(context.target_organization, context.target_token)
        self.mapping = mapping
        self.aggregator = aggregator or ResultAggregator()
        self.retry = retry or RetryPolicy(context.max_retries, context.retry_delay, self.cancel_event)
        self.controller = ConcurrencyController(context.max_workers, context.max_version_workers, self.cancel_event)
        self._completed = 0
        self._total = 0
        self._progress_lock = threading.Lock()

    def load_mapping(self) -> NameMappingResolver:
        """
        Load the name mapping once before the run.

        Raises:
            MappingFileError: If the mapping file cannot be read
        """
        if self.mapping is None:
            if self.context.mapping_file:
                self.mapping = NameMappingResolver.from_csv(self.context.mapping_file)
            else:
                self.mapping = NameMappingResolver()
        return self.mapping

    def fetch_packages(self) -> List[Package]:
        """
        Fetch the source catalog.

        Raises:
            FetchError: If the catalog could not be fetched
        """
        return self.source.fetch_packages(self.context.source_organization, self.context.package_type)

    def run(self) -> MigrationSummary:
        """
        Migrate every package of the source organization.

        Returns:
            Summary of all package reports

        Raises:
            MappingFileError: If the mapping file cannot be read
            FetchError: If the catalog could not be fetched
        """
        mapping = self.load_mapping()
        packages = self.fetch_packages()
        self._total = len(packages)

        log_operation_start(
            "package migration",
            source=self.context.source_organization,
            target=self.context.target_organization,
            packages=len(packages),
        )

        if self.context.work_dir:
            return self._run(packages, mapping, Path(self.context.work_dir), cleanup=False)

        with tempfile.TemporaryDirectory(prefix="migrate-packages-") as work_dir:
            return self._run(packages, mapping, Path(work_dir), cleanup=True)

    def _run(
        self, packages: List[Package], mapping: NameMappingResolver, work_dir: Path, cleanup: bool
    ) -> MigrationSummary:
        pipeline = TransferPipeline(
            self.source,
            self.target,
            work_dir,
            self.retry,
            skip_existing=self.context.skip_existing,
            cleanup=cleanup,
            strategies=build_upload_strategies(self.target, self.retry, DigestLocks()),
        )

        def migrate(package: Package) -> None:
            self.migrate_package(package, pipeline, mapping)

        def not_started(package: Package) -> None:
            self.aggregator.submit(
                TransferReport.failure(
                    package.name, mapping.resolve(package.name), package.package_type, "cancelled before start"
                )
            )

        self.aggregator.start()
        try:
            self.controller.run_packages(packages, migrate, on_not_started=not_started)
        finally:
            self.aggregator.close()
            summary = self.aggregator.join()

        return summary

    def migrate_package(self, package: Package, pipeline: TransferPipeline, mapping: NameMappingResolver) -> None:
        """
        Validate, transfer and report one package.

        Exactly one report is submitted, whatever happens inside.
        """
        target_name = mapping.resolve(package.name)
        report = TransferReport.failure(package.name, target_name, package.package_type, "migration did not complete")

        try:
            try:
                get_validator(package.package_type).validate_package(package)
            except (UnsupportedPackageTypeError, ValidationError) as e:
                logging.warning("Package %s validation failed: %s", package.name, e)
                report = TransferReport.failure(package.name, target_name, package.package_type, str(e))
                return

            if target_name != package.name:
                logging.info("Migrating %s as %s", package.name, target_name)

            results: List[VersionResult] = self.controller.map_versions(
                list(package.versions), lambda version: pipeline.run_version(package, version, target_name)
            )

            if any(r.succeeded for r in results):
                try:
                    pipeline.propagate_visibility(package, target_name)
                except VisibilityPropagationError as e:
                    logging.warning("Error updating visibility for package %s: %s", target_name, e)

            report = TransferReport.from_versions(
                package.name, target_name, package.package_type, results, total_size=package.total_size
            )
        except Exception as e:
            logging.error("Unexpected error migrating %s: %s", package.name, e)
            report = TransferReport.failure(package.name, target_name, package.package_type, str(e))
        finally:
            self.aggregator.submit(report)
            with self._progress_lock:
                self._completed += 1
                log_progress(self._completed, self._total, "Packages migrated", interval=5)

    def close(self) -> None:
        """Close both registry clients."""
        self.source.close()
        self.target.close()


__all__ = ["SyncService"]
