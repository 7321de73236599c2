"""
Transfer pipeline for package versions.

A version goes through: validate, optional existence probe, download,
size check, upload through the package type's strategy, metadata
propagation. Visibility is propagated once per package after all of its
versions. Failures of one version never affect its siblings.
"""

import logging
import shutil
import threading
from pathlib import Path
from typing import Mapping, Optional

import httpx

from ..api.source_client import SourceRegistryClient
from ..api.target_client import TargetRegistryClient
from ..exceptions import (
    MetadataPropagationError,
    MigrationError,
    TransferError,
    VisibilityPropagationError,
)
from ..models.packages import Package, PackageType, Version
from ..models.results import VersionResult
from ..models.transfer import TransferSpec
from ..protocols import UploadStrategy
from ..utils.path_utils import get_version_directory
from ..utils.validation import get_validator
from .download import download_version
from .retry import RetryPolicy
from .upload import build_upload_strategies


class TransferPipeline:
    """Move versions from the source organization to the target organization."""

    def __init__(
        self,
        source: SourceRegistryClient,
        target: TargetRegistryClient,
        work_dir: Path,
        retry: RetryPolicy,
        *,
        skip_existing: bool = False,
        cleanup: bool = False,
        strategies: Optional[Mapping[PackageType, UploadStrategy]] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            source: Source registry client
            target: Target registry client
            work_dir: Directory downloaded files are staged in
            retry: Retry policy applied to every network mutation
            skip_existing: Skip versions that already exist in the target
            cleanup: Remove each version's staged files once it is done
            strategies: Upload strategies (defaults to one per package type)
        """
        self.source = source
        self.target = target
        self.work_dir = Path(work_dir)
        self.retry = retry
        self.skip_existing = skip_existing
        self.cleanup = cleanup
        self.strategies = strategies or build_upload_strategies(target, retry)

    @property
    def cancel_event(self) -> threading.Event:
        """Cancellation event shared with the retry policy."""
        return self.retry.cancel_event

    @property
    def organization(self) -> str:
        """Target organization."""
        return self.target.organization

    def transfer(self, package: Package, version: Version, target_name: str) -> bool:
        """
        Transfer one version.

        Args:
            package: Package owning the version (already validated)
            version: Version to transfer
            target_name: Resolved target package name

        Returns:
            True if the version was skipped because it already exists in the target

        Raises:
            ValidationError: If the version breaks its package type's rules
            DescriptorError: If the version's descriptor is missing or inconsistent
            TransferError: If a download or upload failed after all attempts
            TransferCancelledError: If the run was cancelled
        """
        validator = get_validator(package.package_type)
        validator.validate_version(version, package.name)

        if self.skip_existing:
            exists = self.retry.run(
                f"check {target_name} {version.name} in target",
                lambda: self.target.version_exists(package.package_type, target_name, version.name),
            )
            if exists:
                logging.info("Skipping existing version %s %s", target_name, version.name)
                return True

        files = download_version(self.source, package, version, self.work_dir, self.retry, self.cancel_event)
        validator.validate_local_files(files, package.name, version.name)

        spec = TransferSpec(
            organization=self.organization,
            package_name=target_name,
            version=version.name,
            package_type=package.package_type,
            files=tuple(files),
            metadata=version.metadata,
            visibility=package.visibility,
        )
        self.strategies[validator.package_type].upload(spec)
        logging.info("Transferred %s %s to %s/%s", package.name, version.name, self.organization, target_name)

        try:
            self.propagate_metadata(spec)
        except MetadataPropagationError as e:
            logging.warning("Error updating metadata for %s version %s: %s", target_name, version.name, e)
        return False

    def run_version(self, package: Package, version: Version, target_name: str) -> VersionResult:
        """
        Transfer one version and convert any failure into a result.

        Returns:
            VersionResult describing the outcome
        """
        try:
            skipped = self.transfer(package, version, target_name)
            return VersionResult(version=version.name, succeeded=True, skipped=skipped)
        except (MigrationError, httpx.HTTPError, OSError, ValueError) as e:
            logging.error("Failed to transfer %s %s: %s", package.name, version.name, e)
            return VersionResult(version=version.name, succeeded=False, error=str(e))
        finally:
            if self.cleanup:
                self._remove_staged_files(package, version)

    def _remove_staged_files(self, package: Package, version: Version) -> None:
        try:
            directory = get_version_directory(self.work_dir, package.package_type, package.name, version.name)
        except ValueError:
            return
        shutil.rmtree(directory, ignore_errors=True)

    def propagate_metadata(self, spec: TransferSpec) -> None:
        """
        Apply version metadata in the target.

        Raises:
            MetadataPropagationError: If the update failed after all attempts
        """
        if not spec.metadata:
            return
        try:
            self.retry.run(
                f"update metadata of {spec.package_name} {spec.version}",
                lambda: self.target.update_version_metadata(
                    spec.package_type, spec.package_name, spec.version, spec.metadata
                ),
            )
        except TransferError as e:
            raise MetadataPropagationError(str(e)) from e

    def propagate_visibility(self, package: Package, target_name: str) -> None:
        """
        Apply the source package's visibility in the target.

        Raises:
            VisibilityPropagationError: If the update failed after all attempts
        """
        try:
            self.retry.run(
                f"update visibility of {target_name}",
                lambda: self.target.update_visibility(package.package_type, target_name, package.visibility),
            )
        except TransferError as e:
            raise VisibilityPropagationError(str(e)) from e


__all__ = ["TransferPipeline"]
