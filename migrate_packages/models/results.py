"""Result models for sync and export operations."""

from enum import Enum
from typing import List, Optional, Sequence

from pydantic import Field

from .base import FrozenModel, MigrateBaseModel


class TransferStatus(str, Enum):
    """Outcome of migrating one package."""

    SUCCESS = "Success"
    PARTIAL_SUCCESS = "Partial Success"
    FAILED = "Failed"


def classify(succeeded: int, failed: int) -> TransferStatus:
    """
    Classify a package from its version outcomes.

    Args:
        succeeded: Number of versions that transferred (or were skipped as existing)
        failed: Number of versions that failed

    Returns:
        SUCCESS when nothing failed, PARTIAL_SUCCESS when some versions failed
        and some succeeded, FAILED when every version failed
    """
    if failed == 0:
        return TransferStatus.SUCCESS
    if succeeded > 0:
        return TransferStatus.PARTIAL_SUCCESS
    return TransferStatus.FAILED


class VersionResult(FrozenModel):
    """
    Outcome of transferring a single version.

    Attributes:
        version: Version string
        succeeded: True when the version is present in the target afterwards
        skipped: True when the version already existed and skip-existing was requested
        error: Error message for failed versions
    """

    version: str
    succeeded: bool
    skipped: bool = False
    error: Optional[str] = None


class TransferReport(FrozenModel):
    """
    Per package outcome handed from a worker to the result aggregator.

    Attributes:
        package_name: Source package name
        target_name: Resolved target package name
        package_type: Lowercase package type
        status: Classification of the package outcome
        versions_count: Number of versions attempted
        versions_failed: Number of versions that failed
        versions_skipped: Number of versions skipped because they already existed
        error_message: Concatenated error summary, empty on success
        total_size: Bytes described by the package's files
    """

    package_name: str
    target_name: str
    package_type: str
    status: TransferStatus
    versions_count: int = Field(default=0, ge=0)
    versions_failed: int = Field(default=0, ge=0)
    versions_skipped: int = Field(default=0, ge=0)
    error_message: str = ""
    total_size: int = Field(default=0, ge=0)

    @classmethod
    def from_versions(
        cls,
        package_name: str,
        target_name: str,
        package_type: str,
        results: Sequence[VersionResult],
        total_size: int = 0,
    ) -> "TransferReport":
        """Build a report by classifying the version results of a package."""
        failed = [r for r in results if not r.succeeded]
        succeeded = len(results) - len(failed)
        return cls(
            package_name=package_name,
            target_name=target_name,
            package_type=package_type,
            status=classify(succeeded, len(failed)),
            versions_count=len(results),
            versions_failed=len(failed),
            versions_skipped=sum(1 for r in results if r.skipped),
            error_message="; ".join(f"{r.version}: {r.error}" for r in failed),
            total_size=total_size,
        )

    @classmethod
    def failure(cls, package_name: str, target_name: str, package_type: str, message: str) -> "TransferReport":
        """Build a Failed report for a package that never reached version transfer."""
        return cls(
            package_name=package_name,
            target_name=target_name,
            package_type=package_type,
            status=TransferStatus.FAILED,
            error_message=message,
        )


class MigrationSummary(MigrateBaseModel):
    """
    Aggregate outcome of a sync run.

    Attributes:
        reports: Every package report, in arrival order
        successful: Number of Success packages
        partial: Number of Partial Success packages
        failed: Number of Failed packages
    """

    reports: List[TransferReport] = Field(default_factory=list)
    successful: int = Field(default=0, ge=0)
    partial: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        """Total number of packages reported."""
        return self.successful + self.partial + self.failed

    @property
    def has_failures(self) -> bool:
        """Check whether any package was not fully migrated."""
        return (self.partial + self.failed) > 0


class ExportResult(MigrateBaseModel):
    """
    Result of an export run.

    Attributes:
        packages_count: Number of packages written to the packages CSV
        versions_count: Number of versions written to the versions CSV
        packages_csv: Path of the packages CSV
        versions_csv: Path of the versions CSV
        downloads_completed: Versions whose files were all downloaded
        downloads_failed: Versions with at least one failed download
        bytes_downloaded: Bytes written to disk
    """

    packages_count: int = Field(default=0, ge=0)
    versions_count: int = Field(default=0, ge=0)
    packages_csv: str = ""
    versions_csv: str = ""
    downloads_completed: int = Field(default=0, ge=0)
    downloads_failed: int = Field(default=0, ge=0)
    bytes_downloaded: int = Field(default=0, ge=0)

    @property
    def has_download_failures(self) -> bool:
        """Check whether any download failed."""
        return self.downloads_failed > 0


__all__ = [
    "TransferStatus",
    "classify",
    "VersionResult",
    "TransferReport",
    "MigrationSummary",
    "ExportResult",
]
