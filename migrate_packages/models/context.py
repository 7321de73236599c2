"""Context and configuration models for export and sync operations."""

from typing import Optional

from pydantic import Field, field_validator

from ..utils.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_VERSION_WORKERS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RETRY_DELAY,
)
from .base import MigrateBaseModel
from .packages import PackageType, normalize_package_type


def _validate_package_type(v: Optional[str]) -> Optional[str]:
    """Normalize an optional package type filter and reject unknown values."""
    if v is None or not v.strip():
        return None

    normalized = normalize_package_type(v)
    valid_types = [t.value for t in PackageType]
    if normalized not in valid_types:
        raise ValueError(f"Invalid package type '{v}'. Must be one of: {', '.join(valid_types)}")
    return normalized


class ExportContext(MigrateBaseModel):
    """
    Context information for export operations.

    Attributes:
        organization: Organization whose packages are exported
        token: Access token for the organization
        file_prefix: Prefix for the generated CSV files (defaults to the organization)
        hostname: Optional GitHub Enterprise Server hostname
        package_type: Optional package type filter
        download: Whether to download package files after writing the CSVs
        download_path: Root directory for downloaded files
        max_workers: Maximum number of concurrent version downloads
        debug: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3+=DEBUG with HTTP logs)
    """

    organization: str = Field(min_length=1)
    token: str = Field(min_length=1, repr=False)
    file_prefix: Optional[str] = None
    hostname: Optional[str] = None
    package_type: Optional[str] = None
    download: bool = False
    download_path: str = "downloads"
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1, le=50)
    debug: int = 0

    @field_validator("package_type")
    @classmethod
    def validate_package_type(cls, v: Optional[str]) -> Optional[str]:
        """Validate the package type filter."""
        return _validate_package_type(v)

    @property
    def prefix(self) -> str:
        """File prefix for CSV output."""
        return self.file_prefix or self.organization


class SyncContext(MigrateBaseModel):
    """
    Configuration for one migration run, built once at startup.

    Attributes:
        source_organization: Organization packages are read from
        target_organization: Organization packages are written to
        source_token: Access token for the source organization
        target_token: Access token for the target organization
        mapping_file: Optional CSV of source,target package names
        source_hostname: Optional GitHub Enterprise Server hostname of the source
        package_type: Optional package type filter
        skip_existing: Skip versions that already exist in the target
        max_workers: Maximum number of packages migrated at the same time
        max_version_workers: Maximum number of versions transferred at the same time per package
        max_retries: Attempts per network mutation before giving up
        retry_delay: Base delay in seconds; attempt n waits retry_delay * n
        work_dir: Directory downloads are staged in (a temporary directory if unset)
        debug: Verbosity level
    """

    source_organization: str = Field(min_length=1)
    target_organization: str = Field(min_length=1)
    source_token: str = Field(min_length=1, repr=False)
    target_token: str = Field(min_length=1, repr=False)
    mapping_file: Optional[str] = None
    source_hostname: Optional[str] = None
    package_type: Optional[str] = None
    skip_existing: bool = False
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1, le=50)
    max_version_workers: int = Field(default=DEFAULT_MAX_VERSION_WORKERS, ge=1, le=20)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1, le=10)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)
    work_dir: Optional[str] = None
    debug: int = 0

    @field_validator("package_type")
    @classmethod
    def validate_package_type(cls, v: Optional[str]) -> Optional[str]:
        """Validate the package type filter."""
        return _validate_package_type(v)


__all__ = ["ExportContext", "SyncContext"]
