"""Catalog models: packages, versions and files fetched from the source organization."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import Field, field_validator

from .base import FrozenModel


class PackageType(str, Enum):
    """Package types the migration engine knows how to validate and upload."""

    CONTAINER = "container"
    NPM = "npm"
    MAVEN = "maven"
    NUGET = "nuget"
    RUBYGEMS = "rubygems"

    @property
    def graphql_name(self) -> str:
        """Value used for the GraphQL ``PackageType`` enum filter."""
        if self is PackageType.CONTAINER:
            return "DOCKER"
        return self.value.upper()


# GraphQL reports container images with the legacy DOCKER enum value
_API_TYPE_ALIASES = {"docker": "container"}


def normalize_package_type(value: str) -> str:
    """
    Normalize a package type string from the API or the command line.

    Args:
        value: Package type as reported by GraphQL (``NPM``, ``DOCKER``) or typed by a user

    Returns:
        Lowercase package type name
    """
    lowered = value.strip().lower()
    return _API_TYPE_ALIASES.get(lowered, lowered)


class PackageFile(FrozenModel):
    """
    A single file belonging to a package version.

    Attributes:
        name: File name
        size: Size in bytes as reported by the source registry
        sha256: Hex SHA-256 digest, if the registry reports one
        url: Source download URL
    """

    name: str
    size: int = Field(default=0, ge=0)
    sha256: Optional[str] = None
    url: str = ""


class Version(FrozenModel):
    """
    One release of a package.

    Attributes:
        id: Opaque version identifier
        name: Registry specific version string
        created_at: Creation timestamp
        updated_at: Last update timestamp
        files: Files of this version, in catalog order
        metadata: Free-form metadata propagated to the target
    """

    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    files: Tuple[PackageFile, ...] = ()
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def file_names(self) -> Tuple[str, ...]:
        """Names of all files in this version."""
        return tuple(f.name for f in self.files)

    @property
    def total_size(self) -> int:
        """Sum of all file sizes in bytes."""
        return sum(f.size for f in self.files)

    def has_file(self, name: str) -> bool:
        """Check whether a file with exactly this name is present."""
        return name in self.file_names

    def has_suffix(self, suffix: str) -> bool:
        """Check whether any file name ends with the given suffix."""
        return any(n.endswith(suffix) for n in self.file_names)

    def find_file(self, name: str) -> Optional[PackageFile]:
        """Return the file with the given name, if present."""
        for package_file in self.files:
            if package_file.name == name:
                return package_file
        return None


class RepositoryRef(FrozenModel):
    """Repository that owns a package."""

    name: str = ""
    url: str = ""


class Package(FrozenModel):
    """
    An organization scoped package and all of its versions.

    Attributes:
        id: Opaque package identifier
        name: Package name, unique within the organization and package type
        package_type: Lowercase package type (see PackageType)
        visibility: ``public``, ``private`` or ``internal``
        repository: Owning repository
        downloads_total_count: Aggregate download count
        versions: Versions in catalog order
    """

    id: str
    name: str
    package_type: str
    visibility: str = "private"
    repository: RepositoryRef = Field(default_factory=RepositoryRef)
    downloads_total_count: int = Field(default=0, ge=0)
    versions: Tuple[Version, ...] = ()

    @field_validator("package_type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        """Store package types lowercase, mapping API aliases."""
        return normalize_package_type(v)

    @field_validator("visibility")
    @classmethod
    def normalize_visibility(cls, v: str) -> str:
        """Store visibility lowercase."""
        return v.lower()

    @property
    def version_count(self) -> int:
        """Number of versions in the catalog."""
        return len(self.versions)

    @property
    def total_size(self) -> int:
        """Sum of file sizes across all versions."""
        return sum(v.total_size for v in self.versions)


__all__ = [
    "PackageType",
    "normalize_package_type",
    "PackageFile",
    "Version",
    "RepositoryRef",
    "Package",
]
