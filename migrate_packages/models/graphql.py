"""
Pydantic models for GitHub GraphQL API responses.

These models mirror the shape of the ``organization.packages`` catalog query
and the ``rateLimit`` probe, and convert nodes into catalog models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .packages import Package, PackageFile, RepositoryRef, Version


# ============================================================================
# Base Models
# ============================================================================


class GraphQLBaseModel(BaseModel):
    """Base model for all GraphQL API responses."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)  # Allow extra fields from API


class GraphQLError(GraphQLBaseModel):
    """A single entry of a GraphQL ``errors`` array."""

    message: str
    type: Optional[str] = None
    path: Optional[List[Any]] = None


# ============================================================================
# Rate Limit Models
# ============================================================================


class RateLimit(GraphQLBaseModel):
    """Remaining request budget and the moment it resets."""

    remaining: int
    reset_at: datetime = Field(alias="resetAt")


# ============================================================================
# Catalog Models
# ============================================================================


class PageInfo(GraphQLBaseModel):
    """Cursor pagination state."""

    end_cursor: Optional[str] = Field(default=None, alias="endCursor")
    has_next_page: bool = Field(default=False, alias="hasNextPage")


class FileNode(GraphQLBaseModel):
    """Package file node."""

    name: str
    size: Optional[int] = None
    sha256: Optional[str] = None
    url: Optional[str] = None


class FileConnection(GraphQLBaseModel):
    nodes: List[FileNode] = Field(default_factory=list)


class VersionNode(GraphQLBaseModel):
    """Package version node."""

    id: str
    version: str
    summary: Optional[str] = None
    pre_release: Optional[bool] = Field(default=None, alias="preRelease")
    platform: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    files: FileConnection = Field(default_factory=FileConnection)

    def metadata(self) -> Dict[str, Any]:
        """Collect the optional descriptive fields that are set on this version."""
        values = {"summary": self.summary, "pre_release": self.pre_release, "platform": self.platform}
        return {k: v for k, v in values.items() if v is not None}

    def to_version(self) -> Version:
        """Convert to a catalog Version."""
        return Version(
            id=self.id,
            name=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
            files=tuple(
                PackageFile(name=f.name, size=f.size or 0, sha256=f.sha256 or None, url=f.url or "")
                for f in self.files.nodes
            ),
            metadata=self.metadata(),
        )


class VersionConnection(GraphQLBaseModel):
    nodes: List[VersionNode] = Field(default_factory=list)


class RepositoryNode(GraphQLBaseModel):
    name: str = ""
    url: str = ""


class StatisticsNode(GraphQLBaseModel):
    downloads_total_count: int = Field(default=0, alias="downloadsTotalCount")


class PackageNode(GraphQLBaseModel):
    """Package node of the organization catalog."""

    id: str
    name: str
    package_type: str = Field(alias="packageType")
    visibility: Optional[str] = None
    repository: Optional[RepositoryNode] = None
    statistics: Optional[StatisticsNode] = None
    versions: VersionConnection = Field(default_factory=VersionConnection)

    def to_package(self) -> Package:
        """Convert to a catalog Package."""
        repository = self.repository or RepositoryNode()
        return Package(
            id=self.id,
            name=self.name,
            package_type=self.package_type,
            visibility=self.visibility or "private",
            repository=RepositoryRef(name=repository.name, url=repository.url),
            downloads_total_count=self.statistics.downloads_total_count if self.statistics else 0,
            versions=tuple(v.to_version() for v in self.versions.nodes),
        )


class PackageConnection(GraphQLBaseModel):
    page_info: PageInfo = Field(alias="pageInfo")
    nodes: List[PackageNode] = Field(default_factory=list)


class OrganizationPackages(GraphQLBaseModel):
    packages: PackageConnection


class PackagesPage(GraphQLBaseModel):
    """``data`` object of one catalog page."""

    organization: Optional[OrganizationPackages] = None


__all__ = [
    "GraphQLBaseModel",
    "GraphQLError",
    "RateLimit",
    "PageInfo",
    "FileNode",
    "VersionNode",
    "PackageNode",
    "PackageConnection",
    "PackagesPage",
]
