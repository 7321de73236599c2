"""
Pydantic models for migrate-packages.

This package contains all Pydantic models used in the application:
- graphql: Models for GitHub GraphQL API responses
- base, packages, context, transfer, results: Domain models
"""

# GraphQL API Response Models
from .graphql import (
    GraphQLBaseModel,
    GraphQLError,
    RateLimit,
    PageInfo,
    VersionNode,
    PackageNode,
    PackagesPage,
)

# Domain Models
from .base import MigrateBaseModel, FrozenModel
from .packages import PackageType, PackageFile, Version, RepositoryRef, Package, normalize_package_type
from .context import ExportContext, SyncContext
from .transfer import TransferSpec
from .results import TransferStatus, VersionResult, TransferReport, MigrationSummary, ExportResult, classify

__all__ = [
    # GraphQL API Models
    "GraphQLBaseModel",
    "GraphQLError",
    "RateLimit",
    "PageInfo",
    "VersionNode",
    "PackageNode",
    "PackagesPage",
    # Domain Models
    "MigrateBaseModel",
    "FrozenModel",
    "PackageType",
    "PackageFile",
    "Version",
    "RepositoryRef",
    "Package",
    "normalize_package_type",
    "ExportContext",
    "SyncContext",
    "TransferSpec",
    "TransferStatus",
    "VersionResult",
    "TransferReport",
    "MigrationSummary",
    "ExportResult",
    "classify",
]
