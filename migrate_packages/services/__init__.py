"""
Service layer for package migration.

This package provides high-level services that coordinate the API clients,
the transfer pipeline and reporting for the CLI commands.
"""

from .export_service import ExportService, write_packages_csv, write_versions_csv
from .sync_service import SyncService

__all__ = [
    "ExportService",
    "SyncService",
    "write_packages_csv",
    "write_versions_csv",
]
