"""
Utility modules for migrate-packages.

This package contains the shared building blocks used by the API clients,
the transfer pipeline and the CLI:
- session: HTTP client creation
- logger, logging_utils: Logging setup and formatting helpers
- error_handling: Standardized error logging
- checksums, path_utils: File hashing and download layout
- mapping: Source to target package name resolution
- concurrency: Bounded package and version scheduling
- validation: Per package type rules (imported from utils.validation)
"""

from .session import create_session_with_retry
from .logger import setup_logging, WrappingFormatter, get_logger
from .error_handling import (
    handle_http_error,
    handle_generic_error,
    handle_migration_error,
    with_error_handling,
    log_and_exit,
)
from .logging_utils import (
    format_count_with_unit,
    format_file_size,
    log_operation_complete,
    log_operation_start,
    log_progress,
)
from .checksums import calculate_checksums, calculate_sha256_checksum, file_digest, sha256_digest, sri_integrity
from .path_utils import ensure_directory_exists, file_has_size, get_version_directory, safe_path_component
from .mapping import NameMappingResolver
from .concurrency import ConcurrencyController

__all__ = [
    "create_session_with_retry",
    "setup_logging",
    "WrappingFormatter",
    "get_logger",
    "handle_http_error",
    "handle_generic_error",
    "handle_migration_error",
    "with_error_handling",
    "log_and_exit",
    "format_count_with_unit",
    "format_file_size",
    "log_operation_complete",
    "log_operation_start",
    "log_progress",
    "calculate_checksums",
    "calculate_sha256_checksum",
    "file_digest",
    "sha256_digest",
    "sri_integrity",
    "ensure_directory_exists",
    "file_has_size",
    "get_version_directory",
    "safe_path_component",
    "NameMappingResolver",
    "ConcurrencyController",
]
