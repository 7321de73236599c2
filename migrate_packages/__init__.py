"""
Migrate Packages - Move GitHub Packages between organizations.

This package exports an organization's package catalog and migrates
container, npm, Maven, NuGet and RubyGems packages to another organization,
with rate limiting, retries and bounded concurrency.
"""

from ._version import __version__

# Import main classes and functions for easy access
from .api import RateLimitAwareGraphQLClient, SourceRegistryClient, TargetRegistryClient, TokenAuth
from .exceptions import MigrationError
from .services import ExportService, SyncService
from .utils import create_session_with_retry, get_logger, setup_logging, WrappingFormatter
from .cli import main as cli_main, cli as cli_group

__all__ = [
    "__version__",
    "RateLimitAwareGraphQLClient",
    "SourceRegistryClient",
    "TargetRegistryClient",
    "TokenAuth",
    "MigrationError",
    "ExportService",
    "SyncService",
    "setup_logging",
    "WrappingFormatter",
    "get_logger",
    "create_session_with_retry",
    "cli_main",
    "cli_group",
]
