"""
Central constants for the migrate-packages package.

This module consolidates all constants used throughout the codebase
to eliminate magic numbers and strings.
"""

# ============================================================================
# Size Units
# ============================================================================

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

# ============================================================================
# GitHub Endpoints
# ============================================================================

# GraphQL endpoint for github.com; Enterprise Server uses <hostname>/api/graphql
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"

# REST API used for existence probes, metadata and visibility
GITHUB_REST_URL = "https://api.github.com"

# Registry endpoints of the target organization
CONTAINER_REGISTRY_URL = "https://ghcr.io/v2"
NPM_REGISTRY_URL = "https://npm.pkg.github.com"
MAVEN_REGISTRY_URL = "https://maven.pkg.github.com"
NUGET_REGISTRY_URL = "https://nuget.pkg.github.com"
RUBYGEMS_REGISTRY_URL = "https://rubygems.pkg.github.com"

# ============================================================================
# Catalog Fetch Constants
# ============================================================================

# Packages requested per GraphQL page
PACKAGES_PAGE_SIZE = 100

# Versions and files requested per package node
VERSIONS_PAGE_SIZE = 100
FILES_PAGE_SIZE = 100

# ============================================================================
# Transfer Constants
# ============================================================================

# Packages migrated concurrently
DEFAULT_MAX_WORKERS = 5

# Versions transferred concurrently inside one package
DEFAULT_MAX_VERSION_WORKERS = 3

# Attempts per network mutation
DEFAULT_MAX_RETRIES = 3

# Base backoff delay in seconds; attempt n waits DEFAULT_RETRY_DELAY * n
DEFAULT_RETRY_DELAY = 5.0

# Default timeout for HTTP requests (seconds)
DEFAULT_TIMEOUT = 120

# Timeout for artifact downloads and uploads (seconds)
TRANSFER_TIMEOUT = 600

# Streaming chunk size bounds (bytes)
MIN_CHUNK_SIZE = 8192
MAX_CHUNK_SIZE = 65536

# ============================================================================
# Container Registry Constants
# ============================================================================

CONTAINER_MANIFEST_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
CONTAINER_CONFIG_MEDIA_TYPE = "application/vnd.docker.container.image.v1+json"
CONTAINER_LAYER_MEDIA_TYPE = "application/vnd.docker.image.rootfs.diff.tar.gzip"

# File suffixes treated as image layers
CONTAINER_LAYER_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".gz")

# Comment written into the history of generated image configs
CONTAINER_HISTORY_COMMENT = "Imported via GitHub Packages Migration Tool"

# ============================================================================
# Package Validation Constants
# ============================================================================

# Characters NuGet and RubyGems package names may not contain
INVALID_NAME_CHARACTERS = "!@#$%^&*()+=[]{}|\\:;\"'<>?,/"

# Upper bound for a gem's metadata.gz
RUBYGEMS_METADATA_MAX_SIZE = 2 * MIB

# Maven binary artifacts uploaded after the POM
MAVEN_ARTIFACT_SUFFIXES = (".jar", ".war", ".aar")

# ============================================================================
# Export Constants
# ============================================================================

PACKAGES_CSV_HEADER = ["ID", "Name", "Type", "Repository", "Repository URL", "Downloads Count", "Version Count"]
VERSIONS_CSV_HEADER = [
    "Package ID",
    "Package Name",
    "Version ID",
    "Version",
    "Created At",
    "Updated At",
    "File Count",
    "Total Size",
]

# Metadata file written next to downloaded version files
VERSION_METADATA_FILENAME = "metadata.json"

# ============================================================================
# Display Constants
# ============================================================================

# Width for separator lines in console output
SEPARATOR_WIDTH = 80

# Column headers of the migration report table
REPORT_TABLE_HEADER = ["Package", "Type", "Status", "Versions", "Error"]

# Error column is truncated to keep the table readable
MAX_ERROR_COLUMN_WIDTH = 60

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_PARTIAL_SUCCESS = 2
EXIT_USER_INTERRUPT = 130


__all__ = [
    "KIB",
    "MIB",
    "GIB",
    "GITHUB_GRAPHQL_URL",
    "GITHUB_REST_URL",
    "CONTAINER_REGISTRY_URL",
    "NPM_REGISTRY_URL",
    "MAVEN_REGISTRY_URL",
    "NUGET_REGISTRY_URL",
    "RUBYGEMS_REGISTRY_URL",
    "PACKAGES_PAGE_SIZE",
    "VERSIONS_PAGE_SIZE",
    "FILES_PAGE_SIZE",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_MAX_VERSION_WORKERS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_TIMEOUT",
    "TRANSFER_TIMEOUT",
    "MIN_CHUNK_SIZE",
    "MAX_CHUNK_SIZE",
    "CONTAINER_MANIFEST_MEDIA_TYPE",
    "CONTAINER_CONFIG_MEDIA_TYPE",
    "CONTAINER_LAYER_MEDIA_TYPE",
    "CONTAINER_LAYER_SUFFIXES",
    "CONTAINER_HISTORY_COMMENT",
    "INVALID_NAME_CHARACTERS",
    "RUBYGEMS_METADATA_MAX_SIZE",
    "MAVEN_ARTIFACT_SUFFIXES",
    "PACKAGES_CSV_HEADER",
    "VERSIONS_CSV_HEADER",
    "VERSION_METADATA_FILENAME",
    "SEPARATOR_WIDTH",
    "REPORT_TABLE_HEADER",
    "MAX_ERROR_COLUMN_WIDTH",
    "EXIT_SUCCESS",
    "EXIT_GENERAL_ERROR",
    "EXIT_PARTIAL_SUCCESS",
    "EXIT_USER_INTERRUPT",
]
