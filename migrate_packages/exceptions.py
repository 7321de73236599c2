"""
Exceptions raised by the package migration engine.

Fetch and configuration errors abort a run. Validation and transfer errors
are caught at the package worker boundary and recorded in the package's
TransferReport. Metadata and visibility propagation errors are only logged.
"""

from typing import Optional


class MigrationError(Exception):
    """Base exception for package migration operations."""


class MappingFileError(MigrationError):
    """The package name mapping file could not be read."""


class FetchError(MigrationError):
    """Catalog pagination failed; no partial results are returned."""


class UnsupportedPackageTypeError(MigrationError):
    """No validator or upload strategy exists for the package type."""

    def __init__(self, package_type: str) -> None:
        self.package_type = package_type
        super().__init__(f"unsupported package type: {package_type}")


class ValidationError(MigrationError):
    """A package or one of its versions failed structural validation."""

    def __init__(self, package_type: str, package_name: str, message: str, version: Optional[str] = None) -> None:
        self.package_type = package_type
        self.package_name = package_name
        self.version = version
        self.message = message
        if version:
            text = f"validation error for {package_type} package '{package_name}' version '{version}': {message}"
        else:
            text = f"validation error for {package_type} package '{package_name}': {message}"
        super().__init__(text)


class DescriptorError(MigrationError):
    """A registry descriptor (package.json, pom.xml, .nuspec, gemspec) is missing or malformed."""


class TransferError(MigrationError):
    """A download or upload failed after every retry attempt."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")


class TransferCancelledError(MigrationError):
    """The run was cancelled while a transfer was waiting or in flight."""


class MetadataPropagationError(MigrationError):
    """Version metadata could not be applied to the target package."""


class VisibilityPropagationError(MigrationError):
    """Package visibility could not be applied to the target package."""


__all__ = [
    "MigrationError",
    "MappingFileError",
    "FetchError",
    "UnsupportedPackageTypeError",
    "ValidationError",
    "DescriptorError",
    "TransferError",
    "TransferCancelledError",
    "MetadataPropagationError",
    "VisibilityPropagationError",
]
