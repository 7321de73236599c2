"""
Validation utilities for package migration.

Modules:
    - packages: Per package type naming and structure rules
"""

from .packages import (
    PackageValidator,
    ContainerValidator,
    NpmValidator,
    MavenValidator,
    NuGetValidator,
    RubyGemsValidator,
    VALIDATORS,
    get_validator,
)

__all__ = [
    "PackageValidator",
    "ContainerValidator",
    "NpmValidator",
    "MavenValidator",
    "NuGetValidator",
    "RubyGemsValidator",
    "VALIDATORS",
    "get_validator",
]
