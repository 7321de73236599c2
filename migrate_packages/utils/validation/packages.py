"""
Package and version validation rules.

Every supported package type has exactly one validator, selected through
a total mapping from PackageType. Package rules check the name and run
once per package; version rules check the file set and run before each
version is transferred.
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Union

from ...exceptions import UnsupportedPackageTypeError, ValidationError
from ...models.packages import Package, PackageType, Version, normalize_package_type
from ..constants import GIB, INVALID_NAME_CHARACTERS, MIB, RUBYGEMS_METADATA_MAX_SIZE
from ..logging_utils import format_file_size


class PackageValidator:
    """
    Base validator shared by all package types.

    Subclasses set ``package_type``, ``max_file_size`` and ``required_files``
    and override ``check_name`` and ``check_files``. Required file markers
    starting with a dot are suffixes; all others are exact file names.
    """

    package_type: PackageType
    max_file_size: int = 0
    required_files: FrozenSet[str] = frozenset()

    def _error(self, package_name: str, message: str, version: Optional[str] = None) -> ValidationError:
        return ValidationError(self.package_type.value, package_name, message, version=version)

    def check_name(self, name: str) -> Optional[str]:
        """Return an error message if the package name is not allowed, else None."""
        return None

    def check_files(self, version: Version) -> Optional[str]:
        """Return an error message for type specific file rules, else None."""
        return None

    def validate_package(self, package: Package) -> None:
        """
        Validate package level naming rules.

        Raises:
            ValidationError: If the package name is not valid for this type
        """
        message = self.check_name(package.name)
        if message:
            raise self._error(package.name, message)

    def validate_version(self, version: Version, package_name: str = "") -> None:
        """
        Validate the file set of a version.

        Args:
            version: Version to validate
            package_name: Owning package name, used in the error message

        Raises:
            ValidationError: If required files are missing or a file is too large
        """
        for marker in sorted(self.required_files):
            present = version.has_suffix(marker) if marker.startswith(".") else version.has_file(marker)
            if not present:
                raise self._error(package_name, f"missing required file {marker}", version=version.name)

        for package_file in version.files:
            if package_file.size > self.max_file_size:
                raise self._error(
                    package_name,
                    f"file {package_file.name} ({format_file_size(package_file.size)}) exceeds maximum size "
                    f"of {format_file_size(self.max_file_size)}",
                    version=version.name,
                )

        message = self.check_files(version)
        if message:
            raise self._error(package_name, message, version=version.name)

    def validate_local_files(
        self, paths: Iterable[Union[str, Path]], package_name: str = "", version: Optional[str] = None
    ) -> None:
        """
        Check downloaded files against the maximum file size.

        Raises:
            ValidationError: If a file exceeds ``max_file_size``
        """
        for path in paths:
            size = os.path.getsize(path)
            if size > self.max_file_size:
                raise self._error(
                    package_name,
                    f"file {os.path.basename(path)} exceeds maximum size of {self.max_file_size} bytes",
                    version=version,
                )
            logging.debug("%s file '%s': %s", self.package_type.value, path, format_file_size(size))


def _invalid_characters(name: str, extra: str = "") -> str:
    return "".join(sorted({c for c in name if c in INVALID_NAME_CHARACTERS + extra}))


class ContainerValidator(PackageValidator):
    package_type = PackageType.CONTAINER
    max_file_size = 10 * GIB

    def check_name(self, name: str) -> Optional[str]:
        if ":" in name:
            return "container names cannot contain ':'"
        return None


class NpmValidator(PackageValidator):
    package_type = PackageType.NPM
    max_file_size = 256 * MIB
    required_files = frozenset({"package.json"})

    def check_name(self, name: str) -> Optional[str]:
        if not name.startswith("@"):
            return "npm packages must be scoped (start with @)"
        return None


class MavenValidator(PackageValidator):
    package_type = PackageType.MAVEN
    max_file_size = 1 * GIB
    required_files = frozenset({"pom.xml"})

    def check_name(self, name: str) -> Optional[str]:
        parts = name.split(":")
        if len(parts) != 2 or not all(parts):
            return "Maven packages must be named groupId:artifactId"
        return None


class NuGetValidator(PackageValidator):
    package_type = PackageType.NUGET
    max_file_size = 250 * MIB
    required_files = frozenset({".nupkg", ".nuspec"})

    def check_name(self, name: str) -> Optional[str]:
        invalid = _invalid_characters(name)
        if invalid:
            return f"NuGet package names cannot contain: {invalid}"
        return None


class RubyGemsValidator(PackageValidator):
    package_type = PackageType.RUBYGEMS
    max_file_size = 512 * MIB
    required_files = frozenset({".gem", ".gemspec"})

    def check_name(self, name: str) -> Optional[str]:
        invalid = _invalid_characters(name, extra=" ")
        if invalid:
            return f"gem names cannot contain: {invalid!r}"
        if name != name.lower():
            return "gem names must be lowercase"
        return None

    def check_files(self, version: Version) -> Optional[str]:
        metadata = version.find_file("metadata.gz")
        if metadata is not None and metadata.size > RUBYGEMS_METADATA_MAX_SIZE:
            return "metadata.gz exceeds size limit of 2MB"
        return None


# Total mapping from package type to validator; extend PackageType to add a type
VALIDATORS: Mapping[PackageType, PackageValidator] = MappingProxyType(
    {
        PackageType.CONTAINER: ContainerValidator(),
        PackageType.NPM: NpmValidator(),
        PackageType.MAVEN: MavenValidator(),
        PackageType.NUGET: NuGetValidator(),
        PackageType.RUBYGEMS: RubyGemsValidator(),
    }
)


def get_validator(package_type: Union[str, PackageType]) -> PackageValidator:
    """
    Resolve the validator for a package type.

    Args:
        package_type: PackageType or a type name such as ``npm`` or ``DOCKER``

    Returns:
        The validator for the type

    Raises:
        UnsupportedPackageTypeError: If the type is not supported
    """
    if isinstance(package_type, PackageType):
        return VALIDATORS[package_type]

    try:
        key = PackageType(normalize_package_type(package_type))
    except ValueError:
        raise UnsupportedPackageTypeError(package_type) from None
    return VALIDATORS[key]


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
