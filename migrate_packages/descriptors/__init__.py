"""
Registry descriptor parsers.

Each parser reads the identity and declared version of a package from the
descriptor shipped with its files and raises DescriptorError when the
descriptor is missing or malformed.
"""

from .base import Descriptor
from .npm import parse_package_json
from .maven import maven_path, parse_pom
from .nuget import parse_nupkg, parse_nuspec, parse_nuspec_bytes
from .rubygems import gem_path, parse_gem, parse_gemspec_yaml

__all__ = [
    "Descriptor",
    "parse_package_json",
    "parse_pom",
    "maven_path",
    "parse_nupkg",
    "parse_nuspec",
    "parse_nuspec_bytes",
    "parse_gem",
    "parse_gemspec_yaml",
    "gem_path",
]
