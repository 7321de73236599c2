"""
File path handling utilities.

Downloaded artifacts are laid out as ``<root>/<type>/<package>/<version>/<file>``
for both export and sync staging.
"""

import os
from pathlib import Path
from typing import Union


def safe_path_component(value: str) -> str:
    """
    Make a registry name usable as a single path component.

    Args:
        value: Package name, version string or file name

    Returns:
        The value with path separators replaced by underscores

    Raises:
        ValueError: If the value is empty or a relative path reference

    Example:
        >>> safe_path_component("@octo/widgets")
        '@octo_widgets'
    """
    cleaned = value.replace("/", "_").replace("\\", "_").strip()
    if cleaned in ("", ".", ".."):
        raise ValueError(f"Invalid path component: {value!r}")
    return cleaned


def get_version_directory(root: Union[str, Path], package_type: str, package_name: str, version: str) -> Path:
    """
    Directory holding the files of one package version.

    Args:
        root: Download root directory
        package_type: Lowercase package type
        package_name: Package name
        version: Version string

    Returns:
        Path of the version directory (not created)
    """
    return Path(root) / package_type / safe_path_component(package_name) / safe_path_component(version)


def ensure_directory_exists(file_path: Union[str, Path]) -> None:
    """
    Ensure the directory containing the file path exists.

    Args:
        file_path: Full path to a file
    """
    directory = os.path.dirname(os.fspath(file_path))
    if directory:
        os.makedirs(directory, exist_ok=True)


def file_has_size(path: Union[str, Path], expected_size: int) -> bool:
    """Check whether a file already exists with the expected size."""
    try:
        return os.path.getsize(path) == expected_size
    except OSError:
        return False


__all__ = [
    "safe_path_component",
    "get_version_directory",
    "ensure_directory_exists",
    "file_has_size",
]
