"""npm ``package.json`` parsing."""

import json
from pathlib import Path
from typing import Union

from ..exceptions import DescriptorError
from .base import Descriptor


def parse_package_json(path: Union[str, Path]) -> Descriptor:
    """
    Read name and version from an npm package.json.

    Args:
        path: Path to package.json

    Returns:
        Descriptor with the package name as identity; ``data`` holds the full document

    Raises:
        DescriptorError: If the file is unreadable, not a JSON object, or lacks name/version
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, ValueError) as e:
        raise DescriptorError(f"failed to parse package.json: {e}") from e

    if not isinstance(document, dict):
        raise DescriptorError("package.json must contain a JSON object")

    name = document.get("name")
    version = document.get("version")
    if not name:
        raise DescriptorError("package.json missing required field: name")
    if not version:
        raise DescriptorError("package.json missing required field: version")

    return Descriptor(identity=str(name), version=str(version), data=document)


__all__ = ["parse_package_json"]
