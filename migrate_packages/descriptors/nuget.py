"""NuGet ``.nuspec`` parsing, standalone or embedded in a ``.nupkg``."""

import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import Union

from ..exceptions import DescriptorError
from .base import Descriptor


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_nuspec_bytes(content: bytes) -> Descriptor:
    """
    Read id and version from nuspec XML.

    Raises:
        DescriptorError: If the XML is malformed or lacks id/version
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise DescriptorError(f"failed to parse nuspec: {e}") from e

    metadata = next((child for child in root if _local(child.tag) == "metadata"), None)
    if metadata is None:
        raise DescriptorError("nuspec has no metadata element")

    fields = {_local(child.tag): (child.text or "").strip() for child in metadata}
    if not fields.get("id"):
        raise DescriptorError("nuspec missing required field: id")
    if not fields.get("version"):
        raise DescriptorError("nuspec missing required field: version")

    return Descriptor(identity=fields["id"], version=fields["version"], data=fields)


def parse_nuspec(path: Union[str, Path]) -> Descriptor:
    """Read id and version from a standalone .nuspec file."""
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        raise DescriptorError(f"failed to read nuspec: {e}") from e
    return parse_nuspec_bytes(content)


def parse_nupkg(path: Union[str, Path]) -> Descriptor:
    """
    Read id and version from the nuspec embedded at the root of a .nupkg.

    Raises:
        DescriptorError: If the archive is invalid or contains no nuspec
    """
    try:
        with zipfile.ZipFile(path) as archive:
            nuspec_names = [n for n in archive.namelist() if n.endswith(".nuspec") and "/" not in n]
            if not nuspec_names:
                raise DescriptorError("no .nuspec file found in package")
            content = archive.read(nuspec_names[0])
    except (OSError, zipfile.BadZipFile) as e:
        raise DescriptorError(f"failed to open nupkg: {e}") from e

    return parse_nuspec_bytes(content)


__all__ = ["parse_nuspec", "parse_nuspec_bytes", "parse_nupkg"]
