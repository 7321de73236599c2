"""Maven POM parsing."""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from ..exceptions import DescriptorError
from .base import Descriptor


def _child_text(element: Optional[ET.Element], tag: str) -> Optional[str]:
    """Text of a direct child, ignoring the POM namespace."""
    if element is None:
        return None
    for child in element:
        if child.tag.rsplit("}", 1)[-1] == tag and child.text and child.text.strip():
            return child.text.strip()
    return None


def _child(element: ET.Element, tag: str) -> Optional[ET.Element]:
    for child in element:
        if child.tag.rsplit("}", 1)[-1] == tag:
            return child
    return None


def parse_pom(path: Union[str, Path]) -> Descriptor:
    """
    Read Maven coordinates from a POM.

    The groupId and version fall back to the ``<parent>`` element when the
    project does not declare them itself.

    Args:
        path: Path to the POM file

    Returns:
        Descriptor with ``groupId:artifactId`` as identity; ``data`` holds
        ``group_id`` and ``artifact_id``

    Raises:
        DescriptorError: If the POM cannot be parsed or lacks a groupId or artifactId
    """
    try:
        root = ET.parse(path).getroot()
    except (OSError, ET.ParseError) as e:
        raise DescriptorError(f"failed to parse POM file: {e}") from e

    parent = _child(root, "parent")
    group_id = _child_text(root, "groupId") or _child_text(parent, "groupId")
    artifact_id = _child_text(root, "artifactId")
    version = _child_text(root, "version") or _child_text(parent, "version") or ""

    if not group_id:
        raise DescriptorError("no group ID found in POM file")
    if not artifact_id:
        raise DescriptorError("no artifact ID found in POM file")

    return Descriptor(
        identity=f"{group_id}:{artifact_id}",
        version=version,
        data={"group_id": group_id, "artifact_id": artifact_id},
    )


def maven_path(group_id: str, artifact_id: str, version: str, filename: str) -> str:
    """
    Repository layout path of a Maven file.

    Example:
        >>> maven_path("com.example", "widgets", "1.0.0", "widgets-1.0.0.jar")
        'com/example/widgets/1.0.0/widgets-1.0.0.jar'
    """
    return "/".join([group_id.replace(".", "/"), artifact_id, version, filename])


__all__ = ["parse_pom", "maven_path"]
