"""Common descriptor model."""

from typing import Any, Dict

from pydantic import Field

from ..models.base import FrozenModel


class Descriptor(FrozenModel):
    """
    Identity and declared version read from a registry descriptor.

    Attributes:
        identity: Package identity as declared (npm name, groupId:artifactId, NuGet id, gem name)
        version: Declared version string
        data: Remaining descriptor fields, as parsed
    """

    identity: str
    version: str
    data: Dict[str, Any] = Field(default_factory=dict)

    def matches_version(self, version: str) -> bool:
        """Check whether the declared version equals the version being transferred."""
        return self.version == version


__all__ = ["Descriptor"]
