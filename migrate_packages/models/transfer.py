"""Transfer specification model."""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import Field

from .base import FrozenModel


class TransferSpec(FrozenModel):
    """
    Everything an upload strategy needs to publish one version.

    Built fresh for every attempt and never shared between versions.

    Attributes:
        organization: Target organization
        package_name: Resolved target package name
        version: Version string being published
        package_type: Lowercase package type
        files: Local paths of the downloaded files
        metadata: Metadata propagated to the target version
        visibility: Visibility of the source package
    """

    organization: str
    package_name: str
    version: str
    package_type: str
    files: Tuple[Path, ...] = ()
    metadata: Dict[str, Any] = Field(default_factory=dict)
    visibility: str = "private"

    def find(self, name: str) -> Optional[Path]:
        """Return the first local file with exactly this name."""
        for path in self.files:
            if path.name == name:
                return path
        return None

    def with_suffix(self, *suffixes: str) -> Tuple[Path, ...]:
        """Return local files whose names end with any of the suffixes."""
        return tuple(p for p in self.files if p.name.endswith(suffixes))


__all__ = ["TransferSpec"]
