"""
Upload strategy protocol.

Every package type publishes through an object implementing this protocol,
selected from a total mapping keyed by PackageType.
"""

from typing import Protocol

from ..models.transfer import TransferSpec


class UploadStrategy(Protocol):
    """
    Protocol defining how one version is published to the target registry.

    Implementations perform every network mutation through the pipeline's
    retry policy and raise DescriptorError when the version's descriptor
    does not match what is being published.
    """

    def upload(self, spec: TransferSpec) -> None:
        """
        Publish one version.

        Args:
            spec: Files and identity of the version to publish
        """
        ...


__all__ = ["UploadStrategy"]
