"""
Transfer operations for migrating package versions.

This package moves versions from the source organization to the target
organization and reports the outcome per package.

Modules:
    - retry: Linear backoff retry policy with cancellation
    - download: Version download and local layout
    - container: Layer, config and manifest publishing
    - upload: Per package type upload strategies
    - pipeline: Per version transfer steps
    - reporting: Result aggregation and summary rendering
"""

from .retry import RetryPolicy
from .download import download_version, write_version_metadata
from .container import ContainerPublisher, DigestLocks
from .upload import build_upload_strategies
from .pipeline import TransferPipeline
from .reporting import ResultAggregator, render_summary, render_table

__all__ = [
    "RetryPolicy",
    "download_version",
    "write_version_metadata",
    "ContainerPublisher",
    "DigestLocks",
    "build_upload_strategies",
    "TransferPipeline",
    "ResultAggregator",
    "render_summary",
    "render_table",
]
