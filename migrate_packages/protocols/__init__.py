"""
Protocols for type safety and abstraction.

This package defines Protocol classes that specify interfaces for the
migration engine, enabling better type checking and testability.
"""

from .upload_protocol import UploadStrategy

__all__ = ["UploadStrategy"]
