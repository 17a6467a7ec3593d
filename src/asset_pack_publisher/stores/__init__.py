"""Blob store implementations.

Each store auto-registers itself with the StoreRegistry when this package
is imported.
"""

from pathlib import Path

from ..registry import StoreRegistry
from .base import BlobStore
from .directory import DirectoryBlobStore
from .http import HttpBlobStore


def _create_http_store(url: str, timeout: float = 30.0, **kwargs) -> HttpBlobStore:
    """Factory function for creating HTTP stores.

    Args:
        url: Root URL of the object endpoint
        timeout: Request timeout in seconds
        **kwargs: Additional parameters (unused)
    """
    return HttpBlobStore(url, timeout=timeout)


def _create_directory_store(root: Path, **kwargs) -> DirectoryBlobStore:
    """Factory function for creating local directory stores."""
    return DirectoryBlobStore(Path(root))


# Auto-register at module import
StoreRegistry.register_factory('http', _create_http_store)
StoreRegistry.register_factory('directory', _create_directory_store)

__all__ = [
    "BlobStore",
    "DirectoryBlobStore",
    "HttpBlobStore",
]
