"""Base abstraction for remote blob stores.

A blob store holds immutable objects keyed solely by content identifier.
Writing the same identifier twice with the same bytes must be a no-op,
never a conflict.
"""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Abstract base class for content-addressed blob stores."""

    @abstractmethod
    def exists(self, bucket: str, cid: str) -> bool:
        """Check whether an object is already stored.

        Args:
            bucket: Bucket (namespace) name
            cid: Content identifier of the object

        Returns:
            True if the object is present

        Raises:
            TransferError: If the store answers with an error
        """
        pass

    @abstractmethod
    def put(self, bucket: str, content_type: str, cid: str, data: bytes) -> None:
        """Store an object under its content identifier.

        Args:
            bucket: Bucket (namespace) name
            content_type: Media type of the object
            cid: Content identifier of ``data``
            data: Object bytes

        Raises:
            TransferError: If the store rejects the object
        """
        pass

    def close(self) -> None:
        """Release any connections held by the store."""
