"""HTTP blob store.

Objects live at ``{base_url}/{bucket}/{cid}``. Existence is a HEAD request
and uploads are PUT requests carrying the object's media type.
"""

import logging

import httpx

from ..core.errors import TransferError
from .base import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpBlobStore(BlobStore):
    """Blob store backed by a plain HTTP object endpoint.

    Transport failures (``httpx.TransportError``) propagate unchanged;
    error statuses are reported as :class:`TransferError`.

    Example:
        >>> store = HttpBlobStore("https://blobs.example.com")
        >>> if not store.exists("assets", cid):
        ...     store.put("assets", "image/png", cid, data)
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the store.

        Args:
            base_url: Root URL of the object endpoint
            client: Optional preconfigured client (auth headers, transport)
            timeout: Request timeout in seconds when no client is given
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def object_url(self, bucket: str, cid: str) -> str:
        return f"{self.base_url}/{bucket}/{cid}"

    def exists(self, bucket: str, cid: str) -> bool:
        response = self.client.head(self.object_url(bucket, cid))
        if response.status_code == 404:
            return False
        if response.is_success:
            return True
        raise TransferError(
            f"Existence check for {cid} failed with HTTP {response.status_code}",
            cid=cid,
            status_code=response.status_code,
        )

    def put(self, bucket: str, content_type: str, cid: str, data: bytes) -> None:
        response = self.client.put(
            self.object_url(bucket, cid),
            content=data,
            headers={"Content-Type": content_type},
        )
        if not response.is_success:
            raise TransferError(
                f"Upload of {cid} failed with HTTP {response.status_code}",
                cid=cid,
                status_code=response.status_code,
            )
        logger.debug("Uploaded %s (%s, %d bytes)", cid, content_type, len(data))

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpBlobStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
