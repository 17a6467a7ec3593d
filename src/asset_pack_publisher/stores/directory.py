"""Local directory blob store.

Mirrors the remote layout on disk as ``root/bucket/cid``. Useful for
staging a pack before publishing and for tests.
"""

import os
import tempfile
from pathlib import Path

from .base import BlobStore


class DirectoryBlobStore(BlobStore):
    """Blob store writing objects into a local directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def object_path(self, bucket: str, cid: str) -> Path:
        if "/" in bucket or "/" in cid or bucket in ("", ".", "..") or cid in ("", ".", ".."):
            raise ValueError(f"Invalid object key: {bucket}/{cid}")
        return self.root / bucket / cid

    def exists(self, bucket: str, cid: str) -> bool:
        return self.object_path(bucket, cid).is_file()

    def put(self, bucket: str, content_type: str, cid: str, data: bytes) -> None:
        path = self.object_path(bucket, cid)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write then rename so a concurrent reader never sees a partial object
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
