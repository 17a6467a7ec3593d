"""Deduplicated, concurrent upload of content-addressed files.

Work is keyed by content identifier rather than by path: identical content
referenced from several paths is checked and transferred once. Content
already present in the store is skipped through the existence check, which
is what makes re-running an interrupted upload safe.
"""

import logging
import mimetypes
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .stores.base import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Checked before the platform's media-type table, which may lack them
CONTENT_TYPES = {
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
    ".ktx2": "image/ktx2",
    ".webp": "image/webp",
}


def content_type_for(path: str) -> str:
    """Resolve a file's media type from its name."""
    content_type = CONTENT_TYPES.get(PurePath(path).suffix.lower())
    if content_type is None:
        content_type, _ = mimetypes.guess_type(path, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


@dataclass
class UploadReport:
    """Outcome of a successful upload.

    Attributes:
        uploaded: Content identifiers transferred during this call
        skipped: Content identifiers already present in the store
    """

    uploaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def unique_contents(contents: Mapping[str, str]) -> dict[str, str]:
    """Map each distinct content identifier to one relative path.

    The lexicographically first path wins so the choice is stable.
    """
    by_cid: dict[str, str] = {}
    for relative_path in sorted(contents):
        by_cid.setdefault(contents[relative_path], relative_path)
    return by_cid


def _upload_one(
    store: BlobStore,
    bucket: str,
    base_dir: Path,
    relative_path: str,
    cid: str,
    skip_check: bool,
) -> bool:
    if not skip_check and store.exists(bucket, cid):
        return False

    data = (base_dir / relative_path).read_bytes()
    store.put(bucket, content_type_for(relative_path), cid, data)
    return True


def upload_contents(
    contents: Mapping[str, str],
    store: BlobStore,
    bucket: str,
    base_dir: Path,
    skip_check: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> UploadReport:
    """Upload every distinct content identifier that the store lacks.

    All per-identifier units run concurrently. The call waits for every
    unit to finish and then re-raises the first failure, so callers either
    get a report for a complete upload or an exception.

    Args:
        contents: Relative path -> content identifier
        store: Destination blob store
        bucket: Bucket name
        base_dir: Directory the relative paths are resolved against
        skip_check: Transfer without querying existence first
        max_workers: Maximum number of in-flight units

    Returns:
        UploadReport listing transferred and skipped identifiers

    Raises:
        TransferError: If the store rejects a request
        OSError: If a local file cannot be read
    """
    base_dir = Path(base_dir)
    work = unique_contents(contents)
    report = UploadReport()

    if not work:
        return report

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            cid: executor.submit(
                _upload_one, store, bucket, base_dir, relative_path, cid, skip_check
            )
            for cid, relative_path in work.items()
        }
        wait(futures.values())

    errors = [f.exception() for f in futures.values() if f.exception() is not None]
    if errors:
        logger.error("%d of %d uploads to %s failed", len(errors), len(futures), bucket)
        raise errors[0]

    for cid, future in futures.items():
        if future.result():
            report.uploaded.append(cid)
        else:
            report.skipped.append(cid)

    logger.info(
        "Uploaded %d files to %s (%d already present)",
        len(report.uploaded),
        bucket,
        len(report.skipped),
    )
    return report
