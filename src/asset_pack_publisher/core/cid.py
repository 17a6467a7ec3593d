"""Content identifiers.

A content identifier (CID) is the address of a file in the remote store and
the deduplication key used everywhere else. Identifiers are rendered as
CIDv1 strings: raw codec, SHA2-256 multihash, base32 multibase.
"""

import base64
import hashlib
from pathlib import Path

CID_VERSION = 0x01
RAW_CODEC = 0x55
SHA2_256 = 0x12
SHA2_256_LENGTH = 0x20

# Multibase prefix for lower-case RFC 4648 base32 without padding
BASE32_PREFIX = "b"

READ_CHUNK_SIZE = 1024 * 1024


def _render(digest: bytes) -> str:
    prefix = bytes([CID_VERSION, RAW_CODEC, SHA2_256, SHA2_256_LENGTH])
    encoded = base64.b32encode(prefix + digest).decode("ascii")
    return BASE32_PREFIX + encoded.rstrip("=").lower()


def identify(data: bytes) -> str:
    """Compute the content identifier of a byte string.

    Args:
        data: Raw file contents

    Returns:
        Fixed-length textual identifier (59 characters)
    """
    return _render(hashlib.sha256(data).digest())


def identify_file(path: Path) -> str:
    """Compute the content identifier of a file on disk.

    The file is streamed so large textures do not need to be held in memory.
    The result is identical to ``identify(path.read_bytes())``.

    Raises:
        OSError: If the file cannot be read
    """
    digest = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(READ_CHUNK_SIZE), b""):
            digest.update(chunk)
    return _render(digest.digest())


def sha256_hex(text: str) -> str:
    """Hex SHA-256 of a UTF-8 string, used for directory-derived asset ids."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
