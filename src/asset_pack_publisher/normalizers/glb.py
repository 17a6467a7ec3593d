"""Binary glTF (GLB) normalizer.

Pulls images embedded in the GLB binary chunk out into standalone files,
rewrites the images to reference those files by URI and compacts the
binary chunk so the freed bytes are not uploaded twice.
"""

import json
import struct
from pathlib import PurePath
from typing import Any, Iterator
from urllib.parse import quote

from ..scanner import sanitize_filename
from .base import NormalizedScene, Normalizer

GLTF_MAGIC = 0x46546C67
GLTF_VERSION = 2
JSON_CHUNK_TYPE = 0x4E4F534A
BIN_CHUNK_TYPE = 0x004E4942

HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8

IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/ktx2": ".ktx2",
}
DEFAULT_EXTENSION = ".bin"


def align4(value: int) -> int:
    return (value + 3) & ~3


def parse_glb(data: bytes) -> tuple[dict[str, Any], bytes | None]:
    """Split a GLB container into its JSON payload and binary chunk.

    Raises:
        ValueError: If the container is truncated or not GLB version 2
    """
    if len(data) < HEADER_SIZE + CHUNK_HEADER_SIZE:
        raise ValueError("GLB too small")

    magic, version, total_length = struct.unpack_from("<III", data, 0)
    if magic != GLTF_MAGIC:
        raise ValueError("Invalid GLB magic")
    if version != GLTF_VERSION:
        raise ValueError(f"Unsupported GLB version: {version}")
    if total_length > len(data):
        raise ValueError("GLB is truncated")

    offset = HEADER_SIZE
    json_chunk: bytes | None = None
    bin_chunk: bytes | None = None

    while offset + CHUNK_HEADER_SIZE <= total_length:
        chunk_len, chunk_type = struct.unpack_from("<II", data, offset)
        offset += CHUNK_HEADER_SIZE
        chunk_end = offset + chunk_len
        if chunk_end > total_length:
            raise ValueError("GLB chunk exceeds file size")

        chunk_data = data[offset:chunk_end]
        offset = chunk_end

        if chunk_type == JSON_CHUNK_TYPE and json_chunk is None:
            json_chunk = chunk_data
        elif chunk_type == BIN_CHUNK_TYPE and bin_chunk is None:
            bin_chunk = chunk_data

    if json_chunk is None:
        raise ValueError("GLB missing JSON chunk")

    payload = json.loads(json_chunk.decode("utf-8").rstrip(" \t\r\n\x00"))
    if not isinstance(payload, dict):
        raise ValueError("GLB JSON root is not an object")

    return payload, bin_chunk


def build_glb(payload: dict[str, Any], binary_blob: bytes | None) -> bytes:
    """Assemble a GLB container; the BIN chunk is omitted when ``binary_blob`` is None."""
    json_bytes = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    json_bytes += b" " * (align4(len(json_bytes)) - len(json_bytes))

    total_length = HEADER_SIZE + CHUNK_HEADER_SIZE + len(json_bytes)
    if binary_blob is not None:
        binary_blob += b"\x00" * (align4(len(binary_blob)) - len(binary_blob))
        total_length += CHUNK_HEADER_SIZE + len(binary_blob)

    out = bytearray()
    out += struct.pack("<III", GLTF_MAGIC, GLTF_VERSION, total_length)
    out += struct.pack("<II", len(json_bytes), JSON_CHUNK_TYPE)
    out += json_bytes
    if binary_blob is not None:
        out += struct.pack("<II", len(binary_blob), BIN_CHUNK_TYPE)
        out += binary_blob
    return bytes(out)


def _buffer_view_refs(node: Any, top: bool = True) -> Iterator[dict[str, Any]]:
    # Every object holding a bufferView index: accessors, images, sparse
    # storage and extension payloads such as Draco.
    if isinstance(node, dict):
        for key, value in node.items():
            if top and key == "bufferViews":
                continue
            if key == "bufferView" and isinstance(value, int):
                yield node
            else:
                yield from _buffer_view_refs(value, top=False)
    elif isinstance(node, list):
        for item in node:
            yield from _buffer_view_refs(item, top=False)


class GlbNormalizer(Normalizer):
    """Externalizes images stored inside GLB buffer views."""

    def normalize(self, data: bytes, stem: str) -> NormalizedScene:
        payload, bin_chunk = parse_glb(data)

        images = payload.get("images", [])
        embedded = [(i, image) for i, image in enumerate(images) if "bufferView" in image]
        if not embedded:
            # Already normalized; hand the original bytes back untouched
            return NormalizedScene(primary=data)

        if bin_chunk is None:
            raise ValueError("GLB images reference buffer views but the BIN chunk is missing")

        try:
            auxiliary = self._extract_images(payload, bin_chunk, embedded, stem)
            blob = self._compact(payload, bin_chunk)
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed glTF JSON: {e!r}") from e

        return NormalizedScene(primary=build_glb(payload, blob), auxiliary=auxiliary)

    def _extract_images(
        self,
        payload: dict[str, Any],
        bin_chunk: bytes,
        embedded: list[tuple[int, dict[str, Any]]],
        stem: str,
    ) -> dict[str, bytes]:
        views = payload["bufferViews"]
        if "uri" in payload["buffers"][0]:
            raise ValueError("GLB buffer 0 is external; embedded images cannot be located")

        auxiliary: dict[str, bytes] = {}

        for index, image in embedded:
            view = views[image["bufferView"]]
            if view.get("buffer", 0) != 0:
                raise ValueError(f"Image {index} is not stored in the GLB binary chunk")

            start = view.get("byteOffset", 0)
            end = start + view["byteLength"]
            if end > len(bin_chunk):
                raise ValueError(f"Image {index} exceeds the GLB binary chunk")

            name = self._resource_name(stem, image, index, auxiliary)
            auxiliary[name] = bin_chunk[start:end]

            del image["bufferView"]
            image.pop("mimeType", None)
            image["uri"] = quote(name)

        return auxiliary

    @staticmethod
    def _resource_name(
        stem: str, image: dict[str, Any], index: int, taken: dict[str, bytes]
    ) -> str:
        extension = IMAGE_EXTENSIONS.get(image.get("mimeType", ""), DEFAULT_EXTENSION)

        label = sanitize_filename(str(image.get("name") or "")) or str(index)
        if PurePath(label).suffix.lower() == extension:
            label = PurePath(label).stem

        name = f"{stem}_{label}{extension}"
        suffix = index
        while name in taken:
            name = f"{stem}_{label}_{suffix}{extension}"
            suffix += 1
        return name

    @staticmethod
    def _compact(payload: dict[str, Any], bin_chunk: bytes) -> bytes | None:
        """Drop unreferenced buffer views and repack the GLB binary chunk."""
        views = payload.get("bufferViews", [])
        buffers = payload.get("buffers", [])
        glb_buffer = bool(buffers) and "uri" not in buffers[0]

        refs = list(_buffer_view_refs(payload))
        used = {ref["bufferView"] for ref in refs}

        remap: dict[int, int] = {}
        kept: list[dict[str, Any]] = []
        blob = bytearray()

        for old_index, view in enumerate(views):
            if old_index not in used:
                continue
            if glb_buffer and view.get("buffer", 0) == 0:
                start = view.get("byteOffset", 0)
                chunk = bin_chunk[start : start + view["byteLength"]]
                blob += b"\x00" * (align4(len(blob)) - len(blob))
                view["byteOffset"] = len(blob)
                blob += chunk
            remap[old_index] = len(kept)
            kept.append(view)

        for ref in refs:
            ref["bufferView"] = remap[ref["bufferView"]]

        if kept:
            payload["bufferViews"] = kept
        else:
            payload.pop("bufferViews", None)

        if not glb_buffer:
            return None

        if not blob and len(buffers) == 1:
            del payload["buffers"]
            return None

        # glTF requires byteLength >= 1 even when nothing references the buffer
        if not blob:
            blob += b"\x00" * 4
        buffers[0]["byteLength"] = len(blob)
        return bytes(blob)
