"""Shared fixtures: GLB builders, pack directories and an in-memory store."""

import json
from pathlib import Path
from typing import Any

import pytest

from asset_pack_publisher import AssetPack
from asset_pack_publisher.core.errors import TransferError
from asset_pack_publisher.normalizers.glb import align4, build_glb
from asset_pack_publisher.stores.base import BlobStore

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
TEXTURE_BYTES = PNG_SIGNATURE + b"wood-texture-pixels"
THUMB_BYTES = PNG_SIGNATURE + b"chair-thumbnail"
MESH_BYTES = bytes(range(12))

CONTENT_SERVER_URL = "https://content.example.com"
CONTRACT_URI = "https://contract.example.com/assets"
REGISTRY_ID = "registry-1"


def make_glb(images: list[tuple[str, str, bytes]] = (), mesh: bytes = MESH_BYTES) -> bytes:
    """Build a GLB with one mesh buffer view followed by embedded images.

    Args:
        images: (name, mimeType, bytes) of each embedded image
        mesh: Bytes of the mesh buffer view, referenced by accessor 0
    """
    blob = bytearray(mesh)
    views: list[dict[str, Any]] = [{"buffer": 0, "byteOffset": 0, "byteLength": len(mesh)}]
    payload_images = []

    for name, mime, data in images:
        blob += b"\x00" * (align4(len(blob)) - len(blob))
        views.append({"buffer": 0, "byteOffset": len(blob), "byteLength": len(data)})
        blob += data
        payload_images.append({"name": name, "mimeType": mime, "bufferView": len(views) - 1})

    payload: dict[str, Any] = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": len(blob)}],
        "bufferViews": views,
        "accessors": [{"bufferView": 0, "componentType": 5126, "count": 1, "type": "VEC3"}],
    }
    if payload_images:
        payload["images"] = payload_images
        payload["textures"] = [{"source": i} for i in range(len(payload_images))]

    return build_glb(payload, bytes(blob))


def write_asset(
    pack_dir: Path,
    name: str,
    metadata: dict[str, Any],
    files: dict[str, bytes],
) -> Path:
    """Create an asset directory with an asset.json and the given files."""
    asset_dir = pack_dir / name
    asset_dir.mkdir(parents=True, exist_ok=True)
    (asset_dir / "asset.json").write_text(json.dumps(metadata), encoding="utf-8")
    for relative, data in files.items():
        path = asset_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return asset_dir


class MemoryStore(BlobStore):
    """In-memory blob store recording every call."""

    def __init__(self, fail_on: set[str] | None = None):
        self.objects: dict[tuple[str, str], tuple[str, bytes]] = {}
        self.exists_calls: list[str] = []
        self.put_calls: list[str] = []
        self.fail_on = fail_on or set()

    def exists(self, bucket: str, cid: str) -> bool:
        self.exists_calls.append(cid)
        return (bucket, cid) in self.objects

    def put(self, bucket: str, content_type: str, cid: str, data: bytes) -> None:
        self.put_calls.append(cid)
        if cid in self.fail_on:
            raise TransferError(f"Upload of {cid} rejected", cid=cid, status_code=500)
        self.objects[(bucket, cid)] = (content_type, data)


@pytest.fixture
def asset_pack() -> AssetPack:
    return AssetPack(
        content_server_url=CONTENT_SERVER_URL,
        contract_uri=CONTRACT_URI,
        registry_id=REGISTRY_ID,
        title="Test Pack",
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def pack_dir(tmp_path: Path) -> Path:
    """Pack directory holding a single 'chair' asset with one embedded texture."""
    pack = tmp_path / "pack"
    write_asset(
        pack,
        "chair",
        {"name": "Chair", "category": "furniture", "tags": ["chair", "wood"]},
        {
            "thumbnail.png": THUMB_BYTES,
            "model.glb": make_glb([("wood", "image/png", TEXTURE_BYTES)]),
        },
    )
    return pack
