"""Tests for building, filling and serializing assets."""

import json
from pathlib import Path

import pytest

from asset_pack_publisher import Asset, AssetPack
from asset_pack_publisher.asset import CATEGORY_TRAIT, TAG_TRAIT, VARIATION_TRAIT
from asset_pack_publisher.core.cid import identify, sha256_hex
from asset_pack_publisher.core.errors import AssetValidationError, SchemaError
from asset_pack_publisher.normalizers.glb import parse_glb

from conftest import (
    CONTENT_SERVER_URL,
    CONTRACT_URI,
    REGISTRY_ID,
    TEXTURE_BYTES,
    THUMB_BYTES,
    make_glb,
    write_asset,
)

CHAIR = {"name": "Chair", "category": "furniture", "tags": ["chair", "wood"]}


class TestBuild:
    """Test reading and validating asset descriptors."""

    def test_reads_descriptor(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test that metadata is read from asset.json."""
        asset = Asset.build(pack_dir / "chair", asset_pack)

        assert asset.name == "Chair"
        assert asset.category == "furniture"
        assert asset.tags == ["chair", "wood"]
        assert asset.variations == []
        assert asset.contents == {}
        assert asset.thumbnail == ""

    def test_id_derived_from_directory_name(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test that the id is a pure function of the directory name."""
        asset = Asset.build(pack_dir / "chair", asset_pack)
        assert asset.id == sha256_hex("chair")

    def test_reads_variations(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test the optional variations list."""
        asset_dir = write_asset(tmp_path, "lamp", {**CHAIR, "variations": ["red", "blue"]}, {})
        assert Asset.build(asset_dir, asset_pack).variations == ["red", "blue"]

    @pytest.mark.parametrize(
        "metadata,message",
        [
            ({"category": "furniture", "tags": ["chair"]}, "must have a name"),
            ({"name": "", "category": "furniture", "tags": ["chair"]}, "must have a name"),
            ({"name": "Chair", "category": "furniture"}, "at least 1 tag"),
            ({"name": "Chair", "category": "furniture", "tags": []}, "at least 1 tag"),
            ({"name": "Chair", "tags": ["chair"]}, "must have a category"),
            ({"name": "Chair", "category": "", "tags": ["chair"]}, "must have a category"),
            ({"name": "Chair", "category": "furniture", "tags": [""]}, "non-empty strings"),
        ],
    )
    def test_invalid_metadata(
        self, tmp_path: Path, asset_pack: AssetPack, metadata: dict, message: str
    ) -> None:
        """Test that invariant violations fail at construction."""
        asset_dir = write_asset(tmp_path, "bad", metadata, {})
        with pytest.raises(AssetValidationError, match=message):
            Asset.build(asset_dir, asset_pack)

    def test_invalid_metadata_fails_before_scanning(
        self, tmp_path: Path, asset_pack: AssetPack, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that validation happens before any directory scan."""

        def fail_scan(*args, **kwargs):
            raise AssertionError("directory was scanned")

        monkeypatch.setattr("asset_pack_publisher.asset.list_files", fail_scan)
        asset_dir = write_asset(tmp_path, "bad", {"name": "Chair", "tags": ["chair"]}, {})

        with pytest.raises(AssetValidationError):
            Asset.build(asset_dir, asset_pack)

    def test_missing_descriptor(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that a missing asset.json propagates."""
        (tmp_path / "empty").mkdir()
        with pytest.raises(FileNotFoundError):
            Asset.build(tmp_path / "empty", asset_pack)

    def test_descriptor_not_an_object(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that a non-object asset.json is rejected."""
        asset_dir = tmp_path / "list"
        asset_dir.mkdir()
        (asset_dir / "asset.json").write_text(json.dumps(["Chair"]), encoding="utf-8")
        with pytest.raises(AssetValidationError, match="JSON object"):
            Asset.build(asset_dir, asset_pack)


class TestFill:
    """Test content addressing of an asset directory."""

    def test_chair_end_to_end(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test thumbnail, extracted texture and entry point of the chair asset."""
        asset = Asset.build(pack_dir / "chair", asset_pack).fill()

        assert asset.thumbnail == f"{CONTENT_SERVER_URL}/{identify(THUMB_BYTES)}"
        assert asset.url == "chair/model.glb"
        assert set(asset.contents) == {
            "chair/model.glb",
            "chair/model_wood.png",
            "chair/thumbnail.png",
        }
        assert asset.contents["chair/model_wood.png"] == identify(TEXTURE_BYTES)
        assert asset.contents["chair/thumbnail.png"] == identify(THUMB_BYTES)

        model_bytes = (pack_dir / "chair" / "model.glb").read_bytes()
        assert asset.contents["chair/model.glb"] == identify(model_bytes)
        payload, _ = parse_glb(model_bytes)
        assert payload["images"][0]["uri"] == "model_wood.png"

    def test_fill_is_idempotent(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test that filling a fresh instance twice yields the same contents."""
        first = Asset.build(pack_dir / "chair", asset_pack).fill()
        second = Asset.build(pack_dir / "chair", asset_pack).fill()

        assert first.contents == second.contents
        assert first.thumbnail == second.thumbnail
        assert first.url == second.url

    def test_missing_thumbnail_is_fatal(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that an asset without a thumbnail cannot be filled."""
        asset_dir = write_asset(tmp_path, "chair", CHAIR, {"model.glb": make_glb()})
        asset = Asset.build(asset_dir, asset_pack)

        with pytest.raises(FileNotFoundError):
            asset.fill()

    def test_broken_scene_degrades_gracefully(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that a scene that cannot be normalized is still addressed."""
        broken = b"not really a glb"
        asset_dir = write_asset(
            tmp_path,
            "chair",
            CHAIR,
            {"thumbnail.png": THUMB_BYTES, "model.glb": broken},
        )

        asset = Asset.build(asset_dir, asset_pack).fill()

        assert asset.contents["chair/model.glb"] == identify(broken)
        assert asset.url == "chair/model.glb"
        assert asset.normalization is not None
        assert asset_dir / "model.glb" in asset.normalization.failed

    def test_extracted_webp_texture_is_addressed(
        self, tmp_path: Path, asset_pack: AssetPack
    ) -> None:
        """Test that textures extracted in any supported format reach the contents."""
        webp = b"RIFF\x10\x00\x00\x00WEBPVP8 wood"
        asset_dir = write_asset(
            tmp_path,
            "chair",
            CHAIR,
            {"thumbnail.png": THUMB_BYTES, "model.glb": make_glb([("wood", "image/webp", webp)])},
        )

        asset = Asset.build(asset_dir, asset_pack).fill()

        assert asset.contents["chair/model_wood.webp"] == identify(webp)
        payload, _ = parse_glb((asset_dir / "model.glb").read_bytes())
        assert payload["images"][0]["uri"] == "model_wood.webp"

    def test_existing_texture_is_kept(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that a file of the asset is never replaced by an extracted texture."""
        user_texture = TEXTURE_BYTES + b"-retouched"
        scene = make_glb([("wood", "image/png", TEXTURE_BYTES)])
        asset_dir = write_asset(
            tmp_path,
            "chair",
            CHAIR,
            {"thumbnail.png": THUMB_BYTES, "model.glb": scene, "model_wood.png": user_texture},
        )

        asset = Asset.build(asset_dir, asset_pack).fill()

        assert (asset_dir / "model_wood.png").read_bytes() == user_texture
        assert asset.contents["chair/model_wood.png"] == identify(user_texture)
        # The scene keeps its embedded texture
        assert asset.contents["chair/model.glb"] == identify(scene)
        assert asset_dir / "model.glb" in asset.normalization.failed

    def test_ignores_non_resource_files(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test that descriptors and unknown formats are not content-addressed."""
        (pack_dir / "chair" / "notes.txt").write_text("todo", encoding="utf-8")
        asset = Asset.build(pack_dir / "chair", asset_pack).fill()

        assert "chair/asset.json" not in asset.contents
        assert "chair/notes.txt" not in asset.contents

    def test_entry_point_example(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test the entry point with a scene in one folder and a texture in another."""
        asset_dir = write_asset(
            tmp_path,
            "chair",
            CHAIR,
            {"thumbnail.png": THUMB_BYTES, "a/model.glb": make_glb(), "b/tex.png": TEXTURE_BYTES},
        )
        asset = Asset.build(asset_dir, asset_pack).fill()

        assert asset.url == "chair/a/model.glb"

    def test_entry_point_is_lowest_scene_path(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that selection among several scenes is deterministic."""
        asset_dir = write_asset(
            tmp_path,
            "chair",
            CHAIR,
            {
                "thumbnail.png": THUMB_BYTES,
                "z_model.glb": make_glb(mesh=b"zzzz"),
                "m_model.glb": make_glb(mesh=b"mmmm"),
            },
        )

        urls = {Asset.build(asset_dir, asset_pack).fill().url for _ in range(3)}
        assert urls == {"chair/m_model.glb"}

    def test_no_scene_leaves_url_empty(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test an asset made only of images."""
        asset_dir = write_asset(tmp_path, "poster", CHAIR, {"thumbnail.png": THUMB_BYTES})
        asset = Asset.build(asset_dir, asset_pack).fill()

        assert asset.url == ""
        assert list(asset.contents) == ["poster/thumbnail.png"]


class TestToJson:
    """Test serialization into asset records."""

    def test_chair_record(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test the record of the chair asset."""
        asset = Asset.build(pack_dir / "chair", asset_pack).fill()
        record = asset.to_json()

        assert record["name"] == "Chair"
        assert record["description"] == ""
        assert record["token_id"] == asset.id
        assert record["image"] == asset.thumbnail
        assert record["uri"] == f"{CONTRACT_URI}/{asset.id}"
        assert record["owner"] == ""
        assert record["registry"] == REGISTRY_ID
        assert record["traits"] == [
            {"id": CATEGORY_TRAIT, "value": "furniture"},
            {"id": TAG_TRAIT, "value": "chair"},
            {"id": TAG_TRAIT, "value": "wood"},
        ]

    def test_files_sorted_with_urls(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test file records carry the content URL of each identifier."""
        asset = Asset.build(pack_dir / "chair", asset_pack).fill()
        files = asset.to_json()["files"]

        assert [f["name"] for f in files] == sorted(asset.contents)
        for f in files:
            assert f["cid"] == asset.contents[f["name"]]
            assert f["url"] == f"{CONTENT_SERVER_URL}/{f['cid']}"

    def test_variation_traits(self, tmp_path: Path, asset_pack: AssetPack) -> None:
        """Test that each variation becomes a trait after the tags."""
        asset_dir = write_asset(
            tmp_path,
            "chair",
            {**CHAIR, "variations": ["oak"]},
            {"thumbnail.png": THUMB_BYTES, "model.glb": make_glb()},
        )
        traits = Asset.build(asset_dir, asset_pack).fill().to_json()["traits"]

        assert len(traits) == 4
        assert traits[-1] == {"id": VARIATION_TRAIT, "value": "oak"}

    def test_unfilled_asset_is_invalid(self, pack_dir: Path, asset_pack: AssetPack) -> None:
        """Test that emitting before fill fails schema validation."""
        asset = Asset.build(pack_dir / "chair", asset_pack)
        with pytest.raises(SchemaError):
            asset.to_json()

    def test_missing_registry_is_invalid(self, pack_dir: Path) -> None:
        """Test that an empty registry identifier fails schema validation."""
        pack = AssetPack(CONTENT_SERVER_URL, CONTRACT_URI, registry_id="")
        asset = Asset.build(pack_dir / "chair", pack).fill()

        with pytest.raises(SchemaError, match="registry") as exc_info:
            asset.to_json()
        assert exc_info.value.path == "registry"
