"""Asset manifest building.

An Asset is one packaged unit of an asset pack: a directory holding an
``asset.json`` descriptor, a ``thumbnail.png`` and the scene and resource
files that make up the model. Building an asset reads and validates the
descriptor; filling it normalizes scenes and content-addresses every
resource.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from .asset_pack import AssetPack
from .core.cid import identify_file, sha256_hex
from .core.errors import AssetValidationError
from .core.types import AssetRecord, FileRecord, Trait
from .core.validator import validate_record
from .normalizers import NormalizationReport, normalize_scenes
from .scanner import DEFAULT_CLASSIFIER, FileClassifier, list_files
from .stores.base import BlobStore
from .upload import DEFAULT_MAX_WORKERS, UploadReport, upload_contents

logger = logging.getLogger(__name__)

ASSET_FILE_NAME = "asset.json"
THUMB_FILE_NAME = "thumbnail.png"

CATEGORY_TRAIT = "dcl:asset-pack:category"
TAG_TRAIT = "dcl:asset-pack:tag"
VARIATION_TRAIT = "dcl:asset-pack:variation"


class Asset:
    """A single asset of a pack and its content-addressed files.

    Attributes:
        id: SHA-256 hex of the asset directory name
        directory: Asset directory
        name: Human-readable name
        category: Category tag
        tags: Classification tags (at least one)
        variations: Variant labels
        thumbnail: Public URL of the thumbnail, set by ``fill``
        url: Entry-point scene path relative to the pack, set by ``fill``
        contents: Path relative to the pack -> content identifier, set by ``fill``

    Example:
        >>> asset = Asset.build(Path('pack/chair'), asset_pack).fill()
        >>> asset.upload(store, 'assets', Path('pack'))
        >>> record = asset.to_json()
    """

    def __init__(
        self,
        directory: Path,
        name: str,
        category: str,
        tags: list[str],
        asset_pack: AssetPack,
        variations: list[str] | None = None,
        classifier: FileClassifier = DEFAULT_CLASSIFIER,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.directory = Path(directory)
        self.id = sha256_hex(self.directory.name)
        self.name = name
        self.category = category
        self.tags = tags
        self.variations = variations if variations is not None else []
        self.asset_pack = asset_pack
        self.classifier = classifier
        self.max_workers = max_workers

        self.thumbnail = ""
        self.url = ""
        self.contents: dict[str, str] = {}
        self.normalization: NormalizationReport | None = None

        self.check()

    @classmethod
    def build(cls, asset_dir: Path, asset_pack: AssetPack, **kwargs: Any) -> "Asset":
        """Read an asset directory's descriptor and construct the Asset.

        Args:
            asset_dir: Directory containing ``asset.json``
            asset_pack: Pack context
            **kwargs: Passed to the constructor (classifier, max_workers)

        Raises:
            AssetValidationError: If the descriptor violates an invariant
            FileNotFoundError: If ``asset.json`` is missing
            json.JSONDecodeError: If ``asset.json`` is not valid JSON
        """
        asset_dir = Path(asset_dir)
        logger.info("Reading: %s", asset_dir)

        with (asset_dir / ASSET_FILE_NAME).open("r", encoding="utf-8") as f:
            asset_json = json.load(f)

        if not isinstance(asset_json, dict):
            raise AssetValidationError(f"{ASSET_FILE_NAME} in {asset_dir} must be a JSON object")

        return cls(
            asset_dir,
            asset_json.get("name"),
            asset_json.get("category"),
            asset_json.get("tags"),
            asset_pack,
            variations=asset_json.get("variations"),
            **kwargs,
        )

    def check(self) -> None:
        """Validate the asset's metadata.

        Raises:
            AssetValidationError: If name, category or tags are missing
        """
        if not self.name or not isinstance(self.name, str):
            raise AssetValidationError("Asset must have a name")

        if not self.tags or not isinstance(self.tags, list):
            raise AssetValidationError(f"Asset '{self.name}' must have at least 1 tag")

        if not all(isinstance(tag, str) and tag for tag in self.tags):
            raise AssetValidationError(f"Asset '{self.name}' tags must be non-empty strings")

        if not self.category or not isinstance(self.category, str):
            raise AssetValidationError(f"Asset '{self.name}' must have a category")

        if not isinstance(self.variations, list) or not all(
            isinstance(v, str) and v for v in self.variations
        ):
            raise AssetValidationError(f"Asset '{self.name}' variations must be non-empty strings")

    @property
    def pack_dir(self) -> Path:
        """Directory that content paths are relative to."""
        return self.directory.parent

    def fill(self) -> "Asset":
        """Resolve the thumbnail, normalize scenes and content-address resources.

        Returns:
            self, for chaining

        Raises:
            OSError: If the thumbnail or any resource cannot be read
        """
        # Thumb
        thumbnail_cid = identify_file(self.directory / THUMB_FILE_NAME)
        self.thumbnail = self.asset_pack.content_url(thumbnail_cid)

        # Textures
        self.normalization = self.save_content_textures()

        # Content
        # Extracted textures are referenced by their scene whatever their format
        resource_paths = sorted(set(self.get_resources()) | set(self.normalization.extracted))
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            cids = list(executor.map(identify_file, resource_paths))

        self.contents = {
            path.relative_to(self.pack_dir).as_posix(): cid
            for path, cid in zip(resource_paths, cids)
        }

        # Entry point
        scenes = sorted(p for p in self.contents if self.classifier.is_scene_file(p))
        self.url = scenes[0] if scenes else ""

        logger.info("Filled %s: %d files, entry point %r", self.name, len(self.contents), self.url)
        return self

    def save_content_textures(self) -> NormalizationReport:
        """Externalize the embedded textures of every scene file (best effort)."""
        report = normalize_scenes(self.get_scenes())
        for scene_path, error in report.failed.items():
            logger.warning("Asset %s keeps embedded resources of %s: %s", self.name, scene_path, error)
        return report

    def get_files(self) -> list[Path]:
        return [self.directory / relative for relative in list_files(self.directory)]

    def get_scenes(self) -> list[Path]:
        return [p for p in self.get_files() if self.classifier.is_scene_file(p)]

    def get_resources(self) -> list[Path]:
        return [p for p in self.get_files() if self.classifier.is_resource_file(p)]

    def upload(
        self, store: BlobStore, bucket: str, base_dir: Path | None = None, skip_check: bool = False
    ) -> UploadReport:
        """Upload the asset's contents that the store does not hold yet.

        Args:
            store: Destination blob store
            bucket: Bucket name
            base_dir: Directory content paths are resolved against
                (defaults to the pack directory)
            skip_check: Transfer without querying existence first

        Raises:
            TransferError: If the store rejects a transfer
            OSError: If a local file cannot be read
        """
        return upload_contents(
            self.contents,
            store,
            bucket,
            base_dir if base_dir is not None else self.pack_dir,
            skip_check=skip_check,
            max_workers=self.max_workers,
        )

    def to_json(self) -> AssetRecord:
        """Serialize the asset into its published record.

        Must be called after ``fill``; an unfilled asset has no image or
        files and fails validation.

        Raises:
            SchemaError: If the record does not conform to the asset schema
        """
        files: list[FileRecord] = [
            FileRecord(name=path, cid=cid, url=self.asset_pack.content_url(cid))
            for path, cid in sorted(self.contents.items())
        ]

        traits: list[Trait] = [Trait(id=CATEGORY_TRAIT, value=self.category)]
        traits += [Trait(id=TAG_TRAIT, value=tag) for tag in self.tags]
        traits += [Trait(id=VARIATION_TRAIT, value=v) for v in self.variations]

        record = AssetRecord(
            name=self.name,
            description="",
            token_id=self.id,
            image=self.thumbnail,
            uri=f"{self.asset_pack.contract_uri}/{self.id}",
            files=files,
            owner="",
            registry=self.asset_pack.registry_id,
            traits=traits,
        )

        validate_record("asset", record)

        return record

    def __repr__(self) -> str:
        return f"Asset(name={self.name!r}, directory={str(self.directory)!r})"
