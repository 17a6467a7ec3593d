"""Publishing pipeline for asset packs.

This module provides the main interface for turning a pack directory into
uploaded content and validated records. A pack directory contains one
sub-directory per asset, each with its own ``asset.json``.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Callable

from .asset import ASSET_FILE_NAME, Asset
from .asset_pack import AssetPack
from .core.types import AssetPackRecord
from .core.validator import validate_record
from .stores.base import BlobStore
from .upload import DEFAULT_MAX_WORKERS, UploadReport

logger = logging.getLogger(__name__)


class PublishPipeline:
    """Main interface for publishing an asset pack.

    Example:
        >>> pack = AssetPack.from_file(Path('pack/asset_pack.json'))
        >>> pipeline = PublishPipeline(pack, Path('pack'))
        >>> assets = list(pipeline.generate_assets())
        >>> record = pipeline.publish(assets, store, 'assets')
    """

    def __init__(
        self,
        asset_pack: AssetPack,
        pack_dir: Path,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """Initialize the pipeline.

        Args:
            asset_pack: Pack context shared by all assets
            pack_dir: Directory holding one sub-directory per asset
            max_workers: Concurrency cap for hashing and uploads

        Raises:
            ValueError: If pack_dir doesn't exist or isn't a directory
        """
        self.asset_pack = asset_pack
        self.pack_dir = Path(pack_dir)
        self.max_workers = max_workers

        if not self.pack_dir.exists():
            raise ValueError(f"Path does not exist: {self.pack_dir}")

        if not self.pack_dir.is_dir():
            raise ValueError(f"Path is not a directory: {self.pack_dir}")

    def discover_asset_dirs(self) -> list[Path]:
        """List asset directories (those holding an ``asset.json``), sorted by name."""
        return sorted(
            entry
            for entry in self.pack_dir.iterdir()
            if entry.is_dir()
            and not entry.name.startswith(".")
            and (entry / ASSET_FILE_NAME).is_file()
        )

    def build_asset(self, asset_dir: Path) -> Asset:
        """Build and fill a single asset."""
        return Asset.build(asset_dir, self.asset_pack, max_workers=self.max_workers).fill()

    def generate_assets(
        self,
        filter_fn: Callable[[Path], bool] | None = None,
        limit: int | None = None,
    ) -> Iterator[Asset]:
        """Build and fill the assets of the pack.

        Args:
            filter_fn: Optional filter on asset directories
            limit: Optional limit on number of assets

        Yields:
            Filled assets, in directory-name order
        """
        asset_dirs = self.discover_asset_dirs()

        if filter_fn:
            asset_dirs = [d for d in asset_dirs if filter_fn(d)]

        if limit:
            asset_dirs = asset_dirs[:limit]

        for asset_dir in asset_dirs:
            yield self.build_asset(asset_dir)

    def upload(
        self,
        assets: list[Asset],
        store: BlobStore,
        bucket: str,
        skip_check: bool = False,
    ) -> dict[str, UploadReport]:
        """Upload the contents of every asset.

        Assets are uploaded one after another; content shared between
        assets is transferred once because later assets find it through
        the existence check.

        Returns:
            Asset id -> upload report
        """
        reports: dict[str, UploadReport] = {}
        for asset in assets:
            logger.info("Uploading: %s", asset.name)
            reports[asset.id] = asset.upload(store, bucket, self.pack_dir, skip_check=skip_check)
        return reports

    def to_json(self, assets: list[Asset]) -> AssetPackRecord:
        """Serialize the pack and its assets.

        Raises:
            SchemaError: If any record does not conform to its schema
        """
        record = AssetPackRecord(
            title=self.asset_pack.title,
            registry=self.asset_pack.registry_id,
            content_server_url=self.asset_pack.content_server_url,
            contract_uri=self.asset_pack.contract_uri,
            assets=[asset.to_json() for asset in assets],
        )
        validate_record("asset_pack", record)
        return record

    def publish(
        self,
        assets: list[Asset],
        store: BlobStore,
        bucket: str,
        skip_check: bool = False,
    ) -> AssetPackRecord:
        """Upload every asset, then emit the pack record.

        Records are only emitted once all uploads have completed, so every
        identifier they reference is present in the store.
        """
        self.upload(assets, store, bucket, skip_check=skip_check)
        return self.to_json(assets)
