"""Asset Pack Publisher.

This package content-addresses the files of an asset pack (3D models,
textures, images), uploads only the content a remote blob store does not
already hold and emits validated JSON records mapping each asset's files
to content identifiers and public URLs.
"""

# Core library interface
from .asset import Asset
from .asset_pack import AssetPack
from .pipeline import PublishPipeline
from .registry import StoreRegistry
from .stores import BlobStore, DirectoryBlobStore, HttpBlobStore
from .upload import UploadReport, upload_contents

# Core utilities
from .core import AssetValidationError, SchemaError, TransferError
from .core import identify, identify_file, validate_record
from .normalizers import NormalizationReport, normalize, normalize_scenes
from .scanner import is_resource_file, is_scene_file, list_files

# CLI interface
from .cli import main

__version__ = "0.1.0"

__all__ = [
    # Primary library interface
    "Asset",
    "AssetPack",
    "PublishPipeline",
    "StoreRegistry",
    "BlobStore",
    "DirectoryBlobStore",
    "HttpBlobStore",
    "UploadReport",
    "upload_contents",
    # Core utilities
    "AssetValidationError",
    "SchemaError",
    "TransferError",
    "identify",
    "identify_file",
    "validate_record",
    "NormalizationReport",
    "normalize",
    "normalize_scenes",
    "is_resource_file",
    "is_scene_file",
    "list_files",
    # CLI
    "main",
]
