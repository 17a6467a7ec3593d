"""Core utilities for publishing asset packs.

This package contains content identifiers, schema validation, error types
and record type definitions that are shared by every stage of the
pipeline.
"""

from .cid import identify, identify_file, sha256_hex
from .errors import AssetValidationError, SchemaError, TransferError
from .types import AssetPackRecord, AssetRecord, FileRecord, Trait
from .validator import validate_record, validate_record_with_error_details

__all__ = [
    "AssetPackRecord",
    "AssetRecord",
    "AssetValidationError",
    "FileRecord",
    "SchemaError",
    "Trait",
    "TransferError",
    "identify",
    "identify_file",
    "sha256_hex",
    "validate_record",
    "validate_record_with_error_details",
]
