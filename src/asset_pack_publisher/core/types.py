"""Type definitions for published asset records.

This module defines TypedDict classes that mirror the JSON schema structure
defined in core/schemas/.
"""

from typing import TypedDict


class FileRecord(TypedDict):
    """A single content-addressed file belonging to an asset."""

    name: str  # Path relative to the pack root, POSIX separators
    cid: str  # Content identifier
    url: str  # Public URL on the content server


class Trait(TypedDict):
    """Classification tag attached to an asset."""

    id: str  # Trait kind, e.g. 'dcl:asset-pack:tag'
    value: str


class AssetRecord(TypedDict):
    """Serialized descriptor for one asset."""

    name: str
    description: str
    token_id: str  # SHA-256 hex of the asset directory name
    image: str  # Thumbnail URL
    uri: str  # Canonical URI under the contract
    files: list[FileRecord]
    owner: str  # Placeholder, filled by the registry
    registry: str  # Registry identifier of the pack
    traits: list[Trait]


class AssetPackRecord(TypedDict):
    """Serialized descriptor for a whole asset pack."""

    title: str
    registry: str
    content_server_url: str
    contract_uri: str
    assets: list[AssetRecord]
