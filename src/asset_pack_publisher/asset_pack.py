"""Asset pack context.

The pack context supplies the URLs and registry identifier every asset
record is built with. It is read-only once constructed.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .scanner import validate_url

ASSET_PACK_FILE_NAME = "asset_pack.json"
REQUIRED_KEYS = ("content_server_url", "contract_uri", "registry_id")


def read_pack_config(path: Path) -> dict[str, Any]:
    """Read a pack configuration file without checking for required keys.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the file does not hold a JSON object
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


@dataclass(frozen=True)
class AssetPack:
    """Read-only context shared by the assets of one pack.

    Attributes:
        content_server_url: Public root URL of the content server
        contract_uri: Root URI asset records are published under
        registry_id: Registry identifier of the pack
        title: Human-readable pack title
    """

    content_server_url: str
    contract_uri: str
    registry_id: str
    title: str = ""

    def __post_init__(self) -> None:
        validate_url(self.content_server_url)
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "content_server_url", self.content_server_url.rstrip("/"))
        object.__setattr__(self, "contract_uri", self.contract_uri.rstrip("/"))

    def content_url(self, cid: str) -> str:
        """Public URL of a content identifier."""
        return f"{self.content_server_url}/{cid}"

    @classmethod
    def from_file(cls, path: Path) -> "AssetPack":
        """Load a pack context from a JSON file.

        Expected keys: ``content_server_url``, ``contract_uri``,
        ``registry_id`` and optionally ``title``.

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the file is not valid JSON
            ValueError: If a required key is missing or a URL is invalid
        """
        data = read_pack_config(path)

        missing = [k for k in REQUIRED_KEYS if k not in data]
        if missing:
            raise ValueError(f"{path} is missing required keys: {', '.join(missing)}")

        return cls(
            content_server_url=data["content_server_url"],
            contract_uri=data["contract_uri"],
            registry_id=data["registry_id"],
            title=data.get("title", ""),
        )
