"""Command-line interface for the asset pack publisher.

This module provides the CLI entry point for content-addressing an asset
pack directory, uploading its files and emitting the pack record.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .asset_pack import ASSET_PACK_FILE_NAME, REQUIRED_KEYS, AssetPack, read_pack_config
from .core.types import AssetPackRecord
from .core.validator import validate_record_with_error_details
from .pipeline import PublishPipeline
from .registry import StoreRegistry
from .stores.base import BlobStore
from .upload import DEFAULT_MAX_WORKERS


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_asset_pack(args: argparse.Namespace) -> AssetPack:
    """Resolve the pack context from a config file and/or CLI flags.

    Flags override values read from the config file.

    Raises:
        ValueError: If a required value is missing
    """
    config_path = Path(args.pack_config) if args.pack_config else Path(args.path) / ASSET_PACK_FILE_NAME
    config = read_pack_config(config_path) if config_path.exists() else {}

    values = {
        "content_server_url": args.content_server_url or config.get("content_server_url", ""),
        "contract_uri": args.contract_uri or config.get("contract_uri", ""),
        "registry_id": args.registry_id or config.get("registry_id", ""),
        "title": args.title or config.get("title") or Path(args.path).resolve().name,
    }

    missing = [key for key in REQUIRED_KEYS if not values[key]]
    if missing:
        flags = ", ".join("--" + key.replace("_", "-") for key in missing)
        raise ValueError(f"Missing pack configuration: {flags} (or {ASSET_PACK_FILE_NAME})")

    return AssetPack(**values)


def create_store(args: argparse.Namespace) -> BlobStore:
    """Create the destination store named on the command line."""
    if args.store == "http":
        if not args.store_url:
            raise ValueError("--store-url is required for the http store")
        return StoreRegistry.create_store("http", url=args.store_url)

    if not args.store_dir:
        raise ValueError("--store-dir is required for the directory store")
    return StoreRegistry.create_store("directory", root=Path(args.store_dir))


def publish_pack(args: argparse.Namespace) -> AssetPackRecord:
    """Build, fill, upload and serialize the pack described by ``args``."""
    asset_pack = load_asset_pack(args)
    pack_dir = Path(args.path).resolve()

    print(f"Scanning pack: {pack_dir}", file=sys.stderr)
    pipeline = PublishPipeline(asset_pack, pack_dir, max_workers=args.workers)
    assets = list(pipeline.generate_assets())
    print(f"Found {len(assets)} assets", file=sys.stderr)

    if args.no_upload:
        return pipeline.to_json(assets)

    store = create_store(args)
    try:
        print(f"Uploading to bucket '{args.bucket}'...", file=sys.stderr)
        return pipeline.publish(assets, store, args.bucket, skip_check=args.skip_check)
    finally:
        store.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asset-pack",
        description="Content-address an asset pack, upload it and emit its JSON record",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build records only
  asset-pack --path ./my-pack --no-upload > pack.json

  # Upload to an HTTP blob store
  asset-pack --path ./my-pack --bucket assets --store http \\
      --store-url https://blobs.example.com > pack.json

  # Stage into a local directory, re-uploading everything
  asset-pack --path ./my-pack --bucket assets --store directory \\
      --store-dir ./staging --skip-check
        """,
    )

    parser.add_argument("--path", required=True, help="Asset pack directory (one sub-directory per asset)")
    parser.add_argument(
        "--pack-config",
        help=f"Pack context JSON file (default: <path>/{ASSET_PACK_FILE_NAME})",
    )
    parser.add_argument(
        "--content-server-url",
        default=os.environ.get("ASSET_PACK_CONTENT_SERVER_URL"),
        help="Public content server root URL",
    )
    parser.add_argument(
        "--contract-uri",
        default=os.environ.get("ASSET_PACK_CONTRACT_URI"),
        help="Root URI asset records are published under",
    )
    parser.add_argument(
        "--registry-id",
        default=os.environ.get("ASSET_PACK_REGISTRY_ID"),
        help="Registry identifier of the pack",
    )
    parser.add_argument("--title", help="Pack title (default: pack directory name)")

    parser.add_argument(
        "--bucket",
        default=os.environ.get("ASSET_PACK_BUCKET", "assets"),
        help="Destination bucket",
    )
    parser.add_argument(
        "--store",
        choices=["http", "directory"],
        default=os.environ.get("ASSET_PACK_STORE", "http"),
        help="Destination store type",
    )
    parser.add_argument(
        "--store-url",
        default=os.environ.get("ASSET_PACK_STORE_URL"),
        help="Root URL of the HTTP blob store",
    )
    parser.add_argument(
        "--store-dir",
        default=os.environ.get("ASSET_PACK_STORE_DIR"),
        help="Root directory of the local directory store",
    )
    parser.add_argument(
        "--skip-check",
        action="store_true",
        help="Upload every file without checking whether it already exists",
    )
    parser.add_argument("--no-upload", action="store_true", help="Only build and print records")
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Concurrent hashing/upload workers (default: {DEFAULT_MAX_WORKERS})",
    )
    parser.add_argument("--output", help="Write the record to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the publisher."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    # Validate path exists
    path = Path(args.path)
    if not path.exists():
        print(f"Error: Path does not exist: {path}", file=sys.stderr)
        sys.exit(1)

    if not path.is_dir():
        print(f"Error: Path is not a directory: {path}", file=sys.stderr)
        sys.exit(1)

    if args.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        sys.exit(1)

    try:
        record = publish_pack(args)

        # Validate against JSON schema
        print("Validating pack record against schema...", file=sys.stderr)
        is_valid, error_msg = validate_record_with_error_details("asset_pack", record)

        if not is_valid:
            print("Error: Pack record validation failed:", file=sys.stderr)
            print(error_msg, file=sys.stderr)
            sys.exit(1)

        print("Validation successful!", file=sys.stderr)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
                f.write("\n")
        else:
            json.dump(record, sys.stdout, indent=2)
            print()  # Add newline at end

    except Exception as e:
        print(f"Error: Failed to publish asset pack: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
