"""JSON Schema validation for published records.

This module loads the bundled JSON Schemas and validates records before
they are emitted.
"""

import json
from pathlib import Path
from typing import Any, Mapping

import jsonschema
from jsonschema import ValidationError

from .errors import SchemaError

# Schemas ship as package data next to this module
SCHEMA_DIR = Path(__file__).parent / "schemas"

SCHEMA_FILES = {
    "asset": "asset.schema.json",
    "asset_pack": "asset_pack.schema.json",
}


def load_schema(kind: str) -> dict[str, Any]:
    """Load the JSON schema for a record kind from disk.

    Args:
        kind: Record kind ('asset' or 'asset_pack')

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        KeyError: If the kind is unknown
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema is invalid JSON
    """
    if kind not in SCHEMA_FILES:
        available = ", ".join(SCHEMA_FILES)
        raise KeyError(f"Unknown record kind: '{kind}'. Available kinds: {available}")

    schema_path = SCHEMA_DIR / SCHEMA_FILES[kind]
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)  # type: ignore[no-any-return]


def _describe(error: ValidationError) -> tuple[str, str]:
    error_path = " -> ".join(str(p) for p in error.path) if error.path else "root"
    return error_path, f"Validation error at {error_path}: {error.message}"


def validate_record(kind: str, record: Mapping[str, Any]) -> None:
    """Validate a record against the JSON Schema for its kind.

    Args:
        kind: Record kind ('asset' or 'asset_pack')
        record: The record dictionary to validate

    Raises:
        SchemaError: If the record doesn't conform to the schema
    """
    schema = load_schema(kind)
    try:
        jsonschema.validate(instance=record, schema=schema)
    except ValidationError as e:
        error_path, message = _describe(e)
        raise SchemaError(message, path=error_path) from e


def validate_record_with_error_details(
    kind: str, record: Mapping[str, Any]
) -> tuple[bool, str | None]:
    """Validate a record and return detailed error information.

    This is a convenience wrapper that catches validation errors and
    returns user-friendly error messages.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_record(kind, record)
        return True, None
    except SchemaError as e:
        error_msg = str(e)
        cause = e.__cause__
        if isinstance(cause, ValidationError) and cause.instance:
            error_msg += f"\nInvalid value: {cause.instance}"
        return False, error_msg
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
