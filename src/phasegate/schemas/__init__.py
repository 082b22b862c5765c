"""PhaseGate JSON Schema definitions and validation utilities.

Schemas:
    - protocol.schema.json: Declarative protocol table (roles, cycles, threshold)
    - session.schema.json: On-disk session document

Usage:
    from phasegate.schemas import validate_protocol

    with open("protocol.json") as f:
        data = json.load(f)
    validate_protocol(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'protocol.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("phasegate.schemas").joinpath(name).read_text(encoding="utf-8")
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_protocol_schema() -> dict[str, Any]:
    """Get the protocol table schema."""
    return _load_schema("protocol.schema.json")


def get_session_schema() -> dict[str, Any]:
    """Get the session document schema."""
    return _load_schema("session.schema.json")


def validate_protocol(data: dict[str, Any]) -> None:
    """Validate a protocol table against the schema.

    Args:
        data: Protocol table dictionary

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_protocol_schema())


def validate_session(data: dict[str, Any]) -> None:
    """Validate a stored session document against the schema.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_session_schema())


__all__ = [
    "get_protocol_schema",
    "get_session_schema",
    "validate_protocol",
    "validate_session",
]
