"""Protocol table loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from phasegate.domain.exceptions import ConfigurationError
from phasegate.domain.models import Capability, Role, Tier
from phasegate.domain.protocol import (
    DEFAULT_ALLOWED_CYCLES,
    DEFAULT_ESCALATE_AFTER,
    DEFAULT_FIRST_HANDOFF_TARGETS,
    ProtocolConfig,
)
from phasegate.domain.roles import DEFAULT_ROLES, OPERATOR
from phasegate.schemas import validate_protocol


def _role_from_dict(data: dict[str, Any]) -> Role:
    return Role(
        name=data["name"],
        tier=Tier[data["tier"].upper()],
        capabilities=frozenset(Capability(c) for c in data["capabilities"]),
        job=data["job"],
        does=tuple(data.get("does", ())),
        does_not=tuple(data.get("does_not", ())),
    )


def role_to_dict(role: Role) -> dict[str, Any]:
    """Serialize a role to the protocol table form."""
    return {
        "name": role.name,
        "tier": role.tier.name.lower(),
        "capabilities": sorted(c.value for c in role.capabilities),
        "job": role.job,
        "does": list(role.does),
        "does_not": list(role.does_not),
    }


def protocol_from_dict(data: dict[str, Any], name: str = "custom") -> ProtocolConfig:
    """
    Build a ProtocolConfig from a protocol table.

    Omitted keys fall back to the built-in defaults.

    Raises:
        ConfigurationError: If the table violates the schema or references
            roles it does not declare
    """
    try:
        validate_protocol(data)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid protocol table at {location}: {e.message}") from e

    roles = (
        tuple(_role_from_dict(r) for r in data["roles"]) if "roles" in data else DEFAULT_ROLES
    )
    names = [r.name for r in roles]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate role names: {', '.join(duplicates)}")

    known = set(names)
    initial_role = data.get("initial_role", OPERATOR)

    targets = frozenset(data.get("first_handoff_targets", DEFAULT_FIRST_HANDOFF_TARGETS))
    unknown_targets = sorted(targets - known)
    if unknown_targets:
        raise ConfigurationError(
            f"first_handoff_targets references unknown roles: {', '.join(unknown_targets)}"
        )

    if "allowed_cycles" in data:
        cycles = frozenset((a, b) for a, b in data["allowed_cycles"])
    else:
        cycles = frozenset(c for c in DEFAULT_ALLOWED_CYCLES if set(c) <= known)
    unknown_cycle_roles = sorted({r for pair in cycles for r in pair} - known)
    if unknown_cycle_roles:
        raise ConfigurationError(
            f"allowed_cycles references unknown roles: {', '.join(unknown_cycle_roles)}"
        )

    return ProtocolConfig(
        roles=roles,
        allowed_cycles=cycles,
        first_handoff_targets=targets,
        escalate_after=data.get("escalate_after", DEFAULT_ESCALATE_AFTER),
        initial_role=initial_role,
        name=data.get("name", name),
    )


def load_protocol_config(path: Path) -> ProtocolConfig:
    """
    Load a protocol table from a JSON file.

    Args:
        path: Path to protocol.json

    Returns:
        Validated ProtocolConfig

    Raises:
        ConfigurationError: If file is missing or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Protocol file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected object in {path}, got {type(data).__name__}")

    return protocol_from_dict(data, name=path.stem)


def dump_protocol_config(config: ProtocolConfig) -> dict[str, Any]:
    """Render a ProtocolConfig as a protocol table (the inverse of protocol_from_dict)."""
    return {
        "name": config.name,
        "escalate_after": config.escalate_after,
        "initial_role": config.initial_role,
        "first_handoff_targets": sorted(config.first_handoff_targets),
        "allowed_cycles": [list(pair) for pair in sorted(config.allowed_cycles)],
        "roles": [role_to_dict(r) for r in config.roles],
    }
