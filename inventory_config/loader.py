"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads a YAML policy document and parses it into the typed
``inventory_config.schema`` dataclasses.  Runtime callers go through
``inventory_config.get_active_config()`` instead of calling this module.

Invariants enforced
-------------------
* Unknown section or key names raise ``ValueError`` (typos never fall
  back silently to defaults).
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed document for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    CountPolicy,
    InventoryPolicy,
    OrderDefaults,
    ReplenishmentPolicy,
)

_SECTIONS = {
    "replenishment": ReplenishmentPolicy,
    "counting": CountPolicy,
    "ordering": OrderDefaults,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level of a policy document must be a mapping")
    return data


def _parse_section(name: str, data: Any):
    cls = _SECTIONS[name]
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"section {name!r} must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown keys in section {name!r}: {', '.join(unknown)}")
    return cls(**data)


def parse_policy(data: dict[str, Any]) -> InventoryPolicy:
    """
    Build an ``InventoryPolicy`` from a parsed YAML mapping.

    Missing sections and keys take their schema defaults.
    """
    unknown = sorted(set(data) - set(_SECTIONS) - {"config_id", "version"})
    if unknown:
        raise ValueError(f"unknown top-level keys: {', '.join(unknown)}")

    return InventoryPolicy(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        replenishment=_parse_section("replenishment", data.get("replenishment")),
        counting=_parse_section("counting", data.get("counting")),
        ordering=_parse_section("ordering", data.get("ordering")),
        checksum=compute_checksum(data),
    )


def load_policy(path: Path) -> InventoryPolicy:
    return parse_policy(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
