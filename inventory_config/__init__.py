"""
inventory_config -- single public entrypoint for inventory policy.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads policy files
    directly.  Returns a frozen ``InventoryPolicy``.

Architecture position:
    Configuration -- YAML-driven policy.  Sits above ``inventory_kernel``
    and ``inventory_engines`` and below ``inventory_services``.  The kernel
    and the engines MUST NEVER import from ``inventory_config``; services
    translate the policy into engine parameters.

Failure modes:
    - ``FileNotFoundError`` -- the requested policy file does not exist.
    - ``ValueError`` -- schema validation failures or unknown keys.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``INVENTORY_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying computed indicators back to the policy that produced
    them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inventory_config.loader import load_policy
from inventory_config.schema import (
    CountPolicy,
    InventoryPolicy,
    OrderDefaults,
    ReplenishmentPolicy,
)

_logger = logging.getLogger("inventory_kernel.config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> InventoryPolicy:
    """The ONLY public configuration entrypoint.

    Args:
        path: Policy YAML to load.  Defaults to the shipped defaults.yaml.

    Raises:
        FileNotFoundError: If the policy file does not exist.
        ValueError: If the document fails validation.
    """
    source = Path(path) if path is not None else DEFAULT_POLICY_PATH
    policy = load_policy(source)

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "config_id": policy.config_id,
            "config_version": policy.version,
            "checksum": policy.checksum,
            "source": str(source),
            "allow_overlapping_scopes": policy.counting.allow_overlapping_scopes,
        },
    )
    return policy


__all__ = [
    "CountPolicy",
    "DEFAULT_POLICY_PATH",
    "InventoryPolicy",
    "OrderDefaults",
    "ReplenishmentPolicy",
    "get_active_config",
]
