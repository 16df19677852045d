"""
Inventory policy schema.

Frozen dataclasses for the reconciliation and replenishment policy.  The
loader parses YAML into these types; services read them through
``inventory_config.get_active_config()``.

Every section validates itself in ``__post_init__`` and raises
``ValueError`` on out-of-range values, so an invalid document never
produces a policy object.
"""

from __future__ import annotations

from dataclasses import dataclass, field


def _require_positive(owner: str, name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{owner}.{name} must be a positive integer, got {value!r}")


def _require_non_negative(owner: str, name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{owner}.{name} must be a non-negative integer, got {value!r}")


@dataclass(frozen=True)
class ReplenishmentPolicy:
    """Indicator and suggestion tunables."""

    default_period_days: int = 30
    default_min_quantity: int = 10
    default_max_quantity: int = 1000
    safety_days: int = 15
    coverage_days: int = 30
    running_low_days: int = 7
    purchase_history_depth: int = 5

    def __post_init__(self) -> None:
        _require_positive("replenishment", "default_period_days", self.default_period_days)
        for name in (
            "default_min_quantity",
            "default_max_quantity",
            "safety_days",
            "coverage_days",
            "running_low_days",
            "purchase_history_depth",
        ):
            _require_non_negative("replenishment", name, getattr(self, name))
        if self.default_min_quantity > self.default_max_quantity:
            raise ValueError(
                "replenishment.default_min_quantity cannot exceed default_max_quantity"
            )


@dataclass(frozen=True)
class CountPolicy:
    """Cycle count rules."""

    # Reject a new session whose scope overlaps an ACTIVE one
    allow_overlapping_scopes: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.allow_overlapping_scopes, bool):
            raise ValueError("counting.allow_overlapping_scopes must be a boolean")


@dataclass(frozen=True)
class OrderDefaults:
    """Commercial defaults for new purchase order drafts."""

    payment_terms: str = "30 days"
    freight: str = "CIF"
    currency: str = "BRL"
    default_unit: str = "UN"

    def __post_init__(self) -> None:
        for name in ("payment_terms", "freight", "currency", "default_unit"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"ordering.{name} must be a non-empty string")
        if len(self.currency) != 3:
            raise ValueError(f"ordering.currency must be a 3-letter code, got {self.currency!r}")


@dataclass(frozen=True)
class InventoryPolicy:
    """The complete runtime policy."""

    config_id: str = "default"
    version: int = 1
    replenishment: ReplenishmentPolicy = field(default_factory=ReplenishmentPolicy)
    counting: CountPolicy = field(default_factory=CountPolicy)
    ordering: OrderDefaults = field(default_factory=OrderDefaults)
    checksum: str = ""
