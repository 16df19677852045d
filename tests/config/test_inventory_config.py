"""
Tests for inventory policy loading (inventory_config).

Covers:
- Shipped defaults
- Override files, partial sections
- Unknown keys and invalid values rejected
- Checksum identity
- INVENTORY_CONFIG_TRACE emission
"""

import pytest
import yaml

from inventory_config import DEFAULT_POLICY_PATH, get_active_config
from inventory_config.loader import compute_checksum, load_yaml_file, parse_policy
from inventory_config.schema import (
    CountPolicy,
    InventoryPolicy,
    OrderDefaults,
    ReplenishmentPolicy,
)
from inventory_services.replenishment_service import indicator_parameters, order_terms


def write_policy(tmp_path, data):
    path = tmp_path / "policy.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:

    def test_shipped_defaults(self):
        policy = get_active_config()

        assert policy.config_id == "default"
        r = policy.replenishment
        assert r.default_period_days == 30
        assert r.default_min_quantity == 10
        assert r.default_max_quantity == 1000
        assert r.safety_days == 15
        assert r.coverage_days == 30
        assert r.running_low_days == 7
        assert r.purchase_history_depth == 5
        assert policy.counting.allow_overlapping_scopes is False
        assert policy.ordering.currency == "BRL"

    def test_shipped_file_matches_schema_defaults(self):
        loaded = get_active_config(DEFAULT_POLICY_PATH)
        schema = InventoryPolicy()
        assert loaded.replenishment == schema.replenishment
        assert loaded.counting == schema.counting
        assert loaded.ordering == schema.ordering

    def test_translated_to_engine_parameters(self):
        policy = get_active_config()
        params = indicator_parameters(policy)
        assert params.safety_days == 15
        assert order_terms(policy).default_unit == "UN"


class TestOverrides:

    def test_partial_override(self, tmp_path):
        path = write_policy(
            tmp_path,
            {
                "config_id": "plant-2",
                "version": 3,
                "replenishment": {"safety_days": 7},
                "counting": {"allow_overlapping_scopes": True},
            },
        )
        policy = get_active_config(path)

        assert policy.config_id == "plant-2"
        assert policy.version == 3
        assert policy.replenishment.safety_days == 7
        assert policy.replenishment.coverage_days == 30
        assert policy.counting.allow_overlapping_scopes is True
        assert policy.ordering == OrderDefaults()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        policy = get_active_config(path)
        assert policy.replenishment == ReplenishmentPolicy()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestValidation:

    def test_unknown_top_level_key(self, tmp_path):
        with pytest.raises(ValueError, match="unknown top-level"):
            get_active_config(write_policy(tmp_path, {"replenishmnet": {}}))

    def test_unknown_section_key(self, tmp_path):
        with pytest.raises(ValueError, match="safety_dayz"):
            get_active_config(write_policy(tmp_path, {"replenishment": {"safety_dayz": 3}}))

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_policy({"counting": ["yes"]})

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_file(path)

    @pytest.mark.parametrize(
        "section",
        [
            {"default_period_days": 0},
            {"safety_days": -1},
            {"coverage_days": "30"},
            {"default_min_quantity": 50, "default_max_quantity": 10},
            {"running_low_days": True},
        ],
    )
    def test_invalid_replenishment_values(self, section):
        with pytest.raises(ValueError):
            parse_policy({"replenishment": section})

    def test_invalid_currency(self):
        with pytest.raises(ValueError):
            parse_policy({"ordering": {"currency": "REAL"}})

    def test_invalid_overlap_flag(self):
        with pytest.raises(ValueError):
            CountPolicy(allow_overlapping_scopes="no")


class TestChecksumAndTrace:

    def test_checksum_is_deterministic(self):
        a = compute_checksum({"b": 1, "a": {"y": 2, "x": 3}})
        b = compute_checksum({"a": {"x": 3, "y": 2}, "b": 1})
        assert a == b
        assert len(a) == 64

    def test_checksum_changes_with_content(self, tmp_path):
        first = get_active_config(write_policy(tmp_path, {"version": 1}))
        second = get_active_config(write_policy(tmp_path, {"version": 2}))
        assert first.checksum != second.checksum

    def test_trace_emitted(self, captured_logs):
        policy = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "INVENTORY_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == "default"
        assert traces[0]["checksum"] == policy.checksum
        assert traces[0]["logger"] == "inventory_kernel.config"
