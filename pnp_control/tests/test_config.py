"""Tests for machine configuration loading and validation."""

from __future__ import annotations

import copy
import dataclasses
from pathlib import Path
from typing import Any

import pytest
import yaml

from pnp_control.configs.loader import (
    ConfigError,
    MachineConfig,
    load_config,
    parse_config,
)


@pytest.fixture()
def raw() -> dict[str, Any]:
    """Deep copy of the shipped machine.yaml contents."""
    path = Path(__file__).resolve().parents[1] / "configs" / "machine.yaml"
    with open(path, encoding="utf-8") as f:
        return copy.deepcopy(yaml.safe_load(f))


def _write(tmp_path: Path, data: Any) -> Path:
    p = tmp_path / "machine.yaml"
    p.write_text(yaml.safe_dump(data), encoding="utf-8")
    return p


# ---------------------------------------------------------------------------
# Default config
# ---------------------------------------------------------------------------


class TestDefaultConfig:
    def test_loads(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, MachineConfig)

    def test_reference_constants(self) -> None:
        cfg = load_config()
        assert cfg.heights.hovering_mm == 10.0
        assert cfg.heights.tape_thick_mm == 0.0
        assert cfg.speeds.to_tape_mm_s == 1000.0
        assert cfg.speeds.to_board_mm_s == 100.0
        assert cfg.speeds.plunge_feed_mm_min == 4000
        assert cfg.rotation.units_per_turn == pytest.approx(50.34965)
        assert cfg.actuators.suction_pin == 6
        assert cfg.actuators.blower_pin == 8

    def test_frozen(self) -> None:
        cfg = load_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.heights.hovering_mm = 1.0  # type: ignore[misc]

    def test_wait_model(self) -> None:
        d = load_config().dispense
        assert d.wait_ms(0.0) == d.init_ms
        assert d.wait_ms(2.0) == pytest.approx(d.init_ms + 2.0 * d.area_ms_per_mm2)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoading:
    def test_explicit_path(self, tmp_path: Path, raw: dict[str, Any]) -> None:
        raw["speeds"]["to_board_mm_s"] = 50
        cfg = load_config(_write(tmp_path, raw))
        assert cfg.speeds.to_board_mm_s == 50.0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "machine.yaml"
        p.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="Empty"):
            load_config(p)

    def test_overrides_merge(self) -> None:
        cfg = load_config(overrides={"dispense": {"init_ms": 55.0}})
        assert cfg.dispense.init_ms == 55.0
        # untouched sibling keeps the file value
        assert cfg.dispense.area_ms_per_mm2 == load_config().dispense.area_ms_per_mm2

    def test_optional_sections(self, raw: dict[str, Any]) -> None:
        del raw["actuators"]
        del raw["heights"]["tape_thick_mm"]
        del raw["heights"]["preamble_margin_mm"]
        cfg = parse_config(raw)
        assert cfg.actuators.blow_ms == 40
        assert cfg.heights.tape_thick_mm == 0.0
        assert cfg.heights.preamble_margin_mm == cfg.heights.hovering_mm


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_key(self, raw: dict[str, Any]) -> None:
        del raw["rotation"]
        with pytest.raises(ConfigError, match="rotation"):
            parse_config(raw)

    def test_bad_value(self, raw: dict[str, Any]) -> None:
        raw["speeds"]["to_tape_mm_s"] = "fast"
        with pytest.raises(ConfigError, match="Invalid"):
            parse_config(raw)

    def test_negative_clearance(self, raw: dict[str, Any]) -> None:
        raw["heights"]["hovering_mm"] = -1.0
        with pytest.raises(ConfigError, match="hovering_mm"):
            parse_config(raw)

    def test_dispense_must_be_below_hover(self, raw: dict[str, Any]) -> None:
        raw["heights"]["dispense_above_mm"] = 3.0
        with pytest.raises(ConfigError, match="hover_above_mm"):
            parse_config(raw)

    def test_dispense_must_be_below_separate(self, raw: dict[str, Any]) -> None:
        raw["heights"]["hover_above_mm"] = 8.0
        raw["heights"]["dispense_above_mm"] = 6.0
        with pytest.raises(ConfigError, match="separate_droplet_above_mm"):
            parse_config(raw)

    def test_zero_speed(self, raw: dict[str, Any]) -> None:
        raw["speeds"]["to_board_mm_s"] = 0
        with pytest.raises(ConfigError, match="speeds"):
            parse_config(raw)

    def test_rotation_scale(self, raw: dict[str, Any]) -> None:
        raw["rotation"]["units_per_turn"] = 0
        with pytest.raises(ConfigError, match="units_per_turn"):
            parse_config(raw)

    def test_pins_differ(self, raw: dict[str, Any]) -> None:
        raw["actuators"]["blower_pin"] = raw["actuators"]["suction_pin"]
        with pytest.raises(ConfigError, match="differ"):
            parse_config(raw)

    def test_negative_timing(self, raw: dict[str, Any]) -> None:
        raw["dispense"]["init_ms"] = -5
        with pytest.raises(ConfigError, match="dispense"):
            parse_config(raw)

    def test_thick_tape_warns(self, raw: dict[str, Any], caplog) -> None:
        raw["heights"]["tape_thick_mm"] = 12.0
        parse_config(raw)
        assert "tape_thick_mm" in caplog.text
