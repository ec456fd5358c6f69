"""Configuration loader for pick-and-place G-code synthesis.

Loads and validates ``machine.yaml`` into typed, frozen dataclasses.
Every clearance, speed and timing value embedded in the emitted G-code
comes from here, so calibrating the machine never requires touching the
templates.

Feed rates are stored in **mm/s** throughout Python.  Conversion to the
G-code ``F`` parameter (mm/min) happens only in the G-code templates.
The one exception is ``plunge_feed_mm_min``, which the templates embed
verbatim.

Usage::

    from pnp_control.configs.loader import load_config
    cfg = load_config()                                  # default path
    cfg = load_config("/custom/machine.yaml")            # explicit path
    cfg = load_config(overrides={"dispense": {"init_ms": 50}})
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pnp_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeightsConfig:
    """Z clearances in mm.

    ``hovering_mm`` is added on top of tape and board thickness while a
    component is carried.  ``tape_thick_mm`` is subtracted from the place
    contact height; it compensates for a spring-loaded placement and is
    zero until calibrated.  The ``*_above_mm`` values are relative to the
    board top surface and only apply to paste dispensing.
    """

    hovering_mm: float
    tape_thick_mm: float
    preamble_margin_mm: float
    dispense_above_mm: float
    hover_above_mm: float
    separate_droplet_above_mm: float


@dataclass(frozen=True)
class SpeedsConfig:
    """Travel speeds (mm/s) and the literal descent feed (mm/min)."""

    to_tape_mm_s: float
    to_board_mm_s: float
    plunge_feed_mm_min: int


@dataclass(frozen=True)
class RotationConfig:
    """Rotation axis scaling.

    ``units_per_turn`` is the E-axis distance that turns the nozzle by one
    full revolution.
    """

    units_per_turn: float


@dataclass(frozen=True)
class ActuatorsConfig:
    """Auxiliary output pins and actuator timings."""

    suction_pin: int
    blower_pin: int
    blow_ms: int


@dataclass(frozen=True)
class DispenseConfig:
    """Paste dwell model: ``wait_ms = init_ms + area_ms_per_mm2 * area``."""

    init_ms: float
    area_ms_per_mm2: float

    def wait_ms(self, area_mm2: float) -> float:
        return self.init_ms + self.area_ms_per_mm2 * area_mm2


@dataclass(frozen=True)
class MachineConfig:
    """Complete machine configuration loaded from ``machine.yaml``.

    All linear dimensions are in **millimeters**.
    All speeds are in **mm/s** unless the field name says otherwise.
    """

    heights: HeightsConfig
    speeds: SpeedsConfig
    rotation: RotationConfig
    actuators: ActuatorsConfig
    dispense: DispenseConfig


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_heights(data: dict[str, Any]) -> HeightsConfig:
    """Parse the ``heights`` section."""
    return HeightsConfig(
        hovering_mm=float(data["hovering_mm"]),
        tape_thick_mm=float(data.get("tape_thick_mm", 0.0)),
        preamble_margin_mm=float(
            data.get("preamble_margin_mm", data["hovering_mm"])
        ),
        dispense_above_mm=float(data["dispense_above_mm"]),
        hover_above_mm=float(data["hover_above_mm"]),
        separate_droplet_above_mm=float(data["separate_droplet_above_mm"]),
    )


def _parse_speeds(data: dict[str, Any]) -> SpeedsConfig:
    """Parse the ``speeds`` section."""
    return SpeedsConfig(
        to_tape_mm_s=float(data["to_tape_mm_s"]),
        to_board_mm_s=float(data["to_board_mm_s"]),
        plunge_feed_mm_min=int(data.get("plunge_feed_mm_min", 4000)),
    )


def _parse_actuators(data: dict[str, Any]) -> ActuatorsConfig:
    """Parse the ``actuators`` section (all keys optional)."""
    return ActuatorsConfig(
        suction_pin=int(data.get("suction_pin", 6)),
        blower_pin=int(data.get("blower_pin", 8)),
        blow_ms=int(data.get("blow_ms", 40)),
    )


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with *overrides* merged in, section by section."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: MachineConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    h = cfg.heights
    for label, value in [
        ("hovering_mm", h.hovering_mm),
        ("preamble_margin_mm", h.preamble_margin_mm),
        ("dispense_above_mm", h.dispense_above_mm),
        ("hover_above_mm", h.hover_above_mm),
        ("separate_droplet_above_mm", h.separate_droplet_above_mm),
    ]:
        if value < 0:
            raise ConfigError(f"heights.{label} must be >= 0, got {value}")

    # -- Needle must come down to dispense and go up to separate ------------
    if h.dispense_above_mm >= h.hover_above_mm:
        raise ConfigError(
            f"heights.dispense_above_mm ({h.dispense_above_mm}) must be "
            f"below hover_above_mm ({h.hover_above_mm})"
        )
    if h.dispense_above_mm >= h.separate_droplet_above_mm:
        raise ConfigError(
            f"heights.dispense_above_mm ({h.dispense_above_mm}) must be "
            f"below separate_droplet_above_mm ({h.separate_droplet_above_mm})"
        )
    if h.tape_thick_mm >= h.hovering_mm:
        logger.warning(
            "tape_thick_mm (%.2f) >= hovering_mm (%.2f); place contact "
            "height ends above the travel plane",
            h.tape_thick_mm,
            h.hovering_mm,
        )

    s = cfg.speeds
    if s.to_tape_mm_s <= 0 or s.to_board_mm_s <= 0:
        raise ConfigError(
            f"speeds must be > 0, got to_tape_mm_s={s.to_tape_mm_s}, "
            f"to_board_mm_s={s.to_board_mm_s}"
        )
    if s.plunge_feed_mm_min <= 0:
        raise ConfigError(
            f"speeds.plunge_feed_mm_min must be > 0, got {s.plunge_feed_mm_min}"
        )

    if cfg.rotation.units_per_turn <= 0:
        raise ConfigError(
            f"rotation.units_per_turn must be > 0, "
            f"got {cfg.rotation.units_per_turn}"
        )

    a = cfg.actuators
    if a.suction_pin == a.blower_pin:
        raise ConfigError(
            f"actuators.suction_pin and blower_pin must differ, both {a.blower_pin}"
        )
    if a.blow_ms < 0:
        raise ConfigError(f"actuators.blow_ms must be >= 0, got {a.blow_ms}")

    d = cfg.dispense
    if d.init_ms < 0 or d.area_ms_per_mm2 < 0:
        raise ConfigError(
            f"dispense timings must be >= 0, got init_ms={d.init_ms}, "
            f"area_ms_per_mm2={d.area_ms_per_mm2}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_config(data: dict[str, Any]) -> MachineConfig:
    """Build and validate a ``MachineConfig`` from an already-loaded dict.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    """
    try:
        rot = data["rotation"]
        disp = data["dispense"]
        config = MachineConfig(
            heights=_parse_heights(data["heights"]),
            speeds=_parse_speeds(data["speeds"]),
            rotation=RotationConfig(units_per_turn=float(rot["units_per_turn"])),
            actuators=_parse_actuators(data.get("actuators") or {}),
            dispense=DispenseConfig(
                init_ms=float(disp["init_ms"]),
                area_ms_per_mm2=float(disp["area_ms_per_mm2"]),
            ),
        )
    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc

    _validate_config(config)
    return config


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> MachineConfig:
    """Load and validate machine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``machine.yaml``.  ``None`` loads the default shipped
        alongside this module.
    overrides : dict | None
        Nested values merged over the file contents before parsing,
        e.g. ``{"dispense": {"init_ms": 50.0}}``.

    Returns
    -------
    MachineConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "machine.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if overrides:
        data = _deep_merge(data, overrides)

    config = parse_config(data)
    logger.info("Configuration loaded successfully")
    return config
