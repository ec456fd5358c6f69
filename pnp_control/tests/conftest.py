"""Shared fixtures: a calibrated machine and a one-tape board."""

from __future__ import annotations

from typing import Any

import pytest

from pnp_control.board.models import Dimension, Pad, Part, PnPConfig, Point, Size, Tape
from pnp_control.configs.loader import MachineConfig, parse_config


MACHINE_DATA = {
    "heights": {
        "hovering_mm": 10.0,
        "tape_thick_mm": 0.0,
        "preamble_margin_mm": 10.0,
        "dispense_above_mm": 0.3,
        "hover_above_mm": 2.0,
        "separate_droplet_above_mm": 5.0,
    },
    "speeds": {
        "to_tape_mm_s": 1000,
        "to_board_mm_s": 100,
        "plunge_feed_mm_min": 4000,
    },
    "rotation": {"units_per_turn": 50.34965},
    "actuators": {"suction_pin": 6, "blower_pin": 8, "blow_ms": 40},
    "dispense": {"init_ms": 30.0, "area_ms_per_mm2": 20.0},
}


@pytest.fixture()
def machine() -> MachineConfig:
    """Calibration matching the reference firmware constants."""
    return parse_config(MACHINE_DATA)


@pytest.fixture()
def tape() -> Tape:
    return Tape(
        first=Point(100.0, 10.0),
        spacing=Point(4.0, 0.0),
        count=2,
        height=2.0,
        angle=90.0,
    )


@pytest.fixture()
def pnp_config(tape: Tape) -> PnPConfig:
    """Board at (10, 20), top 5 mm above a bed at 0, one 0805@10k tape."""
    return PnPConfig(
        board=Dimension(origin=Point(10.0, 20.0), top=5.0, width=50.0, height=30.0),
        bed_level=0.0,
        tape_for_component={"0805@10k": tape},
    )


@pytest.fixture()
def resistor() -> Part:
    return Part(
        component_name="R1",
        footprint="0805",
        value="10k",
        pos=Point(12.5, 8.0),
        angle=180.0,
        pads=(
            Pad(name="1", pos=Point(-1.0, 0.0), size=Size(1.0, 1.3)),
            Pad(name="2", pos=Point(1.0, 0.0), size=Size(1.0, 1.3)),
        ),
    )


@pytest.fixture()
def job_data() -> dict[str, Any]:
    """Raw job file contents for the board above, three resistors on tape."""
    return {
        "board": {"origin": [10.0, 20.0], "top": 5.0, "size": [50.0, 30.0]},
        "bed_level": 0.0,
        "tapes": [
            {
                "component": "0805@10k",
                "first": [100.0, 10.0],
                "spacing": [4.0, 0.0],
                "count": 3,
                "height": 2.0,
                "angle": 90,
            },
        ],
        "parts": [
            {
                "name": "R1",
                "footprint": "0805",
                "value": "10k",
                "pos": [12.5, 8.0],
                "angle": 180,
                "pads": [
                    {"name": "1", "pos": [-1.0, 0.0], "size": [1.0, 1.3]},
                    {"name": "2", "pos": [1.0, 0.0], "size": [1.0, 1.3]},
                ],
            },
            {"name": "R2", "footprint": "0805", "value": "10k", "pos": [20.0, 8.0]},
        ],
    }
