"""Z-height sequencing for pick, place and dispense.

Every sequence follows the same order -- hover, descend to contact,
actuate, ascend -- and the dataclasses below list their fields in that
order.  All heights are absolute machine Z in mm.

Travel height
-------------
``travel_height`` is the plane used while a component hangs from the
nozzle: tape height plus board thickness plus the hovering clearance.
It does not account for components already placed on the board; a
collision-aware clearance would replace this single function.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pnp_control.board.models import PnPConfig, Tape
from pnp_control.configs.loader import HeightsConfig


@dataclass(frozen=True)
class PickHeights:
    """Heights for picking a component from its tape."""

    approach: float
    contact: float
    ascend: float


@dataclass(frozen=True)
class PlaceHeights:
    """Heights for putting a component on the board."""

    travel: float
    contact: float
    ascend: float


@dataclass(frozen=True)
class DispenseHeights:
    """Heights for one paste dot, all relative to the board top."""

    hover: float
    dispense: float
    separate: float


def board_thickness(config: PnPConfig) -> float:
    return config.board.top - config.bed_level


def travel_height(config: PnPConfig, tape: Tape, heights: HeightsConfig) -> float:
    """Z for carrying a component between tape and board."""
    return tape.height + board_thickness(config) + heights.hovering_mm


def pick_heights(config: PnPConfig, tape: Tape, heights: HeightsConfig) -> PickHeights:
    """Approach hovers above the tape, contact is the component's resting Z."""
    return PickHeights(
        approach=tape.height + heights.hovering_mm,
        contact=tape.height,
        ascend=travel_height(config, tape, heights),
    )


def place_heights(config: PnPConfig, tape: Tape, heights: HeightsConfig) -> PlaceHeights:
    """Contact is offset by the board thickness, minus the spring allowance."""
    travel = travel_height(config, tape, heights)
    return PlaceHeights(
        travel=travel,
        contact=tape.height + board_thickness(config) - heights.tape_thick_mm,
        ascend=travel,
    )


def dispense_heights(config: PnPConfig, heights: HeightsConfig) -> DispenseHeights:
    top = config.board.top
    return DispenseHeights(
        hover=top + heights.hover_above_mm,
        dispense=top + heights.dispense_above_mm,
        separate=top + heights.separate_droplet_above_mm,
    )


def preamble_height(
    board_top: float, tapes: Iterable[Tape], heights: HeightsConfig
) -> float:
    """Initial needle lift: clear of the board and of every loaded tape."""
    highest = board_top
    for tape in tapes:
        highest = max(highest, tape.height)
    return highest + heights.preamble_margin_mm
