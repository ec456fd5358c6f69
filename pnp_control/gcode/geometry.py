"""Board/part/pad frame transforms and rotation-axis scaling.

Frames:
    - Board frame: origin at ``Dimension.origin``; part positions are
      given here and are **not** rotated -- only the part itself turns.
    - Part frame: pad offsets, rotated by the part angle about the part
      origin before being added to the part position.

Rotation axis:
    The nozzle rotation is driven through the E axis.  Angles are
    normalized to ``[0, 360)`` before scaling so a command never has to
    unwrap through the 0/360 boundary.

Malformed input (NaN, inf) is passed through unchanged.
"""

from __future__ import annotations

import math

from pnp_control.board.models import Dimension, Pad, Part, Point


def normalize_angle(deg: float) -> float:
    """Map *deg* into ``[0, 360)``.

    ``fmod`` keeps the sign of the dividend, so negative remainders are
    shifted up by one turn.  A tiny negative remainder can round to
    exactly 360 after the shift; that is folded back to 0.  Infinite
    input yields NaN, as C ``fmod`` does, instead of raising.
    """
    if math.isinf(deg):
        return math.nan
    a = math.fmod(deg, 360.0)
    if a < 0:
        a += 360.0
    if a >= 360.0:
        a = 0.0
    return a


def angle_to_units(deg: float, units_per_turn: float) -> float:
    """Scale a normalized angle to rotation-axis units."""
    return units_per_turn / 360.0 * normalize_angle(deg)


def pick_rotation(tape_angle: float, units_per_turn: float) -> float:
    """Rotation-axis target while picking: the tape's own orientation."""
    return angle_to_units(tape_angle, units_per_turn)


def place_rotation(
    part_angle: float, tape_angle: float, units_per_turn: float
) -> float:
    """Rotation-axis target while placing.

    The component was picked at the tape angle, so it is turned by the
    difference to its target angle in one relative rotation.
    """
    return angle_to_units(part_angle - tape_angle, units_per_turn)


def rotate(x: float, y: float, deg: float) -> tuple[float, float]:
    """Rotate ``(x, y)`` counter-clockwise by *deg* about the origin."""
    theta = 2 * math.pi * deg / 360.0
    c = math.cos(theta)
    s = math.sin(theta)
    return x * c - y * s, x * s + y * c


def place_position(board: Dimension, part: Part) -> Point:
    """Absolute machine XY of a part centre."""
    return Point(board.origin.x + part.pos.x, board.origin.y + part.pos.y)


def pad_position(board: Dimension, part: Part, pad: Pad) -> Point:
    """Absolute machine XY of a pad, with the pad offset rotated by the part angle."""
    px, py = place_position(board, part)
    dx, dy = rotate(pad.pos.x, pad.pos.y, part.angle)
    return Point(px + dx, py + dy)
