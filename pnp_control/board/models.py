"""Board, part, pad and tape records.

Everything here is plain data.  Parts, pads and the board dimension are
immutable once read from a job file.  ``Tape`` is the one mutable record:
its feed position is advanced by the job runner after each successful
pick-and-place, while the G-code session only reads it.

All linear values are in millimeters; angles in degrees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple


class Point(NamedTuple):
    """2-D position in mm."""

    x: float
    y: float


class Size(NamedTuple):
    """Rectangular extent in mm."""

    w: float
    h: float


@dataclass(frozen=True, slots=True)
class Dimension:
    """Board placement on the machine bed.

    Parameters
    ----------
    origin : Point
        Machine position of the board reference corner.
    top : float
        Absolute machine Z of the board top surface.
    width, height : float
        Physical board extents.  Informational; nothing is clipped.
    """

    origin: Point
    top: float
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Pad:
    """Solder-paste target inside a footprint.

    ``pos`` is relative to the part origin before the part is rotated.
    """

    name: str
    pos: Point
    size: Size

    @property
    def area(self) -> float:
        return self.size.w * self.size.h


@dataclass(frozen=True, slots=True)
class Part:
    """One component to place.

    Parameters
    ----------
    component_name : str
        Reference designator (``"R12"``), used in comments and logs.
    footprint, value : str
        Together they identify which tape feeds this part.
    pos : Point
        Target position, board frame.
    angle : float
        Target rotation in degrees, board frame.
    pads : tuple[Pad, ...]
        Paste pads of the footprint.
    """

    component_name: str
    footprint: str
    value: str
    pos: Point
    angle: float = 0.0
    pads: tuple[Pad, ...] = ()

    @property
    def key(self) -> str:
        """Tape lookup key, ``"<footprint>@<value>"``."""
        return f"{self.footprint}@{self.value}"

    @property
    def print_name(self) -> str:
        """Label used in G-code comments: ``R12 (0805@10k)``."""
        return f"{self.component_name} ({self.footprint}@{self.value})"


class Tape:
    """A reel of identical components.

    Components sit at ``first + i * spacing`` for ``i`` in
    ``[0, count)``.  Once all of them are used the tape reports no feed
    position.

    Parameters
    ----------
    first : Point
        Machine XY of the first component.
    spacing : Point
        Offset from one component to the next.
    count : int
        Number of components on the tape.
    height : float
        Absolute machine Z of a component resting in the tape.
    angle : float
        Orientation of components in the tape, degrees.
    """

    def __init__(
        self,
        first: Point,
        spacing: Point = Point(0.0, 0.0),
        count: int = 1,
        height: float = 0.0,
        angle: float = 0.0,
    ) -> None:
        if count < 0:
            raise ValueError(f"Tape count must be >= 0, got {count}")
        self._first = Point(*first)
        self._spacing = Point(*spacing)
        self._count = count
        self._index = 0
        self._height = float(height)
        self._angle = float(angle)

    def __repr__(self) -> str:
        return (
            f"Tape(first={tuple(self._first)}, spacing={tuple(self._spacing)}, "
            f"count={self._count}, used={self._index}, height={self._height}, "
            f"angle={self._angle})"
        )

    @property
    def height(self) -> float:
        return self._height

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def remaining(self) -> int:
        return self._count - self._index

    @property
    def exhausted(self) -> bool:
        return self._index >= self._count

    def current_feed_position(self) -> Point | None:
        """Position of the next component, or ``None`` when out of stock."""
        if self.exhausted:
            return None
        return Point(
            self._first.x + self._index * self._spacing.x,
            self._first.y + self._index * self._spacing.y,
        )

    def advance(self) -> bool:
        """Move to the next component; ``False`` if already exhausted."""
        if self.exhausted:
            return False
        self._index += 1
        return True


@dataclass(frozen=True)
class PnPConfig:
    """Job-level configuration handed to a session at initialization.

    ``tape_for_component`` maps ``Part.key`` to its tape.  The mapping is
    exposed read-only; the tapes themselves stay owned by the caller.
    """

    board: Dimension
    bed_level: float
    tape_for_component: Mapping[str, Tape] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "tape_for_component",
            MappingProxyType(dict(self.tape_for_component)),
        )

    def tape_for(self, part: Part) -> Tape | None:
        return self.tape_for_component.get(part.key)
