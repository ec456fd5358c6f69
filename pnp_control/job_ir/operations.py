"""Instruction records -- one immutable dataclass per G-code line.

Templates build lists of these records; the generator renders them.
Keeping the two apart means height and geometry tests can inspect the
numbers (``move.value("Z")``) while protocol tests check the exact text.

Words
-----
A ``Word`` is one address letter plus its value and the ``format``
spec used to print it (``".3f"``, ``"<6.2f"``, ``"d"``).  ``lead`` is
the whitespace printed before the word; the firmware ignores it, but
the reference output aligns some columns with it.

Comments
--------
Every instruction can carry a trailing comment.  The ``;`` goes
``gap`` spaces after the command, but no earlier than ``column``.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import ClassVar, Literal

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Program = list["Instruction"]
"""An ordered command group (or a whole emitted job)."""


# ---------------------------------------------------------------------------
# Words
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Word:
    """Address letter with a formatted value.

    Parameters
    ----------
    letter : str
        Address letter (``"X"``, ``"F"``, ``"P"``...).
    value : float | int
        Parameter value.
    spec : str
        ``format()`` spec for the value.
    lead : str
        Separator printed before this word.
    """

    letter: str
    value: float | int
    spec: str = ""
    lead: str = " "

    def render(self) -> str:
        return f"{self.lead}{self.letter}{format(self.value, self.spec)}"


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Instruction(ABC):
    """Base class for all emitted lines."""

    code: ClassVar[str] = ""

    comment: str | None = field(default=None, kw_only=True)
    gap: int = field(default=1, kw_only=True)
    column: int = field(default=0, kw_only=True)

    def command(self) -> str:
        return self.code

    def words(self) -> tuple[Word, ...]:
        return ()

    def value(self, letter: str) -> float | int | None:
        """Return the value of address *letter*, ``None`` if absent."""
        for word in self.words():
            if word.letter == letter:
                return word.value
        return None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Blank(Instruction):
    """Empty line separating command groups."""

    pass


@dataclass(frozen=True, slots=True)
class Comment(Instruction):
    """Comment-only line: ``<prefix> <text>``."""

    text: str = ""
    prefix: str = ";"


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Home(Instruction):
    """``G28`` -- home the given axes."""

    code: ClassVar[str] = "G28"

    axes: tuple[Literal["X", "Y", "Z"], ...] = ("X", "Y")

    def __post_init__(self) -> None:
        if not self.axes:
            raise ValueError("Home requires at least one axis")
        for axis in self.axes:
            if axis not in ("X", "Y", "Z"):
                raise ValueError(f"Cannot home axis {axis!r}")

    def words(self) -> tuple[Word, ...]:
        return tuple(Word(axis, 0, "d") for axis in self.axes)


@dataclass(frozen=True, slots=True)
class SetUnitsMM(Instruction):
    """``G21`` -- millimeter units."""

    code: ClassVar[str] = "G21"


@dataclass(frozen=True, slots=True)
class SelectTool(Instruction):
    """``T<n>`` -- select extruder *n*; the rotation axis is wired as E1."""

    tool: int = 1

    def command(self) -> str:
        return f"T{self.tool}"


@dataclass(frozen=True, slots=True)
class AllowColdExtrusion(Instruction):
    """``M302`` -- the E axis drives a nozzle, not a heated extruder."""

    code: ClassVar[str] = "M302"


@dataclass(frozen=True, slots=True)
class AbsolutePositioning(Instruction):
    """``G90`` -- absolute coordinates."""

    code: ClassVar[str] = "G90"


@dataclass(frozen=True, slots=True)
class SetPosition(Instruction):
    """``G92`` -- declare the current E position (rotation reference)."""

    code: ClassVar[str] = "G92"

    e: float = 0.0
    spec: str = "g"

    def words(self) -> tuple[Word, ...]:
        return (Word("E", self.e, self.spec),)


# ---------------------------------------------------------------------------
# Motion
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Move(Instruction):
    """``G0`` (rapid) or ``G1`` (linear) move in absolute coordinates.

    Parameters
    ----------
    words_ : tuple[Word, ...]
        Axis and feed words in output order.  Use the ``move`` helper
        to build them.
    rapid : bool
        ``True`` for ``G0``.
    """

    words_: tuple[Word, ...] = ()
    rapid: bool = False

    def __post_init__(self) -> None:
        letters = [w.letter for w in self.words_]
        if not letters:
            raise ValueError("Move requires at least one word")
        for letter in letters:
            if letter not in ("X", "Y", "Z", "E", "F"):
                raise ValueError(f"Unsupported move word {letter!r}")
        if len(set(letters)) != len(letters):
            raise ValueError(f"Duplicate words in move: {letters}")

    def command(self) -> str:
        return "G0" if self.rapid else "G1"

    def words(self) -> tuple[Word, ...]:
        return self.words_


@dataclass(frozen=True, slots=True)
class Dwell(Instruction):
    """``G4`` -- pause.  Without ``ms`` it only drains the move queue."""

    code: ClassVar[str] = "G4"

    ms: float | None = None
    spec: str = "g"

    def words(self) -> tuple[Word, ...]:
        if self.ms is None:
            return ()
        return (Word("P", self.ms, self.spec),)


# ---------------------------------------------------------------------------
# Actuators
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SetPin(Instruction):
    """``M42`` -- drive an auxiliary output (suction valve, blower)."""

    code: ClassVar[str] = "M42"

    pin: int = 0
    level: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.level <= 255:
            raise ValueError(f"Pin level must be in [0, 255], got {self.level}")

    def words(self) -> tuple[Word, ...]:
        return (Word("P", self.pin, "d"), Word("S", self.level, "d"))


@dataclass(frozen=True, slots=True)
class SolenoidOn(Instruction):
    """``M106`` -- paste solenoid on (wired to the fan output)."""

    code: ClassVar[str] = "M106"


@dataclass(frozen=True, slots=True)
class SolenoidOff(Instruction):
    """``M107`` -- paste solenoid off."""

    code: ClassVar[str] = "M107"


@dataclass(frozen=True, slots=True)
class MotorsOff(Instruction):
    """``M84`` -- disable steppers."""

    code: ClassVar[str] = "M84"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def move(
    *words: Word,
    rapid: bool = False,
    comment: str | None = None,
    gap: int = 1,
    column: int = 0,
) -> Move:
    """Build a ``Move`` from words given in output order."""
    return Move(
        words_=tuple(words), rapid=rapid, comment=comment, gap=gap, column=column
    )


def z_values(program: Program) -> list[float]:
    """Z targets of all moves in *program*, in emission order."""
    return [
        float(z) for instr in program
        if isinstance(instr, Move) and (z := instr.value("Z")) is not None
    ]
