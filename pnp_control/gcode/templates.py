"""Command-group templates.

Each function returns the fixed instruction sequence for one group,
with every number already resolved by the caller.  There is no
branching inside a group: what a template emits depends only on its
arguments.

Rendered through ``generator.render_program`` the groups reproduce the
reference firmware output byte for byte, including comments and
column alignment.  Bump ``TEMPLATE_VERSION`` whenever that text
changes.

Groups (in session order):
    preamble            once
    pick, place         per part
    dispense_move/paste per pad
    finish              once
"""

from __future__ import annotations

from pnp_control.job_ir.operations import (
    AbsolutePositioning,
    AllowColdExtrusion,
    Blank,
    Comment,
    Dwell,
    Home,
    MotorsOff,
    Program,
    SelectTool,
    SetPin,
    SetPosition,
    SetUnitsMM,
    SolenoidOff,
    SolenoidOn,
    Word,
    move,
)

TEMPLATE_VERSION = 1

PIN_ON = 255
PIN_OFF = 0


def feed_mm_min(speed_mm_s: float) -> int:
    """Convert mm/s to the integer ``F`` value (mm/min)."""
    return round(speed_mm_s * 60.0)


def preamble(z_clear: float) -> Program:
    """Home all axes, set up units and the rotation axis, lift the needle.

    XY is homed first so the needle is over free space before Z homes.
    """
    return [
        Blank(),
        Home(axes=("X", "Y"), comment="Home (x/y) - needle over free space", column=11),
        Home(axes=("Z",), comment="Now it is safe to home z", column=11),
        SetUnitsMM(comment="set to mm", column=11),
        SelectTool(tool=1, comment="Use E1 extruder, our 'A' axis.", column=11),
        AllowColdExtrusion(
            comment="cold extrusion override - because it is not actually an extruder.",
            column=11,
        ),
        AbsolutePositioning(comment="Use absolute positions in general.", column=11),
        SetPosition(e=0, comment="'home' E axis", column=11),
        Blank(),
        move(Word("Z", z_clear, ".1f"), Word("E", 0, "d"), comment="Move needle out of way"),
    ]


def pick(
    name: str,
    feed: int,
    x: float,
    y: float,
    z_approach: float,
    a: float,
    z_contact: float,
    z_ascend: float,
    *,
    plunge_feed: int = 4000,
    suction_pin: int = 6,
) -> Program:
    """Move over the tape, descend, switch suction on, lift to travel height."""
    return [
        Blank(),
        Comment(text=f"-- Pick {name}", prefix=";;"),
        move(
            Word("F", feed, "d"),
            Word("X", x, ".3f"),
            Word("Y", y, ".3f"),
            Word("Z", z_approach, ".3f"),
            Word("E", a, ".3f"),
            rapid=True,
            comment="Move over component to pick.",
        ),
        move(
            Word("Z", z_contact, "<6.2f"),
            Word("F", plunge_feed, "d", lead="   "),
            comment="move down on tape.",
        ),
        Dwell(comment="flush buffer", column=13),
        SetPin(pin=suction_pin, level=PIN_ON, comment="turn on suckage", column=13),
        move(Word("Z", z_ascend, "<6.3f"), comment="Move up a bit for travelling", gap=3),
    ]


def place(
    name: str,
    feed: int,
    x: float,
    y: float,
    z_travel: float,
    a: float,
    z_contact: float,
    z_ascend: float,
    *,
    plunge_feed: int = 4000,
    suction_pin: int = 6,
    blower_pin: int = 8,
    blow_ms: int = 40,
) -> Program:
    """Carry to the target, descend, release suction, blow off, lift."""
    return [
        Blank(),
        Comment(text=f"-- Place {name}", prefix=";;"),
        move(
            Word("F", feed, "d"),
            Word("X", x, ".3f"),
            Word("Y", y, ".3f"),
            Word("Z", z_travel, ".3f"),
            Word("E", a, ".3f"),
            rapid=True,
            comment="Move component to place on board.",
        ),
        move(
            Word("Z", z_contact, "<6.3f"),
            Word("F", plunge_feed, "d"),
            comment="move down over board thickness.",
        ),
        Dwell(comment="flush buffer.", column=14),
        SetPin(pin=suction_pin, level=PIN_OFF, comment="turn off suckage", column=14),
        Dwell(comment="flush buffer.", column=14),
        SetPin(pin=blower_pin, level=PIN_ON, comment="blow", column=14),
        Dwell(ms=blow_ms, spec="d", comment=f".. for {blow_ms}ms", column=14),
        SetPin(pin=blower_pin, level=PIN_OFF, comment="done.", column=14),
        move(Word("Z", z_ascend, "<6.2f"), comment="Move up", gap=4),
    ]


def dispense_move(
    component: str, pad: str, x: float, y: float, z_hover: float
) -> Program:
    """Announce the pad and move above it at hover height."""
    return [
        Blank(),
        Comment(text=f"-- component {component}, pad {pad}", prefix=";;"),
        move(
            Word("X", x, ".3f"),
            Word("Y", y, ".3f"),
            Word("Z", z_hover, ".3f"),
            rapid=True,
            comment="move there.",
            gap=3,
        ),
    ]


def dispense_paste(
    z_dispense: float, wait_ms: float, area: float, z_separate: float
) -> Program:
    """Go down, open the solenoid for *wait_ms*, lift to separate the droplet."""
    return [
        move(Word("Z", z_dispense, ".2f"), comment="Go down to dispense"),
        SolenoidOn(comment="switch on fan (=solenoid)", column=10),
        Dwell(
            ms=wait_ms,
            spec="<5.1f",
            comment=f"Wait time dependent on area {area:.2f} mm^2",
        ),
        SolenoidOff(comment="switch off solenoid", column=10),
        move(Word("Z", z_separate, ".2f"), comment="high above to have paste separated"),
    ]


def finish() -> Program:
    """Park XY at home (Z stays clear) and release the motors."""
    return [
        Blank(),
        Home(axes=("X", "Y"), comment="Home x/y, but leave z clear", column=11),
        MotorsOff(comment="stop motors", column=11),
    ]
