"""
Instruction records.

One immutable dataclass per emitted G-code line.  This vocabulary is
the contract between the command-group templates and the renderer.
"""

from pnp_control.job_ir.operations import (
    AbsolutePositioning,
    AllowColdExtrusion,
    Blank,
    Comment,
    Dwell,
    Home,
    Instruction,
    MotorsOff,
    Move,
    Program,
    SelectTool,
    SetPin,
    SetPosition,
    SetUnitsMM,
    SolenoidOff,
    SolenoidOn,
    Word,
    move,
    z_values,
)

__all__ = [
    "AbsolutePositioning",
    "AllowColdExtrusion",
    "Blank",
    "Comment",
    "Dwell",
    "Home",
    "Instruction",
    "MotorsOff",
    "Move",
    "Program",
    "SelectTool",
    "SetPin",
    "SetPosition",
    "SetUnitsMM",
    "SolenoidOff",
    "SolenoidOn",
    "Word",
    "move",
    "z_values",
]
