"""
G-code generation module.

Geometry transforms, height sequencing, command-group templates and
rendering of instruction records to G-code text.
"""

from pnp_control.gcode.generator import GCodeEmitter, GCodeError, render_program

__all__ = ["GCodeEmitter", "GCodeError", "render_program"]
