"""
Pick-and-Place Control Package.

Turns component placements on a circuit board, fed from tape reels, into
G-code for a pick-and-place head with a rotating suction nozzle and a
solder-paste dispenser.

Subpackages:
    board: Board, part, pad and tape records; job file loading
    configs: Machine calibration loading and validation
    job_ir: Instruction records, one per emitted G-code line
    gcode: Geometry transforms, height sequencing, templates, rendering
    machine: Session lifecycle (preamble, per-part groups, finish)
    scripts: Command-line entrypoints
"""

__all__ = ["board", "configs", "job_ir", "gcode", "machine", "scripts"]
