"""
Board model and job loading.

Parts, pads, tapes and the board dimension, plus the YAML job-file
loader that builds them.
"""

from pnp_control.board.loader import Job, build_job, load_job
from pnp_control.board.models import (
    Dimension,
    Pad,
    Part,
    PnPConfig,
    Point,
    Size,
    Tape,
)

__all__ = [
    "Dimension",
    "Job",
    "Pad",
    "Part",
    "PnPConfig",
    "Point",
    "Size",
    "Tape",
    "build_job",
    "load_job",
]
