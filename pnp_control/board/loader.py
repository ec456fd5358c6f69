"""Job file loading and validation.

A job file describes one board: where it sits on the bed, which tapes
are loaded, and the parts (with their paste pads) to process.  The
schema is validated with pydantic so malformed jobs fail before any
G-code is written, with the offending key in the message.

Example ``job.yaml``::

    board:
      origin: [10.0, 20.0]
      top: 5.0
      size: [50.0, 30.0]
    bed_level: 0.0
    tapes:
      - component: "0805@10k"
        first: [100.0, 10.0]
        spacing: [4.0, 0.0]
        count: 20
        height: 2.0
        angle: 90
    parts:
      - name: R1
        footprint: "0805"
        value: 10k
        pos: [12.5, 8.0]
        angle: 180
        pads:
          - {name: "1", pos: [-1.0, 0.0], size: [1.0, 1.3]}
          - {name: "2", pos: [1.0, 0.0], size: [1.0, 1.3]}

Usage::

    from pnp_control.board.loader import load_job
    job = load_job("job.yaml")
    job.config.tape_for_component["0805@10k"]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from pnp_control.board.models import Dimension, Pad, Part, PnPConfig, Point, Size, Tape
from pnp_control.configs.loader import ConfigError
from pnp_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)


# ============================================================================
# JOB SCHEMA
# ============================================================================

class BoardV1(BaseModel):
    """Board placement on the bed (mm)."""
    model_config = ConfigDict(extra="forbid")

    origin: Tuple[float, float] = Field(..., description="Machine XY of board reference corner")
    top: float = Field(..., description="Absolute Z of board top surface")
    size: Tuple[float, float] = Field((0.0, 0.0), description="Board extents (w, h)")

    @field_validator('size')
    @classmethod
    def validate_size(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        if v[0] < 0 or v[1] < 0:
            raise ValueError(f"Board size must be non-negative, got {v}")
        return v


class TapeV1(BaseModel):
    """One loaded tape reel."""
    model_config = ConfigDict(extra="forbid")

    component: str = Field(..., description="Component key '<footprint>@<value>'")
    first: Tuple[float, float] = Field(..., description="Machine XY of first component")
    spacing: Tuple[float, float] = Field((0.0, 0.0), description="Offset between components")
    count: int = Field(1, ge=0, description="Components on the tape")
    height: float = Field(..., description="Absolute Z of a component resting in the tape")
    angle: float = Field(0.0, description="Component orientation in the tape (degrees)")

    @field_validator('component')
    @classmethod
    def validate_component(cls, v: str) -> str:
        if '@' not in v:
            raise ValueError(f"Tape component must look like '<footprint>@<value>', got: {v!r}")
        return v


class PadV1(BaseModel):
    """Paste pad relative to the part origin."""
    model_config = ConfigDict(extra="forbid")

    name: str
    pos: Tuple[float, float]
    size: Tuple[float, float]

    @field_validator('size')
    @classmethod
    def validate_size(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        if v[0] < 0 or v[1] < 0:
            raise ValueError(f"Pad size must be non-negative, got {v}")
        return v


class PartV1(BaseModel):
    """One component placement."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Reference designator")
    footprint: str
    value: str
    pos: Tuple[float, float]
    angle: float = 0.0
    pads: List[PadV1] = Field(default_factory=list)

    @field_validator('value', 'footprint', mode='before')
    @classmethod
    def require_quoted_label(cls, v: Any) -> Any:
        # YAML reads bare 0603 as octal 387 and 100 as an int
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            raise ValueError(
                f"Label {v!r} was read as a number; quote it in the job file (e.g. \"0603\")"
            )
        return v


class JobV1(BaseModel):
    """Complete job file."""
    model_config = ConfigDict(extra="forbid")

    board: BoardV1
    bed_level: float = 0.0
    tapes: List[TapeV1] = Field(default_factory=list)
    parts: List[PartV1] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique(self) -> 'JobV1':
        keys = [t.component for t in self.tapes]
        dupes = sorted({k for k in keys if keys.count(k) > 1})
        if dupes:
            raise ValueError(f"Duplicate tapes for component(s): {dupes}")
        names = [p.name for p in self.parts]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate part names: {dupes}")
        if self.board.top < self.bed_level:
            raise ValueError(
                f"board.top ({self.board.top}) is below bed_level ({self.bed_level})"
            )
        return self


# ============================================================================
# CONVERSION
# ============================================================================

@dataclass(frozen=True)
class Job:
    """Loaded job: session configuration plus the ordered part list."""

    config: PnPConfig
    parts: tuple[Part, ...]
    source: Optional[Path] = None


def _to_part(p: PartV1) -> Part:
    return Part(
        component_name=p.name,
        footprint=p.footprint,
        value=p.value,
        pos=Point(*p.pos),
        angle=p.angle,
        pads=tuple(
            Pad(name=pad.name, pos=Point(*pad.pos), size=Size(*pad.size))
            for pad in p.pads
        ),
    )


def build_job(data: dict[str, Any], source: Optional[Path] = None) -> Job:
    """Validate a raw job dict and convert it to model objects.

    Raises
    ------
    ConfigError
        If the data does not match the job schema.
    """
    try:
        spec = JobV1.model_validate(data)
    except ValidationError as exc:
        where = f" in {source}" if source else ""
        raise ConfigError(f"Invalid job file{where}: {exc}") from exc

    board = Dimension(
        origin=Point(*spec.board.origin),
        top=spec.board.top,
        width=spec.board.size[0],
        height=spec.board.size[1],
    )
    tapes = {
        t.component: Tape(
            first=Point(*t.first),
            spacing=Point(*t.spacing),
            count=t.count,
            height=t.height,
            angle=t.angle,
        )
        for t in spec.tapes
    }
    parts = tuple(_to_part(p) for p in spec.parts)

    missing = sorted({p.key for p in parts} - tapes.keys())
    if missing:
        logger.warning("No tape loaded for: %s", ", ".join(missing))

    return Job(
        config=PnPConfig(board=board, bed_level=spec.bed_level, tape_for_component=tapes),
        parts=parts,
        source=source,
    )


def load_job(path: str | Path) -> Job:
    """Load and validate a job file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ConfigError
        If the file is empty or fails validation.
    """
    path = Path(path)
    logger.info("Loading job from %s", path)
    data = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty job file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Job file {path} must contain a mapping, got {type(data).__name__}")
    job = build_job(data, source=path)
    logger.info(
        "Job loaded: %d part(s), %d tape(s)",
        len(job.parts),
        len(job.config.tape_for_component),
    )
    return job
