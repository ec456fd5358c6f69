"""G-code rendering -- instruction records to text lines.

Rendering is format-only: given well-formed numbers it cannot fail, and
it never reorders anything.  Each record becomes exactly one line::

    <command><words>[<padding>; <comment>]

Blank records render as empty lines and ``Comment`` records as
``<prefix> <text>``.

``GCodeEmitter`` appends rendered lines to a text stream in the order
the groups are handed to it, and keeps the records so callers and tests
can inspect what was emitted without parsing text back.
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import TextIO

from pnp_control.job_ir.operations import Blank, Comment, Instruction, Program

logger = logging.getLogger(__name__)


class GCodeError(Exception):
    """Raised when an instruction cannot be rendered."""

    pass


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_instruction(instr: Instruction) -> str:
    """Render one record to a line (without the newline).

    Raises
    ------
    GCodeError
        If a word value does not fit its format spec (e.g. a float
        passed where ``d`` is expected).
    """
    if isinstance(instr, Blank):
        return ""
    if isinstance(instr, Comment):
        return f"{instr.prefix} {instr.text}"

    try:
        line = instr.command() + "".join(w.render() for w in instr.words())
    except (TypeError, ValueError) as exc:
        raise GCodeError(
            f"Cannot render {type(instr).__name__}: {exc}"
        ) from exc

    if instr.comment is not None:
        width = max(len(line) + instr.gap, instr.column)
        line = f"{line:<{width}}; {instr.comment}"
    return line


def render_program(program: Program) -> str:
    """Render records to newline-terminated text."""
    return "".join(render_instruction(instr) + "\n" for instr in program)


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class GCodeEmitter:
    """Append-only G-code sink.

    Parameters
    ----------
    stream : TextIO | None
        Destination for rendered text.  ``None`` collects into an
        in-memory buffer readable through ``getvalue()``.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else StringIO()
        self._program: Program = []

    @property
    def program(self) -> Program:
        """Copy of every record emitted so far, in order."""
        return list(self._program)

    def emit(self, group: Program) -> None:
        """Render *group* and append it to the stream."""
        text = render_program(group)
        self._stream.write(text)
        self._program.extend(group)
        logger.debug("Emitted %d line(s)", len(group))

    def comment(self, text: str) -> None:
        """Emit a single ``; text`` line (job banners and the like)."""
        self.emit([Comment(text=text)])

    def getvalue(self) -> str:
        """Everything written so far, when the stream is in-memory."""
        if not isinstance(self._stream, StringIO):
            raise GCodeError("getvalue() is only available for in-memory streams")
        return self._stream.getvalue()
