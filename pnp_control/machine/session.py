"""Pick-and-place session -- the lifecycle around the command groups.

States::

    UNINITIALIZED --initialize(config)--> READY --finish()--> FINISHED

``initialize`` emits the preamble and ``finish`` the closing group, so
every emitted job is bracketed by exactly one of each regardless of how
many parts are processed in between.  Per-part operations are only
accepted while READY and are independent of each other.

Tapes are never passed in by the caller: each operation resolves the
tape from ``Part.key`` through the session configuration, so a part can
not be paired with the wrong reel.

Diagnostics (missing or empty tapes, board thickness) go to the logger,
never into the G-code stream.
"""

from __future__ import annotations

import enum
import logging

from pnp_control.board.models import Pad, Part, PnPConfig, Tape
from pnp_control.configs.loader import MachineConfig
from pnp_control.gcode import geometry, heights, templates
from pnp_control.gcode.generator import GCodeEmitter

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base class for session lifecycle errors."""

    pass


class ConfigurationMissing(SessionError):
    """Raised when ``initialize`` is called without a configuration."""

    pass


class SessionStateError(SessionError):
    """Raised when an operation is called in the wrong lifecycle state."""

    pass


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FINISHED = "finished"


class PnPSession:
    """Turn parts and pads into pick, place and dispense G-code.

    Parameters
    ----------
    machine : MachineConfig
        Calibration constants (clearances, speeds, rotation scaling).
    emitter : GCodeEmitter
        Output sink.  Groups are appended in call order.

    Examples
    --------
    >>> session = PnPSession(load_config(), GCodeEmitter(sys.stdout))
    >>> session.initialize(job.config)
    >>> for part in job.parts:
    ...     session.pick_and_place(part)
    >>> session.finish()
    """

    def __init__(self, machine: MachineConfig, emitter: GCodeEmitter) -> None:
        self._machine = machine
        self._emitter = emitter
        self._config: PnPConfig | None = None
        self._state = SessionState.UNINITIALIZED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> PnPConfig | None:
        return self._config

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, config: PnPConfig | None) -> None:
        """Bind the job configuration and emit the preamble.

        Raises
        ------
        ConfigurationMissing
            If *config* is ``None``.
        SessionStateError
            If the session was already initialized.
        """
        if self._state is not SessionState.UNINITIALIZED:
            raise SessionStateError(
                f"initialize() called in state {self._state.value}"
            )
        if config is None:
            logger.error("Need configuration")
            raise ConfigurationMissing("Need configuration")

        self._config = config
        logger.info("Board-thickness = %.1fmm", heights.board_thickness(config))

        z_clear = heights.preamble_height(
            config.board.top,
            config.tape_for_component.values(),
            self._machine.heights,
        )
        self._emitter.emit(templates.preamble(z_clear))
        self._state = SessionState.READY

    def finish(self) -> None:
        """Emit the closing group.  No operation is accepted afterwards."""
        self._require_ready("finish")
        self._emitter.emit(templates.finish())
        self._state = SessionState.FINISHED

    # ------------------------------------------------------------------
    # Per-part operations
    # ------------------------------------------------------------------

    def pick(self, part: Part) -> bool:
        """Emit the pick group for *part*.

        Returns ``False`` (and emits nothing) when no tape is loaded for
        the part or the tape is out of components.
        """
        self._require_ready("pick")
        tape = self._tape_for(part)
        if tape is None:
            return False
        return self._pick(part, tape)

    def place(self, part: Part) -> bool:
        """Emit the place group for *part*.

        Returns ``False`` (and emits nothing) when no tape is loaded for
        the part.
        """
        self._require_ready("place")
        tape = self._tape_for(part)
        if tape is None:
            return False
        self._place(part, tape)
        return True

    def pick_and_place(self, part: Part) -> bool:
        """Pick then place *part* from one tape lookup.

        Both groups are skipped when the tape is missing or exhausted.
        The caller advances the tape after a ``True`` result.
        """
        self._require_ready("pick_and_place")
        tape = self._tape_for(part)
        if tape is None:
            return False
        if not self._pick(part, tape):
            return False
        self._place(part, tape)
        return True

    def dispense(self, part: Part, pad: Pad) -> None:
        """Emit one paste dot for *pad* of *part*."""
        self._require_ready("dispense")
        config = self._config
        x, y = geometry.pad_position(config.board, part, pad)
        h = heights.dispense_heights(config, self._machine.heights)
        area = pad.area

        self._emitter.emit(
            templates.dispense_move(part.component_name, pad.name, x, y, h.hover)
        )
        self._emitter.emit(
            templates.dispense_paste(
                h.dispense,
                self._machine.dispense.wait_ms(area),
                area,
                h.separate,
            )
        )

    def dispense_part(self, part: Part) -> int:
        """Dispense every pad of *part* in order; returns the pad count."""
        self._require_ready("dispense_part")
        for pad in part.pads:
            self.dispense(part, pad)
        return len(part.pads)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_ready(self, op: str) -> None:
        if self._state is not SessionState.READY:
            raise SessionStateError(
                f"{op}() requires a READY session, state is {self._state.value}"
            )

    def _tape_for(self, part: Part) -> Tape | None:
        tape = self._config.tape_for(part)
        if tape is None:
            logger.warning(
                "No tape for %s (%s), skipping", part.component_name, part.key
            )
        return tape

    def _pick(self, part: Part, tape: Tape) -> bool:
        pos = tape.current_feed_position()
        if pos is None:
            logger.warning(
                "We are out of components for %s %s", part.footprint, part.value
            )
            return False

        m = self._machine
        h = heights.pick_heights(self._config, tape, m.heights)
        self._emitter.emit(
            templates.pick(
                part.print_name,
                templates.feed_mm_min(m.speeds.to_tape_mm_s),
                pos.x,
                pos.y,
                h.approach,
                geometry.pick_rotation(tape.angle, m.rotation.units_per_turn),
                h.contact,
                h.ascend,
                plunge_feed=m.speeds.plunge_feed_mm_min,
                suction_pin=m.actuators.suction_pin,
            )
        )
        return True

    def _place(self, part: Part, tape: Tape) -> None:
        m = self._machine
        x, y = geometry.place_position(self._config.board, part)
        h = heights.place_heights(self._config, tape, m.heights)
        self._emitter.emit(
            templates.place(
                part.print_name,
                templates.feed_mm_min(m.speeds.to_board_mm_s),
                x,
                y,
                h.travel,
                geometry.place_rotation(
                    part.angle, tape.angle, m.rotation.units_per_turn
                ),
                h.contact,
                h.ascend,
                plunge_feed=m.speeds.plunge_feed_mm_min,
                suction_pin=m.actuators.suction_pin,
                blower_pin=m.actuators.blower_pin,
                blow_ms=m.actuators.blow_ms,
            )
        )
