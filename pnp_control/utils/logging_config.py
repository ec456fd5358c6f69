"""Logging configuration for the command-line entrypoints.

Diagnostics (out-of-stock tapes, board thickness, config problems) go to
stderr through the root logger, so they never mix with G-code written to
stdout.

Public API:
    setup_logging(log_level="INFO", log_file=None, json=False, context={"app": "pnp"})
    push_context(mode="place")
    pop_context(keys=["mode"])
    with logging_context(job="board.yaml"): ...

Format examples:
    Human: 2026-10-18T13:45:12.345Z | WARNING  | app=pnp job=board.yaml | We are out of components for 0805 100n
    JSON: {"t": "2026-10-18T13:45:12.345Z", "lvl": "WARNING", "logger": "pnp_control.machine.session", "app": "pnp", "msg": "..."}

Context fields live in a contextvar.  Calling setup_logging() again only
replaces the handlers it installed itself; handlers added by others (test
harnesses, embedding applications) are left alone.
"""

import contextlib
import contextvars
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, TextIO


_context_var: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'pnp_logging_context', default={}
)

_installed: List[logging.Handler] = []

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Render records as ``ts | LEVEL | k=v ... | message`` or JSON lines.

    Parameters
    ----------
    fmt_mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        Color the level name; only honored when stderr is a terminal.
    tz : str
        ``"UTC"`` or ``"local"``.
    """

    def __init__(self, fmt_mode: str = "human", use_color: bool = True, tz: str = "UTC"):
        super().__init__()
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()
        self.tz = tz

    def _timestamp(self, record: logging.LogRecord) -> str:
        if self.tz == "UTC":
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        else:
            ts = datetime.fromtimestamp(record.created)
        return ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get()
        if self.fmt_mode == "json":
            payload: Dict[str, Any] = {
                't': self._timestamp(record),
                'lvl': record.levelname,
                'logger': record.name,
                **context,
                'msg': record.getMessage(),
            }
            if record.exc_info:
                payload['exc'] = self.formatException(record.exc_info)
            return json.dumps(payload)

        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"
        fields = [self._timestamp(record), level]
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())
        line = ' | '.join(fields)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    stream: Optional[TextIO] = None,
    rotate: Optional[Dict[str, Any]] = None,
    tz: str = "UTC",
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the root logger for a CLI run.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL".
    log_file : str, optional
        Also write diagnostics here (always uncolored).
    json : bool
        JSON lines instead of the human format.
    color : bool
        ANSI level colors on the console.
    stream : TextIO, optional
        Console stream; defaults to the current ``sys.stderr``.
    rotate : dict, optional
        File rotation, e.g. ``{"max_bytes": 5_000_000, "backup_count": 3}``.
    tz : str
        "UTC" (default) or "local".
    context : dict, optional
        Initial context fields, e.g. ``{"app": "pnp"}``.

    Returns
    -------
    list of logging.Handler
        The handlers installed by this call.
    """
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, log_level.upper()))
    fmt_mode = "json" if json else "human"

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setFormatter(ContextFormatter(fmt_mode, color, tz))
    _installed.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if rotate:
            file_handler: logging.Handler = logging.handlers.RotatingFileHandler(
                path,
                maxBytes=rotate.get('max_bytes', 5_000_000),
                backupCount=rotate.get('backup_count', 3),
            )
        else:
            file_handler = logging.FileHandler(path)
        file_handler.setFormatter(ContextFormatter(fmt_mode, use_color=False, tz=tz))
        _installed.append(file_handler)

    for handler in _installed:
        root.addHandler(handler)

    if context:
        push_context(**context)
    logging.captureWarnings(True)
    return list(_installed)


def push_context(**kwargs: Any) -> None:
    """Add fields to every subsequent record.

    >>> push_context(app="pnp", mode="place")
    >>> logger.info("Started")  # "... | app=pnp mode=place | Started"
    """
    _context_var.set({**_context_var.get(), **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove context fields; all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    _context_var.set({k: v for k, v in _context_var.get().items() if k not in keys})


@contextlib.contextmanager
def logging_context(**kwargs: Any) -> Iterator[None]:
    """Add fields for the duration of a ``with`` block, then restore."""
    token = _context_var.set({**_context_var.get(), **kwargs})
    try:
        yield
    finally:
        _context_var.reset(token)
