"""Session lifecycle: preamble, per-part operations, finish."""

from pnp_control.machine.session import (
    ConfigurationMissing,
    PnPSession,
    SessionError,
    SessionState,
    SessionStateError,
)

__all__ = [
    "ConfigurationMissing",
    "PnPSession",
    "SessionError",
    "SessionState",
    "SessionStateError",
]
