"""Cross-cutting utilities (lowest dependency layer).

    - Atomic file I/O and YAML loading (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (gcode, machine, board).
"""

from . import fs
from . import logging_config
from .logging_config import logging_context, push_context, setup_logging

__all__ = [
    'fs',
    'logging_config',
    'logging_context',
    'push_context',
    'setup_logging',
]
