"""
Logging setup built on loguru.

Modules log through ``from loguru import logger``; the CLI calls
``configure_logger`` once to install the stderr sink.
"""

import sys
from typing import Optional

from loguru import logger as _logger

_CONFIGURED = False
_LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def _write_stderr(message: str) -> None:
    # sys.stderr may be swapped after configuration.
    sys.stderr.write(message)


def configure_logger(level: Optional[str] = None, *, force: bool = False) -> None:
    """
    Configure the loguru logger once per process.

    Args:
        level: Minimum level for the stderr sink (default: WARNING).
        force: Reconfigure even if already configured.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    _logger.remove()
    _logger.add(
        _write_stderr,
        level=level or "WARNING",
        format=_LOG_FORMAT,
        colorize=sys.stderr.isatty(),
    )
    _CONFIGURED = True
