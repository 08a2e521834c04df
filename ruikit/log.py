# ruikit/log.py

"""
Process-wide error and debug log hooks.

Every rejected property assignment, unknown constant or malformed protocol
message ends up in `error_log`. The text is kept as the "last error" and
handed to the installed hook, so tests and host applications can capture it.
"""

import logging
from typing import Callable, Optional

logger = logging.getLogger("ruikit")

LogFunc = Callable[[str], None]

# When True, bridges and the application write every protocol message to the debug log.
protocol_in_debug_log: bool = False

_last_error: str = ""


def _default_error_log(text: str) -> None:
    logger.error(text, stack_info=True, stacklevel=3)


def _default_debug_log(text: str) -> None:
    logger.debug(text)


_error_hook: LogFunc = _default_error_log
_debug_hook: LogFunc = _default_debug_log


def set_error_log(func: Optional[LogFunc]) -> None:
    """Installs the error hook. ``None`` restores the default logging hook."""
    global _error_hook
    _error_hook = func if func is not None else _default_error_log


def set_debug_log(func: Optional[LogFunc]) -> None:
    """Installs the debug hook. ``None`` restores the default logging hook."""
    global _debug_hook
    _debug_hook = func if func is not None else _default_debug_log


def set_protocol_in_debug_log(enabled: bool) -> None:
    global protocol_in_debug_log
    protocol_in_debug_log = bool(enabled)


def error_log(text: str) -> None:
    global _last_error
    _last_error = text
    _error_hook(text)


def error_log_f(fmt: str, *args) -> None:
    error_log(fmt % args if args else fmt)


def debug_log(text: str) -> None:
    _debug_hook(text)


def debug_log_f(fmt: str, *args) -> None:
    debug_log(fmt % args if args else fmt)


def last_error() -> str:
    """Returns the text of the most recent error passed to `error_log`."""
    return _last_error
