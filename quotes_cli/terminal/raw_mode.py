"""Scoped raw-mode acquisition for the controlling terminal.

Architectural role:
    Provides the context manager the input decoder wraps around every blocking
    read. The terminal is switched to a mode without echo, line buffering, or
    signal generation on entry and switched back on exit.

Resource model:
    - Acquired once per decoder call, never held across a backend request.
    - Original attributes are captured with `tcgetattr` before any change and
      restored exactly once in a `finally` block, including when the body raises
      or the process is interrupted.

Mode details:
    - `ECHO` and `ICANON` are cleared so bytes arrive one at a time unechoed.
    - `ISIG` is cleared so Ctrl+C arrives as byte `0x03` instead of `SIGINT`,
      letting the decoder turn it into an `Exit` event.
    - Output processing (`OPOST`) is left untouched so rendered lines keep their
      normal newline handling.

Failure handling:
    Any `termios.error` while reading, changing, or restoring attributes is
    raised as `TerminalModeError`. A restore failure is fatal for the caller.
"""

import contextlib
import logging
import termios

from quotes_cli.core.errors import TerminalModeError


logger = logging.getLogger(__name__)

_LFLAG = 3
_CC = 6
_CLEARED_LFLAGS = termios.ECHO | termios.ICANON | termios.ISIG


def _raw_attributes(original):
    """Return a modified copy of `original` with raw-mode local flags."""
    raw = list(original)
    raw[_LFLAG] = raw[_LFLAG] & ~_CLEARED_LFLAGS
    cc = list(raw[_CC])
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    raw[_CC] = cc
    return raw


@contextlib.contextmanager
def raw_mode(fd: int):
    """Hold `fd` in raw mode for the duration of the `with` block.

    Args:
        fd: File descriptor of the terminal (normally stdin).

    Raises:
        TerminalModeError: Attributes could not be read or applied on entry, or
            could not be restored on exit.
    """
    try:
        original = termios.tcgetattr(fd)
    except termios.error as exc:
        raise TerminalModeError(f"Cannot read terminal attributes: {exc}") from exc

    try:
        termios.tcsetattr(fd, termios.TCSANOW, _raw_attributes(original))
    except termios.error as exc:
        raise TerminalModeError(f"Cannot enter raw mode: {exc}") from exc

    try:
        yield
    finally:
        try:
            termios.tcsetattr(fd, termios.TCSANOW, original)
        except termios.error as exc:
            logger.critical("Failed to restore terminal attributes on fd %s", fd)
            raise TerminalModeError(f"Cannot restore terminal attributes: {exc}") from exc
