"""Keystroke decoding for single-key navigation.

Architectural role:
    Turns the unbuffered byte stream of a raw-mode terminal into navigation
    events consumed by the acquisition loop.

Split:
    - `KeyDecoder`: pure byte-at-a-time state machine, no I/O.
    - `InputDecoder`: owns the file descriptor, wraps each blocking read in
      `raw_mode`, and feeds bytes to a `KeyDecoder` until an event appears.

State machine (`KeyDecoder.feed`):
    IDLE --ESC--> SAW_ESCAPE --'['--> SAW_ESCAPE_BRACKET --A/B/C/D--> event
    - `0x03` (Ctrl+C) yields `EXIT` from any state and clears pending bytes.
    - Any other byte after ESC or ESC '[' resets to IDLE silently.
    - Printable bytes in IDLE are ignored.
    - A bare ESC never becomes an event; the decoder keeps waiting for the
      rest of a sequence.

Failure handling:
    The decoder itself never raises on input. Terminal-mode failures surface as
    `TerminalModeError` from `raw_mode`.
    A read that raises clears any partial sequence before the error propagates.
"""

import enum
import logging
import os
import sys
from typing import Callable

from quotes_cli.terminal.raw_mode import raw_mode


logger = logging.getLogger(__name__)

CTRL_C = 0x03
ESC = 0x1B
BRACKET = 0x5B


class NavigationEvent(enum.Enum):
    """User intents decoded from keystrokes."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    EXIT = "exit"
    UNRECOGNIZED = "unrecognized"


ARROW_KEYS = {
    0x41: NavigationEvent.UP,
    0x42: NavigationEvent.DOWN,
    0x43: NavigationEvent.RIGHT,
    0x44: NavigationEvent.LEFT,
}


class DecoderState(enum.Enum):
    IDLE = "idle"
    SAW_ESCAPE = "saw_escape"
    SAW_ESCAPE_BRACKET = "saw_escape_bracket"


class KeyDecoder:
    """Byte-at-a-time escape sequence decoder."""

    def __init__(self):
        self.state = DecoderState.IDLE
        self._pending = bytearray()

    @property
    def pending(self) -> bytes:
        """Bytes of a partially received escape sequence."""
        return bytes(self._pending)

    def reset(self) -> None:
        self.state = DecoderState.IDLE
        self._pending.clear()

    def feed(self, byte: int) -> NavigationEvent | None:
        """Consume one byte; return an event once a complete one is recognized."""
        if byte == CTRL_C:
            self.reset()
            return NavigationEvent.EXIT

        if self.state is DecoderState.IDLE:
            if byte == ESC:
                self.state = DecoderState.SAW_ESCAPE
                self._pending.append(byte)
            return None

        if self.state is DecoderState.SAW_ESCAPE:
            if byte == BRACKET:
                self.state = DecoderState.SAW_ESCAPE_BRACKET
                self._pending.append(byte)
            else:
                logger.debug("Dropping escape sequence %r + %#04x", self.pending, byte)
                self.reset()
            return None

        event = ARROW_KEYS.get(byte)
        if event is None:
            logger.debug("Dropping unknown sequence %r + %#04x", self.pending, byte)
        self.reset()
        return event


def _stdin_fd() -> int:
    return sys.stdin.fileno()


class InputDecoder:
    """Blocking source of navigation events read from a terminal.

    Args:
        fd: Terminal file descriptor; defaults to stdin.
        read_byte: Callable returning the next byte as an int, or `None` on
            end-of-file. Defaults to a one-byte `os.read` on `fd`.
        terminal_mode: Context manager factory applied around every read.
    """

    def __init__(
        self,
        fd: int | None = None,
        read_byte: Callable[[], int | None] | None = None,
        terminal_mode=raw_mode,
    ):
        self._fd = _stdin_fd() if fd is None else fd
        self._read_byte = read_byte or self._read_fd_byte
        self._terminal_mode = terminal_mode
        self._decoder = KeyDecoder()

    def _read_fd_byte(self) -> int | None:
        data = os.read(self._fd, 1)
        if not data:
            return None
        return data[0]

    def next_event(self, any_key: bool = False) -> NavigationEvent:
        """Block until one navigation event is available.

        Args:
            any_key: When true, a complete keystroke that is not an arrow key
                (a printable byte, or a dropped escape sequence) returns
                `UNRECOGNIZED` instead of being ignored. Used by "press any key"
                prompts.

        Returns:
            The decoded event. End-of-file and `KeyboardInterrupt` map to `EXIT`.
        """
        with self._terminal_mode(self._fd):
            while True:
                try:
                    byte = self._read_byte()
                except KeyboardInterrupt:
                    self._decoder.reset()
                    return NavigationEvent.EXIT
                except Exception:
                    # A half-read sequence must not leak into the next call.
                    self._decoder.reset()
                    raise

                if byte is None:
                    logger.debug("End of input; treating as exit")
                    self._decoder.reset()
                    return NavigationEvent.EXIT

                event = self._decoder.feed(byte)
                if event is not None:
                    return event

                if any_key and self._decoder.state is DecoderState.IDLE:
                    return NavigationEvent.UNRECOGNIZED
