"""ANSI console rendering for the interactive loop.

Response formatting:
    - Status lines are single colored lines with a leading emoji.
    - The quote itself is printed bold between blank lines.
    - Errors go to the same stream as everything else so the retry hint stays
      next to the failure it refers to.

Side effects:
    Writes to the configured stream (stdout by default) and flushes after each
    line so output is visible before the next blocking read.
"""

import sys
from typing import TextIO


CYAN = "\033[0;36m"
YELLOW = "\033[0;33m"
GREEN = "\033[0;32m"
RED = "\033[0;31m"
MAGENTA = "\033[0;35m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0;0m"


class ConsoleOutput:
    """Colored status and quote rendering.

    Args:
        stream: Destination text stream; defaults to `sys.stdout`.
        color: Emit ANSI escape codes. Disable for non-terminal streams.
    """

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        self.stream = stream or sys.stdout
        self.color = color

    def _line(self, text: str, style: str = "") -> None:
        if self.color and style:
            text = f"{style}{text}{RESET}"
        self.stream.write(text + "\n")
        self.stream.flush()

    def welcome(self) -> None:
        self._line(
            "✨ Welcome to Quotes CLI! Press ➡️ to save, ⬅️ to discard. Ctrl+C to exit. ✨",
            CYAN,
        )

    def loading(self) -> None:
        self._line("🔄 Generating quote...", YELLOW)

    def quote(self, text: str) -> None:
        self._line("")
        self._line(text, BOLD)
        self._line("")

    def saved(self, quote_id: int) -> None:
        self._line(f"✅ Quote saved with ID: {quote_id}", GREEN)

    def discarded(self) -> None:
        self._line("🗑️  Quote discarded.", DIM)

    def error(self, message: str) -> None:
        self._line(f"❌ {message}", RED)

    def retry_hint(self) -> None:
        self._line("Press any key to retry, or Ctrl+C to exit.", YELLOW)

    def store_failed(self, message: str) -> None:
        self._line(f"⚠️  Quote not saved: {message}", RED)

    def goodbye(self) -> None:
        self._line("👋 Goodbye! Come back for more wisdom! ✨", MAGENTA)
