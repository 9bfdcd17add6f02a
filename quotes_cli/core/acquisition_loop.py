"""Interactive acquisition loop: fetch, render, decide, persist.

Architectural role:
    Top-level control flow used by the CLI. It is the only component with
    externally observable interactive behavior.

Control-flow model (states):
    FETCHING
        - Ask the backend for a quote built from the theme and liked history.
        - Ok -> render, go to AWAITING_DECISION.
        - Err -> render the error and a retry hint, wait for any key.
          `EXIT` terminates, anything else returns to FETCHING. There is no
          retry ceiling and no backoff.
    AWAITING_DECISION
        - LEFT  -> discard, back to FETCHING.
        - RIGHT -> append to the store; on success extend session history.
          A store failure is logged and rendered, history is left unchanged,
          and the loop returns to FETCHING.
        - anything else (Ctrl+C, Up, Down) -> TERMINATED.
    TERMINATED
        - Absorbing. `run` returns exit code 0.

Ordering guarantees:
    - The quote is rendered before the decoder is asked for a decision.
    - Session history is extended strictly after the store returned an id.
    - Terminal raw mode is only held inside decoder calls, never across a
      backend request, and the loop never issues two requests at once.
    - Decoder reads block the event loop on purpose. Nothing else runs while
      the user decides, so there is no task to starve.

Error handling strategy:
    `BackendError` values arrive inside `QuoteResult` and are retried.
    `StoreError` is caught here. `ConfigurationError` and `TerminalModeError`
    propagate to the CLI.
"""

import enum
import logging
from typing import Protocol

from quotes_cli.api.output import ConsoleOutput
from quotes_cli.core.errors import StoreError
from quotes_cli.core.types import AcceptedQuote, QuoteRequest, SessionHistory
from quotes_cli.llm.client import QuoteBackend
from quotes_cli.storage.quote_store import QuoteSink
from quotes_cli.terminal.input_decoder import NavigationEvent


logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    FETCHING = "fetching"
    AWAITING_DECISION = "awaiting_decision"
    TERMINATED = "terminated"


class EventSource(Protocol):
    """Blocking navigation-event source (normally `InputDecoder`)."""

    def next_event(self, any_key: bool = False) -> NavigationEvent:
        ...


class AcquisitionLoop:
    """Drives the fetch/decide/persist cycle until the user exits.

    Args:
        backend: Quote backend chosen at startup.
        decoder: Source of navigation events.
        store: Durable sink for accepted quotes.
        theme: Optional theme forwarded in every request.
        verbose: Forwarded in every request.
        history: Session history to extend; a new empty one by default.
        output: Console renderer.
    """

    def __init__(
        self,
        backend: QuoteBackend,
        decoder: EventSource,
        store: QuoteSink,
        *,
        theme: str | None = None,
        verbose: bool = False,
        history: SessionHistory | None = None,
        output: ConsoleOutput | None = None,
    ):
        self.backend = backend
        self.decoder = decoder
        self.store = store
        self.theme = theme
        self.verbose = verbose
        self.history = history if history is not None else SessionHistory()
        self.output = output or ConsoleOutput()

        self.state = LoopState.FETCHING
        self.current_quote: str | None = None

    def build_request(self) -> QuoteRequest:
        return QuoteRequest(
            theme=self.theme,
            liked_history=self.history.snapshot(),
            verbose=self.verbose,
        )

    async def run(self) -> int:
        """Run until TERMINATED and return the process exit code."""
        self.output.welcome()
        while self.state is not LoopState.TERMINATED:
            await self.step()
        self.output.goodbye()
        return 0

    async def step(self) -> LoopState:
        """Perform one state transition and return the new state."""
        if self.state is LoopState.FETCHING:
            await self._fetch()
        elif self.state is LoopState.AWAITING_DECISION:
            self._decide()
        return self.state

    # =========================================================
    # FETCHING
    # =========================================================

    async def _fetch(self) -> None:
        self.output.loading()
        result = await self.backend.fetch(self.build_request())

        if result.is_ok:
            self.current_quote = result.text
            self.output.quote(result.text)
            self.state = LoopState.AWAITING_DECISION
            return

        logger.warning("Quote fetch failed: %s", result.error)
        self.output.error(str(result.error))
        self.output.retry_hint()

        event = self.decoder.next_event(any_key=True)
        if event is NavigationEvent.EXIT:
            self.state = LoopState.TERMINATED
        else:
            self.state = LoopState.FETCHING

    # =========================================================
    # AWAITING_DECISION
    # =========================================================

    def _decide(self) -> None:
        event = self.decoder.next_event()

        if event is NavigationEvent.LEFT:
            self.current_quote = None
            self.output.discarded()
            self.state = LoopState.FETCHING

        elif event is NavigationEvent.RIGHT:
            self._accept(AcceptedQuote(self.current_quote))
            self.current_quote = None
            self.state = LoopState.FETCHING

        else:
            logger.debug("Decision event %s ends the session", event)
            self.state = LoopState.TERMINATED

    def _accept(self, accepted: AcceptedQuote) -> None:
        try:
            quote_id = self.store.append(accepted.text, accepted.accepted_at)
        except StoreError as exc:
            logger.exception("Failed to persist accepted quote")
            self.output.store_failed(str(exc))
            return

        self.history.append(accepted.text)
        self.output.saved(quote_id)
