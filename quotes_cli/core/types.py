"""Data contracts shared by the backend, prompting, storage, and loop layers.

Architectural role:
    Defines the small value types passed between components. None of these
    types perform I/O.

Ownership model:
    - `QuoteRequest` is built fresh per backend call and owned by that call.
    - `QuoteResult` is returned by a backend and is either fully ok or fully
      failed; there is no partially valid state.
    - `AcceptedQuote` lives between a user acceptance and the store append.
    - `SessionHistory` is owned by the acquisition loop for the process lifetime.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator

from quotes_cli.core.errors import BackendError


@dataclass(frozen=True)
class QuoteRequest:
    """Inputs for one generation request.

    Attributes:
        theme: Optional theme; `None` or empty means "a random theme".
        liked_history: Previously accepted quote texts, oldest first.
        verbose: Whether the backend should surface its prompt and headers.
    """

    theme: str | None = None
    liked_history: tuple[str, ...] = ()
    verbose: bool = False


@dataclass(frozen=True)
class QuoteResult:
    """Tagged result of a backend call: exactly one of `text` / `error` is set."""

    text: str | None = None
    error: BackendError | None = None

    def __post_init__(self):
        if (self.text is None) == (self.error is None):
            raise ValueError("QuoteResult requires exactly one of text or error")

    @classmethod
    def ok(cls, text: str) -> "QuoteResult":
        return cls(text=text)

    @classmethod
    def err(cls, error: BackendError) -> "QuoteResult":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AcceptedQuote:
    """A quote the user accepted, awaiting its durable write."""

    text: str
    accepted_at: datetime = field(default_factory=_utcnow)


class SessionHistory:
    """Append-only, in-process list of accepted quote texts.

    The loop appends only after the store confirmed a durable write, so the
    history never holds a quote the store does not.
    """

    def __init__(self, initial: Iterable[str] = ()):
        self._items = list(initial)

    def append(self, text: str) -> None:
        self._items.append(text)

    def snapshot(self) -> tuple[str, ...]:
        """Return an immutable copy suitable for a `QuoteRequest`."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._items))

    def __repr__(self) -> str:
        return f"SessionHistory({self._items!r})"
