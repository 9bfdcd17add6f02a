"""Error taxonomy for the quote acquisition pipeline.

Propagation policy:
    - `ConfigurationError` and `TerminalModeError` are fatal. They escape the
      acquisition loop and are mapped to exit code 1 by the CLI.
    - `BackendError` subclasses never escape a backend call. They are wrapped in
      `QuoteResult.err(...)`, rendered, and followed by a retry opportunity.
    - `StoreError` is caught by the loop, logged, and rendered; the loop keeps
      running without updating session history.
"""


class QuotesError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(QuotesError):
    """Required configuration (for example an API key) is missing or invalid."""


class TerminalModeError(QuotesError):
    """Terminal attributes could not be read, changed, or restored."""


class StoreError(QuotesError):
    """A quote could not be written to or read from the store."""


class BackendError(QuotesError):
    """Base class for normalized generation-request failures.

    Attributes:
        kind: Stable short label used in rendered messages and logs.
    """

    kind = "BackendError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class TransportError(BackendError):
    """The request never produced an HTTP response (DNS, TLS, connection reset)."""

    kind = "TransportError"


class HTTPError(BackendError):
    """The backend answered with a non-2xx status.

    The body is kept for diagnostics only and is never parsed as a quote.
    """

    kind = "HTTPError"

    def __init__(self, status: int, body: str):
        super().__init__(f"HTTP {status}. {body}".rstrip())
        self.status = status
        self.body = body


class EmptyResponseError(BackendError):
    """A 2xx envelope carried no usable candidate text."""

    kind = "EmptyResponseError"


class DecodeError(BackendError):
    """A 2xx response body was not valid JSON or had an unexpected shape."""

    kind = "DecodeError"
