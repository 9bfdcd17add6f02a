"""Core orchestration package.

Exports the data contracts shared by all layers and the acquisition loop that
ties backend, decoder, and store together.
"""

from quotes_cli.core.types import AcceptedQuote, QuoteRequest, QuoteResult, SessionHistory

__all__ = ["AcceptedQuote", "QuoteRequest", "QuoteResult", "SessionHistory"]
