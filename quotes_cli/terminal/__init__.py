"""Terminal input package.

Scope:
    Raw-mode acquisition and arrow-key decoding for the interactive loop.

Non-goals:
    - No cursor control or screen drawing (see `quotes_cli.api.output`).
    - No line editing.
"""

from quotes_cli.terminal.input_decoder import InputDecoder, KeyDecoder, NavigationEvent

__all__ = ["InputDecoder", "KeyDecoder", "NavigationEvent"]
