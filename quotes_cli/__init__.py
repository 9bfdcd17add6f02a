"""Quotes CLI package.

Architectural role:
    Interactive terminal tool that requests short generated quotes from a
    pluggable text-generation backend and lets the user keep or discard each
    one with a single arrow keystroke.

Package split:
    - `terminal`: raw-mode acquisition and keystroke decoding.
    - `llm`: provider configuration and backend transports.
    - `prompting`: deterministic prompt construction.
    - `storage`: durable append-only quote store.
    - `core`: data contracts, error taxonomy, and the acquisition loop.
    - `api`: command-line entrypoint and console rendering.
"""

__version__ = "1.0.0"
