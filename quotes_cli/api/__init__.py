"""Quotes CLI adapter package.

Architectural role:
- Defines the terminal boundary: argument parsing and console rendering.
- Delegates control flow to `quotes_cli.core.acquisition_loop`.

Scope:
- No model invocation or persistence logic is implemented in this package.
"""
