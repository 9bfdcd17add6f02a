"""Quote persistence package.

Scope:
    Append-only SQLite storage of accepted quotes.

Non-goals:
    - No schema migrations beyond creating the table when missing.
    - No editing or deleting stored quotes.
"""
