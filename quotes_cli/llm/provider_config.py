"""Provider configuration and credential lookup for the backend layer.

Architectural role:
    Centralizes backend selection, endpoint/model defaults, and API-key
    resolution. The CLI resolves one `ProviderSettings` value at startup and
    passes it to `client.create_backend`; nothing below the CLI reads the
    environment afterwards.

Determinism:
    Deterministic for a fixed environment mapping and key files.

Failure behavior:
    A missing credential raises `ConfigurationError` before any network I/O.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from quotes_cli.core.errors import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "openai"
DEFAULT_DB_PATH = "quotes.db"

# Backend name -> endpoint, credential, and generation defaults.
PROVIDERS = {

    "openai": {
        "url": "https://api.openai.com/v1/chat/completions",
        "key_env": "OPENAI_API_KEY",
        "key_file": "config/openai.key",
        "model": "gpt-4",
        "max_words": 10,
        "max_tokens": None,
        "rate_limit_headers": (
            "x-ratelimit-limit-requests",
            "x-ratelimit-remaining-requests",
            "x-ratelimit-reset-requests",
            "retry-after",
        ),
    },

    "anthropic": {
        "url": "https://api.anthropic.com/v1/messages",
        "key_env": "ANTHROPIC_API_KEY",
        "key_file": "config/anthropic.key",
        "model": "claude-3-haiku-20240307",
        "max_words": 5,
        "max_tokens": 100,
        "rate_limit_headers": (
            "x-ratelimit-limit",
            "x-ratelimit-remaining",
            "x-ratelimit-reset",
            "retry-after",
        ),
    },

}

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ProviderSettings:
    """Resolved, immutable configuration for one backend instance."""

    name: str
    url: str
    api_key: str
    model: str
    max_words: int
    max_tokens: int | None = None
    timeout: float | None = None
    rate_limit_headers: tuple[str, ...] = ()


def resolve_backend_name(name: str | None) -> str:
    """Map a user-supplied backend name to a known one.

    Unknown or empty names fall back to `DEFAULT_BACKEND`.
    """
    if name and name.lower() in PROVIDERS:
        return name.lower()
    if name:
        logger.warning("Unknown backend %r, falling back to %s", name, DEFAULT_BACKEND)
    return DEFAULT_BACKEND


def load_key(key_env: str, key_file: str | None, environ: Mapping[str, str] | None = None):
    """Load an API key from the environment or a key file.

    Resolution order:
        1. Environment variable `key_env`.
        2. Raw (stripped) file contents at `key_file`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - Empty values at either source are treated as missing.
        - `None` key file skips the file lookup.
    """
    environ = os.environ if environ is None else environ

    env_value = environ.get(key_env, "").strip()
    if env_value:
        return env_value

    if not key_file or not os.path.exists(key_file):
        return None

    with open(key_file, "r", encoding="utf-8") as f:
        return f.read().strip() or None


def _parse_timeout(raw: str | None) -> float | None:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"QUOTES_TIMEOUT must be a number, got {raw!r}") from exc
    return value if value > 0 else None


def load_settings(backend: str | None = None, environ: Mapping[str, str] | None = None) -> ProviderSettings:
    """Resolve provider settings for `backend`.

    Args:
        backend: Backend name from the CLI; `QUOTES_BACKEND` is used when `None`.
        environ: Environment mapping; defaults to `os.environ`.

    Returns:
        `ProviderSettings` with a non-empty API key.

    Raises:
        ConfigurationError: No credential could be resolved, or `QUOTES_TIMEOUT`
            is not numeric.
    """
    environ = os.environ if environ is None else environ

    name = resolve_backend_name(backend or environ.get("QUOTES_BACKEND"))
    config = PROVIDERS[name]

    api_key = load_key(config["key_env"], config["key_file"], environ)
    if not api_key:
        raise ConfigurationError(f"Error: {config['key_env']} not set.")

    return ProviderSettings(
        name=name,
        url=config["url"],
        api_key=api_key,
        model=environ.get("QUOTES_MODEL") or config["model"],
        max_words=config["max_words"],
        max_tokens=config["max_tokens"],
        timeout=_parse_timeout(environ.get("QUOTES_TIMEOUT")),
        rate_limit_headers=config["rate_limit_headers"],
    )


def resolve_db_path(cli_value: str | None = None, environ: Mapping[str, str] | None = None) -> str:
    """Return the store path from the CLI, `QUOTES_DB_PATH`, or the default."""
    environ = os.environ if environ is None else environ
    return cli_value or environ.get("QUOTES_DB_PATH") or DEFAULT_DB_PATH
