"""Provider-specific backends for quote generation.

Architectural role:
    Executes one HTTP request per `fetch` call against the configured provider
    and normalizes the outcome into a `QuoteResult`.

Model invocation flow:
    `AcquisitionLoop` -> `backend.fetch(QuoteRequest)` -> prompt builder (+
    optional embellishments) -> provider payload -> `httpx.AsyncClient.post`
    -> envelope parsing -> `clean_quote` -> `QuoteResult`.

Provider handling:
    - OpenAI: `Authorization: Bearer <key>`, `choices[0].message.content`.
    - Anthropic: `x-api-key` + `anthropic-version`, `content[0].text`,
      random inspiration and starting letter added at call time.

Retry behavior:
    No retry loop is implemented here. Each call is attempted once; the loop
    decides whether to try again.

Timeouts:
    The request timeout comes from `ProviderSettings.timeout`. `None` disables
    it, so a hung connection blocks the caller indefinitely.

Conversation context:
    With `keep_context=True` a backend owns the list of prior user/assistant
    messages and sends it with every request. Only successful calls extend the
    list. It grows for the process lifetime and is never persisted.

Failure handling model:
    Transport, HTTP, and decoding failures are returned as `QuoteResult.err`.
    Only a missing credential is raised (`ConfigurationError`).
"""

import logging
import random
from typing import Any, Protocol

import httpx

from quotes_cli.core.errors import (
    BackendError,
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    HTTPError,
    TransportError,
)
from quotes_cli.core.types import QuoteRequest, QuoteResult
from quotes_cli.llm.provider_config import ANTHROPIC_VERSION, ProviderSettings
from quotes_cli.llm.service import clean_quote, embellish_prompt, pick_embellishments
from quotes_cli.prompting.prompt_builder import build_quote_prompt


logger = logging.getLogger(__name__)


class QuoteBackend(Protocol):
    """Capability implemented by every backend variant."""

    async def fetch(self, request: QuoteRequest) -> QuoteResult:
        """Request one quote and return the normalized result."""
        ...


class ChatBackend:
    """Shared request/response pipeline for chat-style completion endpoints.

    Subclasses provide header framing, payload shape, and envelope parsing.
    """

    embellish = False

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
        keep_context: bool = False,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.keep_context = keep_context
        self._http_client = http_client
        self._rng = rng
        self._messages: list[dict[str, str]] = []

    @property
    def context(self) -> tuple[dict[str, str], ...]:
        """Conversation messages carried into the next request."""
        return tuple(dict(m) for m in self._messages)

    # ---------------------------------------------------------
    # Provider hooks
    # ---------------------------------------------------------

    def build_headers(self) -> dict[str, str]:
        raise NotImplementedError

    def build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Any) -> str:
        raise NotImplementedError

    # ---------------------------------------------------------
    # Pipeline
    # ---------------------------------------------------------

    def build_prompt(self, request: QuoteRequest) -> str:
        prompt = build_quote_prompt(
            request.theme,
            request.liked_history,
            max_words=self.settings.max_words,
        )
        if self.embellish:
            inspiration, letter = pick_embellishments(self._rng)
            prompt = embellish_prompt(prompt, inspiration, letter)
        return prompt

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        headers = self.build_headers()
        if self._http_client is not None:
            return await self._http_client.post(self.settings.url, headers=headers, json=payload)

        async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
            return await client.post(self.settings.url, headers=headers, json=payload)

    def _log_response_headers(self, response: httpx.Response, verbose: bool) -> None:
        logger.debug("Response status code: %s", response.status_code)
        if not verbose:
            return

        for key, value in response.headers.items():
            logger.debug("%s: %s", key, value)

        found = False
        for header in self.settings.rate_limit_headers:
            value = response.headers.get(header)
            if value is not None:
                logger.info("%s: %s", header, value)
                found = True

        if not found:
            logger.info("No specific rate limit headers found")

    async def fetch(self, request: QuoteRequest) -> QuoteResult:
        """Issue one generation request.

        Returns:
            `QuoteResult.ok(text)` with cleaned text, or `QuoteResult.err(...)`
            carrying a `TransportError`, `HTTPError`, `DecodeError`, or
            `EmptyResponseError`.

        Raises:
            ConfigurationError: The settings carry no API key.
        """
        if not self.settings.api_key:
            raise ConfigurationError(f"No API key configured for {self.settings.name}")

        prompt = self.build_prompt(request)
        if request.verbose:
            logger.info("Prompt used: %s", prompt)
        else:
            logger.debug("Prompt used: %s", prompt)

        user_message = {"role": "user", "content": prompt}
        payload = self.build_payload(self._messages + [user_message])

        logger.debug("Sending request to %s (%s)", self.settings.url, self.settings.name)
        try:
            response = await self._post(payload)
        except httpx.RequestError as exc:
            logger.debug("Transport failure: %r", exc)
            return QuoteResult.err(TransportError(str(exc) or exc.__class__.__name__))

        self._log_response_headers(response, request.verbose)

        if not response.is_success:
            logger.debug("Response body: %s", response.text)
            return QuoteResult.err(HTTPError(response.status_code, response.text))

        try:
            data = response.json()
        except ValueError as exc:
            return QuoteResult.err(DecodeError(f"Failed to parse JSON response. {exc}"))

        try:
            text = clean_quote(self.extract_text(data))
        except BackendError as exc:
            return QuoteResult.err(exc)

        if not text:
            return QuoteResult.err(EmptyResponseError("No quote found in response."))

        if self.keep_context:
            self._messages.append(user_message)
            self._messages.append({"role": "assistant", "content": text})

        logger.debug("Retrieved quote: %s", text)
        return QuoteResult.ok(text)


def _first_candidate(data: Any, key: str) -> Any:
    """Return `data[key][0]`, mapping shape problems to backend errors."""
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")

    candidates = data.get(key)
    if candidates is None or candidates == []:
        raise EmptyResponseError("No quote found in response.")
    if not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        raise DecodeError(f"Unexpected `{key}` field in response")

    return candidates[0]


class OpenAIBackend(ChatBackend):
    """OpenAI chat-completions backend."""

    def build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.api_key}",
        }

    def build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.settings.model,
            "messages": messages,
        }
        if self.settings.max_tokens:
            payload["max_tokens"] = self.settings.max_tokens
        return payload

    def extract_text(self, data: Any) -> str:
        choice = _first_candidate(data, "choices")
        message = choice.get("message")
        if not isinstance(message, dict):
            raise DecodeError("Choice carries no message")

        content = message.get("content")
        if content is None:
            raise EmptyResponseError("No quote found in response.")
        if not isinstance(content, str):
            raise DecodeError("Message content is not text")
        return content


class AnthropicBackend(ChatBackend):
    """Anthropic messages backend with randomized prompt embellishments."""

    embellish = True

    def build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.settings.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        return {
            "model": self.settings.model,
            "max_tokens": self.settings.max_tokens or 100,
            "messages": messages,
        }

    def extract_text(self, data: Any) -> str:
        block = _first_candidate(data, "content")
        text = block.get("text")
        if text is None:
            raise EmptyResponseError("No quote found in response.")
        if not isinstance(text, str):
            raise DecodeError("Content block text is not a string")
        return text


BACKENDS = {
    "openai": OpenAIBackend,
    "anthropic": AnthropicBackend,
}


def create_backend(settings: ProviderSettings, **kwargs) -> ChatBackend:
    """Instantiate the backend class registered for `settings.name`.

    Raises:
        ConfigurationError: No backend is registered under that name.
    """
    try:
        backend_cls = BACKENDS[settings.name]
    except KeyError:
        raise ConfigurationError(f"Unknown backend: {settings.name}") from None
    return backend_cls(settings, **kwargs)
