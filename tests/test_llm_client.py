import json
import logging
import random

import httpx
import pytest

from quotes_cli.core.errors import (
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    HTTPError,
    TransportError,
)
from quotes_cli.core.types import QuoteRequest
from quotes_cli.llm.client import AnthropicBackend, OpenAIBackend, create_backend
from quotes_cli.llm.provider_config import ProviderSettings
from quotes_cli.llm.service import INSPIRATIONS, clean_quote


def openai_reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def anthropic_reply(text):
    return {"id": "msg_1", "content": [{"type": "text", "text": text}]}


class Recorder:
    """httpx.MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def body(self, index=-1):
        return json.loads(self.requests[index].content)


def client_for(recorder):
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


@pytest.mark.asyncio
async def test_openai_success_builds_bearer_request(openai_settings):
    recorder = Recorder(httpx.Response(200, json=openai_reply('  "Stay curious"\n')))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    result = await backend.fetch(QuoteRequest(theme="wonder", liked_history=("Begin anyway",)))

    assert result.is_ok
    assert result.text == "Stay curious"

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == openai_settings.url
    assert request.headers["Authorization"] == "Bearer sk-test"

    body = recorder.body()
    assert body["model"] == "gpt-4"
    assert len(body["messages"]) == 1
    prompt = body["messages"][0]["content"]
    assert body["messages"][0]["role"] == "user"
    assert "themes of wonder" in prompt
    assert '1. "Begin anyway"' in prompt
    assert "Draw inspiration" not in prompt


@pytest.mark.asyncio
async def test_anthropic_uses_api_key_header_and_embellishments(anthropic_settings):
    recorder = Recorder(httpx.Response(200, json=anthropic_reply("Quiet minds bloom")))
    backend = AnthropicBackend(
        anthropic_settings,
        http_client=client_for(recorder),
        rng=random.Random(7),
    )

    result = await backend.fetch(QuoteRequest())

    assert result.text == "Quiet minds bloom"
    request = recorder.requests[0]
    assert request.headers["x-api-key"] == "ak-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in request.headers

    body = recorder.body()
    assert body["max_tokens"] == 100
    prompt = body["messages"][0]["content"]
    assert "under 5 words" in prompt
    assert any(f"inspiration from {topic}." in prompt for topic in INSPIRATIONS)
    assert "should start with the letter" in prompt


@pytest.mark.asyncio
async def test_non_2xx_is_http_error_with_body(openai_settings):
    recorder = Recorder(httpx.Response(429, text='{"error": "rate limited"}'))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    result = await backend.fetch(QuoteRequest())

    assert not result.is_ok
    assert isinstance(result.error, HTTPError)
    assert result.error.status == 429
    assert "rate limited" in result.error.body


@pytest.mark.asyncio
async def test_transport_failure(openai_settings):
    recorder = Recorder(httpx.ConnectError("connection refused"))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    result = await backend.fetch(QuoteRequest())

    assert isinstance(result.error, TransportError)
    assert "connection refused" in result.error.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"choices": []},
        {"id": "x"},
        openai_reply(None),
        openai_reply('  ""  '),
    ],
)
async def test_missing_candidate_is_empty_response(openai_settings, payload):
    recorder = Recorder(httpx.Response(200, json=payload))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    result = await backend.fetch(QuoteRequest())

    assert isinstance(result.error, EmptyResponseError)


@pytest.mark.asyncio
async def test_invalid_json_is_decode_error(anthropic_settings):
    recorder = Recorder(httpx.Response(200, text="<html>oops</html>"))
    backend = AnthropicBackend(anthropic_settings, http_client=client_for(recorder))

    result = await backend.fetch(QuoteRequest())

    assert isinstance(result.error, DecodeError)


@pytest.mark.asyncio
async def test_missing_key_raises_before_network():
    recorder = Recorder()
    settings = ProviderSettings(
        name="openai", url="https://example.invalid", api_key="", model="m", max_words=10,
    )
    backend = OpenAIBackend(settings, http_client=client_for(recorder))

    with pytest.raises(ConfigurationError):
        await backend.fetch(QuoteRequest())
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_keep_context_sends_prior_dialogue(openai_settings):
    recorder = Recorder(
        httpx.Response(200, json=openai_reply("First light")),
        httpx.Response(500, text="boom"),
        httpx.Response(200, json=openai_reply("Second wind")),
    )
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder), keep_context=True)

    await backend.fetch(QuoteRequest())
    failed = await backend.fetch(QuoteRequest())
    await backend.fetch(QuoteRequest())

    assert not failed.is_ok
    roles = [m["role"] for m in recorder.body(2)["messages"]]
    assert roles == ["user", "assistant", "user"]
    assert recorder.body(2)["messages"][1]["content"] == "First light"
    assert len(backend.context) == 4


@pytest.mark.asyncio
async def test_without_context_each_call_is_independent(openai_settings):
    recorder = Recorder(
        httpx.Response(200, json=openai_reply("One")),
        httpx.Response(200, json=openai_reply("Two")),
    )
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    await backend.fetch(QuoteRequest())
    await backend.fetch(QuoteRequest())

    assert len(recorder.body(1)["messages"]) == 1
    assert backend.context == ()


def test_factory_maps_names(openai_settings, anthropic_settings):
    assert isinstance(create_backend(openai_settings), OpenAIBackend)
    assert isinstance(create_backend(anthropic_settings), AnthropicBackend)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('"Stay curious"', "Stay curious"),
        ('  \n"Stay curious"  ', "Stay curious"),
        ('""Nested""', '"Nested"'),
        ('"Unbalanced', '"Unbalanced'),
        ("Plain", "Plain"),
    ],
)
def test_clean_quote(raw, expected):
    assert clean_quote(raw) == expected


@pytest.mark.asyncio
async def test_verbose_logs_headers_and_rate_limits(openai_settings, caplog):
    recorder = Recorder(
        httpx.Response(200, json=openai_reply("Hi"), headers={"retry-after": "3", "x-request-id": "abc"}),
    )
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    with caplog.at_level(logging.DEBUG, logger="quotes_cli.llm.client"):
        await backend.fetch(QuoteRequest(verbose=True))

    messages = [r.getMessage() for r in caplog.records]
    assert "x-request-id: abc" in messages
    assert any(r.levelno == logging.INFO and r.getMessage() == "retry-after: 3" for r in caplog.records)
    assert "No specific rate limit headers found" not in messages


@pytest.mark.asyncio
async def test_verbose_reports_missing_rate_limit_headers(openai_settings, caplog):
    recorder = Recorder(httpx.Response(200, json=openai_reply("Hi")))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    with caplog.at_level(logging.DEBUG, logger="quotes_cli.llm.client"):
        await backend.fetch(QuoteRequest(verbose=True))

    assert "No specific rate limit headers found" in [r.getMessage() for r in caplog.records]


@pytest.mark.asyncio
async def test_quiet_mode_skips_header_dump(openai_settings, caplog):
    recorder = Recorder(httpx.Response(200, json=openai_reply("Hi"), headers={"retry-after": "3"}))
    backend = OpenAIBackend(openai_settings, http_client=client_for(recorder))

    with caplog.at_level(logging.DEBUG, logger="quotes_cli.llm.client"):
        await backend.fetch(QuoteRequest())

    messages = [r.getMessage() for r in caplog.records]
    assert "retry-after: 3" not in messages
    assert "No specific rate limit headers found" not in messages
