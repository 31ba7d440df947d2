"""
Unit tests for the AI chat relay.

The Anthropic client is mocked; no network calls are made.
"""

import pytest
import httpx
import anthropic
from unittest.mock import AsyncMock, Mock
from tenacity import wait_none

from nationcraft.ai.relay import AIRelay, filter_blocked, REDACTED, MAX_PROMPT_LENGTH
from nationcraft.config import ClaudeConfig
from nationcraft.exceptions import ClaudeAPIError, ValidationError

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def status_error(cls, code):
    return cls("error", response=httpx.Response(code, request=REQUEST), body=None)


def text_response(text):
    response = Mock()
    response.content = [Mock(type="text", text=text)]
    response.usage = Mock(input_tokens=10, output_tokens=10)
    return response


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    """Retries happen immediately in tests"""
    monkeypatch.setattr(AIRelay._call_claude_raw.retry, "wait", wait_none())


@pytest.fixture
def relay(mock_anthropic_client):
    return AIRelay(ClaudeConfig(api_key="sk-ant-test"), client=mock_anthropic_client)


class TestFilterBlocked:
    """Tests for blocked phrase scrubbing"""

    def test_case_insensitive(self):
        result = filter_blocked("As An AI Language Model, I think so.")
        assert result == f"{REDACTED}, I think so."

    def test_every_occurrence(self):
        result = filter_blocked("join discord.gg/abc or DISCORD.GG/def", ["discord.gg/"])
        assert result == f"join {REDACTED}abc or {REDACTED}def"

    def test_regex_characters_are_literal(self):
        assert filter_blocked("a.b and axb", ["a.b"]) == f"{REDACTED} and axb"

    def test_clean_text_unchanged(self):
        assert filter_blocked("Diamonds spawn below y=16.") == "Diamonds spawn below y=16."

    def test_empty_phrase_ignored(self):
        assert filter_blocked("hello", [""]) == "hello"


class TestAIRelayInit:
    """Tests for AIRelay construction"""

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            AIRelay(ClaudeConfig(api_key=None))

    def test_injected_client_needs_no_key(self, mock_anthropic_client):
        relay = AIRelay(ClaudeConfig(api_key=None), client=mock_anthropic_client)
        assert relay.client is mock_anthropic_client

    def test_uses_configured_model(self, mock_anthropic_client):
        relay = AIRelay(ClaudeConfig(api_key="sk-ant-x", model="claude-3-5-haiku-latest"),
                        client=mock_anthropic_client)
        assert relay.model == "claude-3-5-haiku-latest"


class TestAsk:
    """Tests for AIRelay.ask"""

    @pytest.mark.asyncio
    async def test_returns_answer(self, relay, mock_anthropic_client):
        answer = await relay.ask("where are diamonds?")

        assert answer == "Dig at y=-58 for diamonds."
        kwargs = mock_anthropic_client.messages.create.await_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "where are diamonds?"}]
        assert kwargs["max_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_empty_prompt(self, relay, mock_anthropic_client):
        with pytest.raises(ValidationError) as exc_info:
            await relay.ask("   ")

        assert exc_info.value.message == "❌ You must ask a question."
        mock_anthropic_client.messages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_long_prompt_truncated(self, relay, mock_anthropic_client):
        await relay.ask("q" * (MAX_PROMPT_LENGTH + 500))

        sent = mock_anthropic_client.messages.create.await_args.kwargs["messages"][0]["content"]
        assert len(sent) == MAX_PROMPT_LENGTH

    @pytest.mark.asyncio
    async def test_blocked_phrases_redacted(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = text_response(
            "As a large language model I can't ping @everyone"
        )

        answer = await relay.ask("ping everyone")

        assert answer == f"{REDACTED} I can't ping {REDACTED}"

    @pytest.mark.asyncio
    async def test_long_answer_truncated(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = text_response("w" * 5000)

        answer = await relay.ask("tell me a story")

        assert len(answer) == 2000
        assert answer.endswith("...")

    @pytest.mark.asyncio
    async def test_empty_answer(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = text_response("  ")

        with pytest.raises(ClaudeAPIError, match="no text"):
            await relay.ask("hello")


class TestErrorMapping:
    """Tests for Anthropic SDK error translation"""

    @pytest.mark.asyncio
    async def test_authentication_error(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = status_error(anthropic.AuthenticationError, 401)

        with pytest.raises(ClaudeAPIError) as exc_info:
            await relay.ask("hi")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_rate_limit_retried_then_mapped(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = status_error(anthropic.RateLimitError, 429)

        with pytest.raises(ClaudeAPIError) as exc_info:
            await relay.ask("hi")

        assert exc_info.value.status_code == 429
        assert mock_anthropic_client.messages.create.await_count == 3

    @pytest.mark.asyncio
    async def test_rate_limit_recovers(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = [
            status_error(anthropic.RateLimitError, 429),
            text_response("ok"),
        ]

        assert await relay.ask("hi") == "ok"

    @pytest.mark.asyncio
    async def test_bad_request_not_retried(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = status_error(anthropic.BadRequestError, 400)

        with pytest.raises(ClaudeAPIError) as exc_info:
            await relay.ask("hi")

        assert exc_info.value.status_code == 400
        assert mock_anthropic_client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = anthropic.APITimeoutError(request=REQUEST)

        with pytest.raises(ClaudeAPIError, match="timed out"):
            await relay.ask("hi")

    @pytest.mark.asyncio
    async def test_connection_error(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = anthropic.APIConnectionError(request=REQUEST)

        with pytest.raises(ClaudeAPIError, match="connect"):
            await relay.ask("hi")

    @pytest.mark.asyncio
    async def test_overloaded(self, relay, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = status_error(anthropic.APIStatusError, 529)

        with pytest.raises(ClaudeAPIError) as exc_info:
            await relay.ask("hi")

        assert exc_info.value.status_code == 529
