"""
AI Chat Relay

Forwards a member's question to Claude and relays the text answer back
to the channel, with blocked phrases scrubbed from the reply.
"""

import re
from typing import Iterable, Optional

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import ClaudeConfig
from ..exceptions import ClaudeAPIError, ValidationError
from ..logging_config import get_logger
from ..validation import sanitize_for_discord

logger = get_logger(__name__)


SYSTEM_PROMPT = """You are the helper bot of a Minecraft Bedrock community Discord server.

Answer members' questions in a friendly, casual tone.
- Keep answers short: a few sentences, never more than a Discord message.
- Prefer Bedrock Edition mechanics and commands when the question is about Minecraft.
- If you don't know something about this specific server, say so and suggest asking a moderator.
- Never produce content that breaks Discord's community guidelines."""

REDACTED = "[redacted]"

# Phrases scrubbed from every reply, matched case-insensitively
BLOCKED_PHRASES = [
    "as an ai language model",
    "as a large language model",
    "i am an ai developed by",
    "i'm an ai developed by",
    "@everyone",
    "@here",
    "discord.gg/",
]

MAX_PROMPT_LENGTH = 1500


def filter_blocked(text: str, phrases: Iterable[str] = BLOCKED_PHRASES) -> str:
    """Replace every blocked phrase in text with [redacted]"""
    for phrase in phrases:
        if not phrase:
            continue
        text = re.sub(re.escape(phrase), REDACTED, text, flags=re.IGNORECASE)
    return text


class AIRelay:
    """
    Relay between chat and Claude

    Usage:
        relay = AIRelay(config.claude)
        answer = await relay.ask("How do I find diamonds?")
    """

    def __init__(
        self,
        config: Optional[ClaudeConfig] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
        blocked_phrases: Optional[list[str]] = None
    ):
        self.config = config or ClaudeConfig()
        if client is None and not self.config.api_key:
            raise ValueError("ANTHROPIC_API_KEY is required for the AI relay")

        self.client = client or anthropic.AsyncAnthropic(
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
        )
        self.model = self.config.model
        self.blocked_phrases = blocked_phrases if blocked_phrases is not None else BLOCKED_PHRASES

        logger.info(f"AIRelay initialized with model: {self.model}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type((
            anthropic.RateLimitError,
            anthropic.APIConnectionError,
        )),
        reraise=True,
    )
    async def _call_claude_raw(self, messages: list[dict], max_tokens: int):
        return await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=SYSTEM_PROMPT,
            messages=messages
        )

    async def _call_claude(
        self,
        messages: list[dict],
        max_tokens: int,
        operation: str = "api_call"
    ) -> str:
        """
        Make a Claude API call with retry logic and error handling.

        Raises:
            ClaudeAPIError: On API failures after retries exhausted
        """
        logger.debug(
            f"Calling Claude API for {operation}",
            extra={"model": self.model, "max_tokens": max_tokens, "message_count": len(messages)}
        )

        try:
            response = await self._call_claude_raw(messages, max_tokens)

        except anthropic.AuthenticationError as e:
            logger.error(f"Claude API authentication failed: {e}")
            raise ClaudeAPIError.authentication_failed()

        except anthropic.RateLimitError as e:
            logger.warning(f"Claude API rate limited: {e}")
            raise ClaudeAPIError.rate_limited()

        except anthropic.BadRequestError as e:
            logger.error(f"Claude API bad request: {e}")
            raise ClaudeAPIError.invalid_request(str(e))

        except anthropic.APITimeoutError as e:
            logger.error(f"Claude API timeout: {e}")
            raise ClaudeAPIError.timeout()

        except anthropic.APIConnectionError as e:
            logger.error(f"Claude API connection failed: {e}")
            raise ClaudeAPIError.connection_failed()

        except anthropic.APIStatusError as e:
            logger.error(f"Claude API status error: {e.status_code} - {e}")
            if e.status_code == 529:
                raise ClaudeAPIError.overloaded()
            raise ClaudeAPIError(
                f"Claude API error (HTTP {e.status_code})",
                status_code=e.status_code
            )

        logger.info(
            f"Claude API {operation} completed",
            extra={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "operation": operation,
            }
        )

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", "text") == "text" and getattr(block, "text", None)
        )
        if not text.strip():
            raise ClaudeAPIError.empty_response()
        return text

    async def ask(self, prompt: str) -> str:
        """
        Ask one question and return the scrubbed answer.

        Raises:
            ValidationError: Empty prompt
            ClaudeAPIError: On API failures
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError("prompt", "❌ You must ask a question.")

        if len(prompt) > MAX_PROMPT_LENGTH:
            prompt = prompt[:MAX_PROMPT_LENGTH]

        messages = [{"role": "user", "content": prompt}]
        answer = await self._call_claude(
            messages, max_tokens=self.config.max_tokens_chat, operation="ask"
        )

        return sanitize_for_discord(filter_blocked(answer, self.blocked_phrases))
