"""
Anthropic API client wrapper.

Wraps anthropic.AsyncAnthropic behind a single send_message() call that returns
plain text. Every call is bounded by the configured timeout; retries default to
zero so a failing call surfaces quickly to the insight services, which absorb
it into a fallback response.

Usage:
    client = AnthropicClient.from_settings(get_settings())
    if client.is_configured():
        text = await client.send_message(prompt, max_tokens=200)
"""

from typing import Optional

from anthropic import AsyncAnthropic

from backend.core.config import ANTHROPIC_KEY_PLACEHOLDER, Settings
from backend.core.errors import LLMNotConfiguredError
from backend.core.logging import get_component_logger


DEFAULT_MODEL = 'claude-3-haiku-20240307'
DEFAULT_MAX_TOKENS = 1024


class AnthropicClient:
    """Thin async wrapper around the Anthropic Messages API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        max_retries: int = 0,
        logger=None,
        sdk_client: Optional[AsyncAnthropic] = None,
    ):
        self.model = model
        self.logger = logger or get_component_logger('AnthropicClient')

        key = (api_key or '').strip()
        self._configured = bool(key) and key != ANTHROPIC_KEY_PLACEHOLDER

        self._client = sdk_client
        if self._client is None and self._configured:
            self._client = AsyncAnthropic(api_key=key, timeout=timeout, max_retries=max_retries)
            self.logger.info(f"Anthropic client initialized with {model}")
        elif not self._configured:
            self.logger.warning("ANTHROPIC_API_KEY not set - AI insights and categorization disabled")

    @classmethod
    def from_settings(cls, settings: Settings, logger=None) -> 'AnthropicClient':
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
            logger=logger,
        )

    def is_configured(self) -> bool:
        return self._configured and self._client is not None

    async def send_message(
        self,
        prompt: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        model: Optional[str] = None,
    ) -> str:
        """
        Send a single user prompt and return the text of the first content block.

        Returns an empty string when the response carries no text block.

        Raises:
            LLMNotConfiguredError: If no API key is configured.
            anthropic.APIError: On API failures (including timeouts).
        """
        if not self.is_configured():
            raise LLMNotConfiguredError()

        try:
            response = await self._client.messages.create(
                model=model or self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception:
            self.logger.error("Anthropic API error", exc_info=True)
            raise

        for block in response.content or []:
            if getattr(block, 'type', None) == 'text':
                return block.text
        return ''
