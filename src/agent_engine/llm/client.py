"""
LLMClient -- one provider, with retries, prompt hygiene and token accounting.

Features:
  - Prompt caching via CacheablePrompt (stable system/context prefix)
  - Structured tool calls on anthropic and openai
  - Retry with exponential backoff on transient provider errors
  - Null-byte stripping and per-section size limits; no prompt text or keys in logs
  - Running token and cost totals

Usage:
    client = create_client()                   # provider from the environment
    response = await client.call(prompt="What time is it?", role="react")
    response.content                           # str
    response.tool_calls                        # list[ToolCallRequest]

    prompt = CacheablePrompt(
        system="You can call tools...",        # cached
        context="Progress so far: ...",        # cached per run
        user_message="Question: ...",          # never cached
    )
    response = await client.call(prompt=prompt, tools=registry.definitions())
"""

import asyncio
import logging
import os
import time
from typing import Any, Sequence

from ..errors import LLMCallError
from .models import CacheablePrompt, LLMResponse, TokenUsage
from .providers import PROVIDERS, get_provider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120
DEFAULT_MAX_RETRIES = 2
DEFAULT_MAX_PROMPT_LENGTH = 200_000
RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 30.0

# SDK exception class names (anthropic, openai, httpx) worth another attempt
RETRYABLE_ERRORS = frozenset({
    "RateLimitError",
    "APITimeoutError",
    "APIConnectionError",
    "InternalServerError",
    "ServiceUnavailableError",
    "Timeout",
    "ConnectError",
})


def _clean_text(content: str, max_length: int) -> str:
    """Strip null bytes and cut at max_length."""
    if not content:
        return ""
    content = content.replace("\x00", "")
    if len(content) > max_length:
        logger.info(f"[LLM] Prompt section truncated to {max_length} chars")
        content = content[:max_length] + "\n[TRUNCATED]"
    return content


class LLMClient:
    """
    Chat model client for a single provider (anthropic, openai or google).

    Satisfies the ChatModel protocol. A client whose SDK is missing still
    constructs; its calls raise LLMCallError.
    """

    def __init__(
        self,
        provider: str = "anthropic",
        model: str | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_prompt_length: int = DEFAULT_MAX_PROMPT_LENGTH,
    ):
        self._adapter = get_provider(provider)
        self._model = model or self._adapter.default_model
        self._timeout = timeout
        self._max_retries = max_retries
        self._section_limit = max_prompt_length // 3
        self._total_usage = TokenUsage()

        key = api_key or os.environ.get(self._adapter.api_key_env, "")
        if not key:
            logger.warning(f"[LLM] {self._adapter.api_key_env} not set -- calls will fail")

        try:
            self._client: Any = self._adapter.connect(key, self._model, timeout)
        except ImportError:
            logger.error(
                f"[LLM] {self._adapter.name} SDK not installed. "
                f"Install the '{self._adapter.name}' extra."
            )
            self._client = None

        logger.info(
            f"[LLM] Initialized {self._adapter.name} client "
            f"(model={self._model}, timeout={timeout}s)"
        )

    @property
    def provider(self) -> str:
        return self._adapter.name

    @property
    def model(self) -> str:
        return self._model

    @property
    def supports_tool_calls(self) -> bool:
        """Whether this provider can return structured tool calls."""
        return self._adapter.supports_tools

    @property
    def total_usage(self) -> TokenUsage:
        """Usage summed over every successful call."""
        return self._total_usage

    async def call(
        self,
        prompt: str | CacheablePrompt,
        role: str = "assistant",
        temperature: float = 0.5,
        max_tokens: int = 4096,
        tools: Sequence[Any] | None = None,
    ) -> LLMResponse:
        """
        Send one prompt and return the model's reply.

        Args:
            prompt: Plain string (sent as the user message) or CacheablePrompt.
            role: Caller label for logs ("react", "analyst", ...). Not sent.
            temperature: Sampling temperature.
            max_tokens: Output token cap.
            tools: Tool definitions (name, description, input_schema) offered
                   for structured calls; dropped for providers without support.

        Raises:
            LLMCallError: SDK unavailable, or the last attempt failed.
        """
        if self._client is None:
            raise LLMCallError(
                self.provider, "client not initialized -- check API key and dependencies"
            )

        if isinstance(prompt, str):
            prompt = CacheablePrompt(user_message=prompt)
        prompt = CacheablePrompt(
            system=_clean_text(prompt.system, self._section_limit),
            context=_clean_text(prompt.context, self._section_limit),
            user_message=_clean_text(prompt.user_message, self._section_limit),
        )

        if tools and not self.supports_tool_calls:
            logger.debug(f"[LLM] {self.provider} has no tool support; sending text only")
            tools = None

        started = time.time()
        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = await self._adapter.complete(
                    self._client, self._model, prompt, temperature, max_tokens, tools
                )
            except Exception as e:
                if type(e).__name__ not in RETRYABLE_ERRORS or attempt == attempts:
                    logger.error(
                        f"[LLM] {self.provider}/{role} failed after {attempt} attempt(s): "
                        f"{type(e).__name__}"
                    )
                    raise LLMCallError(self.provider, type(e).__name__) from e
                delay = min(RETRY_BASE_DELAY * 2 ** (attempt - 1), RETRY_MAX_DELAY)
                logger.warning(
                    f"[LLM] {type(e).__name__} on attempt {attempt}/{attempts}, "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            response.latency_ms = (time.time() - started) * 1000
            self._total_usage.add(response.usage)
            usage = response.usage
            logger.debug(
                f"[LLM] {self.provider}/{role}: {usage.input_tokens}in "
                f"({usage.cached_input_tokens} cached) + {usage.output_tokens}out "
                f"${usage.estimated_cost_usd:.4f} ({response.latency_ms:.0f}ms, "
                f"{len(response.tool_calls)} tool calls)"
            )
            return response

        # unreachable: the final attempt either returns or raises
        raise LLMCallError(self.provider, "no attempts made")


def create_client(
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    **kwargs,
) -> LLMClient:
    """
    Build an LLMClient, picking the provider from the environment if not given.

    The first provider whose API key variable is set wins, in the order
    anthropic, openai, google. With no key at all the client defaults to
    anthropic (and its calls will fail until a key is provided).
    """
    if provider is None:
        provider = next(
            (name for name, adapter in PROVIDERS.items() if os.environ.get(adapter.api_key_env)),
            None,
        )
        if provider is None:
            logger.warning("[LLM] No API key found. Defaulting to anthropic.")
            provider = "anthropic"

    return LLMClient(provider=provider, model=model, api_key=api_key, **kwargs)
