"""
Provider adapters: how to connect, shape a request and read a response.

Each adapter is stateless; the SDK handle is created by connect() and owned
by the LLMClient. SDKs are imported lazily so only the installed provider
extra is required.

  anthropic  -- cache_control on system blocks, tool_use content blocks
  openai     -- automatic prefix caching, function-calling tool_calls
  google     -- flat prompt, text only
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from .models import CacheablePrompt, LLMResponse, TokenUsage, ToolCallRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pricing:
    """USD per 1K tokens; cached input is billed at its own rate."""

    input_per_1k: float = 0.0
    cached_per_1k: float = 0.0
    output_per_1k: float = 0.0

    def estimate(self, input_tokens: int, cached_tokens: int, output_tokens: int) -> float:
        cost = (
            (input_tokens - cached_tokens) * self.input_per_1k
            + cached_tokens * self.cached_per_1k
            + output_tokens * self.output_per_1k
        ) / 1000
        return round(cost, 6)


class Provider:
    """Base adapter. Subclasses fill in the three provider-specific steps."""

    name = ""
    default_model = ""
    api_key_env = ""
    supports_tools = False
    pricing = Pricing()

    def connect(self, api_key: str, model: str, timeout: float) -> Any:
        raise NotImplementedError

    async def complete(
        self,
        sdk: Any,
        model: str,
        prompt: CacheablePrompt,
        temperature: float,
        max_tokens: int,
        tools: Sequence[Any] | None,
    ) -> LLMResponse:
        raise NotImplementedError

    def _usage(self, input_tokens: int, output_tokens: int, cached_tokens: int = 0) -> TokenUsage:
        return TokenUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cached_input_tokens=cached_tokens,
            estimated_cost_usd=self.pricing.estimate(input_tokens, cached_tokens, output_tokens),
            cache_hit=cached_tokens > 0,
        )


class AnthropicProvider(Provider):
    name = "anthropic"
    default_model = "claude-sonnet-4-20250514"
    api_key_env = "ANTHROPIC_API_KEY"
    supports_tools = True
    pricing = Pricing(input_per_1k=0.003, cached_per_1k=0.0003, output_per_1k=0.015)

    def connect(self, api_key, model, timeout):
        import anthropic

        return anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)

    async def complete(self, sdk, model, prompt, temperature, max_tokens, tools):
        request: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt.user_message}],
        }
        # both stable sections are marked; the provider caches the longest matching prefix
        system = [
            {"type": "text", "text": part, "cache_control": {"type": "ephemeral"}}
            for part in (prompt.system, prompt.context)
            if part
        ]
        if system:
            request["system"] = system
        if tools:
            request["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.input_schema}
                for t in tools
            ]

        response = await sdk.messages.create(**request)

        text = []
        calls = []
        for block in response.content:
            kind = getattr(block, "type", "text")
            if kind == "tool_use":
                calls.append(ToolCallRequest(name=block.name, arguments=dict(block.input or {}), id=block.id))
            elif kind == "text":
                text.append(block.text)

        usage = response.usage
        cached = getattr(usage, "cache_read_input_tokens", 0) or 0
        token_usage = self._usage(
            getattr(usage, "input_tokens", 0), getattr(usage, "output_tokens", 0), cached
        )
        return LLMResponse(
            content="".join(text),
            tool_calls=calls,
            usage=token_usage,
            model=model,
            provider=self.name,
            cached=token_usage.cache_hit,
        )


class OpenAIProvider(Provider):
    name = "openai"
    default_model = "gpt-4o-mini"
    api_key_env = "OPENAI_API_KEY"
    supports_tools = True
    pricing = Pricing(input_per_1k=0.005, cached_per_1k=0.0025, output_per_1k=0.015)

    def connect(self, api_key, model, timeout):
        import openai

        return openai.AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def complete(self, sdk, model, prompt, temperature, max_tokens, tools):
        request: dict[str, Any] = {
            "model": model,
            "messages": prompt.to_messages(),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if tools:
            request["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.name,
                        "description": t.description,
                        "parameters": t.input_schema,
                    },
                }
                for t in tools
            ]
            request["tool_choice"] = "auto"

        response = await sdk.chat.completions.create(**request)
        message = response.choices[0].message

        calls = [
            ToolCallRequest(name=tc.function.name, arguments=_decode_arguments(tc), id=tc.id)
            for tc in message.tool_calls or []
        ]

        usage = response.usage
        details = getattr(usage, "prompt_tokens_details", None) if usage else None
        cached = (getattr(details, "cached_tokens", 0) or 0) if details else 0
        token_usage = self._usage(
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
            cached,
        )
        return LLMResponse(
            content=message.content or "",
            tool_calls=calls,
            usage=token_usage,
            model=model,
            provider=self.name,
            cached=token_usage.cache_hit,
        )


class GoogleProvider(Provider):
    name = "google"
    default_model = "gemini-2.0-flash"
    api_key_env = "GOOGLE_API_KEY"

    def connect(self, api_key, model, timeout):
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        return genai.GenerativeModel(model)

    async def complete(self, sdk, model, prompt, temperature, max_tokens, tools):
        # the SDK call is blocking
        response = await asyncio.to_thread(
            sdk.generate_content,
            prompt.to_flat_prompt(),
            generation_config={"temperature": temperature, "max_output_tokens": max_tokens},
        )
        meta = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=response.text,
            usage=self._usage(
                getattr(meta, "prompt_token_count", 0) if meta else 0,
                getattr(meta, "candidates_token_count", 0) if meta else 0,
            ),
            model=model,
            provider=self.name,
        )


def _decode_arguments(tool_call: Any) -> dict[str, Any]:
    raw = tool_call.function.arguments or "{}"
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"[LLM] Undecodable arguments for tool call {tool_call.function.name}")
        return {}
    return arguments if isinstance(arguments, dict) else {}


PROVIDERS: dict[str, Provider] = {
    p.name: p for p in (AnthropicProvider(), OpenAIProvider(), GoogleProvider())
}


def get_provider(name: str) -> Provider:
    """Look up an adapter by provider name.

    Raises:
        ValueError: unknown provider.
    """
    try:
        return PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported provider: {name} (expected one of: {', '.join(PROVIDERS)})"
        ) from None
