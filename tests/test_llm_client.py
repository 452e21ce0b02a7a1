"""LLM client -- provider response parsing, tool calls, retries. No network."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from agent_engine.errors import LLMCallError
from agent_engine.llm import CacheablePrompt, LLMClient, Pricing, create_client, get_provider
from agent_engine.tools import ToolDefinition


class RateLimitError(Exception):
    """Stand-in with the provider SDK's class name (retry is by name)."""


def openai_response(content="", tool_calls=None, prompt_tokens=10, completion_tokens=5):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    usage = SimpleNamespace(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        prompt_tokens_details=SimpleNamespace(cached_tokens=0),
    )
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def openai_tool_call(name, arguments, call_id="call_1"):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def openai_client(create):
    client = LLMClient(provider="openai", api_key="test-key")
    client._client = MagicMock()
    client._client.chat.completions.create = create
    return client


ADD_DEFINITION = ToolDefinition(
    name="add",
    description="Add two numbers",
    input_schema={"type": "object", "properties": {"a": {}, "b": {}}, "required": ["a", "b"]},
)


class TestCacheablePrompt:
    def test_flat_prompt_skips_empty_parts(self):
        prompt = CacheablePrompt(system="sys", user_message="hi")
        assert prompt.to_flat_prompt() == "sys\n\nhi"

    def test_messages(self):
        prompt = CacheablePrompt(system="sys", context="ctx", user_message="hi")
        assert prompt.to_messages() == [
            {"role": "system", "content": "sys"},
            {"role": "system", "content": "ctx"},
            {"role": "user", "content": "hi"},
        ]
        assert prompt.total_length == 8


class TestOpenAI:
    @pytest.mark.asyncio
    async def test_text_response(self):
        create = AsyncMock(return_value=openai_response(content="最终答案：5"))
        client = openai_client(create)

        response = await client.call(prompt="2+3?", role="react", temperature=0.0)

        assert response.content == "最终答案：5"
        assert response.tool_calls == []
        assert response.provider == "openai"
        assert response.usage.total_tokens == 15
        kwargs = create.await_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["messages"] == [{"role": "user", "content": "2+3?"}]
        assert "tools" not in kwargs

    @pytest.mark.asyncio
    async def test_tool_calls_parsed(self):
        create = AsyncMock(return_value=openai_response(
            tool_calls=[openai_tool_call("add", '{"a": 2, "b": 3}')]
        ))
        client = openai_client(create)

        response = await client.call(prompt="2+3?", tools=[ADD_DEFINITION])

        assert response.content == ""
        (call,) = response.tool_calls
        assert call.name == "add"
        assert call.arguments == {"a": 2, "b": 3}
        assert call.id == "call_1"
        offered = create.await_args.kwargs["tools"]
        assert offered[0]["function"]["name"] == "add"
        assert offered[0]["function"]["parameters"]["required"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_undecodable_tool_arguments_become_empty(self):
        create = AsyncMock(return_value=openai_response(
            tool_calls=[openai_tool_call("add", "{not json")]
        ))
        response = await openai_client(create).call(prompt="x", tools=[ADD_DEFINITION])
        assert response.tool_calls[0].arguments == {}

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, monkeypatch):
        monkeypatch.setattr("agent_engine.llm.client.RETRY_BASE_DELAY", 0)
        create = AsyncMock(side_effect=[RateLimitError("slow down"), openai_response(content="ok")])
        response = await openai_client(create).call(prompt="x")
        assert response.content == "ok"
        assert create.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_with_llm_call_error(self, monkeypatch):
        monkeypatch.setattr("agent_engine.llm.client.RETRY_BASE_DELAY", 0)
        create = AsyncMock(side_effect=RateLimitError("slow down"))
        client = openai_client(create)

        with pytest.raises(LLMCallError) as exc:
            await client.call(prompt="x")
        assert exc.value.provider == "openai"
        assert create.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_errors_are_not_retried(self):
        create = AsyncMock(side_effect=ValueError("bad request"))
        with pytest.raises(LLMCallError):
            await openai_client(create).call(prompt="x")
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_usage_accumulates(self):
        create = AsyncMock(return_value=openai_response(content="ok"))
        client = openai_client(create)
        await client.call(prompt="a")
        await client.call(prompt="b")
        assert client.total_usage.input_tokens == 20
        assert client.total_usage.output_tokens == 10

    def test_supports_tool_calls(self):
        assert LLMClient(provider="openai", api_key="k").supports_tool_calls


class TestAnthropic:
    @pytest.mark.asyncio
    async def test_text_and_tool_use_blocks(self):
        client = LLMClient(provider="anthropic", api_key="test-key")
        client._client = MagicMock()
        client._client.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Adding now."),
                SimpleNamespace(type="tool_use", id="tu_1", name="add", input={"a": 1, "b": 2}),
            ],
            usage=SimpleNamespace(input_tokens=40, output_tokens=12, cache_read_input_tokens=30),
        ))

        prompt = CacheablePrompt(system="tools...", context="progress", user_message="1+2?")
        response = await client.call(prompt=prompt, tools=[ADD_DEFINITION])

        assert response.content == "Adding now."
        assert response.tool_calls[0].name == "add"
        assert response.tool_calls[0].arguments == {"a": 1, "b": 2}
        assert response.cached
        kwargs = client._client.messages.create.await_args.kwargs
        assert [b["text"] for b in kwargs["system"]] == ["tools...", "progress"]
        assert kwargs["messages"] == [{"role": "user", "content": "1+2?"}]
        assert kwargs["tools"][0]["input_schema"] == ADD_DEFINITION.input_schema


class TestGoogle:
    @pytest.mark.asyncio
    async def test_tools_are_not_sent(self):
        client = LLMClient(provider="google", api_key="test-key")
        client._client = MagicMock()
        client._client.generate_content.return_value = SimpleNamespace(
            text="最终答案：hi",
            usage_metadata=SimpleNamespace(prompt_token_count=3, candidates_token_count=2),
        )

        response = await client.call(prompt="hi", tools=[ADD_DEFINITION])

        assert response.content == "最终答案：hi"
        assert response.tool_calls == []
        assert not client.supports_tool_calls
        args, kwargs = client._client.generate_content.call_args
        assert args == ("hi",)
        assert "tools" not in kwargs


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_uninitialized_client_raises(self):
        client = LLMClient(provider="openai", api_key="test-key")
        client._client = None
        with pytest.raises(LLMCallError, match="not initialized"):
            await client.call(prompt="x")

    @pytest.mark.asyncio
    async def test_prompt_is_sanitized(self):
        create = AsyncMock(return_value=openai_response(content="ok"))
        client = openai_client(create)
        await client.call(prompt="a\x00b")
        assert create.await_args.kwargs["messages"][-1]["content"] == "ab"

    def test_unsupported_provider(self):
        with pytest.raises(ValueError):
            LLMClient(provider="acme", api_key="k")

    def test_create_client_detects_provider(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        client = create_client()
        assert client.provider == "openai"
        assert client.model == "gpt-4o-mini"

    def test_explicit_model(self):
        client = create_client(provider="openai", model="gpt-4o", api_key="k")
        assert client.model == "gpt-4o"


class TestProviders:
    def test_pricing_bills_cached_input_separately(self):
        pricing = Pricing(input_per_1k=1.0, cached_per_1k=0.1, output_per_1k=2.0)
        assert pricing.estimate(input_tokens=1000, cached_tokens=500, output_tokens=500) == 1.55

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            get_provider("acme")

    def test_tool_support_by_provider(self):
        assert get_provider("anthropic").supports_tools
        assert get_provider("OpenAI").supports_tools
        assert not get_provider("google").supports_tools
