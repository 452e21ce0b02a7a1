"""Test fixtures -- scripted chat models, tool registries, sample roles."""

from collections import defaultdict
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from agent_engine.llm import LLMResponse
from agent_engine.orchestration import AgentRole
from agent_engine.tools import FunctionTool, ToolRegistry


class ScriptedModel:
    """Chat model that replays canned replies; the last reply repeats.

    A reply may be a string, an LLMResponse, or an exception to raise.
    """

    def __init__(self, replies, supports_tool_calls=False):
        self._replies = list(replies)
        self.supports_tool_calls = supports_tool_calls
        self.prompts = []
        self.calls = []

    async def call(self, prompt, role="assistant", temperature=0.5, max_tokens=4096, tools=None):
        self.prompts.append(prompt)
        self.calls.append({"role": role, "temperature": temperature, "tools": tools})
        reply = self._replies[min(len(self.prompts), len(self._replies)) - 1]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, LLMResponse):
            return reply
        return LLMResponse(content=reply)

    @property
    def call_count(self):
        return len(self.prompts)


class RoleEchoModel:
    """Answers '<role>#<n>' where n counts that role's calls."""

    def __init__(self):
        self.counts = defaultdict(int)
        self.prompts = defaultdict(list)

    async def call(self, prompt, role="assistant", temperature=0.5, max_tokens=4096, tools=None):
        self.counts[role] += 1
        self.prompts[role].append(prompt)
        return LLMResponse(content=f"{role}#{self.counts[role]}")


class AddArgs(BaseModel):
    a: float
    b: float


@pytest.fixture
def add_calls():
    return []


@pytest.fixture
def add_tool(add_calls):
    def add(a, b):
        add_calls.append((a, b))
        result = a + b
        return int(result) if float(result).is_integer() else result

    return FunctionTool("add", "Add two numbers", add, args_model=AddArgs)


@pytest.fixture
def registry(add_tool):
    return ToolRegistry([add_tool])


@pytest.fixture
def mock_llm():
    """AsyncMock chat model returning a fixed final answer."""
    client = AsyncMock()
    client.call.return_value = LLMResponse(content="最终答案：done")
    client.supports_tool_calls = False
    return client


@pytest.fixture
def three_roles():
    return [
        AgentRole(name="researcher", description="gathers facts", expertise=("search",), tools=("search",)),
        AgentRole(name="analyst", description="crunches numbers", expertise=("math",), tools=("calculator",)),
        AgentRole(name="coordinator", description="integrates results", expertise=("planning",)),
    ]


@pytest.fixture
def scripted():
    """Factory: scripted(replies, supports_tool_calls=False) -> ScriptedModel."""
    return ScriptedModel


@pytest.fixture
def echo_model():
    return RoleEchoModel()
