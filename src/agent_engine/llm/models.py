"""Value types exchanged with chat models, and the ChatModel capability."""

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable


@dataclass
class CacheablePrompt:
    """
    A prompt split by how often each part changes.

      - system: instructions and tool list, fixed for a whole run
      - context: transcript or peer opinions, grows within a run
      - user_message: the request itself

    Providers that cache prefixes get the first two as a stable prefix.
    """

    system: str = ""
    context: str = ""
    user_message: str = ""

    def sections(self) -> list[str]:
        return [s for s in (self.system, self.context, self.user_message) if s]

    def to_flat_prompt(self) -> str:
        """One string, for providers without role-tagged messages."""
        return "\n\n".join(self.sections())

    def to_messages(self) -> list[dict[str, str]]:
        """Chat messages: system and context as system turns, then the user turn."""
        messages = [
            {"role": "system", "content": part}
            for part in (self.system, self.context)
            if part
        ]
        messages.append({"role": "user", "content": self.user_message})
        return messages

    @property
    def total_length(self) -> int:
        return sum(len(s) for s in (self.system, self.context, self.user_message))


@dataclass
class ToolCallRequest:
    """A structured tool invocation requested by the model."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    id: str = ""


@dataclass
class TokenUsage:
    """Token counts and estimated cost for one call (or a running total)."""

    input_tokens: int = 0
    output_tokens: int = 0
    cached_input_tokens: int = 0
    total_tokens: int = 0
    estimated_cost_usd: float = 0.0
    cache_hit: bool = False

    def __post_init__(self):
        self.total_tokens = self.input_tokens + self.output_tokens

    def add(self, other: "TokenUsage") -> None:
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cached_input_tokens += other.cached_input_tokens
        self.total_tokens += other.total_tokens
        self.estimated_cost_usd += other.estimated_cost_usd


@dataclass
class LLMResponse:
    """What a model call returns: text, tool calls, or both."""

    content: str
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""
    provider: str = ""
    latency_ms: float = 0.0
    cached: bool = False


@runtime_checkable
class ChatModel(Protocol):
    """The model capability consumed by the ReAct engine and role agents."""

    async def call(
        self,
        prompt: "str | CacheablePrompt",
        role: str = "assistant",
        temperature: float = 0.5,
        max_tokens: int = 4096,
        tools: Sequence[Any] | None = None,
    ) -> LLMResponse: ...
