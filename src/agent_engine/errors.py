"""
Engine error taxonomy.

Every failure the engine reports derives from AgentEngineError so transport
layers can map them in one place:

  ToolNotFound          -- registry lookup failed
  ToolExecutionError    -- the tool itself failed (bad arguments, internal fault)
  DuplicateToolName     -- strict registry rejected a second registration
  MalformedModelOutput  -- model output had neither a final answer nor an action
  StepBudgetExhausted   -- loop ran out of steps without a final answer
  RoleNotFound          -- collaboration needs a role that is not configured
  LLMCallError          -- model provider failed after the client's retries
"""

from typing import Any


class AgentEngineError(Exception):
    """Base class for all engine errors."""

    pass


class ToolNotFound(AgentEngineError, KeyError):
    """Raised when a tool name is not present in the registry."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is not registered")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class ToolExecutionError(AgentEngineError):
    """Raised when a tool's execute operation fails."""

    def __init__(self, tool_name: str, reason: str):
        self.tool_name = tool_name
        self.reason = reason
        super().__init__(f"Tool '{tool_name}' failed: {reason}")


class DuplicateToolName(AgentEngineError):
    """Raised by a strict registry when a tool name is registered twice."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is already registered")


class MalformedModelOutput(AgentEngineError):
    """The model produced neither a final answer nor a well-formed action."""

    def __init__(self, steps: tuple[Any, ...], raw_output: str):
        self.steps = steps
        self.raw_output = raw_output
        super().__init__(
            f"Model output could not be parsed after {len(steps)} step(s)"
        )


class StepBudgetExhausted(AgentEngineError):
    """The loop used every step without reaching a final answer."""

    def __init__(self, steps: tuple[Any, ...], max_steps: int):
        self.steps = steps
        self.max_steps = max_steps
        super().__init__(
            f"No final answer after {max_steps} step(s)"
        )


class RoleNotFound(AgentEngineError, KeyError):
    """Raised when a collaboration role is missing from the configuration."""

    def __init__(self, role_name: str):
        self.role_name = role_name
        super().__init__(f"Role '{role_name}' is not configured")

    def __str__(self) -> str:
        return self.args[0]


class LLMCallError(AgentEngineError):
    """Raised when the LLM client gives up on a call."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"LLM call to {provider} failed: {reason}")
