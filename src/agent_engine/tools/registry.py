"""
ToolRegistry -- tool name -> Tool, with prompt text and provider schemas.

Built once per agent and treated as read-only afterwards. Listing order is
registration order; lookup is by name.

Duplicate names: by default the last registration wins and a warning is
logged. A strict registry raises DuplicateToolName instead.

Usage:
    registry = ToolRegistry()
    registry.register(add_tool)
    result = await registry.execute("add", {"a": 2, "b": 3})
    prompt_text = registry.describe()
    provider_tools = registry.definitions()
"""

import logging
from typing import Any, Awaitable, Callable, Iterable

from ..errors import DuplicateToolName, ToolExecutionError, ToolNotFound
from .base import Tool, ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry mapping tool names to tools."""

    def __init__(self, tools: Iterable[Tool] | None = None, strict: bool = False):
        self._tools: dict[str, Tool] = {}
        self._strict = strict
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """Register a tool under tool.name.

        Raises:
            ValueError: object does not look like a tool.
            DuplicateToolName: strict registry and the name is taken.
        """
        if not isinstance(tool, Tool):
            raise ValueError(
                "Tool must have 'name', 'description', 'input_schema' and 'execute'"
            )
        name = tool.name
        if name in self._tools:
            if self._strict:
                raise DuplicateToolName(name)
            logger.warning(f"[ToolRegistry] Replacing existing tool '{name}'")
        self._tools[name] = tool
        logger.debug(f"[ToolRegistry] Registered tool: {name}")

    def resolve(self, name: str) -> Tool:
        """Look up a tool by name.

        Raises:
            ToolNotFound: name is not registered.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFound(name) from None

    def list_all(self) -> list[Tool]:
        """All tools in registration order."""
        return list(self._tools.values())

    def describe(self, names: Iterable[str] | None = None) -> str:
        """One 'name: description' line per tool, for prompt text."""
        tools = self.list_all()
        if names is not None:
            wanted = set(names)
            tools = [t for t in tools if t.name in wanted]
        return "\n".join(f"{t.name}: {t.description}" for t in tools)

    def definitions(self, names: Iterable[str] | None = None) -> list[ToolDefinition]:
        """Provider-facing tool definitions.

        Args:
            names: Optional subset of tool names. If None, returns all.
        """
        tools = self.list_all()
        if names is not None:
            wanted = set(names)
            tools = [t for t in tools if t.name in wanted]
        return [ToolDefinition.from_tool(t) for t in tools]

    async def execute(self, name: str, args: Any) -> Any:
        """Resolve a tool and run it. No retry.

        Raises:
            ToolNotFound: name is not registered.
            ToolExecutionError: the tool failed; foreign exceptions are wrapped.
        """
        tool = self.resolve(name)
        try:
            return await tool.execute(args)
        except ToolExecutionError:
            raise
        except Exception as e:
            raise ToolExecutionError(name, str(e) or type(e).__name__) from e

    @property
    def names(self) -> list[str]:
        return list(self._tools.keys())

    @property
    def strict(self) -> bool:
        return self._strict

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def default_registry(
    strict: bool = False,
    search_backend: Callable[[str], Awaitable[str]] | None = None,
) -> ToolRegistry:
    """Build a registry with the built-in search, calculator and clock tools."""
    from .builtin import builtin_tools

    return ToolRegistry(builtin_tools(search_backend), strict=strict)
