"""Tool protocol, built-in tools and the tool registry."""

from .base import FunctionTool, Tool, ToolDefinition, function_tool
from .builtin import (
    builtin_tools,
    evaluate_expression,
    make_calculator_tool,
    make_search_tool,
    make_time_tool,
)
from .http_search import HttpSearchBackend
from .registry import ToolRegistry, default_registry

__all__ = [
    "FunctionTool",
    "HttpSearchBackend",
    "Tool",
    "ToolDefinition",
    "ToolRegistry",
    "builtin_tools",
    "default_registry",
    "evaluate_expression",
    "function_tool",
    "make_calculator_tool",
    "make_search_tool",
    "make_time_tool",
]
