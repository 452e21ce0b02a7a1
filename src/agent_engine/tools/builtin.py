"""
Built-in tools: search, calculator, get_time.

search is a placeholder backend that echoes the query; pass a real search
function to make_search_tool() to wire up an actual provider.
calculator evaluates arithmetic through an AST whitelist, never eval().
"""

import ast
import logging
import operator
from datetime import datetime
from typing import Awaitable, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

from ..errors import ToolExecutionError
from .base import FunctionTool

logger = logging.getLogger(__name__)

MAX_EXPRESSION_LENGTH = 200
MAX_EXPONENT = 100

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


# =============================================================================
# ARGUMENT MODELS
# =============================================================================


class SearchArgs(BaseModel):
    query: str = Field(..., min_length=1, description="Search keywords")


class CalculatorArgs(BaseModel):
    expression: str = Field(..., min_length=1, description="Arithmetic expression, e.g. 2+3*4")


class TimeArgs(BaseModel):
    timezone: str | None = Field(None, description="IANA timezone name, e.g. Asia/Shanghai")


# =============================================================================
# CALCULATOR
# =============================================================================


def _eval_node(node: ast.AST) -> float | int:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise ValueError(f"exponent too large (max {MAX_EXPONENT})")
        result = _BINARY_OPS[type(node.op)](left, right)
        if isinstance(result, complex):
            raise ValueError("result is not a real number")
        return result
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"unsupported syntax: {type(node).__name__}")


def evaluate_expression(expression: str) -> float | int:
    """Evaluate an arithmetic expression (+ - * / // % ** and parentheses)."""
    expression = expression.strip()
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ValueError(f"expression longer than {MAX_EXPRESSION_LENGTH} characters")
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as e:
        raise ValueError(f"invalid expression: {expression!r}") from e
    return _eval_node(tree)


def _calculate(expression: str) -> str:
    try:
        result = evaluate_expression(expression)
    except ZeroDivisionError:
        raise ToolExecutionError("calculator", "division by zero")
    except (ValueError, OverflowError) as e:
        raise ToolExecutionError("calculator", str(e))
    if isinstance(result, float) and result.is_integer():
        result = int(result)
    return f"Result: {result}"


# =============================================================================
# CLOCK
# =============================================================================


def _current_time(timezone: str | None = None, now: Callable[..., datetime] = datetime.now) -> str:
    if timezone:
        try:
            tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ToolExecutionError("get_time", f"unknown timezone: {timezone}")
        current = now(tz)
    else:
        current = now().astimezone()
    return f"Current time: {current.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}"


# =============================================================================
# SEARCH
# =============================================================================


async def _placeholder_search(query: str) -> str:
    return f"Search results: information related to {query}..."


def make_search_tool(
    backend: Callable[[str], Awaitable[str]] | None = None,
) -> FunctionTool:
    """Build the search tool around a backend coroutine (query -> text)."""
    search_fn = backend or _placeholder_search

    async def search(query: str) -> str:
        logger.debug(f"[Tools] search ({len(query)} chars)")
        return await search_fn(query)

    return FunctionTool(
        "search",
        "Search the web for information; input is the search keywords",
        search,
        args_model=SearchArgs,
    )


def make_calculator_tool() -> FunctionTool:
    return FunctionTool(
        "calculator",
        "Evaluate an arithmetic expression (+, -, *, /, //, %, ** and parentheses)",
        _calculate,
        args_model=CalculatorArgs,
    )


def make_time_tool(now: Callable[..., datetime] = datetime.now) -> FunctionTool:
    def get_time(timezone: str | None = None) -> str:
        return _current_time(timezone, now=now)

    return FunctionTool(
        "get_time",
        "Get the current date and time, optionally for an IANA timezone",
        get_time,
        args_model=TimeArgs,
    )


def builtin_tools(
    search_backend: Callable[[str], Awaitable[str]] | None = None,
) -> list[FunctionTool]:
    """The default tool set, in prompt order."""
    return [make_search_tool(search_backend), make_calculator_tool(), make_time_tool()]


__all__ = [
    "builtin_tools",
    "evaluate_expression",
    "make_calculator_tool",
    "make_search_tool",
    "make_time_tool",
]
