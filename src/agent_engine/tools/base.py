"""
Tool protocol and data types.

A tool is a named capability with a description, a JSON Schema for its
arguments and an async execute operation. Anything with those four members
satisfies the Tool protocol; FunctionTool adapts a plain function (sync or
async) and validates arguments with a pydantic model.

Usage:
    class AddArgs(BaseModel):
        a: float
        b: float

    add = FunctionTool("add", "Add two numbers", lambda a, b: a + b, args_model=AddArgs)
    await add.execute({"a": 2, "b": 3})  # 5.0
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from ..errors import ToolExecutionError

logger = logging.getLogger(__name__)

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


@runtime_checkable
class Tool(Protocol):
    """Interface every tool must satisfy to be registered."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def input_schema(self) -> dict[str, Any]: ...

    async def execute(self, args: Any) -> Any: ...


@dataclass(frozen=True)
class ToolDefinition:
    """Schema definition for a tool, suitable for passing to providers."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=lambda: dict(EMPTY_SCHEMA))

    @classmethod
    def from_tool(cls, tool: Tool) -> "ToolDefinition":
        return cls(
            name=tool.name,
            description=tool.description,
            input_schema=tool.input_schema,
        )


class FunctionTool:
    """Tool backed by a plain or async function."""

    def __init__(
        self,
        name: str,
        description: str,
        handler: Callable[..., Any],
        args_model: type[BaseModel] | None = None,
        input_schema: dict[str, Any] | None = None,
    ):
        self._name = name
        self._description = description
        self._handler = handler
        self._args_model = args_model
        if input_schema is not None:
            self._input_schema = input_schema
        elif args_model is not None:
            self._input_schema = args_model.model_json_schema()
        else:
            self._input_schema = dict(EMPTY_SCHEMA)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._input_schema

    @property
    def required_fields(self) -> list[str]:
        return list(self._input_schema.get("required", []))

    def _coerce_arguments(self, args: Any) -> dict[str, Any]:
        """Turn parsed model input into keyword arguments."""
        if args is None or (isinstance(args, str) and not args.strip()):
            return {}
        if isinstance(args, dict):
            return args
        # A bare value is only unambiguous when there is a single required field
        required = self.required_fields
        if len(required) == 1:
            return {required[0]: args}
        raise ToolExecutionError(
            self._name,
            f"expected an object of arguments, got {type(args).__name__}",
        )

    def _validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        if self._args_model is not None:
            try:
                return self._args_model.model_validate(arguments).model_dump()
            except ValidationError as e:
                details = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'args'}: {err['msg']}"
                    for err in e.errors()
                )
                raise ToolExecutionError(self._name, f"invalid arguments ({details})") from e

        missing = [f for f in self.required_fields if f not in arguments]
        if missing:
            raise ToolExecutionError(
                self._name, f"missing required argument(s): {', '.join(missing)}"
            )
        return arguments

    async def execute(self, args: Any) -> Any:
        """Validate arguments and run the handler.

        Raises:
            ToolExecutionError: bad arguments or the handler raised.
        """
        kwargs = self._validate(self._coerce_arguments(args))
        try:
            result = self._handler(**kwargs)
            if inspect.isawaitable(result):
                result = await result
        except ToolExecutionError:
            raise
        except Exception as e:
            logger.debug(f"[Tool] {self._name} handler raised {type(e).__name__}")
            raise ToolExecutionError(self._name, str(e)) from e
        return result

    def definition(self) -> ToolDefinition:
        return ToolDefinition.from_tool(self)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self._name!r})"


def function_tool(
    name: str,
    description: str,
    args_model: type[BaseModel] | None = None,
) -> Callable[[Callable[..., Any]], FunctionTool]:
    """Decorator form of FunctionTool.

    Example:
        @function_tool("add", "Add two numbers", args_model=AddArgs)
        def add(a: float, b: float) -> float:
            return a + b
    """

    def wrap(handler: Callable[..., Any]) -> FunctionTool:
        return FunctionTool(name, description, handler, args_model=args_model)

    return wrap
