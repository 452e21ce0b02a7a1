"""
ReAct Engine -- the single-agent reason -> act -> observe loop.

Each iteration:
  1. Build a prompt: tool list + format instructions (system), transcript so
     far (context), the question (user message)
  2. Await the model
  3. Read a structured tool call if the model returned one, else parse the
     marker grammar
  4. Final answer  -> terminal step, status COMPLETED
     Action+input  -> dispatch through the registry, record the step, extend
                      the transcript, continue
     Anything else -> stop, status CONFUSED (no step recorded)
  Loop exit without an answer -> status EXHAUSTED

Tool failures are recorded as the step's observation and the loop goes on
within the same budget. Set record_tool_errors=False to let them propagate
out of run() instead.

Usage:
    engine = ReActEngine(llm=create_client(), registry=default_registry())
    run = await engine.run("What is 2+3?")
    if run.completed:
        print(run.answer)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from ..errors import ToolExecutionError, ToolNotFound
from ..llm import CacheablePrompt, ChatModel, LLMResponse
from ..tools.registry import ToolRegistry
from .models import AgentRun, RunStatus, Step
from .parser import MarkerGrammar, ParsedResponse, parse_response

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 5
MAX_OBSERVATION_CHARS = 4000
TOOL_CALLING_MODES = ("auto", "text", "native")


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class ReActConfig:
    """Configuration for the single-agent loop."""

    max_steps: int = DEFAULT_MAX_STEPS
    temperature: float = 0.0
    max_tokens: int = 1024
    grammar: MarkerGrammar = field(default_factory=MarkerGrammar)
    tool_calling: str = "auto"  # auto | text | native
    record_tool_errors: bool = True
    max_observation_chars: int = MAX_OBSERVATION_CHARS


# =============================================================================
# ENGINE
# =============================================================================


class ReActEngine:
    """Drives one model through the ReAct loop over a tool registry."""

    def __init__(
        self,
        llm: ChatModel,
        registry: ToolRegistry,
        config: ReActConfig | None = None,
    ):
        self._llm = llm
        self._registry = registry
        self._config = config or ReActConfig()

        if self._config.max_steps < 1:
            raise ValueError(f"max_steps must be at least 1 (got {self._config.max_steps})")
        if self._config.tool_calling not in TOOL_CALLING_MODES:
            raise ValueError(
                f"tool_calling must be one of: {', '.join(TOOL_CALLING_MODES)}"
            )

        client_supports = getattr(llm, "supports_tool_calls", False) is True
        if self._config.tool_calling == "native" and not client_supports:
            raise ValueError("tool_calling='native' needs a client with structured tool calls")
        self._structured = self._config.tool_calling != "text" and client_supports

        logger.info(
            f"[ReAct] Initialized with {len(registry)} tools "
            f"(max_steps={self._config.max_steps}, "
            f"mode={'structured' if self._structured else 'text'})"
        )

    @property
    def config(self) -> ReActConfig:
        return self._config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def _system_prompt(self) -> str:
        """Stable instructions: tool list and the marker format."""
        g = self._config.grammar
        return (
            "You are an intelligent assistant that can call tools to complete tasks.\n\n"
            f"Available tools:\n{self._registry.describe()}\n\n"
            "Work step by step:\n"
            "1. Analyze the question and decide which tool to use\n"
            "2. Call the tool to get information\n"
            "3. Continue reasoning from the result, or give the final answer\n\n"
            "Format (one field per line):\n"
            f"{g.thought}<your reasoning>\n"
            f"{g.action}<tool name>\n"
            f"{g.action_input}<tool arguments as JSON>\n"
            f"{g.observation}<tool result>\n"
            "... (thought/action/observation can repeat)\n"
            f"{g.thought}<final reasoning>\n"
            f"{g.answer}<answer for the user>\n\n"
            "Reply with either one action and its input, or the final answer. "
            "Observations are filled in by the system."
        )

    def build_prompt(self, question: str, accumulated_thought: str = "") -> CacheablePrompt:
        g = self._config.grammar
        return CacheablePrompt(
            system=self._system_prompt(),
            context=f"Progress so far:{accumulated_thought}" if accumulated_thought else "",
            user_message=f"Question: {question}\n{g.thought}",
        )

    def _read_turn(self, response: LLMResponse) -> ParsedResponse:
        """Structured tool call first, marker grammar otherwise."""
        if self._structured and response.tool_calls:
            call = response.tool_calls[0]
            if len(response.tool_calls) > 1:
                logger.debug(
                    f"[ReAct] Model requested {len(response.tool_calls)} tool calls; using the first"
                )
            text = parse_response(response.content, self._config.grammar)
            thought = text.thought if text.thought is not None else response.content.strip()
            return ParsedResponse(
                thought=thought,
                action=call.name,
                action_input=call.arguments,
                has_action_input=True,
            )
        return parse_response(response.content, self._config.grammar)

    def _format_observation(self, result: Any) -> str:
        if isinstance(result, str):
            text = result
        else:
            text = json.dumps(result, ensure_ascii=False, default=str)
        limit = self._config.max_observation_chars
        if len(text) > limit:
            text = text[:limit] + "...[truncated]"
        return text

    async def _dispatch(self, action: str, action_input: Any) -> tuple[str, str | None]:
        """Run a tool; returns (observation, error)."""
        try:
            result = await self._registry.execute(action, action_input)
        except (ToolNotFound, ToolExecutionError) as e:
            if not self._config.record_tool_errors:
                raise
            logger.warning(f"[ReAct] Tool dispatch failed: {e}")
            return f"tool failed: {e}", str(e)
        return self._format_observation(result), None

    async def run(
        self,
        question: str,
        on_step: Callable[[Step], None] | None = None,
    ) -> AgentRun:
        """Run the loop for one question.

        Args:
            question: The task text.
            on_step: Optional callback fired as each step is recorded.

        Returns:
            AgentRun tagged COMPLETED, EXHAUSTED or CONFUSED.

        Raises:
            ToolNotFound, ToolExecutionError: only with record_tool_errors=False.
            LLMCallError: the model call failed.
        """
        g = self._config.grammar
        max_steps = self._config.max_steps
        steps: list[Step] = []
        accumulated_thought = ""
        step_index = 0
        tools = self._registry.definitions() if self._structured else None

        logger.info(f"[ReAct] Run started ({len(question)} chars, max_steps={max_steps})")

        while step_index < max_steps:
            prompt = self.build_prompt(question, accumulated_thought)
            response = await self._llm.call(
                prompt=prompt,
                role="react",
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                tools=tools,
            )
            parsed = self._read_turn(response)

            if parsed.has_answer:
                step = Step(
                    question=question,
                    thought=parsed.thought or "",
                    action="",
                    action_input={},
                    observation="",
                    answer=parsed.answer,
                    step_index=step_index,
                )
                steps.append(step)
                if on_step:
                    on_step(step)
                logger.info(f"[ReAct] Completed at step {step_index}")
                return AgentRun(
                    status=RunStatus.COMPLETED,
                    steps=tuple(steps),
                    max_steps=max_steps,
                    last_raw_output=response.content,
                )

            if not parsed.has_action:
                logger.warning(
                    f"[ReAct] Unparseable model output at step {step_index} "
                    f"({len(response.content)} chars); stopping"
                )
                return AgentRun(
                    status=RunStatus.CONFUSED,
                    steps=tuple(steps),
                    max_steps=max_steps,
                    last_raw_output=response.content,
                )

            thought = parsed.thought or ""
            observation, error = await self._dispatch(parsed.action, parsed.action_input)
            step = Step(
                question=question,
                thought=thought,
                action=parsed.action,
                action_input=parsed.action_input,
                observation=observation,
                answer="",
                step_index=step_index,
                error=error,
            )
            steps.append(step)
            if on_step:
                on_step(step)
            logger.debug(f"[ReAct] Step {step_index}: {parsed.action}")

            accumulated_thought += (
                f"\n{g.thought}{thought}\n{g.action}{parsed.action}\n{g.observation}{observation}\n"
            )
            step_index += 1

        logger.info(f"[ReAct] Step budget of {max_steps} exhausted without a final answer")
        return AgentRun(
            status=RunStatus.EXHAUSTED,
            steps=tuple(steps),
            max_steps=max_steps,
            last_raw_output=response.content,
        )
