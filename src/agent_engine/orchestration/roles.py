"""
Roles and role agents for the multi-agent collaboration.

An AgentRole is static configuration (persona, expertise, tool affinity).
A RoleAgent binds one role to a model handle and the role's prompt template;
the coordinator creates one per role and calls it once per phase.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..llm import CacheablePrompt, ChatModel

logger = logging.getLogger(__name__)

NO_OPINIONS = "none"


class CollaborationPhase(str, Enum):
    """The state string each role sees in its prompt."""

    INITIAL_ANALYSIS = "initial-analysis"
    COLLABORATIVE_ADJUSTMENT = "collaborative-adjustment"
    FINAL_INTEGRATION = "final-integration"


@dataclass(frozen=True)
class AgentRole:
    """A fixed persona assigned to one sub-agent."""

    name: str
    description: str
    expertise: tuple[str, ...] = field(default_factory=tuple)
    tools: tuple[str, ...] = field(default_factory=tuple)


DEFAULT_ROLES: tuple[AgentRole, ...] = (
    AgentRole(
        name="researcher",
        description="Responsible for information gathering and fact checking",
        expertise=("search", "verification", "summarization"),
        tools=("search", "get_time"),
    ),
    AgentRole(
        name="analyst",
        description="Responsible for data analysis and insights",
        expertise=("calculation", "statistics", "visualization"),
        tools=("calculator",),
    ),
    AgentRole(
        name="coordinator",
        description="Responsible for task allocation and integrating results",
        expertise=("planning", "coordination", "summarization"),
        tools=("get_time",),
    ),
)


class RoleAgent:
    """One role's model handle plus its prompt template."""

    def __init__(
        self,
        role: AgentRole,
        llm: ChatModel,
        temperature: float = 0.5,
        max_tokens: int = 2048,
    ):
        self._role = role
        self._llm = llm
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def name(self) -> str:
        return self._role.name

    @property
    def role(self) -> AgentRole:
        return self._role

    def _system_prompt(self) -> str:
        """Stable persona (cached across the three calls)."""
        return (
            f"You are {self._role.name}, {self._role.description}.\n\n"
            f"Your expertise: {', '.join(self._role.expertise)}\n"
            f"Available tools: {', '.join(self._role.tools)}"
        )

    def build_prompt(
        self,
        task: str,
        phase: CollaborationPhase,
        other_opinions: str = NO_OPINIONS,
    ) -> CacheablePrompt:
        return CacheablePrompt(
            system=self._system_prompt(),
            context=(
                f"Current state: {phase.value}\n"
                f"Other agents' opinions:\n{other_opinions}"
            ),
            user_message=(
                f"Task: {task}\n\n"
                "Based on your expertise, give your recommendation or carry out the task:"
            ),
        )

    async def respond(
        self,
        task: str,
        phase: CollaborationPhase,
        other_opinions: str = NO_OPINIONS,
    ) -> str:
        """Invoke this role's model for one phase and return its text."""
        prompt = self.build_prompt(task, phase, other_opinions)
        response = await self._llm.call(
            prompt=prompt,
            role=self._role.name,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        logger.debug(
            f"[RoleAgent] {self._role.name} answered {phase.value} "
            f"({len(response.content)} chars)"
        )
        return response.content
