"""
Multi-Agent Coordinator -- two-round collaboration with coordinator synthesis.

Round 1: INDEPENDENT  -- every role analyzes the task alone
Round 2: ADJUSTMENT   -- every role revises, seeing all peers' round-1 opinions
                         (never its own)
Synthesis             -- the coordinator role integrates every result

Rounds are strictly sequential: round 2 needs every round-1 opinion. Within a
round the role calls are independent and run concurrently by default; each
round is a barrier (asyncio.gather joins every call before the next round).

A failed model call fails the whole collaboration. The round still waits for
its other calls, logs each failure and re-raises the first one.

Usage:
    coordinator = MultiAgentCoordinator(llm=create_client())
    result = await coordinator.collaborate("Plan a product launch")
    print(result.final_answer)
    print(result.individual_results["analyst_final"])
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable

from ..errors import RoleNotFound
from ..llm import ChatModel
from ..tools.registry import ToolRegistry
from .roles import DEFAULT_ROLES, NO_OPINIONS, AgentRole, CollaborationPhase, RoleAgent

logger = logging.getLogger(__name__)

FINAL_SUFFIX = "_final"


# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass
class CollaborationResult:
    """Complete collaboration output."""

    individual_results: dict[str, str] = field(default_factory=dict)
    # round 1 under "<role>", round 2 under "<role>_final"
    final_answer: str = ""
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "individual_results": dict(self.individual_results),
            "final_answer": self.final_answer,
        }


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass
class CollaborationConfig:
    """Configuration for a collaboration."""

    coordinator_role: str = "coordinator"
    concurrent_rounds: bool = True  # gather role calls within a round
    temperature: float = 0.5
    max_tokens: int = 2048


# =============================================================================
# COORDINATOR
# =============================================================================


class MultiAgentCoordinator:
    """
    Owns one RoleAgent per configured role for its whole lifetime.

    Every role can share one model handle (llm=...) or get its own from
    llm_factory(role).
    """

    def __init__(
        self,
        llm: ChatModel | None = None,
        roles: Iterable[AgentRole] = DEFAULT_ROLES,
        config: CollaborationConfig | None = None,
        llm_factory: Callable[[AgentRole], ChatModel] | None = None,
        registry: ToolRegistry | None = None,
    ):
        if llm is None and llm_factory is None:
            raise ValueError("Provide llm or llm_factory")

        self._config = config or CollaborationConfig()
        self._role_agents: dict[str, RoleAgent] = {}

        for role in roles:
            if role.name in self._role_agents:
                raise ValueError(f"Duplicate role name: {role.name}")
            if registry is not None:
                unknown = [t for t in role.tools if t not in registry]
                if unknown:
                    logger.warning(
                        f"[Coordinator] Role '{role.name}' lists unregistered tools: "
                        f"{', '.join(unknown)}"
                    )
            role_llm = llm_factory(role) if llm_factory else llm
            self._role_agents[role.name] = RoleAgent(
                role,
                role_llm,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            )

        # round-2 keys share the results map with round-1 keys
        for name in self._role_agents:
            if f"{name}{FINAL_SUFFIX}" in self._role_agents:
                raise ValueError(
                    f"Role name '{name}{FINAL_SUFFIX}' collides with the final opinion of '{name}'"
                )

        logger.info(
            f"[Coordinator] Initialized with {len(self._role_agents)} roles "
            f"(concurrent_rounds={self._config.concurrent_rounds})"
        )

    @property
    def role_names(self) -> list[str]:
        return list(self._role_agents.keys())

    @property
    def config(self) -> CollaborationConfig:
        return self._config

    def get_agent(self, name: str) -> RoleAgent:
        """Look up a role agent.

        Raises:
            RoleNotFound: no role with this name.
        """
        try:
            return self._role_agents[name]
        except KeyError:
            raise RoleNotFound(name) from None

    async def collaborate(self, task: str) -> CollaborationResult:
        """Run both rounds and the coordinator synthesis for one task.

        Raises:
            RoleNotFound: the coordinator role is not configured.
            LLMCallError: any role's model call failed.
        """
        coordinator = self.get_agent(self._config.coordinator_role)
        start = datetime.now()
        results: dict[str, str] = {}
        names = self.role_names

        # Round 1: independent analysis
        logger.info(f"[Coordinator] Round 1: independent analysis ({len(names)} roles)")
        round_one = await self._run_round(
            CollaborationPhase.INITIAL_ANALYSIS,
            [
                (name, self._invoke(name, task, CollaborationPhase.INITIAL_ANALYSIS, NO_OPINIONS))
                for name in names
            ],
        )
        opinions: list[tuple[str, str]] = []
        for name, text in zip(names, round_one):
            results[name] = text
            opinions.append((name, f"{name}: {text}"))

        # Round 2: peer-informed revision
        logger.info("[Coordinator] Round 2: collaborative adjustment")
        round_two = await self._run_round(
            CollaborationPhase.COLLABORATIVE_ADJUSTMENT,
            [
                (
                    name,
                    self._invoke(
                        name,
                        task,
                        CollaborationPhase.COLLABORATIVE_ADJUSTMENT,
                        self._peer_opinions(name, opinions),
                    ),
                )
                for name in names
            ],
        )
        for name, text in zip(names, round_two):
            results[f"{name}{FINAL_SUFFIX}"] = text

        # Synthesis
        logger.info(f"[Coordinator] Synthesis by '{coordinator.name}'")
        all_results = "\n".join(f"{key}: {value}" for key, value in results.items())
        final_answer = await coordinator.respond(
            task, CollaborationPhase.FINAL_INTEGRATION, all_results
        )

        duration = (datetime.now() - start).total_seconds()
        logger.info(f"[Coordinator] Complete: {len(results)} results, {duration:.1f}s")
        return CollaborationResult(
            individual_results=results,
            final_answer=final_answer,
            duration_seconds=duration,
        )

    @staticmethod
    def _peer_opinions(name: str, opinions: list[tuple[str, str]]) -> str:
        """Every round-1 opinion line not authored by this role."""
        return "\n".join(line for author, line in opinions if author != name)

    def _invoke(
        self, name: str, task: str, phase: CollaborationPhase, other_opinions: str
    ) -> Callable[[], Awaitable[str]]:
        agent = self._role_agents[name]
        return lambda: agent.respond(task, phase, other_opinions)

    async def _run_round(
        self,
        phase: CollaborationPhase,
        invocations: list[tuple[str, Callable[[], Awaitable[str]]]],
    ) -> list[str]:
        """Run one round and join every call; results keep role order."""
        if self._config.concurrent_rounds:
            outcomes = await asyncio.gather(
                *[invoke() for _, invoke in invocations],
                return_exceptions=True,
            )
        else:
            outcomes = []
            for _, invoke in invocations:
                outcomes.append(await invoke())

        failures = [
            (name, outcome)
            for (name, _), outcome in zip(invocations, outcomes)
            if isinstance(outcome, BaseException)
        ]
        for name, error in failures:
            logger.error(f"[Coordinator] {name} failed during {phase.value}: {error}")
        if failures:
            raise failures[0][1]
        return list(outcomes)
