"""
Service facade -- the two entry points exposed to transports.

    service = AgentService()                       # settings from env
    run = await service.run_single_agent("What is 2+3?")
    result = await service.run_multi_agent("Plan a product launch")

AgentService builds the LLM client lazily, so constructing it (e.g. at API
startup) never needs an API key. The engine and coordinator are created once
and reused; both keep all per-call state local to the call.
"""

import logging
from typing import Any, Iterable

from .config import EngineSettings
from .llm import ChatModel, create_client
from .orchestration import DEFAULT_ROLES, AgentRole, CollaborationResult, MultiAgentCoordinator
from .react import AgentRun, ReActEngine
from .tools import HttpSearchBackend, ToolRegistry, default_registry

logger = logging.getLogger(__name__)

AGENT_TYPES = ("react", "multi")


class AgentService:
    """Holds the shared, read-only collaborators for both agent modes."""

    def __init__(
        self,
        llm: ChatModel | None = None,
        registry: ToolRegistry | None = None,
        settings: EngineSettings | None = None,
        roles: Iterable[AgentRole] = DEFAULT_ROLES,
    ):
        self._settings = settings or EngineSettings.from_env()
        self._llm = llm
        self._registry = registry if registry is not None else self._build_registry()
        self._roles = tuple(roles)
        self._engine: ReActEngine | None = None
        self._coordinator: MultiAgentCoordinator | None = None

    def _build_registry(self) -> ToolRegistry:
        backend = None
        if self._settings.search_url:
            backend = HttpSearchBackend(
                self._settings.search_url,
                timeout=self._settings.search_timeout,
                api_key=self._settings.search_api_key,
            )
            logger.info(f"[AgentService] Search backed by {self._settings.search_url}")
        return default_registry(search_backend=backend)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def roles(self) -> tuple[AgentRole, ...]:
        return self._roles

    @property
    def llm(self) -> ChatModel:
        if self._llm is None:
            self._llm = create_client(
                provider=self._settings.provider, model=self._settings.model
            )
        return self._llm

    @property
    def engine(self) -> ReActEngine:
        if self._engine is None:
            self._engine = ReActEngine(
                llm=self.llm,
                registry=self._registry,
                config=self._settings.react_config(),
            )
        return self._engine

    @property
    def coordinator(self) -> MultiAgentCoordinator:
        if self._coordinator is None:
            self._coordinator = MultiAgentCoordinator(
                llm=self.llm,
                roles=self._roles,
                config=self._settings.collaboration_config(),
                registry=self._registry,
            )
        return self._coordinator

    async def run_single_agent(self, question: str) -> AgentRun:
        return await self.engine.run(question)

    async def run_multi_agent(self, task: str) -> CollaborationResult:
        return await self.coordinator.collaborate(task)

    async def run(self, message: str, agent_type: str = "react") -> dict[str, Any]:
        """Mode selector used by the transports; returns a JSON-ready dict.

        Raises:
            ValueError: unsupported agent_type.
        """
        if agent_type == "react":
            run = await self.run_single_agent(message)
            return run.to_dict()
        if agent_type == "multi":
            result = await self.run_multi_agent(message)
            return result.to_dict()
        raise ValueError(
            f"Unsupported agent type '{agent_type}' (expected one of: {', '.join(AGENT_TYPES)})"
        )


async def run_single_agent(question: str, service: AgentService | None = None) -> AgentRun:
    """Run the ReAct loop once with a default service unless one is given."""
    return await (service or AgentService()).run_single_agent(question)


async def run_multi_agent(task: str, service: AgentService | None = None) -> CollaborationResult:
    """Run one collaboration with a default service unless one is given."""
    return await (service or AgentService()).run_multi_agent(task)
