"""
Pydantic request/response models -- the HTTP contract for the agent endpoint.
"""

from typing import Any

from pydantic import BaseModel, Field

MAX_MESSAGE_LENGTH = 100_000


# =============================================================================
# REQUESTS
# =============================================================================


class AgentRequest(BaseModel):
    """Run one task in single-agent ("react") or multi-agent ("multi") mode."""

    message: str = Field(
        ..., min_length=1, max_length=MAX_MESSAGE_LENGTH, description="Task or question"
    )
    agent_type: str = Field("react", description="Agent mode: 'react' or 'multi'")


# =============================================================================
# RESPONSES
# =============================================================================


class StepResponse(BaseModel):
    """One ReAct step."""

    question: str
    thought: str = ""
    action: str = ""
    action_input: Any = None
    observation: str = ""
    answer: str = ""
    step: int = 0
    error: str | None = None


class ReActResultResponse(BaseModel):
    """Single-agent outcome."""

    status: str
    answer: str | None = None
    steps: list[StepResponse] = Field(default_factory=list)


class CollaborationResponse(BaseModel):
    """Multi-agent outcome."""

    individual_results: dict[str, str] = Field(default_factory=dict)
    final_answer: str = ""


class AgentResponse(BaseModel):
    """Envelope returned by POST /api/v1/agent."""

    success: bool = True
    agent_type: str
    data: ReActResultResponse | CollaborationResponse


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = "healthy"
    version: str = ""
    tools_registered: int = 0
    roles_configured: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0
    uptime_seconds: float = 0.0
