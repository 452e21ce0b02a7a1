"""GET /health -- liveness plus the service's tool/role counts and task counters."""

import time

from fastapi import APIRouter, Request

from ... import __version__
from ..models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def liveness(request: Request) -> HealthResponse:
    """200 whenever the process is up; never touches the model."""
    state = request.app.state
    service = state.agent_service
    return HealthResponse(
        status="healthy",
        version=__version__,
        tools_registered=len(service.registry),
        roles_configured=len(service.roles),
        tasks_completed=state.metrics["tasks_completed"],
        tasks_failed=state.metrics["tasks_failed"],
        uptime_seconds=round(time.time() - state.start_time, 1),
    )
