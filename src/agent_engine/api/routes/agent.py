"""
Agent API -- run a task through one of the two agent modes.

  POST /api/v1/agent  {"message": "...", "agent_type": "react" | "multi"}

Unsupported agent types are rejected with 400. Engine errors return 500; the
full traceback stays in the server log.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from ...errors import AgentEngineError
from ...service import AGENT_TYPES, AgentService
from ..models import AgentRequest, AgentResponse, CollaborationResponse, ReActResultResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/agent", response_model=AgentResponse)
async def run_agent(agent_request: AgentRequest, request: Request) -> AgentResponse:
    """Run the ReAct loop or the multi-agent collaboration for one message."""
    service: AgentService = request.app.state.agent_service
    metrics = request.app.state.metrics

    if agent_request.agent_type not in AGENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported agent type: {agent_request.agent_type}",
        )

    try:
        data = await service.run(agent_request.message, agent_request.agent_type)
    except AgentEngineError as e:
        metrics["tasks_failed"] += 1
        logger.error(f"[AgentAPI] {agent_request.agent_type} run failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        metrics["tasks_failed"] += 1
        logger.error(f"[AgentAPI] {agent_request.agent_type} run crashed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Internal error processing the request. Check server logs.",
        )

    metrics["tasks_completed"] += 1
    if agent_request.agent_type == "react":
        payload = ReActResultResponse(**data)
    else:
        payload = CollaborationResponse(**data)
    return AgentResponse(success=True, agent_type=agent_request.agent_type, data=payload)
