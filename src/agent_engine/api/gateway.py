"""
API Gateway -- FastAPI application factory.

    uvicorn agent_engine.api.gateway:create_app --factory --port 8000
    uvicorn agent_engine.api.gateway:app --reload      # development

The app holds one AgentService on app.state; it is built from environment
settings unless one is passed in. CORS origins come from
AGENT_ENGINE_CORS_ORIGINS (localhost only by default) and the agent_engine
logger level from AGENT_ENGINE_LOG_LEVEL. Route logic lives in routes/.
"""

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..service import AgentService
from .routes import agent, health

logger = logging.getLogger(__name__)


def create_app(service: AgentService | None = None) -> FastAPI:
    """
    Build the FastAPI app around an agent service.

    Args:
        service: Pre-configured service (built from env settings if None).
    """
    service = service or AgentService()

    application = FastAPI(
        title="Agent Engine API",
        description="ReAct single-agent loop and multi-agent collaboration",
        version=__version__,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=service.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    logging.getLogger("agent_engine").setLevel(service.settings.log_level)

    application.state.agent_service = service
    application.state.start_time = time.time()
    application.state.metrics = {"tasks_completed": 0, "tasks_failed": 0}

    application.include_router(health.router, tags=["Health"])
    application.include_router(agent.router, prefix="/api/v1", tags=["Agent"])

    logger.info(
        f"[Gateway] Ready: {len(service.registry)} tools, {len(service.roles)} roles"
    )
    return application


app = create_app()
