"""agent-engine -- ReAct tool loop and multi-agent collaboration over any chat model."""

__version__ = "0.1.0"

from .errors import (
    AgentEngineError,
    DuplicateToolName,
    LLMCallError,
    MalformedModelOutput,
    RoleNotFound,
    StepBudgetExhausted,
    ToolExecutionError,
    ToolNotFound,
)
from .orchestration import AgentRole, CollaborationResult, MultiAgentCoordinator
from .react import AgentRun, MarkerGrammar, ReActEngine, RunStatus, Step, parse_response
from .service import AgentService, run_multi_agent, run_single_agent
from .tools import FunctionTool, Tool, ToolRegistry, default_registry
