"""
Multi-agent orchestration.

  roles.py        -- AgentRole configuration and RoleAgent (role + model + prompt)
  coordinator.py  -- MultiAgentCoordinator: independent round, adjustment
                     round, coordinator synthesis
"""
from .coordinator import CollaborationConfig, CollaborationResult, MultiAgentCoordinator
from .roles import DEFAULT_ROLES, AgentRole, CollaborationPhase, RoleAgent
