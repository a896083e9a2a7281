"""Move agents and the orchestrator that consults them."""

from .base import MoveAgent, RandomAgent, ScriptedAgent
from .config import AgentConfig, OrchestratorSettings
from .factory import build_agents

__all__ = [
    "AgentConfig",
    "MoveAgent",
    "OrchestratorSettings",
    "RandomAgent",
    "ScriptedAgent",
    "build_agents",
]
