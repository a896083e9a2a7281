"""Build the pair of move agents for a configured backend."""
from __future__ import annotations

import logging
from typing import Optional

from app.agents.base import MoveAgent, RandomAgent
from app.agents.config import AgentConfig
from app.agents.langchain_agent import LangChainAgent
from app.agents.openrouter_agent import OpenRouterAgent
from app.models.enums import PlayerSymbol


logger = logging.getLogger("app.agents.factory")


def build_agents(config: Optional[AgentConfig] = None) -> dict[PlayerSymbol, MoveAgent]:
    """One agent per symbol, chosen by ``config.backend``."""
    config = config or AgentConfig.from_env()

    agents: dict[PlayerSymbol, MoveAgent] = {}
    for symbol in PlayerSymbol:
        name = config.names.get(symbol, symbol.value)
        if config.backend == "random":
            agents[symbol] = RandomAgent(name=name)
        elif config.backend == "anthropic":
            agents[symbol] = LangChainAgent(symbol, config)
        else:
            agents[symbol] = OpenRouterAgent(symbol, config)

    logger.info(
        "Configured %s agents: X=%s, O=%s",
        config.backend,
        agents[PlayerSymbol.X].name,
        agents[PlayerSymbol.O].name,
    )
    return agents
