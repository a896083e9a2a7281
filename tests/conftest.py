"""Shared fixtures: sessions, orchestrators and a backoff clock that never sleeps."""
import logging

import pytest

from app.agents import orchestrator as orchestrator_module
from app.agents.base import ScriptedAgent
from app.agents.config import OrchestratorSettings
from app.agents.orchestrator import AgentMoveOrchestrator
from app.logging_utils import COMPONENT_LOGGERS, QUIET_LOGGERS
from app.models.enums import PlayerSymbol
from app.models.game_state import SessionConfig
from app.state.session import GameSession


@pytest.fixture
def make_session():
    """Build a session, started and in manual mode unless told otherwise"""

    def build(game_id="session-test", *, start=True, **config):
        config.setdefault("auto_play", False)
        session = GameSession(game_id, SessionConfig(**config))
        if start:
            session.start()
        return session

    return build


@pytest.fixture
def make_orchestrator(make_session):
    """Orchestrator over a fresh playing session; stopped after the test"""
    built = []

    def build(x_agent, o_agent=None, settings=None, **config):
        session = make_session(config.pop("game_id", "orchestrator-test"), **config)
        agents = {
            PlayerSymbol.X: x_agent,
            PlayerSymbol.O: o_agent or ScriptedAgent([], name="idle"),
        }
        orchestrator = AgentMoveOrchestrator(session, agents, settings or OrchestratorSettings())
        built.append(orchestrator)
        return orchestrator

    yield build
    for orchestrator in built:
        orchestrator.stop()


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping"""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(orchestrator_module.asyncio, "sleep", fake_sleep)
    return delays


@pytest.fixture
def restore_logging():
    """Undo configure_root_logger so later tests keep pytest's handlers"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    names = list(QUIET_LOGGERS) + list(COMPONENT_LOGGERS.values())
    levels = {name: logging.getLogger(name).level for name in names}

    yield

    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, saved in levels.items():
        logging.getLogger(name).setLevel(saved)
