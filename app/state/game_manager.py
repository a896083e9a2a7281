"""Game manager - registry of sessions and their agent orchestrators"""
import logging
import uuid
from typing import Callable, Mapping, Optional

from app.agents.base import MoveAgent
from app.agents.config import AgentConfig, OrchestratorSettings
from app.agents.factory import build_agents
from app.agents.orchestrator import AgentMoveOrchestrator
from app.game.decay_intelligence import DecayIntelligence, analyze
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameError, GameSnapshot, GameState, SessionConfig
from app.state.session import GameSession
from app.state.turn_engine import MoveOutcome


logger = logging.getLogger("app.game.manager")

AgentFactory = Callable[[], Mapping[PlayerSymbol, MoveAgent]]


def _agents_from_env() -> Mapping[PlayerSymbol, MoveAgent]:
    return build_agents(AgentConfig.from_env())


class GameNotFoundError(KeyError):
    """Raised for an unknown game id"""

    def __init__(self, game_id: str):
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Game {self.game_id} not found"


class GameManager:
    """Creates sessions and routes control operations to them.

    Agents are built lazily, the first time a session needs one, so games can
    be created, inspected and played manually without any agent credentials.
    """

    def __init__(
        self,
        agent_factory: Optional[AgentFactory] = None,
        orchestrator_settings: Optional[OrchestratorSettings] = None,
    ):
        self.sessions: dict[str, GameSession] = {}
        self.orchestrators: dict[str, AgentMoveOrchestrator] = {}
        self.agent_factory = agent_factory or _agents_from_env
        self.orchestrator_settings = orchestrator_settings

    # ----- registry -----

    def create_game(
        self,
        game_id: Optional[str] = None,
        config: Optional[SessionConfig] = None,
        *,
        player_names: Optional[dict[PlayerSymbol, str]] = None,
    ) -> GameState:
        """Create a new session in ``not_started``"""
        if game_id is None:
            game_id = str(uuid.uuid4())
        if game_id in self.sessions:
            raise ValueError(f"Game {game_id} already exists")

        session = GameSession(game_id, config, player_names=player_names)
        self.sessions[game_id] = session
        logger.info(
            "Created game %s (decay horizon %d, max turns %d, auto-play %s)",
            game_id,
            session.config.decay_horizon,
            session.config.max_turns,
            session.config.auto_play,
        )
        return session.state

    def get_session(self, game_id: str) -> GameSession:
        session = self.sessions.get(game_id)
        if session is None:
            raise GameNotFoundError(game_id)
        return session

    def get_game(self, game_id: str) -> Optional[GameState]:
        """Get game state by ID"""
        session = self.sessions.get(game_id)
        return session.state if session else None

    def snapshot(self, game_id: str) -> GameSnapshot:
        return self.get_session(game_id).snapshot()

    def orchestrator_for(self, game_id: str) -> AgentMoveOrchestrator:
        orchestrator = self.orchestrators.get(game_id)
        if orchestrator is None:
            session = self.get_session(game_id)
            agents = self.agent_factory()
            orchestrator = AgentMoveOrchestrator(session, agents, self.orchestrator_settings)
            session.rename_players(
                {symbol: getattr(agent, "name", symbol.value) for symbol, agent in agents.items()}
            )
            self.orchestrators[game_id] = orchestrator
        return orchestrator

    # ----- control surface -----

    def start_game(self, game_id: str) -> GameState:
        """not_started | paused -> playing; queues the first agent turn"""
        session = self.get_session(game_id)
        if session.config.auto_play:
            self.orchestrator_for(game_id)
        state = session.start()
        self._schedule(game_id)
        return state

    def pause_game(self, game_id: str) -> GameState:
        return self.get_session(game_id).pause()

    def reset_game(self, game_id: str) -> GameState:
        state = self.get_session(game_id).reset()
        logger.info("Game %s reset", game_id)
        return state

    def retry_game(self, game_id: str) -> GameState:
        """error_halted -> playing, then resume auto-play"""
        state = self.get_session(game_id).retry()
        self._schedule(game_id)
        return state

    def make_move(self, game_id: str, coordinate: Optional[str]) -> MoveOutcome:
        """Manual move through the same validation pipeline as agent replies"""
        session = self.get_session(game_id)
        outcome = session.submit_coordinate(coordinate)
        self._schedule(game_id)
        return outcome

    async def request_agent_move(self, game_id: str) -> Optional[MoveOutcome]:
        """Ask the acting agent for one move right now"""
        session = self.get_session(game_id)
        if session.state.status != GameStatus.PLAYING:
            raise ValueError(f"Cannot request a move while the game is {session.state.status.value}")

        orchestrator = self.orchestrator_for(game_id)
        session.scheduler.cancel()
        outcome = await orchestrator.request_move()
        if outcome is not None:
            orchestrator.schedule_next()
        return outcome

    # ----- inspection -----

    def history(self, game_id: str, limit: int = 50) -> list[str]:
        log = self.get_session(game_id).state.move_log
        return log[-limit:] if limit > 0 else []

    def decay_intelligence(self, game_id: str) -> DecayIntelligence:
        return analyze(self.get_session(game_id).state)

    def last_error(self, game_id: str) -> Optional[GameError]:
        return self.get_session(game_id).last_error

    def clear_error(self, game_id: str) -> Optional[GameError]:
        return self.get_session(game_id).clear_error()

    # ----- teardown -----

    def remove_game(self, game_id: str) -> None:
        session = self.sessions.pop(game_id, None)
        self.orchestrators.pop(game_id, None)
        if session is not None:
            session.close()

    def shutdown(self) -> None:
        for game_id in list(self.sessions):
            self.remove_game(game_id)

    def _schedule(self, game_id: str) -> bool:
        session = self.get_session(game_id)
        if not session.config.auto_play or session.state.status != GameStatus.PLAYING:
            return False
        return self.orchestrator_for(game_id).schedule_next()
