"""Game session - owns the canonical state of one game"""
import logging
from typing import Optional, Union

from app.errors import ArenaError, GameTimeoutError
from app.game.board import empty_board
from app.game.decay import move_age, remaining_life
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameError, GameSnapshot, GameState, MoveView, SessionConfig
from app.state.scheduler import AutoPlayScheduler
from app.state.turn_engine import MoveOutcome, TurnEngine, log_event
from app.validation.move_validator import MoveValidator


logger = logging.getLogger("app.game.session")


class GameSession:
    """
    Single writer for one game's state.

    Every change to the board or the active moves goes through
    :meth:`apply_move`. Status transitions (start, pause, reset, retry, halt)
    live here too, along with the last-error slot and the id of the agent
    request currently awaited.
    """

    def __init__(
        self,
        game_id: str,
        config: Optional[SessionConfig] = None,
        *,
        player_names: Optional[dict[PlayerSymbol, str]] = None,
        engine: Optional[TurnEngine] = None,
    ):
        self.game_id = game_id
        self.config = config or SessionConfig()
        self.player_names = dict(player_names or {})
        self.engine = engine or TurnEngine()
        self.scheduler = AutoPlayScheduler(name=game_id)

        self._state = self._fresh_state()
        self.last_error: Optional[GameError] = None
        self.expected_request_id: Optional[str] = None

    def _fresh_state(self) -> GameState:
        state = GameState(game_id=self.game_id, config=self.config, board=empty_board())
        if self.player_names:
            state = state.model_copy(update={"player_names": {**state.player_names, **self.player_names}})
        return state

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def request_in_flight(self) -> bool:
        return self.expected_request_id is not None

    def rename_players(self, names: dict[PlayerSymbol, str]) -> None:
        """Set display names; used once the agents are known"""
        self.player_names.update(names)
        self._state = self._state.model_copy(
            update={"player_names": {**self._state.player_names, **names}}
        )

    # ----- status transitions -----

    def start(self) -> GameState:
        """not_started | paused -> playing"""
        if self._state.status not in (GameStatus.NOT_STARTED, GameStatus.PAUSED):
            raise ValueError(f"Cannot start a game that is {self._state.status.value}")
        self._set_status(GameStatus.PLAYING, "Game started")
        return self._state

    def pause(self) -> GameState:
        """playing -> paused; drops any scheduled agent turn"""
        if self._state.status != GameStatus.PLAYING:
            raise ValueError(f"Cannot pause a game that is {self._state.status.value}")
        self.scheduler.cancel()
        self._set_status(GameStatus.PAUSED, "Game paused")
        return self._state

    def reset(self) -> GameState:
        """Back to not_started with an empty board. Late agent replies are ignored."""
        self.scheduler.cancel()
        self.expected_request_id = None
        self.last_error = None
        self._state = self._fresh_state()
        log_event(self._state, "Game reset")
        return self._state

    def retry(self) -> GameState:
        """error_halted -> playing after the operator has looked at the error"""
        if self._state.status != GameStatus.ERROR_HALTED:
            raise ValueError(f"Nothing to retry: game is {self._state.status.value}")
        self.clear_error()
        self._set_status(GameStatus.PLAYING, "Resumed after error")
        return self._state

    def halt(self, error: ArenaError) -> GameState:
        """playing -> error_halted; the error becomes the fatal last error"""
        self.scheduler.cancel()
        self.record_error(error, fatal=True)
        if self._state.status == GameStatus.PLAYING:
            self._set_status(GameStatus.ERROR_HALTED, f"Halted: {error.message}")
        return self._state

    def _set_status(self, status: GameStatus, event: str) -> None:
        self._state = self._state.model_copy(update={"status": status})
        log_event(self._state, event)

    # ----- moves -----

    def apply_move(self, row: int, col: int) -> MoveOutcome:
        """The only path that changes the board."""
        outcome = self.engine.apply_move(self._state, row, col)
        self._state = outcome.game_state

        if outcome.turn_limit_reached:
            self.record_error(
                GameTimeoutError(
                    f"Game ended: maximum turns ({self.config.max_turns}) reached",
                    {"turn_number": self._state.turn_number},
                )
            )
        return outcome

    def submit_coordinate(self, raw: Optional[str]) -> MoveOutcome:
        """Manual move entry, validated exactly like an agent reply."""
        if self._state.status != GameStatus.PLAYING:
            raise ValueError(f"Cannot move while the game is {self._state.status.value}")
        if self.request_in_flight:
            raise ValueError("An agent move request is in flight")

        try:
            row, col, _ = MoveValidator.validate(raw, self._state.board)
        except ArenaError as exc:
            self.record_error(exc)
            raise
        return self.apply_move(row, col)

    # ----- agent requests -----

    def begin_request(self, request_id: str) -> None:
        if self.request_in_flight:
            raise RuntimeError(
                f"Request {self.expected_request_id} is still in flight for game {self.game_id}"
            )
        self.expected_request_id = request_id

    def rotate_request(self, old_id: str, new_id: str) -> bool:
        """Swap the awaited id for a retry. False if ``old_id`` was superseded."""
        if self.expected_request_id != old_id:
            return False
        self.expected_request_id = new_id
        return True

    def end_request(self, request_id: str) -> None:
        if self.expected_request_id == request_id:
            self.expected_request_id = None

    def is_expected(self, request_id: str) -> bool:
        return self.expected_request_id == request_id

    # ----- errors -----

    def record_error(self, error: Union[ArenaError, GameError], *, fatal: Optional[bool] = None) -> bool:
        """Store ``error`` in the last-error slot.

        An unhandled fatal error is never overwritten; returns False when the
        new error was dropped for that reason.
        """
        entry = error if isinstance(error, GameError) else error.to_game_error(fatal=fatal)
        current = self.last_error
        if current is not None and current.fatal and not current.handled:
            logger.warning(
                "Game %s: keeping unhandled %s, dropping %s: %s",
                self.game_id,
                current.error_type.value,
                entry.error_type.value,
                entry.message,
            )
            return False

        self.last_error = entry
        log = logger.error if entry.fatal else logger.warning
        log("Game %s %s: %s", self.game_id, entry.error_type.value, entry.message)
        return True

    def clear_error(self) -> Optional[GameError]:
        cleared, self.last_error = self.last_error, None
        if cleared is not None:
            cleared = cleared.model_copy(update={"handled": True})
        return cleared

    # ----- inspection -----

    def snapshot(self) -> GameSnapshot:
        state = self._state
        horizon = state.config.decay_horizon
        return GameSnapshot(
            game_id=state.game_id,
            config=state.config,
            board=[list(row) for row in state.board],
            active_moves=[
                MoveView(
                    id=move.id,
                    coordinate=move.coordinate,
                    symbol=move.symbol,
                    turn_number=move.turn_number,
                    age=move_age(move, state.turn_number),
                    remaining_life=round(remaining_life(move, state.turn_number, horizon), 3),
                )
                for move in state.active_moves
            ],
            current_symbol=state.current_symbol,
            turn_number=state.turn_number,
            status=state.status,
            winner=state.winner,
            last_move=state.last_move,
            move_log=list(state.move_log),
            is_thinking=self.request_in_flight,
            last_error=self.last_error,
        )

    def close(self) -> None:
        """Session teardown"""
        self.scheduler.cancel()
        self.expected_request_id = None
