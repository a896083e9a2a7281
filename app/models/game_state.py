"""Game state model"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ErrorType, GameStatus, PlayerSymbol
from app.models.move import BoardState, Move


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionConfig(BaseModel):
    """Per-session settings, fixed once the session is created"""
    model_config = ConfigDict(frozen=True)

    decay_horizon: int = Field(7, ge=1, description="Turns a move stays on the board")
    max_turns: int = Field(50, ge=1, description="Turn ceiling before a forced draw")
    turn_delay: float = Field(0.5, ge=0, description="Seconds between automatic agent turns")
    auto_play: bool = Field(True, description="Schedule agent turns automatically")
    restart_delay: Optional[float] = Field(
        None, ge=0, description="Seconds before a finished auto-play game restarts (None disables)"
    )
    halt_on_invalid_move: bool = Field(
        False, description="Escalate invalid agent responses to error_halted"
    )


class GameError(BaseModel):
    """Entry held in a session's last-error slot"""
    error_type: ErrorType
    message: str
    timestamp: datetime = Field(default_factory=utcnow)
    fatal: bool = False
    handled: bool = False
    retry_count: Optional[int] = None
    details: dict[str, Any] = Field(default_factory=dict)


def empty_grid() -> BoardState:
    return [[None, None, None] for _ in range(3)]


class GameState(BaseModel):
    """Canonical state of one decaying tic-tac-toe session"""
    game_id: str
    config: SessionConfig = Field(default_factory=SessionConfig)

    board: BoardState = Field(default_factory=empty_grid)
    active_moves: list[Move] = Field(default_factory=list)

    current_symbol: PlayerSymbol = PlayerSymbol.X
    turn_number: int = Field(0, ge=0)
    status: GameStatus = GameStatus.NOT_STARTED
    winner: Optional[PlayerSymbol] = None
    last_move: Optional[Move] = None

    move_log: list[str] = Field(default_factory=list)
    player_names: dict[PlayerSymbol, str] = Field(
        default_factory=lambda: {PlayerSymbol.X: "X", PlayerSymbol.O: "O"}
    )

    @property
    def is_game_active(self) -> bool:
        """True while moves may be applied"""
        return self.status == GameStatus.PLAYING

    @property
    def is_finished(self) -> bool:
        return self.status in (GameStatus.WON, GameStatus.DRAW)

    def player_name(self, symbol: PlayerSymbol) -> str:
        return self.player_names.get(symbol, symbol.value)


class MoveView(BaseModel):
    """Active move plus decay-derived fields for renderers"""
    id: str
    coordinate: str
    symbol: PlayerSymbol
    turn_number: int
    age: int
    remaining_life: float


class GameSnapshot(BaseModel):
    """Read-only view handed to the control surface"""
    game_id: str
    config: SessionConfig
    board: BoardState
    active_moves: list[MoveView]
    current_symbol: PlayerSymbol
    turn_number: int
    status: GameStatus
    winner: Optional[PlayerSymbol] = None
    last_move: Optional[Move] = None
    move_log: list[str]
    is_thinking: bool = False
    last_error: Optional[GameError] = None
