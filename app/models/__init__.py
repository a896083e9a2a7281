"""Game data models"""
from app.models.enums import (
    PlayerSymbol,
    GameStatus,
    ErrorType,
    DecayPressure,
)
from app.models.move import Move, BoardState, CellValue
from app.models.game_state import (
    SessionConfig,
    GameState,
    GameError,
    GameSnapshot,
    MoveView,
)
from app.models.agent_protocol import (
    MoveRequest,
    MoveResponse,
    RequestGameState,
    RequestMove,
)
from app.models.responses import (
    ErrorSlotResponse,
    HealthResponse,
    HistoryResponse,
    MoveResult,
)

__all__ = [
    "PlayerSymbol",
    "GameStatus",
    "ErrorType",
    "DecayPressure",
    "Move",
    "BoardState",
    "CellValue",
    "SessionConfig",
    "GameState",
    "GameError",
    "GameSnapshot",
    "MoveView",
    "MoveRequest",
    "MoveResponse",
    "RequestGameState",
    "RequestMove",
    "ErrorSlotResponse",
    "HealthResponse",
    "HistoryResponse",
    "MoveResult",
]
