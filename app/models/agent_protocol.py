"""Request/response contract between the orchestrator and move agents"""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import PlayerSymbol
from app.models.game_state import GameState, utcnow
from app.models.move import BoardState


class RequestMove(BaseModel):
    """Active move as seen by an agent"""
    coordinate: str
    symbol: PlayerSymbol
    turn_number: int
    age: int


class RequestGameState(BaseModel):
    """Serializable snapshot sent with each move request"""
    board: BoardState
    active_moves: list[RequestMove]
    turn_number: int
    decay_horizon: int
    max_turns: int
    move_log: list[str] = Field(default_factory=list)

    @classmethod
    def from_game_state(cls, game_state: GameState) -> "RequestGameState":
        return cls(
            board=[list(row) for row in game_state.board],
            active_moves=[
                RequestMove(
                    coordinate=move.coordinate,
                    symbol=move.symbol,
                    turn_number=move.turn_number,
                    age=game_state.turn_number - move.turn_number,
                )
                for move in game_state.active_moves
            ],
            turn_number=game_state.turn_number,
            decay_horizon=game_state.config.decay_horizon,
            max_turns=game_state.config.max_turns,
            move_log=list(game_state.move_log),
        )


class MoveRequest(BaseModel):
    """Outbound request to the acting agent"""
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    game_id: str
    acting_symbol: PlayerSymbol
    game_state: RequestGameState
    # DecayIntelligence.model_dump(mode="json"), when attached
    decay_intelligence: Optional[dict] = None
    issued_at: datetime = Field(default_factory=utcnow)


class MoveResponse(BaseModel):
    """Inbound reply; ``coordinate`` is the agent's raw answer"""
    request_id: str
    coordinate: Optional[str] = None
    raw_text: Optional[str] = None
