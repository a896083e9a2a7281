"""Pydantic response models used by the HTTP routes and MCP tools."""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.enums import PlayerSymbol
from app.models.game_state import GameError, GameSnapshot
from app.models.move import Move


class MoveResult(BaseModel):
    """Response returned after a move was applied (or not)."""

    applied: bool = Field(..., description="Whether a move was placed on the board")
    move: Optional[Move] = Field(None, description="The move that was placed")
    winner: Optional[PlayerSymbol] = Field(None, description="Winner decided by this move")
    decayed: List[str] = Field(
        default_factory=list, description="Coordinates freed by decay after this move"
    )
    game: GameSnapshot = Field(..., description="Game state after the move")


class HistoryResponse(BaseModel):
    """Response containing a slice of the move log."""

    game_id: str = Field(..., description="Game identifier")
    total_events: int = Field(..., description="Total number of log entries recorded")
    events: List[str] = Field(default_factory=list, description="Most recent log entries")


class ErrorSlotResponse(BaseModel):
    """The session's last-error slot."""

    game_id: str = Field(..., description="Game identifier")
    error: Optional[GameError] = Field(None, description="Last recorded error, if any")


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Service status")
    games: int = Field(..., description="Number of sessions held in memory")
    agent_backend: str = Field(..., description="Configured agent backend")
    api_key_configured: bool = Field(..., description="Whether an agent API key is set")
