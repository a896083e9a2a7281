"""Move model and board alias"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PlayerSymbol


BOARD_SIZE = 3

# A cell holds a symbol or None. The board is always a projection of the
# active moves and never a source of truth.
CellValue = Optional[PlayerSymbol]
BoardState = list[list[CellValue]]


class Move(BaseModel):
    """A placed symbol. Moves are never edited, only removed by decay."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique move identifier")
    row: int = Field(..., ge=0, lt=BOARD_SIZE, description="Row index (0-2)")
    col: int = Field(..., ge=0, lt=BOARD_SIZE, description="Column index (0-2)")
    coordinate: str = Field(..., pattern=r"^[A-C][1-3]$", description="Coordinate label, e.g. B2")
    symbol: PlayerSymbol
    turn_number: int = Field(..., ge=1, description="Turn on which the move was placed")
    timestamp: datetime = Field(description="When the move was created (UTC)")
