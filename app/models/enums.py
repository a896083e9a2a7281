"""Game enumerations"""
from enum import Enum


class PlayerSymbol(str, Enum):
    """Symbols the two agents place on the board"""
    X = "X"
    O = "O"


class GameStatus(str, Enum):
    """Session lifecycle states"""
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    PAUSED = "paused"
    WON = "won"  # winner carried separately on GameState
    DRAW = "draw"
    ERROR_HALTED = "error_halted"


class ErrorType(str, Enum):
    """Error taxonomy surfaced through the last-error slot"""
    VALIDATION_ERROR = "validation_error"
    PARSING_ERROR = "parsing_error"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT_ERROR = "timeout_error"  # turn limit reached, informational
    AGENT_ERROR = "agent_error"  # agent raised outside the transport layer


class DecayPressure(str, Enum):
    """How many live moves are close to expiring"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
