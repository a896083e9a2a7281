"""Error taxonomy for move handling and agent orchestration."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from app.models.enums import ErrorType
from app.models.game_state import GameError


class ArenaError(Exception):
    """Base class for errors that land in a session's last-error slot."""

    error_type: ErrorType = ErrorType.VALIDATION_ERROR
    fatal: bool = False

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_game_error(self, *, fatal: Optional[bool] = None) -> GameError:
        return GameError(
            error_type=self.error_type,
            message=self.message,
            timestamp=self.timestamp,
            fatal=self.fatal if fatal is None else fatal,
            retry_count=self.details.get("attempts"),
            details=dict(self.details),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.error_type.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


class ValidationError(ArenaError):
    """Illegal move: out of range coordinate or occupied cell"""

    error_type = ErrorType.VALIDATION_ERROR


class ParsingError(ArenaError):
    """Agent replied but no coordinate could be read from the reply"""

    error_type = ErrorType.PARSING_ERROR


class TransportError(ArenaError):
    """Request failed or timed out before a reply arrived. Retried."""

    error_type = ErrorType.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        *,
        attempts: int = 1,
    ):
        details = dict(details or {})
        details.setdefault("attempts", attempts)
        super().__init__(message, details)
        self.attempts = attempts


class GameTimeoutError(ArenaError):
    """Turn ceiling reached. Ends the game as a draw, never halts it."""

    error_type = ErrorType.TIMEOUT_ERROR


class AgentError(ArenaError):
    """The agent failed for a reason other than transport. Halts the game."""

    error_type = ErrorType.AGENT_ERROR
    fatal = True
