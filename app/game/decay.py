"""
Move decay.

A move placed on turn T is live for turns T .. T + horizon - 1 and is purged
once ``current_turn - T >= horizon``. Purging is a pure filter over the
active moves, so running it twice for the same turn changes nothing.
"""
import logging
from typing import Iterable

from pydantic import BaseModel

from app.models.enums import PlayerSymbol
from app.models.move import Move


logger = logging.getLogger("app.game.decay")

DEFAULT_DECAY_HORIZON = 7


class DecayPrediction(BaseModel):
    """When a live move will disappear"""
    coordinate: str
    symbol: PlayerSymbol
    turns_until_decay: int
    decays_on_turn: int


class UpcomingFreePosition(BaseModel):
    """Cell that frees at the next decay phase"""
    coordinate: str
    frees_on_turn: int


def move_age(move: Move, current_turn: int) -> int:
    return current_turn - move.turn_number


def is_expired(move: Move, current_turn: int, horizon: int = DEFAULT_DECAY_HORIZON) -> bool:
    return move_age(move, current_turn) >= horizon


def remaining_life(move: Move, current_turn: int, horizon: int = DEFAULT_DECAY_HORIZON) -> float:
    """Fraction of life left, 1.0 when fresh and 0.0 once expired.

    Display-only gradient. Expiry itself is decided by :func:`is_expired`.
    """
    fraction = (horizon - move_age(move, current_turn)) / horizon
    return max(0.0, min(1.0, fraction))


def turns_until_decay(move: Move, current_turn: int, horizon: int = DEFAULT_DECAY_HORIZON) -> int:
    return max(0, horizon - move_age(move, current_turn))


def expired_moves(
    active_moves: Iterable[Move],
    current_turn: int,
    horizon: int = DEFAULT_DECAY_HORIZON,
) -> list[Move]:
    return [move for move in active_moves if is_expired(move, current_turn, horizon)]


def purge_expired(
    active_moves: Iterable[Move],
    current_turn: int,
    horizon: int = DEFAULT_DECAY_HORIZON,
) -> list[Move]:
    """Return the moves still alive on ``current_turn``, preserving order."""
    survivors: list[Move] = []
    for move in active_moves:
        if is_expired(move, current_turn, horizon):
            logger.debug(
                "Decayed %s(%s) placed turn %d at turn %d",
                move.coordinate,
                move.symbol.value,
                move.turn_number,
                current_turn,
            )
            continue
        survivors.append(move)
    return survivors


def decay_predictions(
    active_moves: Iterable[Move],
    current_turn: int,
    horizon: int = DEFAULT_DECAY_HORIZON,
) -> list[DecayPrediction]:
    predictions = [
        DecayPrediction(
            coordinate=move.coordinate,
            symbol=move.symbol,
            turns_until_decay=turns_until_decay(move, current_turn, horizon),
            decays_on_turn=move.turn_number + horizon,
        )
        for move in active_moves
    ]
    return [p for p in predictions if p.turns_until_decay > 0]


def upcoming_free_positions(
    active_moves: Iterable[Move],
    current_turn: int,
    horizon: int = DEFAULT_DECAY_HORIZON,
) -> list[UpcomingFreePosition]:
    """Moves that the next decay phase will remove"""
    return [
        UpcomingFreePosition(
            coordinate=move.coordinate,
            frees_on_turn=move.turn_number + horizon,
        )
        for move in active_moves
        if move_age(move, current_turn) >= horizon - 1
    ]
