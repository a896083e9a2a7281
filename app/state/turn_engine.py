"""Turn engine - the single transaction that applies a move"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from app.errors import ValidationError
from app.game.board import (
    check_winner,
    create_move,
    describe_move,
    is_board_full,
    is_valid_position,
    next_symbol,
    reconstruct_board,
    row_col_to_coordinate,
)
from app.game.decay import expired_moves, purge_expired
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameState
from app.models.move import Move
from app.validation.move_validator import MoveValidator


event_logger = logging.getLogger("app.game.events")


@dataclass
class MoveOutcome:
    """Result of one applied move"""

    game_state: GameState
    move: Move
    winner: Optional[PlayerSymbol] = None
    decayed: list[Move] = field(default_factory=list)
    draw: bool = False
    turn_limit_reached: bool = False


def log_event(game_state: GameState, event: str) -> None:
    event_logger.info(
        "[%s] status=%s turn=%s to_move=%s | %s",
        game_state.game_id,
        game_state.status.value,
        game_state.turn_number,
        game_state.current_symbol.value,
        event,
    )


class TurnEngine:
    """Applies validated moves and returns the next GameState.

    The input state is never modified. A rejected move raises before anything
    is built, so the caller's state stays exactly as it was.
    """

    def apply_move(self, game_state: GameState, row: int, col: int) -> MoveOutcome:
        if game_state.status != GameStatus.PLAYING:
            raise ValueError(
                f"Moves can only be applied while playing (status: {game_state.status.value})"
            )

        if not is_valid_position(row, col):
            raise ValidationError(
                f"Position ({row}, {col}) is off the board",
                {"row": row, "col": col},
            )
        MoveValidator.validate_unoccupied(game_state.board, row, col)

        config = game_state.config
        symbol = game_state.current_symbol
        coordinate = row_col_to_coordinate(row, col)

        # 1. place and project
        move = create_move(row, col, symbol, game_state.turn_number + 1)
        moves = [*game_state.active_moves, move]
        board = reconstruct_board(moves)
        move_log = [
            *game_state.move_log,
            describe_move(game_state.player_name(symbol), symbol, coordinate),
        ]

        # 2. a win on the post-move board is final, decay never gets a say
        winner = check_winner(board)
        if winner is not None:
            new_state = game_state.model_copy(
                update={
                    "board": board,
                    "active_moves": moves,
                    "status": GameStatus.WON,
                    "winner": winner,
                    "last_move": move,
                    "move_log": move_log + [f"{game_state.player_name(winner)} wins!"],
                }
            )
            log_event(new_state, f"{symbol.value} on {coordinate} completes a line")
            return MoveOutcome(game_state=new_state, move=move, winner=winner)

        # 3. advance, then decay against the new turn number
        turn_number = game_state.turn_number + 1
        decayed = expired_moves(moves, turn_number, config.decay_horizon)
        survivors = purge_expired(moves, turn_number, config.decay_horizon)
        board = reconstruct_board(survivors)

        # 4. draw only once decay has had its chance to free a cell
        status = GameStatus.PLAYING
        draw = is_board_full(board)
        turn_limit_reached = False
        if draw:
            status = GameStatus.DRAW
            move_log.append("Board full - draw")
        elif turn_number >= config.max_turns:
            status = GameStatus.DRAW
            turn_limit_reached = True
            move_log.append(f"Maximum turns ({config.max_turns}) reached - draw")

        # 5. hand over to the other symbol
        new_state = game_state.model_copy(
            update={
                "board": board,
                "active_moves": survivors,
                "turn_number": turn_number,
                "current_symbol": next_symbol(symbol),
                "status": status,
                "last_move": move,
                "move_log": move_log,
            }
        )

        log_event(new_state, f"{symbol.value} placed on {coordinate}")
        for gone in decayed:
            log_event(new_state, f"{gone.symbol.value} on {gone.coordinate} decayed")
        if status == GameStatus.DRAW:
            log_event(new_state, "Game drawn")

        return MoveOutcome(
            game_state=new_state,
            move=move,
            decayed=decayed,
            draw=draw,
            turn_limit_reached=turn_limit_reached,
        )
