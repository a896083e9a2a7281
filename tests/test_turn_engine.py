"""Tests for the apply-move transaction"""
import pytest

from app.errors import ValidationError
from app.game.board import available_positions, coordinate_to_row_col, reconstruct_board
from app.models.enums import GameStatus, PlayerSymbol
from app.models.game_state import GameState, SessionConfig
from app.state.turn_engine import TurnEngine

# Subset of a full board with no line, so none of these moves can win
NO_LINE_SEQUENCE = ["A1", "B1", "C1", "B2", "A2", "C2", "B3", "A3"]


def playing_state(**config) -> GameState:
    return GameState(game_id="engine-test", config=SessionConfig(**config), status=GameStatus.PLAYING)


def play(engine, state, coordinates):
    outcome = None
    for coordinate in coordinates:
        row, col = coordinate_to_row_col(coordinate)
        outcome = engine.apply_move(state, row, col)
        state = outcome.game_state
    return state, outcome


def test_first_move():
    """First move is X, stamped turn 1, and hands over to O"""
    state, outcome = play(TurnEngine(), playing_state(), ["B2"])

    assert outcome.move.symbol == PlayerSymbol.X
    assert outcome.move.turn_number == 1
    assert state.turn_number == 1
    assert state.current_symbol == PlayerSymbol.O
    assert state.board[1][1] == PlayerSymbol.X
    assert state.last_move == outcome.move
    assert state.move_log == ["X put X on B2"]


def test_move_decays_after_horizon():
    """Scenario A: A1 placed on turn 1 is gone by turn 8"""
    engine = TurnEngine()
    state, _ = play(engine, playing_state(decay_horizon=7), NO_LINE_SEQUENCE[:7])

    assert state.turn_number == 7
    assert state.board[0][0] == PlayerSymbol.X

    state, outcome = play(engine, state, NO_LINE_SEQUENCE[7:])

    assert state.turn_number == 8
    assert state.board[0][0] is None
    assert [m.coordinate for m in outcome.decayed] == ["A1"]
    assert "A1" not in [m.coordinate for m in state.active_moves]
    assert state.status == GameStatus.PLAYING


def test_immediate_win():
    """Scenario B: completing a line wins without another turn"""
    state, outcome = play(TurnEngine(), playing_state(), ["A1", "B1", "A2", "B2", "A3"])

    assert state.status == GameStatus.WON
    assert state.winner == PlayerSymbol.X
    assert outcome.winner == PlayerSymbol.X
    # the winning move does not advance the turn or run decay
    assert state.turn_number == 4
    assert state.current_symbol == PlayerSymbol.X
    assert state.move_log[-1] == "X wins!"
    assert not state.is_game_active


def test_win_is_checked_before_decay():
    """A1 would decay on this very turn, but the line is evaluated first"""
    state, outcome = play(TurnEngine(), playing_state(decay_horizon=4), ["A1", "B1", "A2", "B2", "A3"])

    assert outcome.winner == PlayerSymbol.X
    assert state.board[0][0] == PlayerSymbol.X


def test_decay_frees_cells_before_draw_check():
    """Ninth move fills the board, but two pieces decay on the same turn"""
    state, outcome = play(TurnEngine(), playing_state(decay_horizon=7), NO_LINE_SEQUENCE + ["C3"])

    assert state.status == GameStatus.PLAYING
    assert not outcome.draw
    assert sorted(m.coordinate for m in outcome.decayed) == ["A1", "B1"]
    assert available_positions(state.board) == ["A1", "B1"]


def test_full_board_is_a_draw():
    state, outcome = play(TurnEngine(), playing_state(decay_horizon=20), NO_LINE_SEQUENCE + ["C3"])

    assert state.status == GameStatus.DRAW
    assert state.winner is None
    assert outcome.draw
    assert state.move_log[-1] == "Board full - draw"


def test_turn_limit_draw():
    """Scenario E: a game that never decides ends as a draw at max_turns"""
    engine = TurnEngine()
    state = playing_state(decay_horizon=2)

    while state.status == GameStatus.PLAYING:
        row, col = coordinate_to_row_col(available_positions(state.board)[0])
        outcome = engine.apply_move(state, row, col)
        state = outcome.game_state

    assert state.turn_number == 50
    assert state.status == GameStatus.DRAW
    assert state.winner is None
    assert outcome.turn_limit_reached
    assert not outcome.draw


def test_board_always_matches_active_moves():
    engine = TurnEngine()
    state = playing_state(decay_horizon=3)

    for coordinate in ["A1", "B2", "C3", "A3", "C1", "B1"]:
        state, _ = play(engine, state, [coordinate])
        assert state.board == reconstruct_board(state.active_moves)
        assert len(state.active_moves) <= 3


def test_occupied_cell_rejected():
    engine = TurnEngine()
    state, _ = play(engine, playing_state(), ["B2"])
    before = state.model_dump()

    with pytest.raises(ValidationError, match="already occupied by X"):
        engine.apply_move(state, 1, 1)
    assert state.model_dump() == before


def test_off_board_rejected():
    with pytest.raises(ValidationError):
        TurnEngine().apply_move(playing_state(), 3, 0)


def test_move_requires_playing():
    state = GameState(game_id="idle")
    with pytest.raises(ValueError, match="not_started"):
        TurnEngine().apply_move(state, 0, 0)
