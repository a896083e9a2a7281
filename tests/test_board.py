"""Tests for the board model"""
import pytest

from app.errors import ValidationError
from app.game.board import (
    WINNING_LINES,
    all_coordinates,
    available_positions,
    check_winner,
    coordinate_to_row_col,
    create_move,
    describe_move,
    empty_board,
    is_board_full,
    next_symbol,
    occupied_positions,
    reconstruct_board,
    render_board,
    row_col_to_coordinate,
    winning_line,
)
from app.models.enums import PlayerSymbol

X, O = PlayerSymbol.X, PlayerSymbol.O


def board_from(rows):
    """Build a board from strings like ``"XO."``"""
    symbols = {"X": X, "O": O, ".": None}
    return [[symbols[c] for c in row] for row in rows]


def test_coordinate_mapping():
    """Column letter picks the column, digit picks the row"""
    assert coordinate_to_row_col("A1") == (0, 0)
    assert coordinate_to_row_col("C1") == (0, 2)
    assert coordinate_to_row_col("A3") == (2, 0)
    assert coordinate_to_row_col("B2") == (1, 1)
    assert row_col_to_coordinate(2, 1) == "B3"


@pytest.mark.parametrize("label", ["D4", "A0", "C4", "a1", "B", "B22", ""])
def test_coordinate_mapping_rejects_off_board(label):
    with pytest.raises(ValidationError):
        coordinate_to_row_col(label)


def test_row_col_rejects_out_of_range():
    with pytest.raises(ValidationError):
        row_col_to_coordinate(3, 0)


def test_all_coordinates_row_major():
    coords = all_coordinates()
    assert len(coords) == 9
    assert coords[:4] == ["A1", "B1", "C1", "A2"]
    assert coords[-1] == "C3"


def test_eight_winning_lines():
    assert len(WINNING_LINES) == 8
    assert len(set(WINNING_LINES)) == 8


@pytest.mark.parametrize("line", WINNING_LINES)
def test_every_line_wins(line):
    board = empty_board()
    for coordinate in line:
        row, col = coordinate_to_row_col(coordinate)
        board[row][col] = O
    assert check_winner(board) == O
    assert winning_line(board) == line


def test_no_winner_on_mixed_board():
    board = board_from(["XOX", "XOO", "OXX"])
    assert check_winner(board) is None
    assert winning_line(board) is None
    assert is_board_full(board)


def test_available_and_occupied_positions():
    board = board_from(["X..", ".O.", "..."])
    assert available_positions(board) == ["B1", "C1", "A2", "C2", "A3", "B3", "C3"]
    assert occupied_positions(board) == [("A1", X), ("B2", O)]
    assert not is_board_full(board)


def test_reconstruct_board_projects_moves():
    moves = [create_move(0, 0, X, 1), create_move(1, 1, O, 2)]
    board = reconstruct_board(moves)
    assert board == board_from(["X..", ".O.", "..."])


def test_reconstruct_board_later_move_wins_collision():
    """Moves are applied in turn order regardless of list order"""
    moves = [create_move(0, 0, O, 3), create_move(0, 0, X, 1)]
    assert reconstruct_board(moves)[0][0] == O


def test_reconstruct_board_empty():
    assert reconstruct_board([]) == empty_board()


def test_create_move():
    move = create_move(2, 1, O, 4)
    assert move.coordinate == "B3"
    assert move.symbol == O
    assert move.turn_number == 4
    assert move.id.startswith("move_")
    assert move.timestamp.tzinfo is not None


def test_render_board():
    board = board_from(["X..", ".O.", "..X"])
    assert render_board(board) == "   A B C\n1  X . .\n2  . O .\n3  . . X"


def test_next_symbol_and_describe_move():
    assert next_symbol(X) == O
    assert next_symbol(O) == X
    assert describe_move("Claude", X, "B2") == "Claude put X on B2"
