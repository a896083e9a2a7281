"""Tests for the move validation pipeline"""
import pytest

from app.errors import ParsingError, ValidationError
from app.game.board import empty_board
from app.models.enums import PlayerSymbol
from app.validation.move_validator import MoveValidator


def test_valid_coordinate():
    assert MoveValidator.validate("b3", empty_board()) == (2, 1, "B3")


def test_shape_check_comes_first():
    with pytest.raises(ParsingError):
        MoveValidator.validate("no idea", empty_board())


def test_range_check():
    """Letter+digit that is off the board is a validation error, not a parse error"""
    with pytest.raises(ValidationError, match="off the board"):
        MoveValidator.validate("D4", empty_board())


def test_occupancy_check():
    board = empty_board()
    board[1][1] = PlayerSymbol.O

    with pytest.raises(ValidationError) as exc_info:
        MoveValidator.validate("B2", board)

    assert str(exc_info.value) == "Position B2 is already occupied by O"
    assert exc_info.value.details == {"coordinate": "B2", "occupant": "O"}


def test_error_converts_to_slot_entry():
    with pytest.raises(ValidationError) as exc_info:
        MoveValidator.validate("C9", empty_board())

    entry = exc_info.value.to_game_error()
    assert entry.error_type.value == "validation_error"
    assert not entry.fatal
    assert not entry.handled
