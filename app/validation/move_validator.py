"""Move validation pipeline shared by agent replies and manual moves"""
from typing import Optional

from app.errors import ValidationError
from app.game.board import coordinate_to_row_col, row_col_to_coordinate
from app.models.move import BoardState
from app.validation.response_parser import extract_coordinate_token


class MoveValidator:
    """
    Validates a proposed coordinate against a board snapshot.

    The checks run in order and the first failure stops the pipeline:

    1. shape: the text must contain a letter followed by a digit
       (:class:`~app.errors.ParsingError` otherwise)
    2. range: letter A-C and digit 1-3 (:class:`~app.errors.ValidationError`)
    3. occupancy: the target cell must be empty on the given board
       (:class:`~app.errors.ValidationError`)
    """

    @staticmethod
    def parse(raw: Optional[str]) -> str:
        """Run the shape check and return the normalised token."""
        return extract_coordinate_token(raw)

    @staticmethod
    def validate_range(token: str) -> tuple[int, int]:
        return coordinate_to_row_col(token)

    @staticmethod
    def validate_unoccupied(board: BoardState, row: int, col: int) -> None:
        occupant = board[row][col]
        if occupant is not None:
            coordinate = row_col_to_coordinate(row, col)
            raise ValidationError(
                f"Position {coordinate} is already occupied by {occupant.value}",
                {"coordinate": coordinate, "occupant": occupant.value},
            )

    @classmethod
    def validate(cls, raw: Optional[str], board: BoardState) -> tuple[int, int, str]:
        """Run the full pipeline.

        Returns:
            (row, col, coordinate)
        """
        token = cls.parse(raw)
        row, col = cls.validate_range(token)
        cls.validate_unoccupied(board, row, col)
        return row, col, token
