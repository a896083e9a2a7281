"""Board model: coordinates, projection from moves and win lines."""
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from app.errors import ValidationError
from app.models.enums import PlayerSymbol
from app.models.move import BOARD_SIZE, BoardState, Move


COLUMN_LETTERS = "ABC"
ROW_DIGITS = "123"

# Rows, then columns, then both diagonals
WINNING_LINES: tuple[tuple[str, str, str], ...] = (
    ("A1", "B1", "C1"),
    ("A2", "B2", "C2"),
    ("A3", "B3", "C3"),
    ("A1", "A2", "A3"),
    ("B1", "B2", "B3"),
    ("C1", "C2", "C3"),
    ("A1", "B2", "C3"),
    ("C1", "B2", "A3"),
)


def is_valid_position(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def coordinate_to_row_col(coordinate: str) -> tuple[int, int]:
    """Map a label such as ``"B2"`` to ``(row, col)``.

    The column letter picks the column (A=0), the digit picks the row (1=0).

    Raises:
        ValidationError: if the label is not a letter A-C followed by 1-3
    """
    if not isinstance(coordinate, str) or len(coordinate) != 2:
        raise ValidationError(
            f"Invalid coordinate: {coordinate!r}",
            {"coordinate": coordinate},
        )

    letter, digit = coordinate[0], coordinate[1]
    if letter not in COLUMN_LETTERS or digit not in ROW_DIGITS:
        raise ValidationError(
            f"Coordinate {coordinate} is off the board (columns A-C, rows 1-3)",
            {"coordinate": coordinate},
        )

    return ROW_DIGITS.index(digit), COLUMN_LETTERS.index(letter)


def row_col_to_coordinate(row: int, col: int) -> str:
    """Inverse of :func:`coordinate_to_row_col`."""
    if not is_valid_position(row, col):
        raise ValidationError(
            f"Invalid position: ({row}, {col})",
            {"row": row, "col": col},
        )
    return f"{COLUMN_LETTERS[col]}{ROW_DIGITS[row]}"


def all_coordinates() -> list[str]:
    """All nine labels in row-major order"""
    return [
        row_col_to_coordinate(row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
    ]


def empty_board() -> BoardState:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def clone_board(board: BoardState) -> BoardState:
    return [list(row) for row in board]


def reconstruct_board(active_moves: Iterable[Move]) -> BoardState:
    """Project the active moves onto a fresh grid.

    Moves are applied in ascending turn order, so if two moves ever shared a
    cell the later placement would show.
    """
    board = empty_board()
    for move in sorted(active_moves, key=lambda m: m.turn_number):
        board[move.row][move.col] = move.symbol
    return board


def cell_at(board: BoardState, coordinate: str) -> Optional[PlayerSymbol]:
    row, col = coordinate_to_row_col(coordinate)
    return board[row][col]


def is_cell_empty(board: BoardState, row: int, col: int) -> bool:
    return is_valid_position(row, col) and board[row][col] is None


def check_winner(board: BoardState) -> Optional[PlayerSymbol]:
    """Return the symbol owning a complete line, or None.

    Only looks at the snapshot it is given; it knows nothing about decay.
    """
    for line in WINNING_LINES:
        first, second, third = (cell_at(board, coordinate) for coordinate in line)
        if first is not None and first == second == third:
            return first
    return None


def winning_line(board: BoardState) -> Optional[tuple[str, str, str]]:
    for line in WINNING_LINES:
        cells = {cell_at(board, coordinate) for coordinate in line}
        if len(cells) == 1 and None not in cells:
            return line
    return None


def is_board_full(board: BoardState) -> bool:
    return all(cell is not None for row in board for cell in row)


def available_positions(board: BoardState) -> list[str]:
    return [
        row_col_to_coordinate(row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if board[row][col] is None
    ]


def occupied_positions(board: BoardState) -> list[tuple[str, PlayerSymbol]]:
    return [
        (row_col_to_coordinate(row, col), board[row][col])
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if board[row][col] is not None
    ]


def render_board(board: BoardState) -> str:
    """Text board with coordinate headers, used in prompts and the CLI"""
    lines = ["   A B C"]
    for row in range(BOARD_SIZE):
        cells = " ".join(cell.value if cell else "." for cell in board[row])
        lines.append(f"{row + 1}  {cells}")
    return "\n".join(lines)


def next_symbol(symbol: PlayerSymbol) -> PlayerSymbol:
    return PlayerSymbol.O if symbol == PlayerSymbol.X else PlayerSymbol.X


def create_move(row: int, col: int, symbol: PlayerSymbol, turn_number: int) -> Move:
    return Move(
        id=f"move_{uuid.uuid4().hex[:12]}",
        row=row,
        col=col,
        coordinate=row_col_to_coordinate(row, col),
        symbol=symbol,
        turn_number=turn_number,
        timestamp=datetime.now(timezone.utc),
    )


def describe_move(player_name: str, symbol: PlayerSymbol, coordinate: str) -> str:
    """Line appended to the move log"""
    return f"{player_name} put {symbol.value} on {coordinate}"
