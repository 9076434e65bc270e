"""Legal moves and successor generation for sliding puzzle boards."""

import logging
from typing import List, Optional

from slide_solver.core.data_models import Board, Direction, IllegalMove

logger = logging.getLogger(__name__)

ALL_DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


def legal_moves(board: Board, blank_index: Optional[int] = None) -> List[Direction]:
    """Directions the blank can move in.

    Edge-blocked directions are removed first, then any direction whose
    destination cell is a wall.

    Args:
        board: Current board
        blank_index: Index of the blank (looked up when omitted)

    Returns:
        Between 0 and 4 directions, in UP, DOWN, LEFT, RIGHT order
    """
    if blank_index is None:
        blank_index = board.blank_index()

    row, col = divmod(blank_index, board.width)
    moves = list(ALL_DIRECTIONS)

    if row == 0:
        moves.remove(Direction.UP)
    if row == board.height - 1:
        moves.remove(Direction.DOWN)
    if col == 0:
        moves.remove(Direction.LEFT)
    if col == board.width - 1:
        moves.remove(Direction.RIGHT)

    return [d for d in moves if not board.cells[_destination(board, row, col, d)].is_wall]


def _destination(board: Board, row: int, col: int, direction: Direction) -> int:
    d_row, d_col = direction.delta
    return (row + d_row) * board.width + (col + d_col)


def move_space(board: Board, direction: Direction) -> Board:
    """Move the blank one step and return the resulting board.

    The source board is left untouched.

    Raises:
        IllegalMove: If the move leaves the grid or hits a wall
    """
    blank_index = board.blank_index()
    row, col = divmod(blank_index, board.width)
    d_row, d_col = direction.delta
    new_row, new_col = row + d_row, col + d_col

    if not (0 <= new_row < board.height and 0 <= new_col < board.width):
        raise IllegalMove(f"Cannot move {direction.name.lower()} from the edge at ({row}, {col})")

    target_index = new_row * board.width + new_col
    if board.cells[target_index].is_wall:
        raise IllegalMove(f"Cannot move {direction.name.lower()} into a wall at ({new_row}, {new_col})")

    cells = list(board.cells)
    cells[blank_index], cells[target_index] = cells[target_index], cells[blank_index]
    return board.with_cells(tuple(cells), direction)


def apply_moves(board: Board, moves) -> Board:
    """Replay a sequence of directions from ``board``."""
    for direction in moves:
        board = move_space(board, direction)
    return board


def generate_successors(board: Board) -> List[Board]:
    """All children reachable with one legal move (at most 4)."""
    blank_index = board.blank_index()
    return [move_space(board, d) for d in legal_moves(board, blank_index)]
