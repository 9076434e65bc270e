"""Wall-penalty Manhattan heuristic for sliding puzzle search.

Each non-wall cell contributes the Manhattan distance between its current
position and its position in the target layout, plus a penalty of 2 for every
wall found on the straight horizontal run (on the current row) and on the
straight vertical run (on the current column) towards the target.

The runs are half-open ranges starting at the current coordinate and stopping
before the target coordinate. A run that points left or up is empty, so walls
only ever add penalty when the target lies to the right or below. The
heuristic is not admissible once walls are involved; search results may be
suboptimal.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import numpy as np

from slide_solver.core.data_models import Board, canonical_target

logger = logging.getLogger(__name__)

WALL_PENALTY = 2


def run_penalty(wall_mask: np.ndarray, row: int, col: int,
                target_row: int, target_col: int) -> int:
    """Penalty for walls on the runs from (row, col) towards the target.

    Args:
        wall_mask: Boolean ``(height, width)`` wall array of the current board
        row, col: Current position
        target_row, target_col: Target position

    Returns:
        Lateral plus vertical wall penalty
    """
    lateral = int(np.count_nonzero(wall_mask[row, col:target_col]))
    vertical = int(np.count_nonzero(wall_mask[row:target_row, col]))
    return WALL_PENALTY * (lateral + vertical)


def tile_distance(board: Board, index: int, target: Board,
                  target_index: Optional[int] = None,
                  wall_mask: Optional[np.ndarray] = None) -> int:
    """Heuristic contribution of the cell at ``index``.

    Args:
        board: Current board
        index: Row-major index of the cell
        target: Target board (read only)
        target_index: Precomputed index of the cell's symbol in ``target``
        wall_mask: Precomputed wall mask of ``board``

    Returns:
        Distance with wall penalty, 0 for walls
    """
    cell = board.cells[index]
    if cell.is_wall:
        return 0

    if target_index is None:
        target_index = target.index_of(cell.symbol)
    if wall_mask is None:
        wall_mask = board.wall_mask()

    row, col = divmod(index, board.width)
    target_row, target_col = divmod(target_index, target.width)

    base = abs(row - target_row) + abs(col - target_col)
    return base + run_penalty(wall_mask, row, col, target_row, target_col)


class WallPenaltyHeuristic:
    """Heuristic evaluator bound to a single target layout.

    The target is only read. Its symbol-to-index table is built once so that
    evaluating a board costs one pass over the cells.
    """

    name = "wall_penalty_manhattan"

    def __init__(self, target: Board):
        self.target = target
        self.target_positions: Dict[str, int] = {
            cell.symbol: idx for idx, cell in enumerate(target.cells) if not cell.is_wall
        }
        self.computation_count = 0
        self.total_computation_time = 0.0

    def distances(self, board: Board) -> List[int]:
        """Per-cell contributions in row-major order."""
        wall_mask = board.wall_mask()
        result = []
        for idx, cell in enumerate(board.cells):
            if cell.is_wall:
                result.append(0)
                continue
            result.append(tile_distance(
                board, idx, self.target,
                target_index=self.target_positions[cell.symbol],
                wall_mask=wall_mask,
            ))
        return result

    def compute(self, board: Board) -> int:
        """Total heuristic value of ``board``."""
        start_time = time.perf_counter()
        value = sum(self.distances(board))

        self.computation_count += 1
        self.total_computation_time += time.perf_counter() - start_time
        return value

    def __call__(self, board: Board) -> int:
        return self.compute(board)

    def get_stats(self) -> Dict[str, Any]:
        """Get computation statistics."""
        avg_time = (self.total_computation_time / self.computation_count
                    if self.computation_count > 0 else 0.0)

        return {
            'name': self.name,
            'computation_count': self.computation_count,
            'total_time': self.total_computation_time,
            'average_time': avg_time,
            'average_time_us': avg_time * 1000000
        }


def compute_heuristic(board: Board, target: Optional[Board] = None) -> int:
    """Heuristic value of ``board`` against ``target`` (canonical target by default)."""
    if target is None:
        target = canonical_target(board)
    return WallPenaltyHeuristic(target).compute(board)


def create_heuristic(target: Board) -> WallPenaltyHeuristic:
    """Factory function to create the heuristic evaluator for a target."""
    return WallPenaltyHeuristic(target)
