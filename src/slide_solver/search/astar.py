"""A* search for sliding puzzles.

The frontier is seeded with the successors of the start board and ordered by
f = g + h, ties broken by insertion order. Visited boards are tracked by
content hash. Children whose f-value reaches ``heuristic_threshold`` are
pruned, so a failed search does not prove the board unsolvable.
"""

import heapq
import itertools
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from slide_solver.core.data_models import Board, Direction, canonical_target, serialize_moves
from slide_solver.search.heuristics import WallPenaltyHeuristic
from slide_solver.search.successors import generate_successors

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Result from a puzzle search."""
    success: bool
    moves: Optional[List[Direction]] = None
    nodes_expanded: int = 0
    nodes_generated: int = 0
    nodes_pruned: int = 0
    iterations: int = 0
    computation_time: float = 0.0
    termination_reason: str = "unknown"
    heuristic_stats: Optional[Dict[str, Any]] = None

    @property
    def move_string(self) -> Optional[str]:
        """Moves encoded as ``U/D/L/R`` characters, or None without a solution."""
        if self.moves is None:
            return None
        return serialize_moves(self.moves)


@dataclass
class SearchStatistics:
    """Counters collected while searching."""
    nodes_expanded: int = 0
    nodes_generated: int = 0
    nodes_pruned: int = 0
    duplicate_states: int = 0
    iterations: int = 0
    max_depth_reached: int = 0

    def merge(self, other: 'SearchStatistics') -> None:
        """Accumulate another statistics object into this one."""
        self.nodes_expanded += other.nodes_expanded
        self.nodes_generated += other.nodes_generated
        self.nodes_pruned += other.nodes_pruned
        self.duplicate_states += other.duplicate_states
        self.iterations += other.iterations
        self.max_depth_reached = max(self.max_depth_reached, other.max_depth_reached)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes_expanded': self.nodes_expanded,
            'nodes_generated': self.nodes_generated,
            'nodes_pruned': self.nodes_pruned,
            'duplicate_states': self.duplicate_states,
            'iterations': self.iterations,
            'max_depth_reached': self.max_depth_reached,
        }


@dataclass
class SearchConfig:
    """Configuration for A* search."""
    heuristic_threshold: float = math.inf  # prune children with f >= threshold
    max_iterations: int = 1_000_000  # frontier pops before giving up
    max_computation_time: Optional[float] = None  # seconds, None for no limit
    statistics_tracking: bool = True


class Frontier:
    """Priority queue of boards ordered by f, then insertion order."""

    def __init__(self):
        self._heap: List[Tuple[float, int, Board]] = []
        self._counter = itertools.count()

    def push(self, f_score: float, board: Board) -> None:
        heapq.heappush(self._heap, (f_score, next(self._counter), board))

    def pop(self) -> Tuple[float, Board]:
        f_score, _, board = heapq.heappop(self._heap)
        return f_score, board

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


def expand(board: Board, heuristic: WallPenaltyHeuristic, frontier: Frontier,
           threshold: float, stats: SearchStatistics) -> None:
    """Push every child of ``board`` whose f-value is below ``threshold``."""
    successors = generate_successors(board)
    stats.nodes_expanded += 1
    stats.nodes_generated += len(successors)

    for child in successors:
        f_score = child.g + heuristic.compute(child)
        if f_score < threshold:
            frontier.push(f_score, child)
        else:
            stats.nodes_pruned += 1


def seed_frontier(board: Board, heuristic: WallPenaltyHeuristic) -> List[Tuple[float, Board]]:
    """Successors of the start board paired with their f-values."""
    return [(child.g + heuristic.compute(child), child) for child in generate_successors(board)]


class AStarSearcher:
    """Single-threaded A* search over board states."""

    def __init__(self, config: Optional[SearchConfig] = None):
        """Initialize A* searcher.

        Args:
            config: Search configuration parameters
        """
        self.config = config or SearchConfig()
        self.statistics = SearchStatistics()

        logger.info(f"A* searcher initialized with threshold={self.config.heuristic_threshold}, "
                    f"max_iterations={self.config.max_iterations}")

    def search(self, board: Board, target: Optional[Board] = None) -> SearchResult:
        """Search for a move sequence that turns ``board`` into ``target``.

        Args:
            board: Scrambled start board
            target: Solved layout (canonical target of ``board`` if omitted)

        Returns:
            SearchResult with the recorded move list and statistics
        """
        start_time = time.perf_counter()
        self.statistics = SearchStatistics()

        if target is None:
            target = canonical_target(board)
        heuristic = WallPenaltyHeuristic(target)

        logger.info(f"Starting A* search on {board.serialize()}")

        if board.is_solved(target):
            return self._result(True, [], start_time, "initial_match", heuristic)

        frontier = Frontier()
        for f_score, child in seed_frontier(board, heuristic):
            frontier.push(f_score, child)
        self.statistics.nodes_generated += len(frontier)

        visited: Set[int] = set()
        deadline = (start_time + self.config.max_computation_time
                    if self.config.max_computation_time is not None else None)
        termination_reason = "search_exhausted"

        while frontier:
            if self.statistics.iterations >= self.config.max_iterations:
                termination_reason = "max_iterations_reached"
                break
            if deadline is not None and time.perf_counter() > deadline:
                termination_reason = "timeout"
                break

            _, current = frontier.pop()
            self.statistics.iterations += 1

            if current.is_solved(target):
                return self._result(True, list(current.moves), start_time, "goal_reached", heuristic)

            if current.content_hash in visited:
                self.statistics.duplicate_states += 1
                continue
            visited.add(current.content_hash)

            if current.g > self.statistics.max_depth_reached:
                self.statistics.max_depth_reached = current.g

            expand(current, heuristic, frontier, self.config.heuristic_threshold, self.statistics)

        logger.info(f"A* search ended without a solution: {termination_reason} "
                    f"after {self.statistics.iterations} iterations")
        return self._result(False, None, start_time, termination_reason, heuristic)

    def _result(self, success: bool, moves: Optional[List[Direction]], start_time: float,
                reason: str, heuristic: WallPenaltyHeuristic) -> SearchResult:
        computation_time = time.perf_counter() - start_time
        if success:
            logger.info(f"A* search solved in {len(moves)} moves "
                        f"({self.statistics.nodes_expanded} expansions, {computation_time:.3f}s)")

        return SearchResult(
            success=success,
            moves=moves,
            nodes_expanded=self.statistics.nodes_expanded,
            nodes_generated=self.statistics.nodes_generated,
            nodes_pruned=self.statistics.nodes_pruned,
            iterations=self.statistics.iterations,
            computation_time=computation_time,
            termination_reason=reason,
            heuristic_stats=heuristic.get_stats() if self.config.statistics_tracking else None,
        )

    def get_search_stats(self) -> Dict[str, Any]:
        """Get statistics of the most recent search."""
        stats = self.statistics.to_dict()
        stats['config'] = {
            'heuristic_threshold': self.config.heuristic_threshold,
            'max_iterations': self.config.max_iterations,
            'max_computation_time': self.config.max_computation_time,
        }
        return stats


def create_astar_searcher(heuristic_threshold: Optional[float] = None,
                          max_iterations: int = 1_000_000,
                          max_computation_time: Optional[float] = None,
                          statistics_tracking: bool = True) -> AStarSearcher:
    """Factory function to create an A* searcher.

    Args:
        heuristic_threshold: f-value bound for pruning (None for no pruning)
        max_iterations: Maximum frontier pops
        max_computation_time: Wall-clock limit in seconds (None for no limit)
        statistics_tracking: Whether to attach heuristic statistics to results

    Returns:
        Configured AStarSearcher instance
    """
    config = SearchConfig(
        heuristic_threshold=math.inf if heuristic_threshold is None else float(heuristic_threshold),
        max_iterations=max_iterations,
        max_computation_time=max_computation_time,
        statistics_tracking=statistics_tracking,
    )
    return AStarSearcher(config)
