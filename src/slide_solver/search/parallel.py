"""Multi-lane A* search.

The successors of the start board are dealt round-robin over a fixed number
of lanes. Every lane runs the A* expansion loop on its own frontier (guarded
by its own lock) with its own visited set, so lanes may repeat each other's
work. The first lane to pop a solved board publishes its moves into a shared
slot; the others notice between pops and stop. The answer is the first
solution found, not necessarily the shortest.
"""

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Set

from slide_solver.core.data_models import Board, Direction, canonical_target
from slide_solver.search.astar import (
    Frontier, SearchConfig, SearchResult, SearchStatistics, expand, seed_frontier
)
from slide_solver.search.heuristics import WallPenaltyHeuristic

logger = logging.getLogger(__name__)

DEFAULT_NUM_WORKERS = 24


class SolutionSlot:
    """Set-once holder for the first published solution."""

    def __init__(self):
        self._lock = threading.Lock()
        self._moves: Optional[List[Direction]] = None
        self._lane: Optional[int] = None

    def publish(self, moves: List[Direction], lane: int) -> bool:
        """Store ``moves`` unless a solution is already present.

        Returns:
            True if this call won the slot
        """
        with self._lock:
            if self._moves is not None:
                return False
            self._moves = list(moves)
            self._lane = lane
            return True

    def is_set(self) -> bool:
        with self._lock:
            return self._moves is not None

    def take(self) -> Optional[List[Direction]]:
        with self._lock:
            return None if self._moves is None else list(self._moves)

    @property
    def lane(self) -> Optional[int]:
        return self._lane


class SearchLane:
    """One worker lane: a locked frontier and a private visited set."""

    def __init__(self, lane_id: int):
        self.lane_id = lane_id
        self.frontier = Frontier()
        self.lock = threading.Lock()
        self.visited: Set[int] = set()
        self.statistics = SearchStatistics()
        self.termination_reason = "search_exhausted"

    def push(self, f_score: float, board: Board) -> None:
        with self.lock:
            self.frontier.push(f_score, board)

    def pop(self) -> Optional[Board]:
        with self.lock:
            if not self.frontier:
                return None
            _, board = self.frontier.pop()
            return board

    def run(self, target: Board, heuristic: WallPenaltyHeuristic, slot: SolutionSlot,
            config: SearchConfig, deadline: Optional[float]) -> None:
        """Expansion loop; returns when solved, pre-empted, exhausted or capped."""
        while True:
            if self.statistics.iterations >= config.max_iterations:
                self.termination_reason = "max_iterations_reached"
                return
            if deadline is not None and time.perf_counter() > deadline:
                self.termination_reason = "timeout"
                return

            current = self.pop()
            if current is None:
                self.termination_reason = "search_exhausted"
                return
            self.statistics.iterations += 1

            if current.is_solved(target):
                if slot.publish(list(current.moves), self.lane_id):
                    logger.debug(f"Lane {self.lane_id} published a {len(current.moves)}-move solution")
                self.termination_reason = "goal_reached"
                return

            if current.content_hash in self.visited:
                self.statistics.duplicate_states += 1
            else:
                self.visited.add(current.content_hash)
                if current.g > self.statistics.max_depth_reached:
                    self.statistics.max_depth_reached = current.g

                with self.lock:
                    expand(current, heuristic, self.frontier,
                           config.heuristic_threshold, self.statistics)

            if slot.is_set():
                self.termination_reason = "preempted"
                return


class ParallelAStarSearcher:
    """A* search split over independent worker lanes."""

    def __init__(self, config: Optional[SearchConfig] = None,
                 num_workers: int = DEFAULT_NUM_WORKERS):
        """Initialize the parallel searcher.

        Args:
            config: Search configuration shared by every lane
            num_workers: Number of lanes (and pool threads)
        """
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")

        self.config = config or SearchConfig()
        self.num_workers = num_workers
        self.statistics = SearchStatistics()
        self.lane_reasons: Dict[int, str] = {}

        logger.info(f"Parallel A* searcher initialized with {num_workers} lanes, "
                    f"threshold={self.config.heuristic_threshold}")

    def search(self, board: Board, target: Optional[Board] = None) -> SearchResult:
        """Search with all lanes and return the first published solution.

        Args:
            board: Scrambled start board
            target: Solved layout (canonical target of ``board`` if omitted)

        Returns:
            SearchResult with the winning lane's moves and aggregated statistics
        """
        start_time = time.perf_counter()
        self.statistics = SearchStatistics()
        self.lane_reasons = {}

        if target is None:
            target = canonical_target(board)
        heuristic = WallPenaltyHeuristic(target)

        if board.is_solved(target):
            return self._result([], start_time, "initial_match", heuristic)

        lanes = [SearchLane(i) for i in range(self.num_workers)]
        seeds = seed_frontier(board, heuristic)
        for i, (f_score, child) in enumerate(seeds):
            lanes[i % self.num_workers].push(f_score, child)
        self.statistics.nodes_generated += len(seeds)

        slot = SolutionSlot()
        deadline = (start_time + self.config.max_computation_time
                    if self.config.max_computation_time is not None else None)

        logger.info(f"Starting parallel search on {board.serialize()} "
                    f"({len(seeds)} seeds over {self.num_workers} lanes)")

        with ThreadPoolExecutor(max_workers=self.num_workers) as pool:
            futures = [
                pool.submit(lane.run, target, heuristic, slot, self.config, deadline)
                for lane in lanes
            ]
            for future in futures:
                # Lane errors are programming errors; let them surface
                future.result()

        for lane in lanes:
            self.statistics.merge(lane.statistics)
            self.lane_reasons[lane.lane_id] = lane.termination_reason

        moves = slot.take()
        if moves is not None:
            logger.debug(f"Lane {slot.lane} won the race")
            return self._result(moves, start_time, "goal_reached", heuristic)

        return self._result(None, start_time, self._failure_reason(), heuristic)

    def _failure_reason(self) -> str:
        reasons = set(self.lane_reasons.values())
        for reason in ("timeout", "max_iterations_reached"):
            if reason in reasons:
                return reason
        return "search_exhausted"

    def _result(self, moves: Optional[List[Direction]], start_time: float, reason: str,
                heuristic: WallPenaltyHeuristic) -> SearchResult:
        computation_time = time.perf_counter() - start_time
        if moves is None:
            logger.info(f"Parallel search ended without a solution: {reason}")
        else:
            logger.info(f"Parallel search solved in {len(moves)} moves ({computation_time:.3f}s)")

        return SearchResult(
            success=moves is not None,
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
        """Get aggregated statistics of the most recent search."""
        stats = self.statistics.to_dict()
        stats['num_workers'] = self.num_workers
        stats['lane_reasons'] = dict(self.lane_reasons)
        return stats


def create_parallel_searcher(num_workers: int = DEFAULT_NUM_WORKERS,
                             heuristic_threshold: Optional[float] = None,
                             max_iterations: int = 1_000_000,
                             max_computation_time: Optional[float] = None,
                             statistics_tracking: bool = True) -> ParallelAStarSearcher:
    """Factory function to create a parallel searcher.

    Args:
        num_workers: Number of lanes
        heuristic_threshold: f-value bound for pruning (None for no pruning)
        max_iterations: Maximum pops per lane
        max_computation_time: Wall-clock limit in seconds (None for no limit)
        statistics_tracking: Whether to attach heuristic statistics to results

    Returns:
        Configured ParallelAStarSearcher instance
    """
    config = SearchConfig(
        heuristic_threshold=math.inf if heuristic_threshold is None else float(heuristic_threshold),
        max_iterations=max_iterations,
        max_computation_time=max_computation_time,
        statistics_tracking=statistics_tracking,
    )
    return ParallelAStarSearcher(config, num_workers=num_workers)
