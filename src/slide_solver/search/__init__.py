"""Search algorithms for the sliding puzzle solver.

This module implements the wall-penalty heuristic, successor generation and
the sequential and multi-lane A* engines.
"""

from .heuristics import WallPenaltyHeuristic, compute_heuristic, create_heuristic
from .successors import legal_moves, move_space, apply_moves, generate_successors
from .astar import AStarSearcher, SearchResult, SearchConfig, SearchStatistics, create_astar_searcher
from .parallel import ParallelAStarSearcher, SolutionSlot, create_parallel_searcher

__all__ = [
    'WallPenaltyHeuristic',
    'compute_heuristic',
    'create_heuristic',
    'legal_moves',
    'move_space',
    'apply_moves',
    'generate_successors',
    'AStarSearcher',
    'SearchResult',
    'SearchConfig',
    'SearchStatistics',
    'create_astar_searcher',
    'ParallelAStarSearcher',
    'SolutionSlot',
    'create_parallel_searcher'
]
