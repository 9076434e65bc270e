"""Tests for A* search algorithm."""

import math

import pytest

from slide_solver.core.data_models import Direction, canonical_target, parse_board
from slide_solver.search.astar import (
    AStarSearcher, Frontier, SearchConfig, SearchResult, SearchStatistics, create_astar_searcher
)
from slide_solver.search.heuristics import compute_heuristic
from slide_solver.search.successors import apply_moves


class TestFrontier:
    """Test the priority queue."""

    def test_pops_lowest_f_first(self):
        frontier = Frontier()
        a, b, c = (parse_board(t) for t in ("3,3,123456708", "3,3,123456780", "3,3,123405678"))
        frontier.push(5, a)
        frontier.push(1, b)
        frontier.push(3, c)

        assert [frontier.pop()[1] for _ in range(3)] == [b, c, a]
        assert not frontier

    def test_ties_broken_by_insertion_order(self):
        frontier = Frontier()
        boards = [parse_board(t) for t in ("3,3,123456708", "3,3,123456780", "3,3,123405678")]
        for board in boards:
            frontier.push(2, board)

        assert len(frontier) == 3
        popped = [frontier.pop()[1].serialize() for _ in range(3)]
        assert popped == [b.serialize() for b in boards]


class TestSearchStatistics:
    """Test statistics aggregation."""

    def test_merge(self):
        a = SearchStatistics(nodes_expanded=2, nodes_generated=5, iterations=3, max_depth_reached=4)
        b = SearchStatistics(nodes_expanded=1, nodes_pruned=2, iterations=1, max_depth_reached=7)
        a.merge(b)

        assert a.nodes_expanded == 3
        assert a.nodes_generated == 5
        assert a.nodes_pruned == 2
        assert a.iterations == 4
        assert a.max_depth_reached == 7
        assert a.to_dict()['iterations'] == 4


class TestAStarSearcher:
    """Test sequential A* search."""

    @pytest.fixture
    def searcher(self):
        return AStarSearcher()

    def test_default_config(self, searcher):
        assert searcher.config.heuristic_threshold == math.inf
        assert searcher.config.max_iterations == 1_000_000
        assert searcher.config.max_computation_time is None

    def test_three_move_board(self, searcher):
        result = searcher.search(parse_board("4,3,123406785aC="))

        assert isinstance(result, SearchResult)
        assert result.success
        assert result.move_string == "DRR"
        assert result.moves == [Direction.DOWN, Direction.RIGHT, Direction.RIGHT]
        assert result.termination_reason == "goal_reached"

    def test_one_move_board(self, searcher):
        result = searcher.search(parse_board("3,3,123456708"))
        assert result.success
        assert result.move_string == "R"

    def test_already_solved(self, searcher):
        result = searcher.search(parse_board("3,3,12345670="))

        assert result.success
        assert result.moves == []
        assert result.move_string == ""
        assert result.termination_reason == "initial_match"

    @pytest.mark.parametrize("text", [
        "3,3,123405678",
        "3,3,412053786",
        "3,3,1=3405786",
        "4,3,1234507=869a",
    ])
    def test_solution_replays_to_target(self, searcher, text):
        board = parse_board(text)
        result = searcher.search(board)

        assert result.success
        final = apply_moves(board, result.moves)
        target = canonical_target(board)
        assert final.is_solved(target)
        assert compute_heuristic(final, target) == 0

    def test_explicit_target(self, searcher):
        board = parse_board("3,3,123456708")
        result = searcher.search(board, target=parse_board("3,3,123456708"))
        assert result.termination_reason == "initial_match"

    def test_threshold_below_cost_finds_nothing(self):
        searcher = create_astar_searcher(heuristic_threshold=2)
        result = searcher.search(parse_board("4,3,123406785aC="))

        assert not result.success
        assert result.moves is None
        assert result.move_string is None
        assert result.termination_reason == "search_exhausted"
        assert result.nodes_pruned > 0

    def test_threshold_above_cost_still_solves(self):
        searcher = create_astar_searcher(heuristic_threshold=10)
        result = searcher.search(parse_board("4,3,123406785aC="))
        assert result.move_string == "DRR"

    def test_iteration_cap(self):
        searcher = create_astar_searcher(max_iterations=1)
        result = searcher.search(parse_board("4,3,123406785aC="))

        assert not result.success
        assert result.termination_reason == "max_iterations_reached"
        assert result.iterations == 1

    def test_statistics_tracking_flag(self):
        board = parse_board("3,3,123456708")
        assert create_astar_searcher().search(board).heuristic_stats is not None

        result = create_astar_searcher(statistics_tracking=False).search(board)
        assert result.move_string == "R"
        assert result.heuristic_stats is None

    def test_walled_off_board_is_exhausted(self, searcher):
        # The blank is sealed in the top-left corner and the tiles are out of place
        result = searcher.search(parse_board("3,3,0=2=13456"))
        assert not result.success
        assert result.termination_reason == "search_exhausted"

    def test_statistics(self, searcher):
        result = searcher.search(parse_board("4,3,123406785aC="))
        stats = searcher.get_search_stats()

        assert result.nodes_expanded == stats['nodes_expanded'] > 0
        assert result.iterations == stats['iterations']
        assert stats['config']['max_iterations'] == 1_000_000
        assert result.heuristic_stats['computation_count'] > 0

    def test_statistics_tracking_disabled(self):
        searcher = AStarSearcher(SearchConfig(statistics_tracking=False))
        result = searcher.search(parse_board("3,3,123456708"))
        assert result.heuristic_stats is None
