"""Tests for the board data model."""

import pytest
import numpy as np

from slide_solver.core.data_models import (
    Board, Cell, CellKind, Direction, FormatError, canonical_target, hash_cells,
    parse_board, parse_moves, serialize_moves, symbol_rank
)


class TestSymbols:
    """Test symbol ranking and cell construction."""

    def test_symbol_rank(self):
        assert symbol_rank('1') == 1
        assert symbol_rank('9') == 9
        assert symbol_rank('a') == 10
        assert symbol_rank('z') == 35
        assert symbol_rank('A') == 36
        assert symbol_rank('Z') == 61
        assert symbol_rank('0') == 62
        assert symbol_rank('=') == -1

    def test_cell_kinds(self):
        assert Cell.from_symbol('=').kind is CellKind.WALL
        assert Cell.from_symbol('0').kind is CellKind.BLANK
        assert Cell.from_symbol('k').kind is CellKind.VALUE
        assert Cell.from_symbol('=').is_wall
        assert Cell.from_symbol('0').is_blank
        assert Cell.from_symbol('C').rank == 38


class TestDirection:
    """Test Direction helpers."""

    def test_inverse_pairs(self):
        for direction in Direction:
            assert direction.inverse.inverse is direction
            d_row, d_col = direction.delta
            i_row, i_col = direction.inverse.delta
            assert (d_row + i_row, d_col + i_col) == (0, 0)

    def test_move_string_round_trip(self):
        moves = [Direction.DOWN, Direction.RIGHT, Direction.RIGHT, Direction.UP, Direction.LEFT]
        assert serialize_moves(moves) == "DRRUL"
        assert parse_moves("DRRUL") == moves

    def test_unknown_move_character(self):
        with pytest.raises(ValueError):
            parse_moves("DX")

    @pytest.mark.parametrize("text", ["d", "DrR", "u"])
    def test_lowercase_moves_rejected(self, text):
        with pytest.raises(ValueError):
            parse_moves(text)


class TestParseBoard:
    """Test board text parsing and serialization."""

    @pytest.mark.parametrize("text", [
        "3,3,123456708",
        "3,3,12346075=",
        "4,3,123406785aC=",
        "2,2,=10=",
        "1,1,0",
    ])
    def test_round_trip(self, text):
        board = parse_board(text)
        assert board.serialize() == text
        assert str(board) == text

    def test_dimensions(self):
        board = parse_board("4,3,123406785aC=")
        assert board.width == 4
        assert board.height == 3
        assert board.size == 12
        assert board.g == 0
        assert board.moves == ()
        assert board.blank_index() == 4
        assert board.position(4) == (1, 0)

    def test_surrounding_whitespace_ignored(self):
        assert parse_board("  3,3,123456708\n").serialize() == "3,3,123456708"

    @pytest.mark.parametrize("text", [
        "",
        "3,3",
        "33,123456708",
        "x,3,123456708",
        "3;3;123456708",
        "0,3,",
    ])
    def test_missing_dimensions(self, text):
        with pytest.raises(FormatError):
            parse_board(text)

    @pytest.mark.parametrize("text", ["\u00b2,1,10", "\u0663,1,120", "3,\u0661,120"])
    def test_non_ascii_dimension_digits(self, text):
        with pytest.raises(FormatError):
            parse_board(text)

    def test_wrong_symbol_count(self):
        with pytest.raises(FormatError):
            parse_board("3,3,12345670")

    def test_invalid_symbol(self):
        with pytest.raises(FormatError):
            parse_board("3,3,1234567#0")

    def test_duplicate_symbol(self):
        with pytest.raises(FormatError):
            parse_board("3,3,123456710")

    def test_blank_count(self):
        with pytest.raises(FormatError):
            parse_board("3,3,123456789")
        with pytest.raises(FormatError):
            parse_board("3,3,123456700")

    def test_repeated_walls_allowed(self):
        board = parse_board("3,3,=21=30456")
        assert sum(1 for c in board.cells if c.is_wall) == 2

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_board("garbage")


class TestBoard:
    """Test Board value semantics."""

    def test_hash_follows_content(self):
        a = parse_board("3,3,123456708")
        b = parse_board("3,3,123456708")
        c = parse_board("3,3,123456780")
        assert a.content_hash == b.content_hash
        assert a.content_hash != c.content_hash
        assert a.content_hash == hash_cells(a.cells)

    def test_size_mismatch_rejected(self):
        cells = tuple(Cell.from_symbol(s) for s in "1230")
        with pytest.raises(FormatError):
            Board(3, 3, cells)

    def test_with_cells_records_move(self):
        board = parse_board("3,3,123456708")
        cells = tuple(Cell.from_symbol(s) for s in "123456780")
        child = board.with_cells(cells, Direction.RIGHT)

        assert child.g == 1
        assert child.moves == (Direction.RIGHT,)
        assert child.move_string() == "R"
        assert child.content_hash != board.content_hash
        # Source untouched
        assert board.serialize() == "3,3,123456708"

    def test_grid_and_wall_mask(self):
        board = parse_board("3,3,12346075=")
        grid = board.grid()
        assert grid.shape == (3, 3)
        assert grid[2, 2] == '='
        assert grid[1, 1] == '6'

        mask = board.wall_mask()
        assert mask.dtype == bool
        assert np.count_nonzero(mask) == 1
        assert mask[2, 2]


class TestCanonicalTarget:
    """Test construction of the solved layout."""

    def test_plain_board(self):
        assert canonical_target(parse_board("3,3,876543210")).serialize() == "3,3,123456780"

    def test_single_wall(self):
        assert canonical_target(parse_board("3,3,12346075=")).serialize() == "3,3,12345670="

    def test_letters_sorted_after_digits(self):
        target = canonical_target(parse_board("4,3,123406785aC="))
        assert target.serialize() == "4,3,12345678aC0="

    def test_multiple_walls_inserted_in_index_order(self):
        target = canonical_target(parse_board("3,3,=21=30456"))
        assert target.serialize() == "3,3,=12=34560"

    def test_solved_board_is_its_own_target(self):
        board = parse_board("3,3,12345670=")
        assert board.is_solved(canonical_target(board))
