"""Tests for batch and answers file I/O."""

import tempfile
from pathlib import Path

import pytest

from slide_solver.core.data_models import FormatError
from slide_solver.integration.io import (
    UNSOLVABLE, BatchEntry, BatchLoader, format_answer, iter_batch_lines, read_answers,
    read_batch, verify_answers, write_answers
)


BATCH_TEXT = """Sliding puzzle batch
width,height,cells
4,3,123406785aC=
3,3,123456708

3,3,123456780
"""


class TestBatchLoader:
    """Test reading batch files."""

    def create_batch_file(self, temp_dir, text=BATCH_TEXT):
        path = Path(temp_dir) / "batch.txt"
        path.write_text(text)
        return path

    def test_load_batch(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            entries = BatchLoader(self.create_batch_file(temp_dir)).load()

        assert entries == [
            BatchEntry(1, "4,3,123406785aC="),
            BatchEntry(2, "3,3,123456708"),
            BatchEntry(3, ""),
            BatchEntry(4, "3,3,123456780"),
        ]

    def test_header_lines(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = self.create_batch_file(temp_dir, "3,3,123456708\n3,3,123456780\n")
            entries = read_batch(path, header_lines=0)

        assert [e.text for e in entries] == ["3,3,123456708", "3,3,123456780"]

    def test_iter_entries_is_lazy(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            loader = BatchLoader(self.create_batch_file(temp_dir))
            first = next(loader.iter_entries())

        assert first.index == 1

    def test_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            BatchLoader("/nonexistent/batch.txt")

    def test_negative_header_lines(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            with pytest.raises(ValueError):
                BatchLoader(self.create_batch_file(temp_dir), header_lines=-1)

    def test_iter_batch_lines(self):
        lines = ["header\n", "  3,3,123456708  \n", "\n", "1,1,0"]
        entries = list(iter_batch_lines(lines, header_lines=1))
        assert entries == [
            BatchEntry(1, "3,3,123456708"),
            BatchEntry(2, ""),
            BatchEntry(3, "1,1,0"),
        ]

    def test_blank_line_keeps_later_indices(self):
        lines = ["h1\n", "h2\n", "\n", "\n", "3,3,123456708\n"]
        entries = list(iter_batch_lines(lines, header_lines=2))
        assert [e.index for e in entries] == [1, 2, 3]
        assert entries[2].text == "3,3,123456708"


class TestAnswersFile:
    """Test writing and reading answers."""

    def test_format_answer(self):
        assert format_answer(1, "DRR") == "1,DRR"
        assert format_answer(2, "") == "2,"
        assert format_answer(3, None) == f"3,{UNSOLVABLE}"

    def test_write_answers_sorted(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = write_answers([(3, None), (1, "DRR"), (2, "R")], Path(temp_dir) / "out" / "answers.txt")
            lines = path.read_text().splitlines()

        assert lines == ["1,DRR", "2,R", "3,UNSOLVABLE"]

    def test_read_answers(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "answers.txt"
            path.write_text("1,DRR\n2,\n\n3,UNSOLVABLE\n")
            answers = read_answers(path)

        assert answers == {1: "DRR", 2: "", 3: None}

    @pytest.mark.parametrize("line", ["DRR", "x,DRR", ",DRR", "\u00b2,DRR"])
    def test_read_malformed_answers(self, line):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "answers.txt"
            path.write_text(line + "\n")
            with pytest.raises(FormatError):
                read_answers(path)


class TestVerifyAnswers:
    """Test replaying answers against their boards."""

    @pytest.fixture
    def entries(self):
        return [
            BatchEntry(1, "4,3,123406785aC="),
            BatchEntry(2, "3,3,123456708"),
            BatchEntry(3, "3,3,123456780"),
        ]

    def test_all_verified(self, entries):
        stats = verify_answers(entries, {1: "DRR", 2: "R", 3: ""})

        assert stats["total"] == 3
        assert stats["verified"] == 3
        assert stats["wrong"] == 0
        assert stats["errors"] == []

    def test_wrong_missing_and_unsolvable(self, entries):
        stats = verify_answers(entries, {1: "DR", 2: None})

        assert stats["wrong"] == 1
        assert stats["unsolvable"] == 1
        assert stats["missing"] == 1
        assert stats["verified"] == 0
        assert "Board 1" in stats["errors"][0]

    def test_illegal_and_unknown_moves(self, entries):
        stats = verify_answers(entries, {1: "UUUU", 2: "X", 3: ""})

        assert stats["wrong"] == 2
        assert stats["verified"] == 1
        assert len(stats["errors"]) == 2

    def test_bad_board_counts_as_wrong(self):
        stats = verify_answers([BatchEntry(1, "3,3,12345")], {1: "R"})
        assert stats["wrong"] == 1

    def test_lowercase_moves_are_wrong(self, entries):
        stats = verify_answers(entries, {1: "drr", 2: "R", 3: ""})

        assert stats["wrong"] == 1
        assert stats["verified"] == 2

    def test_blank_line_entry_is_wrong_unless_unsolvable(self):
        entries = [BatchEntry(1, ""), BatchEntry(2, "")]
        stats = verify_answers(entries, {1: None, 2: ""})

        assert stats["unsolvable"] == 1
        assert stats["wrong"] == 1
