"""Batch and answers file I/O.

A batch file holds one board encoding per line after a fixed number of header
lines. The answers file holds one ``<index>,<moves>`` (or
``<index>,UNSOLVABLE``) line per board, with 1-based indices in batch order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from slide_solver.core.data_models import FormatError, canonical_target, parse_board, parse_moves
from slide_solver.search.successors import apply_moves

logger = logging.getLogger(__name__)

UNSOLVABLE = "UNSOLVABLE"
DEFAULT_HEADER_LINES = 2


@dataclass(frozen=True)
class BatchEntry:
    """One board of a batch: its 1-based position and raw text."""
    index: int
    text: str


class BatchLoader:
    """Reader for batch files."""

    def __init__(self, batch_file: Union[str, Path], header_lines: int = DEFAULT_HEADER_LINES):
        """Initialize the batch loader.

        Args:
            batch_file: Path to the batch file
            header_lines: Number of leading lines to skip
        """
        self.batch_file = Path(batch_file)
        self.header_lines = header_lines

        if not self.batch_file.exists():
            raise FileNotFoundError(f"Batch file not found: {self.batch_file}")
        if header_lines < 0:
            raise ValueError(f"header_lines must be non-negative, got {header_lines}")

    def iter_entries(self) -> Iterator[BatchEntry]:
        """Yield the boards of the batch in file order.

        A blank line keeps its position and yields an entry with empty text.
        """
        with open(self.batch_file, 'r', encoding='utf-8') as f:
            yield from iter_batch_lines(f, self.header_lines)

    def load(self) -> List[BatchEntry]:
        entries = list(self.iter_entries())
        logger.info(f"Loaded {len(entries)} boards from {self.batch_file}")
        return entries


def iter_batch_lines(lines: Iterable[str], header_lines: int = DEFAULT_HEADER_LINES) -> Iterator[BatchEntry]:
    """Turn raw batch lines into entries, skipping the header lines.

    Indices follow line positions after the header. A blank line still takes
    its index and yields an entry with empty text, which never parses, so the
    answers file reports it as unsolvable and later boards keep their numbers.
    """
    for line_no, line in enumerate(lines):
        if line_no < header_lines:
            continue
        yield BatchEntry(index=line_no - header_lines + 1, text=line.strip())


def read_batch(batch_file: Union[str, Path], header_lines: int = DEFAULT_HEADER_LINES) -> List[BatchEntry]:
    """Convenience function to load every board of a batch file."""
    return BatchLoader(batch_file, header_lines).load()


def format_answer(index: int, moves: Optional[str]) -> str:
    """Answers-file line for one board (without newline)."""
    return f"{index},{UNSOLVABLE if moves is None else moves}"


def write_answers(answers: Iterable[Tuple[int, Optional[str]]], output_file: Union[str, Path]) -> Path:
    """Write ``(index, moves)`` pairs, ``None`` moves meaning unsolvable.

    Returns:
        Path of the written file
    """
    out_path = Path(output_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(out_path, 'w', encoding='utf-8') as f:
        for index, moves in sorted(answers, key=lambda item: item[0]):
            f.write(format_answer(index, moves) + "\n")
            count += 1

    logger.info(f"Wrote {count} answers to {out_path}")
    return out_path


def read_answers(answers_file: Union[str, Path]) -> Dict[int, Optional[str]]:
    """Parse an answers file into ``{index: moves}`` (``None`` for unsolvable).

    Raises:
        FormatError: If a line is not ``<index>,<moves>``
    """
    answers: Dict[int, Optional[str]] = {}
    with open(answers_file, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            index_text, sep, moves = line.partition(',')
            if not sep or not (index_text.isascii() and index_text.isdigit()):
                raise FormatError(f"Malformed answer on line {line_no}: {line!r}")
            answers[int(index_text)] = None if moves == UNSOLVABLE else moves
    return answers


def verify_answers(entries: Iterable[BatchEntry], answers: Dict[int, Optional[str]]) -> Dict[str, Any]:
    """Replay every answer on its board and check that it reaches the target.

    Args:
        entries: Boards of the batch
        answers: Parsed answers file

    Returns:
        Dictionary with verification statistics
    """
    stats: Dict[str, Any] = {
        "total": 0,
        "verified": 0,
        "unsolvable": 0,
        "missing": 0,
        "wrong": 0,
        "errors": []
    }

    for entry in entries:
        stats["total"] += 1
        if entry.index not in answers:
            stats["missing"] += 1
            continue

        moves = answers[entry.index]
        if moves is None:
            stats["unsolvable"] += 1
            continue

        try:
            board = parse_board(entry.text)
            final = apply_moves(board, parse_moves(moves))
        except ValueError as e:
            # FormatError, IllegalMove and unknown move characters
            stats["wrong"] += 1
            stats["errors"].append(f"Board {entry.index}: {e}")
            continue

        if final.is_solved(canonical_target(board)):
            stats["verified"] += 1
        else:
            stats["wrong"] += 1
            stats["errors"].append(f"Board {entry.index}: moves do not reach the solved layout")

    return stats

