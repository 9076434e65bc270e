"""Core data models for the sliding puzzle solver."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple
import numpy as np

BLANK_SYMBOL = '0'
WALL_SYMBOL = '='
DIGITS = '0123456789'
MAX_VALUE_SYMBOLS = 62


class FormatError(ValueError):
    """Raised when a board text encoding is malformed."""
    pass


class IllegalMove(ValueError):
    """Raised when the blank cannot move in the requested direction."""
    pass


class CellKind(Enum):
    """Kind of a single board cell."""
    WALL = 'wall'
    BLANK = 'blank'
    VALUE = 'value'


def symbol_rank(symbol: str) -> int:
    """Canonical ordering key of a cell symbol.

    Digits rank 1-9, lowercase letters 10-35, uppercase letters 36-61,
    the blank 62 and the wall -1.
    """
    if '1' <= symbol <= '9':
        return ord(symbol) - ord('0')
    if 'a' <= symbol <= 'z':
        return ord(symbol) - ord('a') + 10
    if 'A' <= symbol <= 'Z':
        return ord(symbol) - ord('A') + 36
    if symbol == BLANK_SYMBOL:
        return 62
    return -1


def is_valid_symbol(symbol: str) -> bool:
    return symbol in (BLANK_SYMBOL, WALL_SYMBOL) or symbol_rank(symbol) > 0


@dataclass(frozen=True)
class Cell:
    """A single board cell."""

    symbol: str
    kind: CellKind

    @classmethod
    def from_symbol(cls, symbol: str) -> 'Cell':
        if symbol == WALL_SYMBOL:
            return cls(symbol, CellKind.WALL)
        if symbol == BLANK_SYMBOL:
            return cls(symbol, CellKind.BLANK)
        return cls(symbol, CellKind.VALUE)

    @property
    def rank(self) -> int:
        return symbol_rank(self.symbol)

    @property
    def is_wall(self) -> bool:
        return self.kind is CellKind.WALL

    @property
    def is_blank(self) -> bool:
        return self.kind is CellKind.BLANK


class Direction(Enum):
    """Direction in which the blank moves."""
    UP = 'U'
    DOWN = 'D'
    LEFT = 'L'
    RIGHT = 'R'

    @property
    def char(self) -> str:
        return self.value

    @property
    def inverse(self) -> 'Direction':
        return _INVERSES[self]

    @property
    def delta(self) -> Tuple[int, int]:
        """(row, col) offset of the destination cell."""
        return _DELTAS[self]

    @classmethod
    def from_char(cls, char: str) -> 'Direction':
        try:
            return cls(char)
        except ValueError:
            raise ValueError(f"Unknown move character: {char!r}")


_INVERSES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


def serialize_moves(moves: Iterable[Direction]) -> str:
    """Encode a move list as one character per move."""
    return ''.join(d.char for d in moves)


def parse_moves(text: str) -> List[Direction]:
    """Decode a move string such as ``"DRR"``."""
    return [Direction.from_char(c) for c in text.strip()]


def hash_cells(cells: Tuple[Cell, ...]) -> int:
    """Content hash of a cell layout."""
    return hash(''.join(c.symbol for c in cells))


@dataclass(frozen=True)
class Board:
    """One puzzle configuration.

    Boards are immutable values: every move produces a new board with the
    blank swapped, ``g`` incremented and the direction appended to ``moves``.
    """

    width: int
    height: int
    cells: Tuple[Cell, ...]
    g: int = 0
    moves: Tuple[Direction, ...] = ()
    content_hash: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if self.width * self.height != len(self.cells):
            raise FormatError(
                f"Board of {self.width}x{self.height} needs {self.width * self.height} "
                f"cells, got {len(self.cells)}"
            )
        # Always derive the hash from the layout so it can never go stale
        object.__setattr__(self, 'content_hash', hash_cells(self.cells))

    @property
    def symbols(self) -> str:
        return ''.join(c.symbol for c in self.cells)

    @property
    def size(self) -> int:
        return len(self.cells)

    def serialize(self) -> str:
        """Board text encoding, ``"<w>,<h>,<symbols>"``."""
        return f"{self.width},{self.height},{self.symbols}"

    def move_string(self) -> str:
        return serialize_moves(self.moves)

    def blank_index(self) -> int:
        for idx, cell in enumerate(self.cells):
            if cell.is_blank:
                return idx
        raise FormatError(f"Board has no blank cell: {self.serialize()}")

    def index_of(self, symbol: str) -> int:
        for idx, cell in enumerate(self.cells):
            if cell.symbol == symbol:
                return idx
        raise KeyError(symbol)

    def position(self, index: int) -> Tuple[int, int]:
        """(row, col) of a row-major index."""
        return divmod(index, self.width)

    def is_solved(self, target: 'Board') -> bool:
        return self.content_hash == target.content_hash

    def grid(self) -> np.ndarray:
        """Symbols as a ``(height, width)`` array."""
        return np.array([c.symbol for c in self.cells]).reshape(self.height, self.width)

    def wall_mask(self) -> np.ndarray:
        """Boolean ``(height, width)`` array marking wall cells."""
        return np.array([c.is_wall for c in self.cells], dtype=bool).reshape(self.height, self.width)

    def with_cells(self, cells: Tuple[Cell, ...], direction: Optional[Direction] = None) -> 'Board':
        """New board with the given layout, one more step and the move recorded."""
        moves = self.moves + (direction,) if direction is not None else self.moves
        return Board(self.width, self.height, cells, g=self.g + 1, moves=moves)

    def __str__(self) -> str:
        return self.serialize()


def parse_board(text: str) -> Board:
    """Parse ``"<width-digit>,<height-digit>,<symbols>"`` into a Board.

    Raises:
        FormatError: If the dimensions are missing, the symbol count does not
            match ``width * height``, or the symbols violate the board grammar.
    """
    if text is None:
        raise FormatError("Board text is empty")

    text = text.strip()
    if len(text) < 4 or text[1] != ',' or text[3] != ',':
        raise FormatError(f"Missing board dimensions in {text!r}")
    if text[0] not in DIGITS or text[2] not in DIGITS:
        raise FormatError(f"Board dimensions must be single digits in {text!r}")

    width, height = int(text[0]), int(text[2])
    symbols = text[4:]

    if width == 0 or height == 0:
        raise FormatError(f"Board dimensions must be positive in {text!r}")
    if len(symbols) != width * height:
        raise FormatError(
            f"Expected {width * height} symbols for a {width}x{height} board, got {len(symbols)}"
        )

    seen = set()
    blanks = 0
    for symbol in symbols:
        if not is_valid_symbol(symbol):
            raise FormatError(f"Invalid board symbol {symbol!r} in {text!r}")
        if symbol == WALL_SYMBOL:
            continue
        if symbol == BLANK_SYMBOL:
            blanks += 1
            continue
        if symbol in seen:
            raise FormatError(f"Duplicate board symbol {symbol!r} in {text!r}")
        seen.add(symbol)

    if blanks != 1:
        raise FormatError(f"Board must contain exactly one blank, found {blanks}")

    cells = tuple(Cell.from_symbol(s) for s in symbols)
    return Board(width, height, cells)


def canonical_target(board: Board) -> Board:
    """Build the solved layout for a board.

    Values are sorted by rank, the blank follows them, and every wall is
    re-inserted at its original index in increasing index order.
    """
    cells = [c for c in board.cells if not (c.is_blank or c.is_wall)]
    cells.sort(key=lambda c: c.rank)
    cells.append(Cell.from_symbol(BLANK_SYMBOL))

    for idx, cell in enumerate(board.cells):
        if cell.is_wall:
            cells.insert(idx, Cell.from_symbol(WALL_SYMBOL))

    return Board(board.width, board.height, tuple(cells))
