"""
Sub-board basics: marks, winner detection, canonical keys and the immutable
3x3 state used as a node of the state graph.

Notes:
- A board is a tuple of 9 ints in row-major order: 0=free, 1=X, 2=O, 3=draw.
  The mark value doubles as the digit of the canonical key.
- DRAW never lands in a cell through a real play. It shows up on the outer
  board, whose cells hold the outcomes of the nine sub-boards.
- Boards without a DRAW cell are keyed in base 3 (cell 0 most significant),
  so every plain sub-board key lies in 0..19682. Boards holding a DRAW cell
  are packed in base 4 and shifted past that range.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from .errors import IllegalMove

FREE, X, O, DRAW = 0, 1, 2, 3

PLAYERS = (X, O)
MOVERS = (X, O, DRAW)
SYMBOLS = "-XOD"

# columns, rows, then the two diagonals; the first uniform line wins
WIN_LINES = (
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 4, 8), (2, 4, 6),
)

TERNARY_SPAN = 3 ** 9
KEY_SPACE = TERNARY_SPAN + 4 ** 9
TERNARY_WEIGHTS = tuple(3 ** (8 - i) for i in range(9))
RADIX4_WEIGHTS = tuple(4 ** (8 - i) for i in range(9))

EMPTY_CELLS = (FREE,) * 9


def mark_name(mark: Optional[int]) -> str:
    if mark is None:
        return "None"
    return {FREE: "Free", X: "X", O: "O", DRAW: "Draw"}[mark]


def serialize_board(cells: Sequence[int]) -> str:
    return "".join(SYMBOLS[v] for v in cells)


def parse_board(text: str) -> Tuple[int, ...]:
    """Parse 9 cells written as ``-XOD`` symbols or ``0123`` digits."""
    raw = text.strip().upper()
    if len(raw) != 9:
        raise ValueError(f"board must have 9 cells, got {len(raw)}: {text!r}")
    cells = []
    for ch in raw:
        if ch in SYMBOLS:
            cells.append(SYMBOLS.index(ch))
        elif ch in "0123":
            cells.append(int(ch))
        else:
            raise ValueError(f"unknown cell symbol {ch!r} in {text!r}")
    return tuple(cells)


def get_winner(cells: Sequence[int]) -> Optional[int]:
    for a, b, c in WIN_LINES:
        v = cells[a]
        if v != FREE and v == cells[b] and v == cells[c]:
            return v
    if FREE not in cells:
        return DRAW
    return None


def _pack4(cells: Iterable[int]) -> int:
    key = 0
    for v in cells:
        key = key * 4 + v
    return key


def canonical_key(cells: Sequence[int]) -> int:
    """Integer identity of a cell configuration, independent of move order."""
    if DRAW in cells:
        return TERNARY_SPAN + _pack4(cells)
    key = 0
    for v in cells:
        key = key * 3 + v
    return key


def decode_key(key: int) -> Tuple[int, ...]:
    """Inverse of :func:`canonical_key`."""
    if not 0 <= key < KEY_SPACE:
        raise ValueError(f"key out of range: {key}")
    base, rest = (3, key) if key < TERNARY_SPAN else (4, key - TERNARY_SPAN)
    cells = []
    for _ in range(9):
        rest, digit = divmod(rest, base)
        cells.append(digit)
    return tuple(reversed(cells))


def check_move(mover: int, cell: int) -> None:
    if mover not in MOVERS:
        raise IllegalMove(f"mover must be one of X, O, Draw, got {mover!r}")
    if not 0 <= cell <= 8:
        raise IllegalMove(f"cell index out of range: {cell!r}")


@dataclass(frozen=True)
class SubBoardState:
    """One finalized 3x3 board.

    ``winner`` is X, O or DRAW once the board is decided and None while it is
    ongoing. ``legal_cells`` lists the free cells of an ongoing board and is
    empty for a decided one.
    """

    cells: Tuple[int, ...]
    winner: Optional[int]
    key: int
    legal_cells: Tuple[int, ...]

    @classmethod
    def empty(cls) -> "SubBoardState":
        return cls._finalize(EMPTY_CELLS)

    @classmethod
    def from_cells(cls, cells: Iterable[int]) -> "SubBoardState":
        cells_t = tuple(cells)
        if len(cells_t) != 9 or any(v not in (FREE, X, O, DRAW) for v in cells_t):
            raise ValueError(f"not a 3x3 board: {cells_t!r}")
        return cls._finalize(cells_t)

    @classmethod
    def _finalize(cls, cells: Tuple[int, ...]) -> "SubBoardState":
        winner = get_winner(cells)
        if winner is None:
            legal = tuple(i for i, v in enumerate(cells) if v == FREE)
        else:
            legal = ()
        return cls(cells=cells, winner=winner, key=canonical_key(cells), legal_cells=legal)

    def is_terminal(self) -> bool:
        return self.winner is not None

    def legal_moves(self) -> FrozenSet[int]:
        if self.winner is not None:
            return frozenset()
        return frozenset(i for i, v in enumerate(self.cells) if v == FREE)

    def canonical_key(self) -> int:
        return self.key

    def play(self, mover: int, cell: int) -> Optional["SubBoardState"]:
        """Return the state after ``mover`` takes ``cell``.

        Returns None when the cell is occupied. Raises IllegalMove on a board
        that is already decided.
        """
        check_move(mover, cell)
        if self.winner is not None:
            raise IllegalMove(f"board {self.key} is already decided ({mark_name(self.winner)})")
        if self.cells[cell] != FREE:
            return None
        cells = self.cells[:cell] + (mover,) + self.cells[cell + 1:]
        return SubBoardState._finalize(cells)

    def child_key(self, mover: int, cell: int) -> int:
        """Key of ``play(mover, cell)`` without building the child.

        The caller guarantees the cell is free.
        """
        if self.key >= TERNARY_SPAN:
            return self.key + mover * RADIX4_WEIGHTS[cell]
        if mover != DRAW:
            return self.key + mover * TERNARY_WEIGHTS[cell]
        return TERNARY_SPAN + _pack4(self.cells) + DRAW * RADIX4_WEIGHTS[cell]

    def render(self) -> str:
        rows = [" ".join(SYMBOLS[v] for v in self.cells[r * 3:r * 3 + 3]) for r in range(3)]
        rows.append(f"Winner: {mark_name(self.winner)}")
        rows.append(f"Key: {self.key}")
        return "\n".join(rows)
