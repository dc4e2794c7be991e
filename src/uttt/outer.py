"""
Ultimate tic-tac-toe board composed of nine sub-boards.

Notes:
- The board stores keys only. Every query borrows a :class:`StateGraph`, and
  the same graph serves both the nine sub-boards and the meta-board whose
  cells are the sub-board outcomes.
- Send rule: the inner cell of the last move names the sub-board to play
  next. If that sub-board is decided, any open sub-board may be played.
  Before the first move every open sub-board is available.
- Turn order is the caller's business; X and O are both accepted at any time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .board import PLAYERS, SYMBOLS, SubBoardState, mark_name
from .errors import IllegalMove
from .graph import StateGraph

logger = logging.getLogger(__name__)

EMPTY_KEY = 0


class Move(NamedTuple):
    mover: int
    outer_cell: int
    inner_cell: int


def _empty_sub_boards() -> List[int]:
    return [EMPTY_KEY] * 9


@dataclass
class OuterBoard:
    sub_boards: List[int] = field(default_factory=_empty_sub_boards)
    outer_key: int = EMPTY_KEY
    last_outer_cell: Optional[int] = None
    last_inner_cell: Optional[int] = None
    history: List[Move] = field(default_factory=list)

    def sub_board(self, outer_cell: int, graph: StateGraph) -> SubBoardState:
        return graph.lookup(self.sub_boards[outer_cell])

    def meta(self, graph: StateGraph) -> SubBoardState:
        return graph.lookup(self.outer_key)

    def winner(self, graph: StateGraph) -> Optional[int]:
        return self.meta(graph).winner

    def is_over(self, graph: StateGraph) -> bool:
        return self.meta(graph).is_terminal()

    def target(self, graph: StateGraph) -> Optional[int]:
        """Sub-board the next move is sent to, or None for a free choice."""
        if self.last_inner_cell is None:
            return None
        if self.sub_board(self.last_inner_cell, graph).is_terminal():
            return None
        return self.last_inner_cell

    def legal_moves(self, graph: StateGraph) -> List[Tuple[int, int]]:
        """All playable ``(outer_cell, inner_cell)`` pairs, ordered by outer then inner cell."""
        if self.is_over(graph):
            return []
        target = self.target(graph)
        if target is not None:
            return [(target, c) for c in self.sub_board(target, graph).legal_cells]
        moves: List[Tuple[int, int]] = []
        for i, key in enumerate(self.sub_boards):
            moves.extend((i, c) for c in graph.lookup(key).legal_cells)
        return moves

    def _rejection(self, outer_cell: int, inner_cell: int, graph: StateGraph) -> str:
        if self.is_over(graph):
            return f"game is over, winner {mark_name(self.winner(graph))}"
        sub = self.sub_board(outer_cell, graph)
        if sub.is_terminal():
            return f"sub-board {outer_cell} is already decided ({mark_name(sub.winner)})"
        target = self.target(graph)
        if target is not None and target != outer_cell:
            return f"previous move sends play to sub-board {target}, not {outer_cell}"
        return f"cell {inner_cell} of sub-board {outer_cell} is occupied"

    def play(self, mover: int, outer_cell: int, inner_cell: int, graph: StateGraph) -> SubBoardState:
        """Play ``mover`` at ``inner_cell`` of sub-board ``outer_cell``.

        Raises IllegalMove and leaves the board untouched when the move is not
        in :meth:`legal_moves`. Returns the new state of the played sub-board.
        """
        if mover not in PLAYERS:
            raise IllegalMove(f"only X or O can play, got {mover!r}")
        if not (0 <= outer_cell <= 8 and 0 <= inner_cell <= 8):
            raise IllegalMove(f"move out of range: ({outer_cell}, {inner_cell})")
        if (outer_cell, inner_cell) not in self.legal_moves(graph):
            raise IllegalMove(self._rejection(outer_cell, inner_cell, graph))

        new_key = graph.child(self.sub_boards[outer_cell], mover, inner_cell)
        new_sub = graph.lookup(new_key)
        outer_key = self.outer_key
        if new_sub.winner is not None:
            outer_key = graph.child(outer_key, new_sub.winner, outer_cell)
            logger.debug("sub-board %d decided: %s", outer_cell, mark_name(new_sub.winner))

        self.sub_boards[outer_cell] = new_key
        self.outer_key = outer_key
        self.last_outer_cell = outer_cell
        self.last_inner_cell = inner_cell
        self.history.append(Move(mover, outer_cell, inner_cell))
        return new_sub

    def position(self) -> Tuple[int, ...]:
        """Hashable identity of the position (sub-board keys then meta key)."""
        return tuple(self.sub_boards) + (self.outer_key,)

    def render(self, graph: StateGraph) -> str:
        lines = []
        for r in range(9):
            outer_row, inner_row = divmod(r, 3)
            chunks = []
            for outer_col in range(3):
                cells = self.sub_board(outer_row * 3 + outer_col, graph).cells
                chunks.append(" ".join(SYMBOLS[v] for v in cells[inner_row * 3:inner_row * 3 + 3]))
            lines.append(" | ".join(chunks))
            if inner_row == 2 and outer_row < 2:
                lines.append("------+-------+------")
        meta = self.meta(graph)
        lines.append(f"Sub-boards: {self.sub_boards}")
        lines.append(f"Outer: {''.join(SYMBOLS[v] for v in meta.cells)} key={self.outer_key} "
                     f"winner={mark_name(meta.winner)}")
        return "\n".join(lines)


def replay(moves: Iterable[Tuple[int, int, int]], graph: StateGraph) -> OuterBoard:
    """Play ``(mover, outer_cell, inner_cell)`` triples on a fresh board."""
    board = OuterBoard()
    for mover, outer_cell, inner_cell in moves:
        board.play(mover, outer_cell, inner_cell, graph)
    return board
