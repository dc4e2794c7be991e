"""
Exhaustive state graph of a single 3x3 board.

The graph is built once by breadth-first search from the empty board and is
read-only afterwards. Every state is keyed by its canonical key, and every
expanded state gets its full transition row at the time it is dequeued.

Transitions live in one numpy arena indexed by ``[key, slot]`` where
``slot = (mover - 1) * 9 + cell``; ``-1`` marks a missing edge. Only keys that
are nodes of the graph ever get a non-empty row.
"""
from __future__ import annotations

import logging
import time
from collections import Counter, deque
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .board import DRAW, KEY_SPACE, MOVERS, O, TERNARY_SPAN, X, SubBoardState, canonical_key, check_move
from .errors import IllegalMove, MissingState

logger = logging.getLogger(__name__)

NO_CHILD = -1
SLOTS = len(MOVERS) * 9


def slot(mover: int, cell: int) -> int:
    return (mover - 1) * 9 + cell


class StateGraph:
    """Mapping from canonical key to :class:`SubBoardState` plus the edges between them."""

    def __init__(
        self,
        states: Dict[int, SubBoardState],
        children: np.ndarray,
        movers: Tuple[int, ...],
        edge_count: int,
        build_seconds: float = 0.0,
    ):
        children.flags.writeable = False
        self._states = states
        self._children = children
        self.movers = movers
        self.edge_count = edge_count
        self.build_seconds = build_seconds

    @classmethod
    def build(cls, movers: Sequence[int] = MOVERS) -> "StateGraph":
        """Enumerate every state reachable from the empty board.

        ``movers`` defaults to X, O and Draw. The Draw pseudo-mover is what lets
        the outer board record a decided sub-board in its own meta-state, so
        graphs built without it cannot drive an :class:`~uttt.outer.OuterBoard`.
        """
        movers_t = tuple(movers)
        if not movers_t or len(set(movers_t)) != len(movers_t) or any(m not in MOVERS for m in movers_t):
            raise ValueError(f"movers must be distinct values among X, O, Draw: {movers!r}")

        t0 = time.perf_counter()
        root = SubBoardState.empty()
        states: Dict[int, SubBoardState] = {root.key: root}
        # without the Draw mover no key leaves the ternary range
        rows = KEY_SPACE if DRAW in movers_t else TERNARY_SPAN
        children = np.full((rows, SLOTS), NO_CHILD, dtype=np.int32)
        edges = 0
        q = deque([root])
        while q:
            node = q.popleft()
            row = children[node.key]
            for cell in node.legal_cells:
                for mover in movers_t:
                    k = node.child_key(mover, cell)
                    if k not in states:
                        child = node.play(mover, cell)
                        states[k] = child
                        q.append(child)
                    row[slot(mover, cell)] = k
                    edges += 1
        elapsed = time.perf_counter() - t0
        logger.info("Built state graph: %d states, %d edges in %.3fs", len(states), edges, elapsed)
        return cls(states, children, movers_t, edges, elapsed)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __iter__(self) -> Iterator[int]:
        return iter(self._states)

    @property
    def root(self) -> SubBoardState:
        return self._states[0]

    def states(self) -> Iterator[SubBoardState]:
        return iter(self._states.values())

    def lookup(self, key: int) -> SubBoardState:
        try:
            return self._states[key]
        except KeyError:
            raise MissingState(key) from None

    def child(self, key: int, mover: int, cell: int) -> int:
        """Key reached from ``key`` when ``mover`` takes ``cell``."""
        state = self.lookup(key)
        check_move(mover, cell)
        k = int(self._children[key, slot(mover, cell)])
        if k == NO_CHILD:
            if mover not in self.movers:
                raise IllegalMove(f"graph was built without mover {mover}")
            raise IllegalMove(f"cell {cell} is not playable on state {state.key}")
        return k

    def transitions(self, key: int) -> Dict[Tuple[int, int], int]:
        self.lookup(key)
        row = self._children[key]
        out: Dict[Tuple[int, int], int] = {}
        for mover in self.movers:
            for cell in range(9):
                k = int(row[slot(mover, cell)])
                if k != NO_CHILD:
                    out[(mover, cell)] = k
        return out

    def children_of(self, key: int) -> List[SubBoardState]:
        return [self._states[k] for k in sorted(set(self.transitions(key).values()))]

    def stats(self) -> Dict[str, int]:
        counts = Counter(s.winner for s in self._states.values())
        return {
            "states": len(self._states),
            "edges": self.edge_count,
            "ongoing": counts[None],
            "x_wins": counts[X],
            "o_wins": counts[O],
            "draws": counts[DRAW],
        }

    def find(self, cells: Sequence[int]) -> Optional[SubBoardState]:
        return self._states.get(canonical_key(tuple(cells)))
