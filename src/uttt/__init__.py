"""uttt package.

State graph of a 3x3 board and the ultimate tic-tac-toe board built on it.

Convenience imports are exposed for common workflows.
"""

from .board import DRAW, FREE, MOVERS, O, PLAYERS, X, SubBoardState, canonical_key
from .errors import IllegalMove, MissingState, UTTTError
from .graph import StateGraph
from .outer import Move, OuterBoard, replay

__all__ = [
    "FREE",
    "X",
    "O",
    "DRAW",
    "MOVERS",
    "PLAYERS",
    "SubBoardState",
    "canonical_key",
    "StateGraph",
    "OuterBoard",
    "Move",
    "replay",
    "UTTTError",
    "MissingState",
    "IllegalMove",
]
