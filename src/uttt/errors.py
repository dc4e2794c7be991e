"""Error types raised by the board and graph layers."""
from __future__ import annotations


class UTTTError(Exception):
    """Base class for every error raised by this package."""


class MissingState(UTTTError, KeyError):
    """A canonical key was looked up but is not a node of the state graph.

    Never recovered locally: it means enumeration was incomplete or a key got
    corrupted on its way through the caller.
    """

    def __init__(self, key: int):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"state {self.key} is not in the graph"


class IllegalMove(UTTTError, ValueError):
    """The requested move is not playable from the current position."""
