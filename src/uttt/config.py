"""Environment-first settings.

``UTTT_MOVERS`` picks the movers enumerated by the graph (``XOD`` by default,
``XO`` for a plain sub-board graph); ``UTTT_LOG_LEVEL`` sets the log level.
Command line flags override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .board import MOVERS, SYMBOLS


def parse_movers(text: str) -> Tuple[int, ...]:
    raw = text.strip().upper()
    if not raw:
        raise ValueError("movers must not be empty")
    movers = []
    for ch in raw:
        if ch not in "XOD":
            raise ValueError(f"unknown mover {ch!r}; use letters from XOD")
        m = SYMBOLS.index(ch)
        if m in movers:
            raise ValueError(f"mover {ch!r} given twice")
        movers.append(m)
    return tuple(movers)


def movers_label(movers: Tuple[int, ...]) -> str:
    return "".join(SYMBOLS[m] for m in movers)


@dataclass
class Settings:
    movers: Tuple[int, ...] = MOVERS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, movers: Optional[str] = None, log_level: Optional[str] = None) -> "Settings":
        m = movers or os.getenv("UTTT_MOVERS")
        lvl = log_level or os.getenv("UTTT_LOG_LEVEL")
        return cls(
            movers=parse_movers(m) if m else MOVERS,
            log_level=(lvl or "INFO").upper(),
        )
