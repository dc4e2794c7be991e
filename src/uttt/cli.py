from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Tuple

from .board import O, SYMBOLS, X, SubBoardState, mark_name, parse_board
from .config import Settings, movers_label
from .errors import IllegalMove, MissingState
from .graph import StateGraph
from .outer import OuterBoard
from .tracking import log_metrics, log_params, maybe_mlflow_run

# O takes sub-board 0 on its middle row, then X's reply lands in a free choice
DEMO_MOVES = (
    (X, 0, 0),
    (O, 0, 3),
    (X, 3, 0),
    (O, 0, 4),
    (X, 4, 0),
    (O, 0, 5),
    (X, 5, 0),
)


def parse_moves(text: str) -> List[Tuple[int, int, int]]:
    """Parse ``"X0:8,O8:1"`` into ``[(X, 0, 8), (O, 8, 1)]``."""
    moves = []
    for raw in text.split(","):
        tok = raw.strip().upper()
        if not tok:
            continue
        if len(tok) < 4 or tok[0] not in "XO" or ":" not in tok:
            raise ValueError(f"bad move {raw!r}; expected e.g. X0:8")
        outer, _, inner = tok[1:].partition(":")
        if not (outer.isdigit() and inner.isdigit()):
            raise ValueError(f"bad move {raw!r}; expected e.g. X0:8")
        moves.append((SYMBOLS.index(tok[0]), int(outer), int(inner)))
    return moves


def format_moves(moves: List[Tuple[int, int]]) -> str:
    return " ".join(f"{o}:{i}" for o, i in moves)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="uttt", description="Ultimate tic-tac-toe state graph CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument(
        "--movers",
        default=None,
        help="Movers enumerated by the graph, e.g. XOD (default) or XO; env UTTT_MOVERS",
    )

    p_graph = sub.add_parser("graph", help="Build the state graph and report its size")
    p_graph.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p_graph.add_argument(
        "--log-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for tracking logs (for mlflow local backend)",
    )

    p_show = sub.add_parser("show", help="Render one sub-board state")
    g = p_show.add_mutually_exclusive_group(required=True)
    g.add_argument("--key", type=int, help="Canonical key of the state")
    g.add_argument("--board", help="Board string of -XOD symbols, e.g. XO--X---O")

    p_play = sub.add_parser("play", help="Replay moves on a fresh ultimate board")
    p_play.add_argument("--moves", required=True, help='Comma-separated moves, e.g. "X0:4,O4:0"')

    sub.add_parser("demo", help="Play a fixed opening and show the resulting legal moves")

    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _play_and_report(moves: List[Tuple[int, int, int]], graph: StateGraph) -> int:
    board = OuterBoard()
    for mover, outer, inner in moves:
        sub = board.play(mover, outer, inner, graph)
        logging.debug("%s -> %d:%d sub-board key=%d", SYMBOLS[mover], outer, inner, sub.key)
    print(board.render(graph))
    actions = board.legal_moves(graph)
    logging.info("winner=%s legal_moves=%d", mark_name(board.winner(graph)), len(actions))
    print(f"Actions: {format_moves(actions)}")
    return 0


def _run(ns: argparse.Namespace, settings: Settings) -> int:
    if ns.cmd == "graph":
        with maybe_mlflow_run(ns.tracking == "mlflow", run_name="state_graph", log_dir=ns.log_dir) as tracked:
            graph = StateGraph.build(settings.movers)
            stats = graph.stats()
            logging.info(
                "movers=%s states=%d edges=%d seconds=%.3f",
                movers_label(graph.movers),
                stats["states"],
                stats["edges"],
                graph.build_seconds,
            )
            print(" ".join(f"{k}={v}" for k, v in stats.items()))
            if tracked:
                log_params({"movers": movers_label(graph.movers)})
                log_metrics({
                    "states": float(stats["states"]),
                    "edges": float(stats["edges"]),
                    "build_seconds": graph.build_seconds,
                })
        return 0

    if ns.cmd == "show":
        if ns.board is not None:
            key = SubBoardState.from_cells(parse_board(ns.board)).key
        else:
            key = ns.key
        graph = StateGraph.build(settings.movers)
        state = graph.lookup(key)
        print(state.render())
        print(f"Transitions: {len(graph.transitions(key))}")
        return 0

    if ns.cmd == "play":
        moves = parse_moves(ns.moves)
        return _play_and_report(moves, StateGraph.build(settings.movers))

    if ns.cmd == "demo":
        return _play_and_report(list(DEMO_MOVES), StateGraph.build(settings.movers))

    return -1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        settings = Settings.from_env(movers=ns.movers, log_level="DEBUG" if ns.verbose else None)
    except ValueError as exc:
        logging.basicConfig(format="[%(levelname)s] %(message)s")
        logging.error("%s", exc)
        return 2
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO),
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if ns.version:
        try:
            from importlib.metadata import version as _ver

            print(_ver("uttt"))
        except Exception:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    try:
        rc = _run(ns, settings)
    except MissingState as exc:
        logging.error("Missing state: %s", exc)
        return 3
    except (IllegalMove, ValueError) as exc:
        logging.error("%s", exc)
        return 2
    if rc < 0:
        parser.print_help()
        return 0
    return rc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
