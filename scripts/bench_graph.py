#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from uttt.config import movers_label, parse_movers
from uttt.graph import StateGraph
from uttt.outer import OuterBoard
from uttt.tracking import log_metrics, log_params, maybe_mlflow_run


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    z = 1.96
    half = z * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    rounds: int = 5
    movers: str = "XOD"
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = Path("runs")


def parse_args() -> Config:
    p = argparse.ArgumentParser(description="Time state graph construction")
    p.add_argument("--rounds", type=int, default=5)
    p.add_argument("--movers", default="XOD")
    p.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    p.add_argument("--log-dir", type=Path, default=Path("runs"))
    ns = p.parse_args()
    return Config(rounds=ns.rounds, movers=ns.movers, tracking=ns.tracking, log_dir=ns.log_dir)


def main() -> int:
    cfg = parse_args()
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    movers = parse_movers(cfg.movers)
    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="graph_benchmark", log_dir=cfg.log_dir) as tracked:
        build_times: List[float] = []
        query_times: List[float] = []
        states = 0
        for _ in range(cfg.rounds):
            t0 = time.perf_counter()
            g = StateGraph.build(movers)
            t1 = time.perf_counter()
            build_times.append(t1 - t0)
            states = len(g)
            board = OuterBoard()
            t2 = time.perf_counter()
            for _ in range(1000):
                board.legal_moves(g)
            query_times.append((time.perf_counter() - t2) / 1000)
        m_build, h_build = ci95(build_times)
        m_query, h_query = ci95(query_times)
        metrics = {
            "states": float(states),
            "build_mean_s": m_build,
            "build_ci95_half_s": h_build,
            "legal_moves_mean_s": m_query,
            "legal_moves_ci95_half_s": h_query,
        }
        if tracked:
            log_params({"rounds": cfg.rounds, "movers": movers_label(movers)})
            log_metrics(metrics)
        print(
            f"movers={movers_label(movers)} states={states} rounds={cfg.rounds}\n"
            f"- StateGraph.build: mean={m_build:.4f}s ± {h_build:.4f}s (95% CI)\n"
            f"- OuterBoard.legal_moves (empty board): mean={m_query * 1e6:.1f}us ± {h_query * 1e6:.1f}us (95% CI)"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
