import pytest

from uttt.board import O, X
from uttt.graph import StateGraph
from uttt.outer import replay

pytest.importorskip("pytest_benchmark")


def test_benchmark_build_xo_graph(benchmark):
    g = benchmark.pedantic(StateGraph.build, args=((X, O),), rounds=3, iterations=1)
    assert len(g) == 18753


def test_benchmark_legal_moves(benchmark, graph):
    board = replay([(X, 4, 4), (O, 4, 0), (X, 0, 8)], graph)
    moves = benchmark(board.legal_moves, graph)
    assert moves == [(8, c) for c in range(9)]
