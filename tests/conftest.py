import pytest

from uttt.board import O, X
from uttt.graph import StateGraph


@pytest.fixture(scope="session")
def graph():
    return StateGraph.build()


@pytest.fixture(scope="session")
def xo_graph():
    return StateGraph.build((X, O))
