"""Tests for the NetworkX view of graph documents."""

import pytest

from stepgraph.contracts.graph import GraphDocument
from stepgraph.core.graph.topology import find_cycle, to_networkx, topological_order
from tests.fixtures.documents import build_document, runnable_document


class TestToNetworkx:
    def test_vertices_and_arcs(self) -> None:
        graph = to_networkx(runnable_document())
        assert set(graph.nodes) == {"src", "p", "out"}
        assert graph.nodes["p"]["step_definition_id"] == "proc"
        assert graph.number_of_edges() == 2
        assert graph.edges["src", "p", "e1"]["target_port"] == "in"

    def test_parallel_edges_kept(self) -> None:
        document = build_document(
            [("s", "source"), ("m", "merge")],
            [("s", "out", "m", "left"), ("s", "out", "m", "right")],
        )
        assert to_networkx(document).number_of_edges("s", "m") == 2


class TestFindCycle:
    def test_acyclic(self) -> None:
        assert find_cycle(runnable_document()) == ()
        assert find_cycle(GraphDocument.empty()) == ()

    def test_two_node_cycle(self) -> None:
        document = build_document([("a", "proc"), ("b", "proc")], [("a", "out", "b", "in"), ("b", "out", "a", "in")])
        assert set(find_cycle(document)) == {"a", "b"}
        assert len(find_cycle(document)) == 2


class TestTopologicalOrder:
    def test_edges_point_forward(self) -> None:
        document = build_document(
            [("out", "sink"), ("p", "proc"), ("src", "source")],
            [("src", "out", "p", "in"), ("p", "out", "out", "in")],
        )
        assert topological_order(document) == ["src", "p", "out"]

    def test_ties_broken_by_document_order(self) -> None:
        document = build_document([("b", "source"), ("a", "source"), ("c", "sink")])
        assert topological_order(document) == ["b", "a", "c"]

    def test_cycle_raises(self) -> None:
        document = build_document([("a", "proc"), ("b", "proc")], [("a", "out", "b", "in"), ("b", "out", "a", "in")])
        with pytest.raises(ValueError, match="contains a cycle"):
            topological_order(document)
