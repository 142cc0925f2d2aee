"""Tests for graph document value types."""

import pytest

from stepgraph.contracts.errors import NotFoundError
from stepgraph.contracts.graph import Edge, GraphDocument, Node, Position, Viewport
from stepgraph.contracts.types import EdgeID, NodeID, PortName, StepDefinitionID


def _node(node_id: str, definition: str = "proc") -> Node:
    return Node(id=NodeID(node_id), step_definition_id=StepDefinitionID(definition), position=Position(0.0, 0.0))


def _edge(edge_id: str, source: str, target: str, target_port: str = "in") -> Edge:
    return Edge(
        id=EdgeID(edge_id),
        source_node_id=NodeID(source),
        source_port=PortName("out"),
        target_node_id=NodeID(target),
        target_port=PortName(target_port),
    )


class TestViewport:
    def test_defaults_are_identity(self) -> None:
        viewport = Viewport()
        assert (viewport.x, viewport.y, viewport.zoom) == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("zoom", [0.0, -1.0])
    def test_zoom_must_be_positive(self, zoom: float) -> None:
        with pytest.raises(ValueError, match="zoom must be positive"):
            Viewport(zoom=zoom)


class TestNode:
    def test_parameters_are_read_only(self) -> None:
        node = Node(id=NodeID("n"), step_definition_id=StepDefinitionID("proc"), position=Position(0, 0), parameters={"a": 1})
        with pytest.raises(TypeError):
            node.parameters["a"] = 2  # type: ignore[index]

    def test_parameters_are_copied(self) -> None:
        """Mutating the caller's dict afterwards must not reach the node."""
        values = {"a": 1}
        node = Node(id=NodeID("n"), step_definition_id=StepDefinitionID("proc"), position=Position(0, 0), parameters=values)
        values["a"] = 99
        assert node.parameters["a"] == 1

    def test_with_position_returns_new_node(self) -> None:
        node = _node("n")
        moved = node.with_position(Position(5, 6))
        assert moved.position == Position(5, 6)
        assert node.position == Position(0, 0)
        assert moved.id == node.id

    def test_equality_compares_parameters(self) -> None:
        a = Node(id=NodeID("n"), step_definition_id=StepDefinitionID("proc"), position=Position(0, 0), parameters={"x": 1})
        b = Node(id=NodeID("n"), step_definition_id=StepDefinitionID("proc"), position=Position(0, 0), parameters={"x": 1})
        c = Node(id=NodeID("n"), step_definition_id=StepDefinitionID("proc"), position=Position(0, 0), parameters={"x": 2})
        assert a == b
        assert a != c


class TestEdge:
    def test_touches(self) -> None:
        edge = _edge("e", "a", "b")
        assert edge.touches("a")
        assert edge.touches("b")
        assert not edge.touches("c")

    def test_as_tuple(self) -> None:
        assert _edge("e", "a", "b").as_tuple() == ("a", "out", "b", "in")


class TestGraphDocument:
    def test_empty(self) -> None:
        document = GraphDocument.empty()
        assert document.node_count == 0
        assert document.edge_count == 0
        assert document.viewport is None

    def test_lookup(self) -> None:
        document = GraphDocument(nodes=(_node("a"), _node("b")), edges=(_edge("e1", "a", "b"),))
        assert document.get_node("a").id == "a"
        assert document.find_node("zzz") is None
        assert document.has_node("b")
        assert document.get_edge("e1").target_node_id == "b"

    def test_get_missing_raises_not_found(self) -> None:
        document = GraphDocument.empty()
        with pytest.raises(NotFoundError) as exc_info:
            document.get_node("ghost")
        assert exc_info.value.kind == "node"
        assert exc_info.value.key == "ghost"
        with pytest.raises(NotFoundError):
            document.get_edge("ghost")

    def test_edge_into_and_touching(self) -> None:
        e1 = _edge("e1", "a", "c", "left")
        e2 = _edge("e2", "b", "c", "right")
        document = GraphDocument(nodes=(_node("a"), _node("b"), _node("c")), edges=(e1, e2))
        assert document.edge_into("c", "left") == e1
        assert document.edge_into("c", "other") is None
        assert document.edges_touching("c") == (e1, e2)
        assert document.edges_touching("a") == (e1,)

    def test_with_methods_do_not_mutate(self) -> None:
        document = GraphDocument(nodes=(_node("a"),))
        updated = document.with_viewport(Viewport(zoom=2.0))
        assert document.viewport is None
        assert updated.viewport == Viewport(zoom=2.0)
        assert updated.nodes == document.nodes
