"""Graph document contracts: nodes, edges, and the document that owns them.

Documents are immutable values. The editing engine produces a new document
for every successful operation, so a saved snapshot can never be altered by
later edits, and any subscriber can hold on to the document it was given.

Nodes and edges are kept in insertion order. Validators report per-node
problems in document order, so the order is part of the contract.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from stepgraph.contracts.errors import NotFoundError
from stepgraph.contracts.types import EdgeID, NodeID, PortName, StepDefinitionID


@dataclass(frozen=True, slots=True)
class Position:
    """Canvas coordinate of a node's top-left corner."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Viewport:
    """Pan and zoom of the canvas. Cosmetic: never consulted by validation."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        if self.zoom <= 0:
            raise ValueError(f"viewport zoom must be positive, got {self.zoom}")


def _freeze_parameters(values: Mapping[str, Any]) -> MappingProxyType[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True, slots=True)
class Node:
    """An instance of a step definition placed in a pipeline graph.

    Ports are not stored here: they are derived from the step definition
    via the catalog, so they cannot drift from it.
    """

    id: NodeID
    step_definition_id: StepDefinitionID
    position: Position
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view over a private copy; callers cannot mutate a node in place
        object.__setattr__(self, "parameters", _freeze_parameters(self.parameters))

    def with_position(self, position: Position) -> Node:
        return replace(self, position=position)

    def with_parameters(self, parameters: Mapping[str, Any]) -> Node:
        return replace(self, parameters=parameters)


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed connection from one node's output port to another node's input port."""

    id: EdgeID
    source_node_id: NodeID
    source_port: PortName
    target_node_id: NodeID
    target_port: PortName

    def touches(self, node_id: str) -> bool:
        """Whether this edge starts or ends at the given node."""
        return self.source_node_id == node_id or self.target_node_id == node_id

    def as_tuple(self) -> tuple[str, str, str, str]:
        """(source_node_id, source_port, target_node_id, target_port)."""
        return (self.source_node_id, self.source_port, self.target_node_id, self.target_port)


@dataclass(frozen=True, slots=True)
class GraphDocument:
    """Nodes and edges of one pipeline graph plus the cosmetic viewport."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    viewport: Viewport | None = None

    @classmethod
    def empty(cls) -> GraphDocument:
        return cls()

    @property
    def node_count(self) -> int:
        """Number of nodes in the document."""
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        """Number of edges in the document."""
        return len(self.edges)

    def find_node(self, node_id: str) -> Node | None:
        """Return the node with this id, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_node(self, node_id: str) -> Node:
        """Return the node with this id.

        Raises:
            NotFoundError: If no such node exists
        """
        node = self.find_node(node_id)
        if node is None:
            raise NotFoundError("node", node_id)
        return node

    def has_node(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def find_edge(self, edge_id: str) -> Edge | None:
        """Return the edge with this id, or None."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def get_edge(self, edge_id: str) -> Edge:
        """Return the edge with this id.

        Raises:
            NotFoundError: If no such edge exists
        """
        edge = self.find_edge(edge_id)
        if edge is None:
            raise NotFoundError("edge", edge_id)
        return edge

    def edge_into(self, target_node_id: str, target_port: str) -> Edge | None:
        """Return the edge occupying an input port, or None if it is free."""
        for edge in self.edges:
            if edge.target_node_id == target_node_id and edge.target_port == target_port:
                return edge
        return None

    def edges_touching(self, node_id: str) -> tuple[Edge, ...]:
        """All edges that start or end at the given node."""
        return tuple(edge for edge in self.edges if edge.touches(node_id))

    def with_nodes(self, nodes: tuple[Node, ...]) -> GraphDocument:
        return replace(self, nodes=nodes)

    def with_edges(self, edges: tuple[Edge, ...]) -> GraphDocument:
        return replace(self, edges=edges)

    def with_viewport(self, viewport: Viewport | None) -> GraphDocument:
        return replace(self, viewport=viewport)
