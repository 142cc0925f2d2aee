"""Graph editing engine.

GraphEditor is the only thing that changes a graph document. Each operation
computes a new immutable GraphDocument, swaps it in, and emits one domain
event carrying it. An operation that fails raises before the swap, so the
previous document stays current and nothing is emitted.

Invariants held by every document the editor exposes:
- node ids are unique and edge ids are unique
- every edge references existing nodes, and ports their step definitions
  declare wherever the catalog still knows the definition
- no edge connects a node to itself
- an input port (target_node_id, target_port) has at most one incoming edge
"""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from typing import Any

from stepgraph.contracts.catalog import StepDefinition
from stepgraph.contracts.enums import ConnectionRejection, OccupiedPortPolicy
from stepgraph.contracts.errors import DataIntegrityWarning, InvalidConnectionError, NotFoundError
from stepgraph.contracts.events import (
    DocumentLoaded,
    EdgeConnected,
    EdgeDisconnected,
    NodeAdded,
    NodeMoved,
    NodeParametersUpdated,
    NodeRemoved,
    ViewportChanged,
)
from stepgraph.contracts.graph import Edge, GraphDocument, Node, Position, Viewport
from stepgraph.contracts.types import NodeID, PortName, StepDefinitionID
from stepgraph.core.catalog import StepDefinitionCatalog
from stepgraph.core.config import StepGraphSettings
from stepgraph.core.events import EventBusProtocol, NullEventBus
from stepgraph.core.graph.connection import validate_connection, validate_edge
from stepgraph.core.identifiers import new_edge_id, new_node_id
from stepgraph.core.logging import get_logger
from stepgraph.core.parameters import initial_parameters, merge_parameters

logger = get_logger(__name__)


class GraphEditor:
    """Holds the authoritative document of one editing session.

    Example:
        editor = GraphEditor(builtin_catalog())
        source = editor.add_node(Position(0, 0), "sd-input-s3")
        sink = editor.add_node(Position(500, 0), "sd-output-s3")
        editor.connect(source.id, "images", sink.id, "images")
    """

    def __init__(
        self,
        catalog: StepDefinitionCatalog,
        *,
        document: GraphDocument | None = None,
        settings: StepGraphSettings | None = None,
        event_bus: EventBusProtocol | None = None,
    ) -> None:
        """Initialize the editor.

        Args:
            catalog: Step definitions nodes are created from
            document: Starting document; empty if None. Not re-validated,
                use load() for documents from outside the editor.
            settings: Editing and validation behavior (defaults if None)
            event_bus: Receives one event per successful mutation
        """
        self._catalog = catalog
        self._settings = settings or StepGraphSettings()
        self._events: EventBusProtocol = event_bus or NullEventBus()
        self._document = document or GraphDocument.empty()

    @property
    def document(self) -> GraphDocument:
        """The current document."""
        return self._document

    @property
    def catalog(self) -> StepDefinitionCatalog:
        return self._catalog

    @property
    def settings(self) -> StepGraphSettings:
        return self._settings

    def _resolve_definition(self, step_definition: StepDefinition | str) -> StepDefinition:
        step_id = step_definition.id if isinstance(step_definition, StepDefinition) else step_definition
        definition = self._catalog.find(step_id)
        if definition is None:
            raise NotFoundError("step definition", step_id)
        return definition

    def add_node(self, position: Position, step_definition: StepDefinition | str) -> Node:
        """Place a new node for a catalog step definition.

        Parameters start at their schema defaults; parameters without a
        default are left unset.

        Raises:
            NotFoundError: If the step definition is not in the catalog
        """
        definition = self._resolve_definition(step_definition)
        node = Node(
            id=new_node_id(self._settings.editor.node_id_prefix),
            step_definition_id=StepDefinitionID(definition.id),
            position=position,
            parameters=initial_parameters(definition),
        )
        self._document = self._document.with_nodes((*self._document.nodes, node))
        logger.debug("node_added", node_id=node.id, step_definition_id=definition.id)
        self._events.emit(NodeAdded(document=self._document, node=node))
        return node

    def remove_node(self, node_id: str) -> tuple[Edge, ...]:
        """Delete a node and every edge touching it.

        Returns:
            The edges removed along with the node

        Raises:
            NotFoundError: If the node does not exist
        """
        self._document.get_node(node_id)
        removed = self._document.edges_touching(node_id)
        document = self._document
        self._document = GraphDocument(
            nodes=tuple(n for n in document.nodes if n.id != node_id),
            edges=tuple(e for e in document.edges if not e.touches(node_id)),
            viewport=document.viewport,
        )
        logger.debug("node_removed", node_id=node_id, removed_edge_count=len(removed))
        self._events.emit(NodeRemoved(document=self._document, node_id=NodeID(node_id), removed_edges=removed))
        return removed

    def move_node(self, node_id: str, position: Position) -> Node:
        """Change a node's position. Edges are unaffected.

        Raises:
            NotFoundError: If the node does not exist
        """
        moved = self._document.get_node(node_id).with_position(position)
        self._document = self._replace_node(moved)
        self._events.emit(NodeMoved(document=self._document, node_id=moved.id, position=position))
        return moved

    def connect(self, source_node_id: str, source_port: str, target_node_id: str, target_port: str) -> Edge:
        """Draw an edge from an output port to an input port.

        If the input port is already wired, the occupied-port policy decides:
        REPLACE removes the existing edge first, REJECT refuses.

        Raises:
            InvalidConnectionError: If the connection rules reject the edge,
                or the port is occupied under the REJECT policy
        """
        check = validate_connection(
            self._document,
            self._catalog,
            source_node_id,
            source_port,
            target_node_id,
            target_port,
            strict_port_kinds=self._settings.validation.strict_port_kinds,
        )
        if not check.allowed:
            assert check.reason is not None
            logger.debug("connection_rejected", reason=check.reason.value, detail=check.detail)
            raise InvalidConnectionError(check.reason, check.detail)

        occupant = self._document.edge_into(target_node_id, target_port)
        if occupant is not None and self._settings.editor.occupied_port_policy is OccupiedPortPolicy.REJECT:
            detail = f"input '{target_port}' of node '{target_node_id}' is already connected by edge '{occupant.id}'"
            logger.debug("connection_rejected", reason=ConnectionRejection.TARGET_PORT_OCCUPIED.value, detail=detail)
            raise InvalidConnectionError(ConnectionRejection.TARGET_PORT_OCCUPIED, detail)

        edge = Edge(
            id=new_edge_id(self._settings.editor.edge_id_prefix),
            source_node_id=NodeID(source_node_id),
            source_port=PortName(source_port),
            target_node_id=NodeID(target_node_id),
            target_port=PortName(target_port),
        )
        kept = tuple(e for e in self._document.edges if e is not occupant)
        self._document = self._document.with_edges((*kept, edge))
        logger.debug(
            "edge_connected",
            edge_id=edge.id,
            source=f"{source_node_id}.{source_port}",
            target=f"{target_node_id}.{target_port}",
            replaced=occupant.id if occupant is not None else None,
        )
        self._events.emit(EdgeConnected(document=self._document, edge=edge, replaced=occupant))
        return edge

    def disconnect(self, edge_id: str) -> Edge:
        """Remove an edge.

        Raises:
            NotFoundError: If the edge does not exist (including a second
                disconnect of the same edge)
        """
        edge = self._document.get_edge(edge_id)
        self._document = self._document.with_edges(tuple(e for e in self._document.edges if e.id != edge_id))
        logger.debug("edge_disconnected", edge_id=edge_id)
        self._events.emit(EdgeDisconnected(document=self._document, edge=edge))
        return edge

    def update_node_parameters(self, node_id: str, new_values: Mapping[str, Any]) -> Node:
        """Merge new values into a node's parameters.

        Every value is checked against the step's parameter schema; if any
        is unknown or of the wrong kind the whole update is refused.

        Raises:
            NotFoundError: If the node does not exist, or its step
                definition is no longer in the catalog
            InvalidParameterError: Listing every offending parameter
        """
        node = self._document.get_node(node_id)
        definition = self._resolve_definition(node.step_definition_id)
        merged = merge_parameters(node.id, definition, node.parameters, new_values)
        updated = node.with_parameters(merged)
        self._document = self._replace_node(updated)
        changed = tuple(new_values)
        logger.debug("node_parameters_updated", node_id=node.id, changed=list(changed))
        self._events.emit(NodeParametersUpdated(document=self._document, node_id=node.id, changed=changed))
        return updated

    def set_viewport(self, viewport: Viewport | None) -> None:
        """Record pan/zoom. Cosmetic only."""
        self._document = self._document.with_viewport(viewport)
        self._events.emit(ViewportChanged(document=self._document, viewport=viewport))

    def load(self, document: GraphDocument) -> GraphDocument:
        """Adopt a document built outside the editor (opened, restored, imported).

        The document is checked against every graph invariant before it
        replaces the current one. Parameter values are not re-checked:
        stored pipelines may predate the current schemas. Nodes whose step
        definition the catalog no longer has are kept, with a
        DataIntegrityWarning.

        Raises:
            ValueError: If node or edge ids are duplicated
            InvalidConnectionError: If an edge breaks a connection rule or
                a second edge enters an occupied input port
        """
        check_document(document, self._catalog, strict_port_kinds=self._settings.validation.strict_port_kinds)
        self._document = document
        logger.info("document_loaded", node_count=document.node_count, edge_count=document.edge_count)
        self._events.emit(DocumentLoaded(document=document))
        return document

    def _replace_node(self, updated: Node) -> GraphDocument:
        return self._document.with_nodes(tuple(updated if n.id == updated.id else n for n in self._document.nodes))


def check_document(document: GraphDocument, catalog: StepDefinitionCatalog, *, strict_port_kinds: bool = True) -> None:
    """Verify the graph invariants of a whole document.

    Raises on the first violation found. A node whose step definition has
    left the catalog stays in the document, inert: it produces a
    DataIntegrityWarning, and edges touching it go through validate_edge()'s
    reduced rules.

    Raises:
        ValueError: If node or edge ids are duplicated
        InvalidConnectionError: If an edge breaks a connection rule or
            shares its input port with an earlier edge
    """
    seen_nodes: set[str] = set()
    for node in document.nodes:
        if node.id in seen_nodes:
            raise ValueError(f"Duplicate node id in document: '{node.id}'")
        seen_nodes.add(node.id)
        if catalog.find(node.step_definition_id) is None:
            logger.warning("unknown_step_definition", node_id=node.id, step_definition_id=node.step_definition_id)
            warnings.warn(
                f"node '{node.id}' references unknown step definition '{node.step_definition_id}'",
                DataIntegrityWarning,
                stacklevel=2,
            )

    seen_edges: set[str] = set()
    occupied: dict[tuple[str, str], str] = {}
    for edge in document.edges:
        if edge.id in seen_edges:
            raise ValueError(f"Duplicate edge id in document: '{edge.id}'")
        seen_edges.add(edge.id)
        check = validate_edge(document, catalog, edge, strict_port_kinds=strict_port_kinds)
        if not check.allowed:
            assert check.reason is not None
            raise InvalidConnectionError(check.reason, f"edge '{edge.id}': {check.detail}")
        port = (edge.target_node_id, edge.target_port)
        if port in occupied:
            raise InvalidConnectionError(
                ConnectionRejection.TARGET_PORT_OCCUPIED,
                f"edges '{occupied[port]}' and '{edge.id}' both enter input '{edge.target_port}' of node '{edge.target_node_id}'",
            )
        occupied[port] = edge.id
