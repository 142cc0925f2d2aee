"""Conversion between graph documents and plain JSON-safe dicts.

Three shapes cross the library boundary:
- document dicts: full fidelity, used for snapshots and the CLI's input files
- execution payloads: what the execution service receives
- pipeline records: the stored "steps + connections" form of a pipeline,
  which carries no positions or port names
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from stepgraph.contracts.enums import ConnectionRejection
from stepgraph.contracts.graph import Edge, GraphDocument, Node, Position, Viewport
from stepgraph.contracts.types import EdgeID, NodeID, PortName, StepDefinitionID
from stepgraph.core.catalog import StepDefinitionCatalog
from stepgraph.core.graph.connection import validate_edge
from stepgraph.core.graph.layout import row_layout_position
from stepgraph.core.identifiers import new_edge_id
from stepgraph.core.logging import get_logger

logger = get_logger(__name__)


def _position_to_dict(position: Position) -> dict[str, float]:
    return {"x": position.x, "y": position.y}


def _position_from_dict(data: Mapping[str, Any]) -> Position:
    return Position(x=float(data["x"]), y=float(data["y"]))


def node_to_dict(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "step_definition_id": node.step_definition_id,
        "position": _position_to_dict(node.position),
        "parameters": dict(node.parameters),
    }


def edge_to_dict(edge: Edge) -> dict[str, str]:
    return {
        "id": edge.id,
        "source_node_id": edge.source_node_id,
        "source_port": edge.source_port,
        "target_node_id": edge.target_node_id,
        "target_port": edge.target_port,
    }


def document_to_dict(document: GraphDocument) -> dict[str, Any]:
    """Serialize a document to a JSON-safe dict (order preserving)."""
    viewport = document.viewport
    return {
        "nodes": [node_to_dict(node) for node in document.nodes],
        "edges": [edge_to_dict(edge) for edge in document.edges],
        "viewport": None if viewport is None else {"x": viewport.x, "y": viewport.y, "zoom": viewport.zoom},
    }


def document_from_dict(data: Mapping[str, Any]) -> GraphDocument:
    """Deserialize a document dict.

    Structural only: this does not check the graph invariants. Imported
    documents go through GraphEditor.load(), which does.

    Raises:
        ValueError: If a required key is missing or malformed
    """
    try:
        nodes = tuple(
            Node(
                id=NodeID(str(item["id"])),
                step_definition_id=StepDefinitionID(str(item["step_definition_id"])),
                position=_position_from_dict(item["position"]),
                parameters=dict(item.get("parameters") or {}),
            )
            for item in data.get("nodes") or []
        )
        edges = tuple(
            Edge(
                id=EdgeID(str(item["id"])),
                source_node_id=NodeID(str(item["source_node_id"])),
                source_port=PortName(str(item["source_port"])),
                target_node_id=NodeID(str(item["target_node_id"])),
                target_port=PortName(str(item["target_port"])),
            )
            for item in data.get("edges") or []
        )
        raw_viewport = data.get("viewport")
        viewport = (
            None
            if raw_viewport is None
            else Viewport(
                x=float(raw_viewport.get("x", 0.0)),
                y=float(raw_viewport.get("y", 0.0)),
                zoom=float(raw_viewport.get("zoom", 1.0)),
            )
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed graph document: {e!r}") from e
    return GraphDocument(nodes=nodes, edges=edges, viewport=viewport)


def execution_payload(document: GraphDocument) -> dict[str, Any]:
    """Serialize a document for the execution service.

    Nodes carry step_definition_id, parameters and position; edges are
    (source_node_id, source_port, target_node_id, target_port) tuples.
    """
    return {
        "nodes": [
            {
                "id": node.id,
                "step_definition_id": node.step_definition_id,
                "parameters": dict(node.parameters),
                "position": _position_to_dict(node.position),
            }
            for node in document.nodes
        ],
        "edges": [edge.as_tuple() for edge in document.edges],
    }


def _first_key(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    raise KeyError(keys[0])


def document_from_pipeline_record(
    steps: Sequence[Mapping[str, Any]],
    connections: Sequence[Sequence[str]],
    catalog: StepDefinitionCatalog,
    *,
    strict_port_kinds: bool = True,
) -> GraphDocument:
    """Build a document from a stored pipeline record.

    Records hold no positions, so nodes are laid out left to right in step
    order. Connections are either [from_step_id, to_step_id] pairs, resolved
    to the source's first output port and the target's first input port, or
    [from_step_id, from_port, to_step_id, to_port] quadruples.

    Records were written without the editor's rules, so each connection is
    checked the way GraphEditor.load() will check it. Connections that
    cannot be resolved or would break a rule are skipped and logged:
    unknown steps, default ports that cannot be resolved, ports the
    definition does not declare, self-connections, mismatched port kinds,
    and a second connection into an input that is already wired (the first
    one wins). The user sees a partially wired graph rather than a pipeline
    that refuses to open.

    Args:
        steps: Items with step_id, step_definition_id and step_parameters
            (camelCase keys are accepted too)
        connections: Stored connections
        catalog: StepDefinitionCatalog used to resolve default ports
        strict_port_kinds: Skip connections between ports declaring different data kinds

    Returns:
        GraphDocument with one node per step
    """
    nodes: list[Node] = []
    for index, step in enumerate(steps):
        nodes.append(
            Node(
                id=NodeID(str(_first_key(step, "step_id", "stepId"))),
                step_definition_id=StepDefinitionID(str(_first_key(step, "step_definition_id", "stepDefinitionId"))),
                position=row_layout_position(index),
                parameters=dict(step.get("step_parameters") or step.get("stepParameters") or {}),
            )
        )
    unwired = GraphDocument(nodes=tuple(nodes))

    edges: list[Edge] = []
    occupied: set[tuple[str, str]] = set()
    for connection in connections:
        if len(connection) == 4:
            source_id, source_port, target_id, target_port = (str(part) for part in connection)
        elif len(connection) == 2:
            source_id, target_id = str(connection[0]), str(connection[1])
            source_port = _default_port(unwired.find_node(source_id), catalog, outputs=True)
            target_port = _default_port(unwired.find_node(target_id), catalog, outputs=False)
            if source_port is None or target_port is None:
                logger.warning("record_connection_skipped", source=source_id, target=target_id, reason="unresolvable port")
                continue
        else:
            raise ValueError(f"connection must have 2 or 4 parts, got {len(connection)}: {list(connection)}")

        edge = Edge(
            id=new_edge_id(),
            source_node_id=NodeID(source_id),
            source_port=PortName(source_port),
            target_node_id=NodeID(target_id),
            target_port=PortName(target_port),
        )
        check = validate_edge(unwired, catalog, edge, strict_port_kinds=strict_port_kinds)
        if not check.allowed:
            assert check.reason is not None
            logger.warning(
                "record_connection_skipped",
                source=f"{source_id}.{source_port}",
                target=f"{target_id}.{target_port}",
                reason=check.reason.value,
                detail=check.detail,
            )
            continue
        if (target_id, target_port) in occupied:
            logger.warning(
                "record_connection_skipped",
                source=f"{source_id}.{source_port}",
                target=f"{target_id}.{target_port}",
                reason=ConnectionRejection.TARGET_PORT_OCCUPIED.value,
                detail=f"input '{target_port}' of step '{target_id}' is already connected",
            )
            continue
        occupied.add((target_id, target_port))
        edges.append(edge)
    return unwired.with_edges(tuple(edges))


def _default_port(node: Node | None, catalog: StepDefinitionCatalog, *, outputs: bool) -> str | None:
    if node is None:
        return None
    definition = catalog.find(node.step_definition_id)
    if definition is None:
        return None
    ports = definition.output_ports if outputs else definition.input_ports
    return ports[0] if ports else None
