"""Connection legality check.

validate_connection() is a pure predicate: the drag gesture calls it on
every pointer move to decide whether to highlight a target handle, and the
editing engine calls it before inserting an edge. It never raises.

Rules are applied in order and the first failure wins:
1. both nodes exist                              (UnknownNode)
2. ports are declared by the step definitions    (UnknownPort)
3. source and target differ                      (SelfConnection)
4. declared port data kinds agree                (IncompatiblePortKinds)

Occupancy of the target port is deliberately not a rule here: the engine
resolves it with the configured occupied-port policy.
"""

from __future__ import annotations

from stepgraph.contracts.enums import ConnectionRejection
from stepgraph.contracts.graph import Edge, GraphDocument
from stepgraph.contracts.results import ConnectionCheck
from stepgraph.core.catalog import StepDefinitionCatalog


def validate_connection(
    document: GraphDocument,
    catalog: StepDefinitionCatalog,
    source_node_id: str,
    source_port: str,
    target_node_id: str,
    target_port: str,
    *,
    strict_port_kinds: bool = True,
) -> ConnectionCheck:
    """Check whether an edge may be drawn between two ports.

    Args:
        document: Current graph document
        catalog: Source of step definitions (and therefore ports)
        source_node_id: Node the edge leaves
        source_port: Output port on the source node
        target_node_id: Node the edge enters
        target_port: Input port on the target node
        strict_port_kinds: Reject ports declaring different data kinds

    Returns:
        ConnectionCheck.ok() or ConnectionCheck.rejected(reason, detail)
    """
    source = document.find_node(source_node_id)
    target = document.find_node(target_node_id)
    if source is None or target is None:
        missing = source_node_id if source is None else target_node_id
        return ConnectionCheck.rejected(ConnectionRejection.UNKNOWN_NODE, f"node '{missing}' does not exist")

    # A node whose definition is missing from the catalog exposes no ports
    source_def = catalog.find(source.step_definition_id)
    target_def = catalog.find(target.step_definition_id)
    source_outputs = source_def.output_ports if source_def is not None else ()
    target_inputs = target_def.input_ports if target_def is not None else ()
    if source_port not in source_outputs:
        return ConnectionCheck.rejected(
            ConnectionRejection.UNKNOWN_PORT,
            f"node '{source_node_id}' has no output port '{source_port}'",
        )
    if target_port not in target_inputs:
        return ConnectionCheck.rejected(
            ConnectionRejection.UNKNOWN_PORT,
            f"node '{target_node_id}' has no input port '{target_port}'",
        )

    if source_node_id == target_node_id:
        return ConnectionCheck.rejected(ConnectionRejection.SELF_CONNECTION, f"node '{source_node_id}' cannot feed itself")

    # Both definitions are known past the UnknownPort rule
    if strict_port_kinds and source_def is not None and target_def is not None:
        source_kind = source_def.port_kind(source_port)
        target_kind = target_def.port_kind(target_port)
        if source_kind is not None and target_kind is not None and source_kind != target_kind:
            return ConnectionCheck.rejected(
                ConnectionRejection.INCOMPATIBLE_PORT_KINDS,
                f"'{source_port}' produces {source_kind} but '{target_port}' expects {target_kind}",
            )

    return ConnectionCheck.ok()


def validate_edge(
    document: GraphDocument,
    catalog: StepDefinitionCatalog,
    edge: Edge,
    *,
    strict_port_kinds: bool = True,
) -> ConnectionCheck:
    """Check an edge that arrives with a whole document (loaded or imported).

    Same rules as validate_connection(), except that an end whose step
    definition has left the catalog is inert: its port is taken on trust, so
    a stored pipeline keeps its wiring. The other end's port, node existence
    and self-connection are still checked.
    """
    source = document.find_node(edge.source_node_id)
    target = document.find_node(edge.target_node_id)
    if source is None or target is None:
        missing = edge.source_node_id if source is None else edge.target_node_id
        return ConnectionCheck.rejected(ConnectionRejection.UNKNOWN_NODE, f"node '{missing}' does not exist")

    source_def = catalog.find(source.step_definition_id)
    target_def = catalog.find(target.step_definition_id)
    if source_def is not None and target_def is not None:
        return validate_connection(document, catalog, *edge.as_tuple(), strict_port_kinds=strict_port_kinds)

    if source_def is not None and edge.source_port not in source_def.output_ports:
        return ConnectionCheck.rejected(
            ConnectionRejection.UNKNOWN_PORT,
            f"node '{edge.source_node_id}' has no output port '{edge.source_port}'",
        )
    if target_def is not None and edge.target_port not in target_def.input_ports:
        return ConnectionCheck.rejected(
            ConnectionRejection.UNKNOWN_PORT,
            f"node '{edge.target_node_id}' has no input port '{edge.target_port}'",
        )
    if edge.source_node_id == edge.target_node_id:
        return ConnectionCheck.rejected(ConnectionRejection.SELF_CONNECTION, f"node '{edge.source_node_id}' cannot feed itself")
    return ConnectionCheck.ok()
