"""NetworkX view of a graph document.

The document is the source of truth; this module builds a throwaway
directed graph from it for the traversal questions the validators ask.
MultiDiGraph is used because two nodes may be joined through more than one
port pair.
"""

from __future__ import annotations

import networkx as nx
from networkx import MultiDiGraph

from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import NodeID


def to_networkx(document: GraphDocument) -> MultiDiGraph[str]:
    """Build a MultiDiGraph with one vertex per node and one arc per edge.

    Vertices carry step_definition_id; arcs are keyed by edge id and carry
    the port names.
    """
    graph: MultiDiGraph[str] = nx.MultiDiGraph()
    for node in document.nodes:
        graph.add_node(node.id, step_definition_id=node.step_definition_id)
    for edge in document.edges:
        graph.add_edge(
            edge.source_node_id,
            edge.target_node_id,
            key=edge.id,
            source_port=edge.source_port,
            target_port=edge.target_port,
        )
    return graph


def find_cycle(document: GraphDocument) -> tuple[NodeID, ...]:
    """Node ids along one directed cycle, or () if the document is acyclic."""
    graph = to_networkx(document)
    if nx.is_directed_acyclic_graph(graph):
        return ()
    # MultiDiGraph returns (u, v, key) tuples; u is enough to name the cycle
    cycle = nx.find_cycle(graph)
    return tuple(NodeID(edge[0]) for edge in cycle)


def topological_order(document: GraphDocument) -> list[NodeID]:
    """Node ids in an order where every edge points forward.

    Ties are broken by document order so the result is deterministic.

    Raises:
        ValueError: If the document contains a cycle
    """
    graph = to_networkx(document)
    position = {node.id: index for index, node in enumerate(document.nodes)}
    try:
        return [NodeID(n) for n in nx.lexicographical_topological_sort(graph, key=lambda n: position.get(n, len(position)))]
    except nx.NetworkXUnfeasible as e:
        raise ValueError("Cannot compute topological order: graph contains a cycle") from e
