"""Domain events emitted by the graph editing engine.

Every successful mutation emits exactly one event carrying the new
authoritative document. Rejected operations emit nothing. UI layers
subscribe to the event types they render.
"""

from dataclasses import dataclass

from stepgraph.contracts.graph import Edge, GraphDocument, Node, Position, Viewport
from stepgraph.contracts.types import NodeID, PipelineID, VersionID


@dataclass(frozen=True, slots=True)
class NodeAdded:
    """A node was placed on the canvas."""

    document: GraphDocument
    node: Node


@dataclass(frozen=True, slots=True)
class NodeRemoved:
    """A node was deleted along with every edge touching it."""

    document: GraphDocument
    node_id: NodeID
    removed_edges: tuple[Edge, ...]


@dataclass(frozen=True, slots=True)
class NodeMoved:
    """A node's position changed."""

    document: GraphDocument
    node_id: NodeID
    position: Position


@dataclass(frozen=True, slots=True)
class EdgeConnected:
    """An edge was added.

    replaced is the edge that previously occupied the target input port,
    if the occupied-port policy displaced one.
    """

    document: GraphDocument
    edge: Edge
    replaced: Edge | None = None


@dataclass(frozen=True, slots=True)
class EdgeDisconnected:
    """An edge was removed."""

    document: GraphDocument
    edge: Edge


@dataclass(frozen=True, slots=True)
class NodeParametersUpdated:
    """A node's parameters were merged with new values."""

    document: GraphDocument
    node_id: NodeID
    changed: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ViewportChanged:
    """Pan or zoom changed."""

    document: GraphDocument
    viewport: Viewport | None


@dataclass(frozen=True, slots=True)
class DocumentLoaded:
    """The whole document was replaced (pipeline opened, version restored, import)."""

    document: GraphDocument


@dataclass(frozen=True, slots=True)
class VersionSaved:
    """A snapshot of the document was persisted."""

    pipeline_id: PipelineID
    version_id: VersionID
