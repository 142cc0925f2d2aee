# src/stepgraph/core/graph/__init__.py
"""Graph editing, validation, layout and serialization.

Package re-exports for the editing engine and the pure functions around it.
"""

from stepgraph.core.graph.connection import validate_connection, validate_edge
from stepgraph.core.graph.editor import GraphEditor, check_document
from stepgraph.core.graph.layout import canvas_to_screen, row_layout_position, screen_to_canvas
from stepgraph.core.graph.serialization import (
    document_from_dict,
    document_from_pipeline_record,
    document_to_dict,
    execution_payload,
)
from stepgraph.core.graph.structural import validate_structure
from stepgraph.core.graph.topology import find_cycle, to_networkx, topological_order

__all__ = [
    "GraphEditor",
    "canvas_to_screen",
    "check_document",
    "document_from_dict",
    "document_from_pipeline_record",
    "document_to_dict",
    "execution_payload",
    "find_cycle",
    "row_layout_position",
    "screen_to_canvas",
    "to_networkx",
    "topological_order",
    "validate_connection",
    "validate_edge",
    "validate_structure",
]
