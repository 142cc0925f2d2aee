"""Shared contracts for cross-boundary data types.

All dataclasses, enums, and models that cross subsystem boundaries are
defined here. This package is a LEAF MODULE with no outbound dependencies
to core, so UI layers can import it without pulling in persistence.

Import patterns:
    # Contracts (lightweight)
    from stepgraph.contracts import GraphDocument, StepDefinition, ConnectionRejection

    # Settings classes (from core, pulls in heavy deps)
    from stepgraph.core.config import StepGraphSettings
"""

from stepgraph.contracts.catalog import (
    MAX_SAFE_NUMBER,
    ParameterSchema,
    ParameterSpec,
    StepDefinition,
    is_canonical_json,
    value_matches_kind,
)
from stepgraph.contracts.enums import (
    ConnectionRejection,
    NodeRole,
    OccupiedPortPolicy,
    RequestKind,
    ParameterKind,
    StepCategory,
    StructuralIssueCode,
)
from stepgraph.contracts.errors import (
    DataIntegrityWarning,
    IntegrityError,
    InvalidConnectionError,
    InvalidParameterError,
    NotFoundError,
    PipelineNotRunnableError,
    SessionClosedError,
    StepGraphError,
)
from stepgraph.contracts.events import (
    DocumentLoaded,
    EdgeConnected,
    EdgeDisconnected,
    NodeAdded,
    NodeMoved,
    NodeParametersUpdated,
    NodeRemoved,
    VersionSaved,
    ViewportChanged,
)
from stepgraph.contracts.graph import Edge, GraphDocument, Node, Position, Viewport
from stepgraph.contracts.results import ConnectionCheck, StructuralIssue, StructuralReport
from stepgraph.contracts.types import (
    EdgeID,
    JobID,
    NodeID,
    PipelineID,
    PortName,
    StepDefinitionID,
    VersionID,
)
from stepgraph.contracts.version import PipelineSummary, Version

__all__ = [
    "ConnectionCheck",
    "ConnectionRejection",
    "DataIntegrityWarning",
    "DocumentLoaded",
    "Edge",
    "EdgeConnected",
    "EdgeDisconnected",
    "EdgeID",
    "GraphDocument",
    "IntegrityError",
    "InvalidConnectionError",
    "InvalidParameterError",
    "JobID",
    "MAX_SAFE_NUMBER",
    "Node",
    "NodeAdded",
    "NodeID",
    "NodeMoved",
    "NodeParametersUpdated",
    "NodeRemoved",
    "NodeRole",
    "NotFoundError",
    "OccupiedPortPolicy",
    "ParameterKind",
    "ParameterSchema",
    "ParameterSpec",
    "PipelineID",
    "PipelineNotRunnableError",
    "PipelineSummary",
    "PortName",
    "Position",
    "RequestKind",
    "SessionClosedError",
    "StepCategory",
    "StepDefinition",
    "StepDefinitionID",
    "StepGraphError",
    "StructuralIssue",
    "StructuralIssueCode",
    "StructuralReport",
    "Version",
    "VersionID",
    "VersionSaved",
    "Viewport",
    "is_canonical_json",
    "value_matches_kind",
]
