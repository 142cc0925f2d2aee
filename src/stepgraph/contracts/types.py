"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

NodeID = NewType("NodeID", str)
"""Unique node identifier within one graph document (e.g., 'node_3f2a9c01')"""

EdgeID = NewType("EdgeID", str)
"""Unique edge identifier within one graph document"""

PortName = NewType("PortName", str)
"""Input or output port name declared by a step definition (e.g., 'images')"""

StepDefinitionID = NewType("StepDefinitionID", str)
"""Catalog identifier of a step kind (e.g., 'sd-blur-detector')"""

PipelineID = NewType("PipelineID", str)
"""Identity of a pipeline whose versions are stored together"""

VersionID = NewType("VersionID", str)
"""Identifier of one saved snapshot"""

JobID = NewType("JobID", str)
"""Opaque identifier returned by the execution collaborator"""
