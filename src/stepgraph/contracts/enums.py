"""All status codes, reasons, and kinds used across subsystem boundaries.

Reason codes are part of the public contract: UI layers switch on them to
decide how a rejected gesture or a blocked run is presented.
"""

from enum import StrEnum


class StepCategory(StrEnum):
    """Well-known step definition categories.

    Only INPUT and OUTPUT carry structural meaning. Every other category
    (including ones the catalog invents later) is a processing category.
    """

    INPUT = "Input"
    OUTPUT = "Output"
    PROCESSING = "Processing"
    IMAGE_PROCESSING = "ImageProcessing"
    UTILITY = "Utility"


class NodeRole(StrEnum):
    """Structural role of a node, derived from its step definition's category."""

    INPUT = "input"
    OUTPUT = "output"
    PROCESSING = "processing"


class ParameterKind(StrEnum):
    """Primitive kind of a step parameter.

    Stored in catalog files and JSON schemas.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    OBJECT = "object"


class ConnectionRejection(StrEnum):
    """Why a proposed edge was refused.

    Values:
        UNKNOWN_NODE: Source or target node is not in the document
        UNKNOWN_PORT: Port is not declared by the node's step definition
        SELF_CONNECTION: Source and target are the same node
        INCOMPATIBLE_PORT_KINDS: Both ports declare data kinds and they differ
        TARGET_PORT_OCCUPIED: Input already wired and the policy forbids replacement
    """

    UNKNOWN_NODE = "UnknownNode"
    UNKNOWN_PORT = "UnknownPort"
    SELF_CONNECTION = "SelfConnection"
    INCOMPATIBLE_PORT_KINDS = "IncompatiblePortKinds"
    TARGET_PORT_OCCUPIED = "TargetPortOccupied"


class StructuralIssueCode(StrEnum):
    """Reasons a graph is not runnable."""

    NO_INPUT_NODE = "NoInputNode"
    NO_OUTPUT_NODE = "NoOutputNode"
    DISCONNECTED_PROCESSING_NODE = "DisconnectedProcessingNode"
    DANGLING_INPUT_NODE = "DanglingInputNode"
    DANGLING_OUTPUT_NODE = "DanglingOutputNode"
    MISSING_REQUIRED_PARAMETER = "MissingRequiredParameter"
    CYCLE_DETECTED = "CycleDetected"


class OccupiedPortPolicy(StrEnum):
    """What connect() does when the target input already has an edge.

    REPLACE displaces the old wire (interactive drag behavior).
    REJECT refuses the new connection.
    """

    REPLACE = "replace"
    REJECT = "reject"


class RequestKind(StrEnum):
    """Kinds of asynchronous request an editor session tracks.

    A response is only applied if no newer request of the same kind was
    issued after it.
    """

    LOAD = "load"  # open or restore: both replace the document
    SAVE = "save"
    RUN = "run"
