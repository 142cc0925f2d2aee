"""Identifier generation for nodes, edges, and versions.

IDs are random (uuid4) rather than sequential: documents restored from
different versions, or imported from elsewhere, must never collide with ids
minted in the current session.
"""

from __future__ import annotations

import uuid

from stepgraph.contracts.types import EdgeID, NodeID, VersionID


def _token() -> str:
    return uuid.uuid4().hex


def new_node_id(prefix: str = "node") -> NodeID:
    """Mint a fresh node id (e.g., 'node_3f2a9c01...')."""
    return NodeID(f"{prefix}_{_token()}")


def new_edge_id(prefix: str = "edge") -> EdgeID:
    """Mint a fresh edge id."""
    return EdgeID(f"{prefix}_{_token()}")


def new_version_id() -> VersionID:
    """Mint a fresh version id."""
    return VersionID(_token())


def validate_id_prefix(prefix: str, context: str) -> None:
    """Validate an id prefix from configuration.

    Raises:
        ValueError: If the prefix is empty or not identifier-like
    """
    if not prefix:
        raise ValueError(f"{context} must not be empty")
    if not prefix.replace("-", "_").isidentifier():
        raise ValueError(f"{context} '{prefix}' must contain only letters, digits, '_' or '-'")
