# src/stepgraph/core/canonical.py
"""
Canonical JSON serialization for deterministic hashing.

Two-phase approach:
1. Normalize: Convert graph contracts and stdlib types to JSON-safe primitives
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

IMPORTANT: NaN and Infinity are strictly REJECTED, not silently converted.
A snapshot that cannot be hashed cannot be stored.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import rfc8785

from stepgraph.contracts.catalog import MAX_SAFE_NUMBER

if TYPE_CHECKING:
    from stepgraph.contracts.graph import GraphDocument

# Version string stored with every version row for hash verification
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    Raises:
        ValueError: If value is NaN or Infinity, or a number too large to
            read back unchanged
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(f"Cannot canonicalize non-finite float: {obj}. Use None for missing values, not NaN.")
        if abs(obj) > MAX_SAFE_NUMBER:
            raise ValueError(f"Cannot canonicalize {obj!r}: outside the safe number range +/-{MAX_SAFE_NUMBER}")
        return obj

    if obj is None or isinstance(obj, str | bool):
        return obj

    if isinstance(obj, int):
        if abs(obj) > MAX_SAFE_NUMBER:
            raise ValueError(f"Cannot canonicalize {obj}: outside the safe number range +/-{MAX_SAFE_NUMBER}")
        return obj

    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            obj = obj.replace(tzinfo=UTC)
        return obj.astimezone(UTC).isoformat()

    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError(f"Cannot canonicalize non-finite Decimal: {obj}.")
        return str(obj)

    return obj


def _normalize_for_canonical(data: Any) -> Any:
    """Recursively normalize a data structure for canonical JSON.

    Mappings include MappingProxyType, which is how node parameters are held.
    """
    if isinstance(data, Mapping):
        return {k: _normalize_for_canonical(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize_for_canonical(v) for v in data]
    return _normalize_value(data)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Args:
        obj: Data structure to serialize

    Returns:
        Canonical JSON string (no whitespace, sorted keys)

    Raises:
        ValueError: If data contains NaN, Infinity, or other non-finite values
        TypeError: If data contains types that cannot be serialized
    """
    normalized = _normalize_for_canonical(obj)
    result: bytes = rfc8785.dumps(normalized)
    return result.decode("utf-8")


def stable_hash(obj: Any, version: str = CANONICAL_VERSION) -> str:
    """Compute stable hash of object.

    Args:
        obj: Data structure to hash
        version: Hash algorithm version (stored with versions for verification)

    Returns:
        SHA-256 hex digest of canonical JSON
    """
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def document_hash(document: GraphDocument) -> str:
    """Compute the content hash of a graph document.

    Hashes the serialized form, so two documents hash equal exactly when
    they serialize equal (including node and edge order and viewport).
    """
    from stepgraph.core.graph.serialization import document_to_dict

    return stable_hash(document_to_dict(document))
