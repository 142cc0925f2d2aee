"""Version store protocol and the in-memory implementation.

A version store keeps an append-only, most-recent-first history of graph
snapshots per pipeline. Snapshots are captured as canonical JSON at save
time, so nothing done to a document after saving can reach a stored
version, and every read re-checks the content hash.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from stepgraph.contracts.errors import IntegrityError, NotFoundError
from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import PipelineID, VersionID
from stepgraph.contracts.version import PipelineSummary, Version
from stepgraph.core.canonical import canonical_json, stable_hash
from stepgraph.core.clock import DEFAULT_CLOCK, Clock
from stepgraph.core.graph.serialization import document_from_dict, document_to_dict
from stepgraph.core.identifiers import new_version_id
from stepgraph.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class VersionStore(Protocol):
    """Append-only version history keyed by (pipeline_id, version_id)."""

    def save(self, pipeline_id: str, snapshot: GraphDocument) -> Version:
        """Record a snapshot as the newest version of a pipeline."""
        ...

    def list(self, pipeline_id: str) -> Sequence[Version]:
        """Versions of a pipeline, newest first; empty if it has none."""
        ...

    def restore(self, pipeline_id: str, version_id: str) -> GraphDocument:
        """The snapshot stored under a version.

        Raises:
            NotFoundError: If the pipeline or version is unknown
            IntegrityError: If the stored snapshot no longer matches its hash
        """
        ...

    def latest(self, pipeline_id: str) -> Version | None:
        """The newest version of a pipeline, or None."""
        ...

    def pipelines(self) -> Sequence[PipelineSummary]:
        """Every pipeline with at least one version, most recently modified first."""
        ...


def encode_snapshot(snapshot: GraphDocument) -> tuple[str, str]:
    """Canonical JSON and content hash of a snapshot.

    Raises:
        ValueError: If a value is NaN, Infinity, or outside +/-MAX_SAFE_NUMBER
        TypeError: If a parameter value is not JSON serializable
    """
    data = document_to_dict(snapshot)
    return canonical_json(data), stable_hash(data)


def decode_snapshot(pipeline_id: str, version_id: str, snapshot_json: str, content_hash: str) -> GraphDocument:
    """Parse stored canonical JSON after checking it against its hash.

    Raises:
        IntegrityError: If the content does not hash to content_hash
    """
    data = json.loads(snapshot_json)
    try:
        actual = stable_hash(data)
    except ValueError as e:
        logger.error("version_integrity_failure", pipeline_id=pipeline_id, version_id=version_id, error=str(e))
        raise IntegrityError(f"Snapshot of version '{version_id}' in pipeline '{pipeline_id}' cannot be re-hashed: {e}") from e
    if actual != content_hash:
        logger.error(
            "version_integrity_failure",
            pipeline_id=pipeline_id,
            version_id=version_id,
            expected=content_hash,
            actual=actual,
        )
        raise IntegrityError(
            f"Snapshot of version '{version_id}' in pipeline '{pipeline_id}' does not match its content hash "
            f"(expected {content_hash}, got {actual})"
        )
    return document_from_dict(data)


@dataclass(frozen=True, slots=True)
class _StoredVersion:
    version_id: VersionID
    timestamp: datetime
    snapshot_json: str
    content_hash: str


class InMemoryVersionStore:
    """Version store held in process memory.

    History lasts as long as the store object. Suitable for tests and for
    sessions that never need to outlive the process.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or DEFAULT_CLOCK
        self._history: dict[str, list[_StoredVersion]] = {}

    def save(self, pipeline_id: str, snapshot: GraphDocument) -> Version:
        snapshot_json, content_hash = encode_snapshot(snapshot)
        stored = _StoredVersion(
            version_id=new_version_id(),
            timestamp=self._clock.now(),
            snapshot_json=snapshot_json,
            content_hash=content_hash,
        )
        # Read back before appending: history only ever holds restorable snapshots
        version = self._to_version(pipeline_id, stored)
        self._history.setdefault(pipeline_id, []).insert(0, stored)
        logger.info("version_saved", pipeline_id=pipeline_id, version_id=stored.version_id, content_hash=content_hash)
        return version

    def list(self, pipeline_id: str) -> Sequence[Version]:
        return tuple(self._to_version(pipeline_id, stored) for stored in self._history.get(pipeline_id, []))

    def restore(self, pipeline_id: str, version_id: str) -> GraphDocument:
        history = self._history.get(pipeline_id)
        if history is None:
            raise NotFoundError("pipeline", pipeline_id)
        for stored in history:
            if stored.version_id == version_id:
                return decode_snapshot(pipeline_id, version_id, stored.snapshot_json, stored.content_hash)
        raise NotFoundError("version", version_id)

    def latest(self, pipeline_id: str) -> Version | None:
        history = self._history.get(pipeline_id)
        if not history:
            return None
        return self._to_version(pipeline_id, history[0])

    def pipelines(self) -> Sequence[PipelineSummary]:
        summaries = [
            PipelineSummary(pipeline_id=PipelineID(pipeline_id), version_count=len(history), last_modified=history[0].timestamp)
            for pipeline_id, history in self._history.items()
            if history
        ]
        summaries.sort(key=lambda s: s.last_modified, reverse=True)
        return tuple(summaries)

    @staticmethod
    def _to_version(pipeline_id: str, stored: _StoredVersion) -> Version:
        return Version(
            version_id=stored.version_id,
            pipeline_id=PipelineID(pipeline_id),
            timestamp=stored.timestamp,
            snapshot=decode_snapshot(pipeline_id, stored.version_id, stored.snapshot_json, stored.content_hash),
            content_hash=stored.content_hash,
        )
