"""SQLAlchemy-backed version store.

One row per version in the `versions` table, keyed by
(pipeline_id, version_id). Snapshots are stored as canonical JSON next to
their SHA-256 content hash; every read re-hashes the JSON and refuses a
mismatching row with IntegrityError.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import Row

from stepgraph.contracts.errors import NotFoundError
from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import PipelineID, VersionID
from stepgraph.contracts.version import PipelineSummary, Version
from stepgraph.core.canonical import CANONICAL_VERSION
from stepgraph.core.clock import DEFAULT_CLOCK, Clock
from stepgraph.core.identifiers import new_version_id
from stepgraph.core.logging import get_logger
from stepgraph.core.versions.database import VersionDB
from stepgraph.core.versions.schema import versions_table
from stepgraph.core.versions.store import decode_snapshot, encode_snapshot

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on DateTime(timezone=True) columns; values are written as UTC
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


class SQLVersionStore:
    """Version store persisted through SQLAlchemy Core.

    Example:
        store = SQLVersionStore(VersionDB.from_url("sqlite:///./.stepgraph/versions.db"))
        version = store.save("pipeline-1", editor.document)
        assert store.restore("pipeline-1", version.version_id) == editor.document
    """

    def __init__(self, db: VersionDB, *, clock: Clock | None = None) -> None:
        self._db = db
        self._clock = clock or DEFAULT_CLOCK

    def save(self, pipeline_id: str, snapshot: GraphDocument) -> Version:
        snapshot_json, content_hash = encode_snapshot(snapshot)
        version_id = new_version_id()
        timestamp = self._clock.now().astimezone(UTC)
        with self._db.connection() as conn:
            # Read back before inserting: a row that cannot be restored must never commit
            restored = decode_snapshot(pipeline_id, version_id, snapshot_json, content_hash)
            current = conn.execute(
                select(func.max(versions_table.c.sequence)).where(versions_table.c.pipeline_id == pipeline_id)
            ).scalar()
            conn.execute(
                versions_table.insert().values(
                    pipeline_id=pipeline_id,
                    version_id=version_id,
                    sequence=(current or 0) + 1,
                    created_at=timestamp,
                    snapshot_json=snapshot_json,
                    content_hash=content_hash,
                    canonical_version=CANONICAL_VERSION,
                )
            )
        logger.info("version_saved", pipeline_id=pipeline_id, version_id=version_id, content_hash=content_hash)
        return Version(
            version_id=version_id,
            pipeline_id=PipelineID(pipeline_id),
            timestamp=timestamp,
            snapshot=restored,
            content_hash=content_hash,
        )

    def list(self, pipeline_id: str) -> Sequence[Version]:
        query = (
            select(versions_table).where(versions_table.c.pipeline_id == pipeline_id).order_by(versions_table.c.sequence.desc())
        )
        with self._db.connection() as conn:
            rows = conn.execute(query).fetchall()
        return tuple(self._row_to_version(row) for row in rows)

    def restore(self, pipeline_id: str, version_id: str) -> GraphDocument:
        query = select(versions_table).where(
            versions_table.c.pipeline_id == pipeline_id,
            versions_table.c.version_id == version_id,
        )
        with self._db.connection() as conn:
            row = conn.execute(query).fetchone()
        if row is None:
            if self.latest(pipeline_id) is None:
                raise NotFoundError("pipeline", pipeline_id)
            raise NotFoundError("version", version_id)
        return decode_snapshot(pipeline_id, version_id, row.snapshot_json, row.content_hash)

    def latest(self, pipeline_id: str) -> Version | None:
        query = (
            select(versions_table)
            .where(versions_table.c.pipeline_id == pipeline_id)
            .order_by(versions_table.c.sequence.desc())
            .limit(1)
        )
        with self._db.connection() as conn:
            row = conn.execute(query).fetchone()
        return None if row is None else self._row_to_version(row)

    def pipelines(self) -> Sequence[PipelineSummary]:
        query = select(
            versions_table.c.pipeline_id,
            func.count().label("version_count"),
            func.max(versions_table.c.created_at).label("last_modified"),
        ).group_by(versions_table.c.pipeline_id)
        with self._db.connection() as conn:
            rows = conn.execute(query).fetchall()
        summaries = [
            PipelineSummary(
                pipeline_id=PipelineID(row.pipeline_id),
                version_count=row.version_count,
                last_modified=_as_utc(row.last_modified),
            )
            for row in rows
        ]
        summaries.sort(key=lambda s: s.last_modified, reverse=True)
        return tuple(summaries)

    @staticmethod
    def _row_to_version(row: Row[Any]) -> Version:
        return Version(
            version_id=VersionID(row.version_id),
            pipeline_id=PipelineID(row.pipeline_id),
            timestamp=_as_utc(row.created_at),
            snapshot=decode_snapshot(row.pipeline_id, row.version_id, row.snapshot_json, row.content_hash),
            content_hash=row.content_hash,
        )
