# src/stepgraph/core/versions/schema.py
"""SQLAlchemy table definitions for the version store.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with SQLite and PostgreSQL.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
)

# Shared metadata for all tables
metadata = MetaData()

versions_table = Table(
    "versions",
    metadata,
    Column("pipeline_id", String(128), nullable=False),
    Column("version_id", String(64), nullable=False),
    # Per-pipeline save counter; orders versions when timestamps tie
    Column("sequence", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("snapshot_json", Text, nullable=False),  # canonical JSON of the document
    Column("content_hash", String(64), nullable=False),
    Column("canonical_version", String(64), nullable=False),
    PrimaryKeyConstraint("pipeline_id", "version_id"),
    UniqueConstraint("pipeline_id", "sequence", name="uq_versions_pipeline_sequence"),
)

Index("ix_versions_created_at", versions_table.c.created_at)
