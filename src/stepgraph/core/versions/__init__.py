# src/stepgraph/core/versions/__init__.py
"""Append-only version history for pipeline graphs."""

from stepgraph.core.config import PersistenceSettings
from stepgraph.core.versions.database import VersionDB
from stepgraph.core.versions.sql_store import SQLVersionStore
from stepgraph.core.versions.store import InMemoryVersionStore, VersionStore


def create_version_store(settings: PersistenceSettings) -> VersionStore:
    """Build the version store selected by persistence settings."""
    if settings.backend == "sql":
        return SQLVersionStore(VersionDB.from_url(settings.url, echo=settings.echo))
    return InMemoryVersionStore()


__all__ = [
    "InMemoryVersionStore",
    "SQLVersionStore",
    "VersionDB",
    "VersionStore",
    "create_version_store",
]
