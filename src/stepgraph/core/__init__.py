# src/stepgraph/core/__init__.py
"""Core infrastructure: catalog, configuration, logging, canonical hashing,
graph editing and validation, version history, and editor sessions."""

from stepgraph.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    document_hash,
    stable_hash,
)
from stepgraph.core.catalog import (
    InMemoryStepCatalog,
    StepDefinitionCatalog,
    builtin_catalog,
    load_catalog,
    parse_catalog,
)
from stepgraph.core.config import (
    CatalogSettings,
    EditorSettings,
    LoggingSettings,
    PersistenceSettings,
    StepGraphSettings,
    ValidationSettings,
    default_settings,
    load_settings,
)
from stepgraph.core.events import EventBus, EventBusProtocol, NullEventBus
from stepgraph.core.execution import ExecutionClient, submit_for_execution
from stepgraph.core.graph import GraphEditor, validate_connection, validate_structure
from stepgraph.core.session import EditorSession, RequestTicket
from stepgraph.core.versions import InMemoryVersionStore, SQLVersionStore, VersionDB, VersionStore

__all__ = [
    "CANONICAL_VERSION",
    "CatalogSettings",
    "EditorSession",
    "EditorSettings",
    "EventBus",
    "EventBusProtocol",
    "ExecutionClient",
    "GraphEditor",
    "InMemoryStepCatalog",
    "InMemoryVersionStore",
    "LoggingSettings",
    "NullEventBus",
    "PersistenceSettings",
    "RequestTicket",
    "SQLVersionStore",
    "StepDefinitionCatalog",
    "StepGraphSettings",
    "ValidationSettings",
    "VersionDB",
    "VersionStore",
    "builtin_catalog",
    "canonical_json",
    "default_settings",
    "document_hash",
    "load_catalog",
    "load_settings",
    "parse_catalog",
    "stable_hash",
    "submit_for_execution",
    "validate_connection",
    "validate_structure",
]
