# tests/property/core/test_snapshot_properties.py
"""Property tests for snapshot serialization and version storage.

Saving a document and restoring it must give back an equal document, and
the content hash must depend only on document content.
"""

from __future__ import annotations

import pytest
from hypothesis import given

from stepgraph.contracts.graph import GraphDocument
from stepgraph.core.canonical import canonical_json, document_hash
from stepgraph.core.graph.serialization import document_from_dict, document_to_dict
from stepgraph.core.versions import InMemoryVersionStore, SQLVersionStore, VersionDB
from stepgraph.core.versions.store import decode_snapshot, encode_snapshot
from tests.property.settings import DETERMINISM_SETTINGS, SLOW_SETTINGS, STANDARD_SETTINGS
from tests.strategies.graphs import graph_documents


class TestDocumentDictProperties:
    @given(document=graph_documents())
    @STANDARD_SETTINGS
    def test_dict_round_trip(self, document: GraphDocument) -> None:
        assert document_from_dict(document_to_dict(document)) == document

    @given(document=graph_documents())
    @STANDARD_SETTINGS
    def test_encode_decode_round_trip(self, document: GraphDocument) -> None:
        snapshot_json, content_hash = encode_snapshot(document)
        assert decode_snapshot("p", "v", snapshot_json, content_hash) == document


class TestHashProperties:
    @given(document=graph_documents())
    @DETERMINISM_SETTINGS
    def test_hash_deterministic(self, document: GraphDocument) -> None:
        assert document_hash(document) == document_hash(document)

    @given(document=graph_documents())
    @STANDARD_SETTINGS
    def test_restored_document_hashes_the_same(self, document: GraphDocument) -> None:
        snapshot_json, content_hash = encode_snapshot(document)
        restored = decode_snapshot("p", "v", snapshot_json, content_hash)
        assert document_hash(restored) == content_hash
        assert canonical_json(document_to_dict(restored)) == snapshot_json


class TestStoreProperties:
    @given(document=graph_documents())
    @STANDARD_SETTINGS
    def test_in_memory_round_trip(self, document: GraphDocument) -> None:
        store = InMemoryVersionStore()
        version = store.save("p", document)
        assert store.restore("p", version.version_id) == document

    @pytest.mark.slow
    @given(document=graph_documents())
    @SLOW_SETTINGS
    def test_sql_round_trip(self, document: GraphDocument) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            version = store.save("p", document)
            assert store.restore("p", version.version_id) == document
