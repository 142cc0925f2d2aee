"""SQLAlchemy-specific version store behavior."""

from pathlib import Path

import pytest
from sqlalchemy import inspect, select, update

from stepgraph.contracts.errors import IntegrityError
from stepgraph.contracts.graph import GraphDocument
from stepgraph.core.canonical import CANONICAL_VERSION
from stepgraph.core.config import PersistenceSettings
from stepgraph.core.versions import InMemoryVersionStore, SQLVersionStore, VersionDB, create_version_store
from stepgraph.core.versions.schema import versions_table
from tests.fixtures.documents import runnable_document


class TestVersionDB:
    def test_tables_created(self) -> None:
        with VersionDB.in_memory() as db:
            assert "versions" in inspect(db.engine).get_table_names()

    def test_closed_db_has_no_engine(self) -> None:
        db = VersionDB.in_memory()
        db.close()
        with pytest.raises(RuntimeError, match="not initialized"):
            _ = db.engine

    def test_from_url_creates_parent_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "dir" / "versions.db"
        with VersionDB.from_url(f"sqlite:///{target}"):
            assert target.parent.is_dir()

    def test_transaction_rolls_back_on_error(self) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            store.save("p1", GraphDocument.empty())
            with pytest.raises(RuntimeError), db.connection() as conn:
                conn.execute(update(versions_table).values(content_hash="0" * 64))
                raise RuntimeError("abort")
            assert store.restore("p1", store.list("p1")[0].version_id) == GraphDocument.empty()


class TestSQLVersionStore:
    def test_rows_record_sequence_and_canonical_version(self) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            store.save("p1", GraphDocument.empty())
            store.save("p1", runnable_document())
            store.save("p2", GraphDocument.empty())

            with db.connection() as conn:
                rows = conn.execute(
                    select(versions_table.c.pipeline_id, versions_table.c.sequence, versions_table.c.canonical_version)
                    .order_by(versions_table.c.pipeline_id, versions_table.c.sequence)
                ).fetchall()

        assert [(r.pipeline_id, r.sequence) for r in rows] == [("p1", 1), ("p1", 2), ("p2", 1)]
        assert {r.canonical_version for r in rows} == {CANONICAL_VERSION}

    def test_history_survives_reopen(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'versions.db'}"
        with VersionDB.from_url(url) as db:
            saved = SQLVersionStore(db).save("p1", runnable_document())

        with VersionDB.from_url(url) as db:
            store = SQLVersionStore(db)
            assert [v.version_id for v in store.list("p1")] == [saved.version_id]
            assert store.restore("p1", saved.version_id) == runnable_document()

    def test_tampered_snapshot_raises_integrity_error(self) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            version = store.save("p1", runnable_document())
            with db.connection() as conn:
                conn.execute(
                    update(versions_table)
                    .where(versions_table.c.version_id == version.version_id)
                    .values(snapshot_json='{"edges":[],"nodes":[],"viewport":null}')
                )

            with pytest.raises(IntegrityError, match="does not match its content hash"):
                store.restore("p1", version.version_id)
            with pytest.raises(IntegrityError):
                store.list("p1")

    def test_tampering_logged(self, captured_logs: list[dict[str, object]]) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            version = store.save("p1", runnable_document())
            with db.connection() as conn:
                conn.execute(update(versions_table).values(content_hash="f" * 64))
            with pytest.raises(IntegrityError):
                store.restore("p1", version.version_id)

        failures = [entry for entry in captured_logs if entry["event"] == "version_integrity_failure"]
        assert failures[0]["version_id"] == version.version_id

    def test_row_with_unsafe_number_raises_integrity_error(self) -> None:
        with VersionDB.in_memory() as db:
            store = SQLVersionStore(db)
            version = store.save("p1", GraphDocument.empty())
            with db.connection() as conn:
                conn.execute(
                    update(versions_table)
                    .where(versions_table.c.version_id == version.version_id)
                    .values(snapshot_json='{"edges":[],"nodes":[],"viewport":{"x":10000000000000000,"y":0,"zoom":1}}')
                )

            with pytest.raises(IntegrityError, match="cannot be re-hashed"):
                store.restore("p1", version.version_id)


class TestCreateVersionStore:
    def test_memory_backend(self) -> None:
        assert isinstance(create_version_store(PersistenceSettings()), InMemoryVersionStore)

    def test_sql_backend(self, tmp_path: Path) -> None:
        settings = PersistenceSettings(backend="sql", url=f"sqlite:///{tmp_path / 'v.db'}")
        store = create_version_store(settings)
        assert isinstance(store, SQLVersionStore)
        store.save("p1", GraphDocument.empty())
        assert (tmp_path / "v.db").exists()
