"""Shared fixtures for CLI tests."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from stepgraph.core.graph.serialization import document_to_dict
from tests.fixtures.documents import runnable_document

CATALOG_YAML = """
step_definitions:
  - id: source
    name: Source
    category: Input
    output_ports: [out]
  - id: proc
    name: Process
    category: Processing
    input_ports: [in]
    output_ports: [out]
    parameter_schema:
      - name: threshold
        kind: number
        default: 10
  - id: sink
    name: Sink
    category: Output
    input_ports: [in]
    parameter_schema:
      - name: target
        kind: string
        required: true
"""


@pytest.fixture(autouse=True)
def _restore_root_handlers() -> Iterator[None]:
    """The CLI points logging at the runner's captured stderr; undo that afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Settings with a file catalog and a SQLite version store under tmp_path."""
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text(CATALOG_YAML)
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"""
catalog:
  path: {catalog}
persistence:
  backend: sql
  url: sqlite:///{tmp_path / "versions.db"}
"""
    )
    return path


@pytest.fixture
def runnable_graph_file(tmp_path: Path) -> Path:
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(document_to_dict(runnable_document())))
    return path
