# tests/conftest.py
"""Shared test fixtures and helpers.

Catalog fixtures:
- test_catalog: small catalog of abstract steps (source, proc, sink, merge,
  plus kind-declaring variants) used by most engine and validator tests
- sample_catalog: the built-in image pipeline catalog

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from hypothesis import Phase, Verbosity, settings
from structlog.testing import capture_logs

from stepgraph.contracts.enums import OccupiedPortPolicy
from stepgraph.core.catalog import InMemoryStepCatalog, builtin_catalog
from stepgraph.core.config import EditorSettings, StepGraphSettings
from stepgraph.core.events import EventBus
from stepgraph.core.graph.editor import GraphEditor
from tests.fixtures.catalogs import make_test_catalog

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Catalogs
# =============================================================================


@pytest.fixture
def test_catalog() -> InMemoryStepCatalog:
    return make_test_catalog()


@pytest.fixture
def sample_catalog() -> InMemoryStepCatalog:
    return builtin_catalog()


# =============================================================================
# Editors
# =============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def editor(test_catalog: InMemoryStepCatalog, event_bus: EventBus) -> GraphEditor:
    """Editor over the test catalog with default (replace) port policy."""
    return GraphEditor(test_catalog, event_bus=event_bus)


@pytest.fixture
def rejecting_editor(test_catalog: InMemoryStepCatalog) -> GraphEditor:
    """Editor that refuses to replace an occupied input port."""
    config = StepGraphSettings(editor=EditorSettings(occupied_port_policy=OccupiedPortPolicy.REJECT))
    return GraphEditor(test_catalog, settings=config)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def captured_logs() -> Iterator[list[dict[str, object]]]:
    """Capture structlog events emitted during a test."""
    with capture_logs() as logs:
        yield logs
