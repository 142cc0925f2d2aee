"""Step definition catalog.

The catalog is a read model: definitions are looked up by id when a node is
validated and are never mutated. A single catalog instance is safe to share
across any number of editor sessions.

Sources:
- InMemoryStepCatalog: definitions handed over by the caller (e.g., fetched
  from the catalog service)
- load_catalog(): YAML or JSON file with a top-level "step_definitions" list
- builtin_catalog(): sample image pipeline steps, used when no file is configured
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from stepgraph.contracts.catalog import StepDefinition
from stepgraph.contracts.errors import NotFoundError
from stepgraph.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class StepDefinitionCatalog(Protocol):
    """Read-only source of step definitions."""

    def list_step_definitions(self) -> Sequence[StepDefinition]:
        """All available step definitions, in catalog order."""
        ...

    def find(self, step_definition_id: str) -> StepDefinition | None:
        """Look up a definition by id, or None if unknown."""
        ...

    def get(self, step_definition_id: str) -> StepDefinition:
        """Look up a definition by id.

        Raises:
            NotFoundError: If the id is not in the catalog
        """
        ...


class InMemoryStepCatalog:
    """Catalog over a fixed set of step definitions.

    Call refresh() to swap in a newer fetch; definitions already referenced
    by nodes are resolved against whatever the catalog holds at lookup time.
    """

    def __init__(self, definitions: Iterable[StepDefinition] = ()) -> None:
        self._definitions: dict[str, StepDefinition] = {}
        self.refresh(definitions)

    def refresh(self, definitions: Iterable[StepDefinition]) -> None:
        """Replace the catalog contents.

        Raises:
            ValueError: If two definitions share an id
        """
        indexed: dict[str, StepDefinition] = {}
        for definition in definitions:
            if definition.id in indexed:
                raise ValueError(f"Duplicate step definition id in catalog: '{definition.id}'")
            indexed[definition.id] = definition
        self._definitions = indexed
        logger.debug("catalog_refreshed", definition_count=len(indexed))

    def list_step_definitions(self) -> Sequence[StepDefinition]:
        return tuple(self._definitions.values())

    def find(self, step_definition_id: str) -> StepDefinition | None:
        return self._definitions.get(step_definition_id)

    def get(self, step_definition_id: str) -> StepDefinition:
        """Look up a definition by id.

        Raises:
            NotFoundError: If the id is not in the catalog
        """
        definition = self.find(step_definition_id)
        if definition is None:
            raise NotFoundError("step definition", step_definition_id)
        return definition

    def __contains__(self, step_definition_id: object) -> bool:
        return step_definition_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def parse_catalog(data: Any) -> InMemoryStepCatalog:
    """Build a catalog from already-parsed file content.

    Accepts either {"step_definitions": [...]} or a bare list.

    Raises:
        ValueError: If the structure is not a list of definitions
        ValidationError: If a definition fails validation
    """
    if isinstance(data, dict):
        if "step_definitions" not in data:
            raise ValueError("catalog file must contain a 'step_definitions' list")
        data = data["step_definitions"]
    if not isinstance(data, list):
        raise ValueError(f"step_definitions must be a list, got {type(data).__name__}")
    return InMemoryStepCatalog(StepDefinition.model_validate(item) for item in data)


def load_catalog(path: Path) -> InMemoryStepCatalog:
    """Load step definitions from a YAML or JSON file.

    Args:
        path: Catalog file (.yaml, .yml, or .json)

    Returns:
        Catalog holding every definition in the file

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file structure is wrong
        ValidationError: If a definition fails validation
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    catalog = parse_catalog(data)
    logger.info("catalog_loaded", path=str(path), definition_count=len(catalog))
    return catalog


# Sample catalog for development and tests: one input, two processing steps,
# one output, and a utility pass-through.
_BUILTIN_DEFINITIONS: list[dict[str, Any]] = [
    {
        "id": "sd-input-s3",
        "name": "S3 Input",
        "description": "Loads images from an S3 bucket path.",
        "category": "Input",
        "output_ports": ["images"],
        "port_kinds": {"images": "image_batch"},
        "parameter_schema": [
            {"name": "bucket", "label": "S3 Bucket", "kind": "string", "required": True},
            {"name": "prefix", "label": "S3 Prefix/Path", "kind": "string", "required": True},
            {"name": "file_pattern", "label": "File Pattern", "kind": "string", "default": "*.jpg"},
        ],
    },
    {
        "id": "sd-blur-detector",
        "name": "Blur Detector",
        "description": "Detects and potentially filters blurry images.",
        "category": "ImageProcessing",
        "input_ports": ["images"],
        "output_ports": ["images"],
        "port_kinds": {"images": "image_batch"},
        "parameter_schema": [
            {"name": "threshold", "label": "Blur Threshold", "kind": "number", "required": True, "default": 100},
            {"name": "filter_blurry", "label": "Filter Blurry Images", "kind": "boolean", "default": True},
        ],
    },
    {
        "id": "sd-resolution-std",
        "name": "Resize Images",
        "description": "Resizes images to a standard resolution.",
        "category": "ImageProcessing",
        "input_ports": ["images"],
        "output_ports": ["images"],
        "port_kinds": {"images": "image_batch"},
        "parameter_schema": [
            {"name": "width", "label": "Target Width", "kind": "number", "required": True, "default": 512},
            {"name": "height", "label": "Target Height", "kind": "number", "required": True, "default": 512},
            {
                "name": "filter_type",
                "label": "Resizing Filter",
                "kind": "enum",
                "default": "Lanczos3",
                "options": ["Nearest", "Triangle", "CatmullRom", "Gaussian", "Lanczos3"],
            },
        ],
    },
    {
        "id": "sd-output-s3",
        "name": "S3 Output",
        "description": "Saves processed images to an S3 bucket path.",
        "category": "Output",
        "input_ports": ["images"],
        "port_kinds": {"images": "image_batch"},
        "parameter_schema": [
            {"name": "bucket", "label": "S3 Bucket", "kind": "string", "required": True},
            {"name": "prefix", "label": "S3 Prefix/Path", "kind": "string", "required": True},
            {"name": "format", "label": "Output Format", "kind": "enum", "default": "jpg", "options": ["jpg", "png", "webp"]},
        ],
    },
    {
        "id": "sd-noop",
        "name": "No Operation",
        "description": "Passes data through without modification (for testing/debugging).",
        "category": "Utility",
        "input_ports": ["in"],
        "output_ports": ["out"],
    },
]


def builtin_catalog() -> InMemoryStepCatalog:
    """Sample catalog used when no catalog file is configured."""
    return parse_catalog(_BUILTIN_DEFINITIONS)
