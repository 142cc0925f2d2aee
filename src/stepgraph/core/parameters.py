"""Parameter initialization and schema checks for node parameters.

Parameters are a schema-checked mapping: every value written through the
editing engine is checked against the step definition's parameter schema at
update time, not deferred to render time.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from stepgraph.contracts.catalog import ParameterSpec, StepDefinition
from stepgraph.contracts.enums import ParameterKind
from stepgraph.contracts.errors import InvalidParameterError


def initial_parameters(definition: StepDefinition) -> dict[str, Any]:
    """Parameters for a freshly placed node.

    Each parameter with a schema default starts at that default; parameters
    without one are left unset (absent from the mapping).
    """
    return {
        spec.name: copy.deepcopy(spec.default)  # defaults may be dicts/lists shared by the catalog
        for spec in definition.parameter_schema.parameters
        if spec.has_default
    }


def check_parameter_values(definition: StepDefinition, values: Mapping[str, Any]) -> dict[str, str]:
    """Check candidate parameter values against a step's schema.

    Args:
        definition: Step definition whose schema applies
        values: Parameter name -> proposed value

    Returns:
        Mapping of offending parameter name -> problem; empty if all values are valid
    """
    problems: dict[str, str] = {}
    schema = definition.parameter_schema
    for name, value in values.items():
        spec = schema.get(name)
        if spec is None:
            problems[name] = f"unknown parameter for step '{definition.id}'"
            continue
        problem = spec.check(value)
        if problem is not None:
            problems[name] = problem
    return problems


def merge_parameters(
    node_id: str,
    definition: StepDefinition,
    current: Mapping[str, Any],
    new_values: Mapping[str, Any],
) -> dict[str, Any]:
    """Merge new values into a node's parameters, all-or-nothing.

    Raises:
        InvalidParameterError: If any value is unknown or of the wrong kind.
            Nothing is merged in that case.
    """
    problems = check_parameter_values(definition, new_values)
    if problems:
        raise InvalidParameterError(node_id, problems)
    merged = dict(current)
    merged.update(new_values)
    return merged


def missing_required(definition: StepDefinition, values: Mapping[str, Any]) -> list[str]:
    """Names of required parameters that are unset or None, in schema order."""
    return [spec.name for spec in definition.parameter_schema.parameters if spec.required and values.get(spec.name) is None]


def coerce_form_value(spec: ParameterSpec, raw: str) -> Any:
    """Convert a raw form string into the parameter's kind.

    Form widgets hand back strings; this is the single place they become
    typed values before reaching update_node_parameters().

    Raises:
        ValueError: If the string cannot represent the parameter's kind
    """
    if spec.kind is ParameterKind.NUMBER:
        try:
            number = float(raw)
        except ValueError:
            raise ValueError(f"'{raw}' is not a number") from None
        return int(number) if number.is_integer() and "." not in raw and "e" not in raw.lower() else number
    if spec.kind is ParameterKind.BOOLEAN:
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"'{raw}' is not a boolean")
    if spec.kind is ParameterKind.OBJECT:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON object: {e.msg}") from e
        if not isinstance(parsed, dict | list):
            raise ValueError("expected a JSON object or array")
        return parsed
    return raw
