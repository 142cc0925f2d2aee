"""Step definition contracts.

Step definitions come from the catalog service (or a catalog file), which is
external data, so they are Pydantic models validated on construction.
Frozen after construction: a catalog fetch is an immutable read model.

Parameter schemas are accepted in three shapes:
- ParameterSchema instance
- list of parameter dicts (catalog file convenience)
- JSON Schema object ({"type": "object", "properties": {...}, "required": [...]})
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from stepgraph.contracts.enums import NodeRole, ParameterKind, StepCategory

# JSON Schema "type" -> ParameterKind. "string" with "enum" becomes ENUM.
_JSON_SCHEMA_KINDS: dict[str, ParameterKind] = {
    "string": ParameterKind.STRING,
    "number": ParameterKind.NUMBER,
    "integer": ParameterKind.NUMBER,
    "boolean": ParameterKind.BOOLEAN,
    "object": ParameterKind.OBJECT,
    "array": ParameterKind.OBJECT,
}


# Largest magnitude a number may have and still round-trip through canonical
# JSON: integral values beyond it print as integers outside the I-JSON domain.
MAX_SAFE_NUMBER = 2**53 - 1


def is_safe_number(value: Any) -> bool:
    """Whether a value is a finite int or float within +/- MAX_SAFE_NUMBER (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return abs(value) <= MAX_SAFE_NUMBER


def is_canonical_json(value: Any) -> bool:
    """Whether a value can be stored in a snapshot and read back unchanged.

    Accepts None, bool, str, safe numbers, lists of such values and dicts
    with string keys. Tuples are rejected: they come back as lists.
    """
    if value is None or isinstance(value, bool | str):
        return True
    if isinstance(value, int | float):
        return is_safe_number(value)
    if isinstance(value, list):
        return all(is_canonical_json(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) and is_canonical_json(item) for key, item in value.items())
    return False


def value_matches_kind(kind: ParameterKind, value: Any) -> bool:
    """Check whether a value has the primitive shape of a parameter kind.

    bool is rejected for NUMBER even though it subclasses int: a checkbox
    value landing in a numeric field is a form bug, not a number.
    Snapshots are stored as canonical JSON, so NUMBER rejects NaN, Infinity
    and magnitudes past MAX_SAFE_NUMBER, and OBJECT contents must satisfy
    is_canonical_json all the way down.
    """
    if kind is ParameterKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is ParameterKind.NUMBER:
        return is_safe_number(value)
    if kind in (ParameterKind.STRING, ParameterKind.ENUM):
        return isinstance(value, str)
    # OBJECT: any JSON container
    return isinstance(value, dict | list) and is_canonical_json(value)


class ParameterSpec(BaseModel):
    """One named parameter of a step definition."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1, description="Parameter name (key in node parameters)")
    kind: ParameterKind = Field(description="Primitive kind of the value")
    required: bool = Field(default=False, description="Must be set before the pipeline runs")
    default: Any = Field(default=None, description="Initial value for new nodes (None = unset)")
    options: tuple[str, ...] | None = Field(default=None, description="Allowed values for enum parameters")
    label: str | None = Field(default=None, description="Display label")
    description: str | None = Field(default=None, description="Help text")

    @model_validator(mode="after")
    def validate_options(self) -> ParameterSpec:
        """Enum parameters need options; other kinds must not declare them."""
        if self.kind is ParameterKind.ENUM and not self.options:
            raise ValueError(f"enum parameter '{self.name}' must declare options")
        if self.kind is not ParameterKind.ENUM and self.options is not None:
            raise ValueError(f"parameter '{self.name}' of kind '{self.kind.value}' cannot declare options")
        return self

    @model_validator(mode="after")
    def validate_default(self) -> ParameterSpec:
        """A declared default must itself satisfy the parameter's kind."""
        if self.default is None:
            return self
        problem = self.check(self.default)
        if problem is not None:
            raise ValueError(f"default for parameter '{self.name}' is invalid: {problem}")
        return self

    @property
    def has_default(self) -> bool:
        """Whether new nodes get an initial value for this parameter."""
        return self.default is not None

    def check(self, value: Any) -> str | None:
        """Check a candidate value against this parameter.

        Returns:
            None if the value is acceptable, otherwise a message describing the problem.
        """
        if not value_matches_kind(self.kind, value):
            if self.kind is ParameterKind.NUMBER and isinstance(value, int | float) and not isinstance(value, bool):
                return f"{value!r} is not a finite number within +/-{MAX_SAFE_NUMBER}"
            if self.kind is ParameterKind.OBJECT and isinstance(value, dict | list):
                return "object holds values that cannot be stored as JSON"
            return f"expected {self.kind.value}, got {type(value).__name__}"
        if self.kind is ParameterKind.ENUM and self.options is not None and value not in self.options:
            return f"'{value}' is not one of {list(self.options)}"
        return None


class ParameterSchema(BaseModel):
    """Ordered set of parameters declared by a step definition."""

    model_config = {"frozen": True}

    parameters: tuple[ParameterSpec, ...] = Field(default=(), description="Parameters in display order")

    @field_validator("parameters")
    @classmethod
    def validate_unique_names(cls, v: tuple[ParameterSpec, ...]) -> tuple[ParameterSpec, ...]:
        """Parameter names must be unique within a schema."""
        names = [p.name for p in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate parameter name(s): {duplicates}")
        return v

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def get(self, name: str) -> ParameterSpec | None:
        """Look up a parameter by name."""
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def __len__(self) -> int:
        return len(self.parameters)

    @classmethod
    def from_json_schema(cls, schema: dict[str, Any]) -> ParameterSchema:
        """Build a parameter schema from a JSON Schema object.

        Only the top-level properties are mapped; nested object schemas are
        treated as opaque OBJECT parameters.

        Args:
            schema: JSON Schema with "properties" and optional "required"

        Returns:
            ParameterSchema with one parameter per property

        Raises:
            ValueError: If a property has no type or an unsupported type
        """
        properties: dict[str, Any] = schema.get("properties") or {}
        required = set(schema.get("required") or [])
        specs: list[ParameterSpec] = []
        for name, prop in properties.items():
            json_type = prop.get("type")
            if json_type not in _JSON_SCHEMA_KINDS:
                raise ValueError(f"property '{name}' has unsupported JSON schema type: {json_type!r}")
            enum_values = prop.get("enum")
            kind = ParameterKind.ENUM if enum_values is not None else _JSON_SCHEMA_KINDS[json_type]
            specs.append(
                ParameterSpec(
                    name=name,
                    kind=kind,
                    required=name in required,
                    default=prop.get("default"),
                    options=tuple(str(v) for v in enum_values) if enum_values is not None else None,
                    label=prop.get("title"),
                    description=prop.get("description"),
                )
            )
        return cls(parameters=tuple(specs))


class StepDefinition(BaseModel):
    """A catalog entry describing one reusable pipeline operation.

    Ports are ordered: the first input/output port is the default handle
    when a stored connection omits port names.
    """

    model_config = {"frozen": True}

    id: str = Field(min_length=1, description="Catalog identifier")
    name: str = Field(description="Display name")
    description: str | None = Field(default=None, description="Help text")
    category: str = Field(description="Input, Output, or any processing category")
    input_ports: tuple[str, ...] = Field(default=(), description="Ordered input port names")
    output_ports: tuple[str, ...] = Field(default=(), description="Ordered output port names")
    parameter_schema: ParameterSchema = Field(default_factory=ParameterSchema, description="Declared parameters")
    port_kinds: dict[str, str] = Field(
        default_factory=dict,
        description="Optional data kind per port name; undeclared ports accept anything",
    )

    @field_validator("parameter_schema", mode="before")
    @classmethod
    def coerce_parameter_schema(cls, v: Any) -> Any:
        """Accept a parameter list or a JSON Schema object."""
        if isinstance(v, list | tuple):
            return {"parameters": v}
        if isinstance(v, dict) and "parameters" not in v and ("properties" in v or v.get("type") == "object"):
            return ParameterSchema.from_json_schema(v)
        return v

    @model_validator(mode="after")
    def validate_ports(self) -> StepDefinition:
        """Port names must be unique per direction and port kinds must name real ports."""
        for direction, ports in (("input", self.input_ports), ("output", self.output_ports)):
            duplicates = sorted({p for p in ports if ports.count(p) > 1})
            if duplicates:
                raise ValueError(f"step '{self.id}' has duplicate {direction} port(s): {duplicates}")
        undeclared = sorted(set(self.port_kinds) - set(self.input_ports) - set(self.output_ports))
        if undeclared:
            raise ValueError(f"step '{self.id}' declares kinds for unknown port(s): {undeclared}")
        return self

    @property
    def role(self) -> NodeRole:
        """Structural role of nodes created from this definition."""
        if self.category == StepCategory.INPUT:
            return NodeRole.INPUT
        if self.category == StepCategory.OUTPUT:
            return NodeRole.OUTPUT
        return NodeRole.PROCESSING

    def port_kind(self, port: str) -> str | None:
        """Declared data kind of a port, or None if undeclared."""
        return self.port_kinds.get(port)
