"""Parameters declared by components and the values bound to them."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

ResolvedVals = dict[str, Any]


class ParameterType(enum.Enum):
    """Primitive types a parameter may take, after the JSON Schema primitives."""

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    NULL = "null"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ValidationErrors(ValueError):
    """Raised when one or more parameter values fail validation."""

    def __init__(self, errors: Iterable[Exception]):
        self.errors = list(errors)
        super().__init__(f"validation failed: {[str(e) for e in self.errors]}")


@dataclass
class Parameter:
    """A configurable unit on a component or application."""

    name: str
    parameter_type: ParameterType
    description: Optional[str] = None
    required: bool = False
    default: Any = None

    def validate(self, value: Any) -> None:
        """Raise ValueError if ``value`` does not match this parameter's type."""
        kind = self.parameter_type
        if kind is ParameterType.BOOLEAN:
            if not isinstance(value, bool):
                raise ValueError(f"expected boolean value for {self.name}")
        elif kind is ParameterType.STRING:
            if not isinstance(value, str):
                raise ValueError(f"expected string value for {self.name}")
        elif kind is ParameterType.NUMBER:
            if not _is_number(value):
                raise ValueError(f"expected numeric value for {self.name}")
        elif kind is ParameterType.NULL:
            if value is not None:
                raise ValueError(f"expected null value for {self.name}")


@dataclass
class ParameterValue:
    """A value substituted into a parameter, possibly taken from a parent parameter."""

    name: str
    value: Any = None
    from_param: Optional[str] = None


def resolve_value(
    params: Mapping[str, Any], from_param: Optional[str], value: Optional[str]
) -> Optional[str]:
    """Return the named parameter rendered as a string, falling back to ``value``."""
    if from_param is not None and from_param in params:
        found = params[from_param]
        if isinstance(found, str):
            return found
        return json.dumps(found, separators=(",", ":"))
    return value


def resolve_parameters(
    definition: Sequence[Parameter], values: Mapping[str, Any]
) -> ResolvedVals:
    """Resolve values against parameter definitions, applying defaults.

    Raises ValidationErrors listing every failure.
    """
    errors: list[Exception] = []
    resolved: ResolvedVals = {}
    for param in definition:
        value = values[param.name] if param.name in values else param.default
        if param.required and value is None:
            errors.append(ValueError(f"parameter {param.name} is required"))
        try:
            param.validate(value)
        except ValueError as exc:
            errors.append(exc)
        resolved[param.name] = value
    if errors:
        raise ValidationErrors(errors)
    return dict(sorted(resolved.items()))


def resolve_values(
    current: Sequence[ParameterValue], parent: Sequence[ParameterValue]
) -> ResolvedVals:
    """Merge current values with values looked up in the parent by ``from_param``.

    Raises ValueError when a ``from_param`` cannot be resolved and no value is given.
    """
    merged: ResolvedVals = {}
    for param in current:
        new_value = None
        if param.from_param is not None:
            override = next(
                (item for item in parent if item.name == param.from_param), None
            )
            if override is not None:
                new_value = override.value
        if new_value is None:
            new_value = param.value
        if param.from_param is not None and new_value is None:
            raise ValueError(
                f"could not resolve fromParam:{param.from_param} for {param.name}"
            )
        if new_value is not None:
            merged[param.name] = new_value
    return dict(sorted(merged.items()))


def extract_value_params(name: str, params: Iterable[ParameterValue]) -> Any:
    """Return the first non-empty value bound to ``name``, or None."""
    return next(
        (p.value for p in params if p.name == name and p.value is not None), None
    )


def extract_string_params(name: str, params: Iterable[ParameterValue]) -> Optional[str]:
    """Return the value bound to ``name`` if it is a string."""
    value = extract_value_params(name, params)
    return value if isinstance(value, str) else None


def extract_number_params(
    name: str, params: Iterable[ParameterValue]
) -> Optional[int | float]:
    """Return the value bound to ``name`` if it is a number."""
    value = extract_value_params(name, params)
    return value if _is_number(value) else None