"""Configuration variables substituted with the [fromVariable(NAME)] syntax."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, TypeVar

from rudr.parameter import ParameterValue

_FROM_VARIABLE = re.compile(r"\[fromVariable\((?P<var>\w+)\)\]", re.ASCII)

T = TypeVar("T")


def parse_from_variable(text: str) -> Optional[str]:
    """Return the variable name referenced by ``text``, or None."""
    match = _FROM_VARIABLE.fullmatch(text)
    return match.group("var") if match else None


@dataclass(frozen=True, order=True)
class Variable:
    """A named value; variables compare and order by name only."""

    name: str
    value: Any = field(compare=False)

    def to_parameter_value(self) -> ParameterValue:
        return ParameterValue(name=self.name, value=self.value)


def expand_variables(
    values: list[ParameterValue], variables: Mapping[str, Any]
) -> None:
    """Replace variable references in ``values`` in place.

    Raises ValueError when a referenced variable is undefined.
    """
    for param in values:
        if not isinstance(param.value, str):
            continue
        var = parse_from_variable(param.value)
        if var is None:
            continue
        if var not in variables:
            param.value = None
            raise ValueError(
                f'parameter `"{param.name}"` references undefined variable `"{var}"`'
            )
        param.value = variables[var]


def resolve_variables(
    values: Iterable[ParameterValue], variables: Iterable[Variable]
) -> list[ParameterValue]:
    """Return copies of ``values`` with variable references resolved."""
    resolved = [replace(v) for v in values]
    expand_variables(resolved, {var.name: var.value for var in variables})
    return resolved


def dedup(values: Iterable[T]) -> list[T]:
    """Return the values sorted, with equal neighbours collapsed to the first."""
    result: list[T] = []
    for item in sorted(values):
        if not result or result[-1] != item:
            result.append(item)
    return result


def get_variable_values(variables: Optional[Iterable[Variable]]) -> list[ParameterValue]:
    """Turn variables into parameter values, dropping duplicate names."""
    return [var.to_parameter_value() for var in dedup(variables or [])]