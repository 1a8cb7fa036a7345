"""Object interpolation in release values.

Two operators are recognized, as whole-string matches on string scalars::

    $ref(.Environment.Spec.Values.a.b)      value at a.b in the environment values
    $spread(.Environment.Spec.Values.list)  sequence inlined into the enclosing list

Strings that do not have the ``$op(.path)`` shape pass through unchanged.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Literal, cast

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import YamlValue

__all__ = [
    "SUPPORTED_PREFIX",
    "Expression",
    "parse_expression",
    "resolve_path",
    "resolve_values",
]

_EXPRESSION = re.compile(r"^\s*\$(\w+)\(\s*((\.\w+)+)\s*\)\s*$")

SUPPORTED_PREFIX = ".Environment.Spec.Values."

Operator = Literal["ref", "spread"]


@dataclass(frozen=True, slots=True)
class Expression:
    operator: Operator
    path: tuple[str, ...]
    text: str


def parse_expression(text: str) -> Result[Expression | None, CatalogError]:
    """Parse ``text`` as an interpolation; Ok(None) for plain strings."""
    m = _EXPRESSION.match(text)
    if m is None:
        return Ok(None)

    operator, full_path = m.group(1), m.group(2)
    if operator not in ("ref", "spread"):
        return Err(
            CatalogError(
                "dsl",
                f"unsupported object interpolation operator {operator!r} in expression: {text}",
                hint="Supported operators: $ref(), $spread()",
            )
        )
    if not full_path.startswith(SUPPORTED_PREFIX):
        return Err(
            CatalogError(
                "dsl",
                f"only {SUPPORTED_PREFIX!r} prefix is supported for object interpolation, but found: {full_path}",
            )
        )
    path = tuple(full_path[len(SUPPORTED_PREFIX) :].split("."))
    return Ok(Expression(operator=cast(Operator, operator), path=path, text=text))


def resolve_path(values: YamlValue, path: tuple[str, ...]) -> Result[YamlValue, CatalogError]:
    """Walk ``path`` through nested mappings."""
    current = values
    for key in path:
        if not isinstance(current, dict):
            return Err(CatalogError("dsl", f"value for key {key!r} is not a map"))
        if key not in current:
            return Err(CatalogError("dsl", f"key {key!r} not found in values"))
        current = current[key]
    return Ok(current)


def _resolve(expression: Expression, env_values: YamlValue) -> Result[YamlValue, CatalogError]:
    resolved = resolve_path(env_values, expression.path)
    if isinstance(resolved, Err):
        dotted = SUPPORTED_PREFIX + ".".join(expression.path)
        return Err(resolved.error.wrap(f"resolving object value for path {dotted!r}"))
    # Environment values are shared by every release of the environment.
    return Ok(copy.deepcopy(resolved.value))


def _resolve_sequence(items: list[YamlValue], env_values: YamlValue) -> Result[list[YamlValue], CatalogError]:
    result: list[YamlValue] = []
    for item in items:
        if not isinstance(item, str):
            resolved = resolve_values(item, env_values)
            if isinstance(resolved, Err):
                return resolved
            result.append(resolved.value)
            continue

        parsed = parse_expression(item)
        if isinstance(parsed, Err):
            return parsed
        expression = parsed.value
        if expression is None:
            result.append(item)
            continue

        value = _resolve(expression, env_values)
        if isinstance(value, Err):
            return value
        if expression.operator == "spread":
            if not isinstance(value.value, list):
                kind = type(value.value).__name__
                return Err(
                    CatalogError(
                        "dsl",
                        f"$spread() operator must resolve to a sequence, but got {kind}: {item}",
                    )
                )
            result.extend(value.value)
        else:
            result.append(value.value)
    return Ok(result)


def resolve_values(value: YamlValue, env_values: YamlValue) -> Result[YamlValue, CatalogError]:
    """Resolve interpolations depth-first, returning a new tree.

    Args:
        value: Release values (or any subtree of them); never mutated
        env_values: The environment's ``spec.values``
    """
    match value:
        case str():
            parsed = parse_expression(value)
            if isinstance(parsed, Err):
                return parsed
            if parsed.value is None:
                return Ok(value)
            if parsed.value.operator != "ref":
                return Err(
                    CatalogError(
                        "dsl",
                        f"only $ref() operator supported within object: {value}",
                        hint="$spread() is only allowed as a sequence element",
                    )
                )
            return _resolve(parsed.value, env_values)
        case dict():
            result: dict[str, YamlValue] = {}
            for key, sub in value.items():
                resolved = resolve_values(sub, env_values)
                if isinstance(resolved, Err):
                    return resolved
                result[str(key)] = resolved.value
            return Ok(result)
        case list():
            return _resolve_sequence(value, env_values)
        case None | bool() | int() | float():
            return Ok(value)
