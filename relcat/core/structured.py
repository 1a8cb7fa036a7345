"""Helpers for safely working with dynamic (untyped) structures.

Use these helpers at boundaries where we ingest YAML/TOML or other untyped
data. They provide runtime validation and static type narrowing.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]

# Decoded YAML value: the closed set produced by yaml.safe_load for catalog files.
type YamlValue = None | bool | int | float | str | list[YamlValue] | dict[str, YamlValue]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    """Return obj as ObjList if it is a list, else None."""
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Numbers are accepted and converted, since YAML decodes an unquoted
    ``version: 1.0`` as a float. Returns None if missing or empty.
    """
    value = table.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_bool(table: Mapping[str, object], key: str) -> bool:
    """Get a boolean flag, False when missing or not a bool."""
    value = table.get(key)
    return value if isinstance(value, bool) else False


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an integer value, None when missing or not an int."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Get a list of strings, None if missing or any item is not a string."""
    items = as_obj_list(table.get(key))
    if items is None:
        return None
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            return None
        out.append(item)
    return out


def same_value(a: object, b: object) -> bool:
    """Deep equality that also requires matching types at every level.

    Decoded YAML needs this: ``1``, ``1.0`` and ``true`` compare equal with
    ``==`` but are different documents.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        left = cast(dict[object, object], a)
        right = cast(dict[object, object], b)
        return left.keys() == right.keys() and all(same_value(v, right[k]) for k, v in left.items())
    if isinstance(a, list):
        left_items = cast(list[object], a)
        right_items = cast(list[object], b)
        return len(left_items) == len(right_items) and all(
            same_value(x, y) for x, y in zip(left_items, right_items)
        )
    return a == b
