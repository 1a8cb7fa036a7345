"""Static value overrides from ``[value_mapping]`` in relcat.toml."""

from __future__ import annotations

import copy
import logging
from collections.abc import MutableMapping

from relcat.core.config import ValueMapping

__all__ = [
    "apply_value_mapping",
    "set_in_map",
    "split_path_segments",
]

logger = logging.getLogger(__name__)


def _unescape(segment: str) -> str:
    return segment.replace("\\.", ".").replace("\\\\", "\\")


def split_path_segments(path: str) -> list[str]:
    """Split a dotted path; ``\\.`` is a literal dot and ``\\\\`` a literal backslash.

    >>> split_path_segments(r"a\\.b.c")
    ['a.b', 'c']
    >>> split_path_segments(r"a\\\\b.c")
    ['a\\\\b', 'c']
    """
    segments: list[str] = []
    start = 0
    escaped = False
    for i, ch in enumerate(path):
        if ch == "\\":
            escaped = not escaped
        elif ch == ".":
            if escaped:
                escaped = False
                continue
            segments.append(_unescape(path[start:i]))
            start = i + 1
        else:
            escaped = False
    segments.append(_unescape(path[start:]))
    return segments


def set_in_map(mapping: MutableMapping[str, object], segments: list[str], value: object) -> None:
    """Set ``value`` at ``segments`` unless the path already exists.

    An existing key is kept even when its value is falsy. Missing
    intermediate mappings are created; an existing non-mapping intermediate
    stops the walk.
    """
    current = mapping
    for i, key in enumerate(segments):
        if i == len(segments) - 1:
            if key not in current:
                current[key] = copy.deepcopy(value)
            return

        sub = current.get(key)
        if key not in current:
            created: dict[str, object] = {}
            current[key] = created
            current = created
        elif isinstance(sub, dict):
            current = sub
        else:
            logger.debug("value mapping stops at non-mapping key %r", key)
            return


def apply_value_mapping(
    values: MutableMapping[str, object], release_name: str, mapping: ValueMapping | None
) -> None:
    """Apply ``mapping`` to ``values`` in place unless the release is ignored."""
    if mapping is None:
        return
    if release_name in mapping.release_ignore_list:
        logger.debug("release %s is in the value mapping ignore list", release_name)
        return
    for path, value in mapping.mappings.items():
        set_in_map(values, split_path_segments(path), value)
