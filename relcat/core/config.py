"""Typed configuration loading and catalog directory resolution.

The optional ``relcat.toml`` at the catalog root holds the git default
branch, the commit and pull request templates, and the static value
mapping applied while hydrating release values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CatalogError
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "CATALOG_DIR_ENV",
    "CONFIG_FILENAME",
    "Config",
    "ValueMapping",
    "find_catalog_dir",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "relcat.toml"
CATALOG_DIR_ENV = "RELCAT_CATALOG_DIR"

DEFAULT_COMMIT_TEMPLATE = (
    "Promote {{ releases | join(', ') }} from {{ source.name }} to {{ target.name }}"
)

DEFAULT_PULL_REQUEST_TEMPLATE = """\
Promotion from **{{ source.name }}** to **{{ target.name }}**.

| Release | Project | From | To |
|---------|---------|------|----|
{% for item in items -%}
| {{ item.name }} | {{ item.project }} | {{ item.target_version or '-' }} | {{ item.source_version }} |
{% endfor %}"""


@dataclass(frozen=True, slots=True)
class ValueMapping:
    """Static overrides applied to release values, never overwriting.

    Attributes:
        mappings: Dotted path (``\\.`` escapes a dot) to literal value
        release_ignore_list: Release names the mapping is not applied to
    """

    mappings: dict[str, object] = field(default_factory=dict)
    release_ignore_list: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    default_branch: str = "main"
    commit_template: str = DEFAULT_COMMIT_TEMPLATE
    pull_request_template: str = DEFAULT_PULL_REQUEST_TEMPLATE
    value_mapping: ValueMapping = field(default_factory=ValueMapping)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        mapping: StrDict = get_table(data, "value_mapping") or {}
        mappings: StrDict = get_table(mapping, "mappings") or {}

        return cls(
            default_branch=get_str(data, "default_branch") or "main",
            commit_template=get_str(data, "commit_template") or DEFAULT_COMMIT_TEMPLATE,
            pull_request_template=get_str(data, "pull_request_template")
            or DEFAULT_PULL_REQUEST_TEMPLATE,
            value_mapping=ValueMapping(
                mappings=dict(mappings),
                release_ignore_list=tuple(get_str_list(mapping, "release_ignore_list") or ()),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, CatalogError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(CatalogError("invalid_catalog", f"config root must be a TOML table: {path}"))
        return Ok(data)
    except FileNotFoundError:
        return Err(CatalogError("not_found", f"config file not found: {path}"))
    except PermissionError:
        return Err(CatalogError("io", f"permission denied reading: {path}"))
    except tomllib.TOMLDecodeError as e:
        return Err(CatalogError("invalid_catalog", f"invalid TOML syntax in {path}: {e}"))
    except UnicodeDecodeError as e:
        return Err(CatalogError("io", f"error reading config {path}: {e}"))


def load_config(path: Path) -> Result[Config, CatalogError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relcat.toml

    Returns:
        Ok(Config) on success, Err(CatalogError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(CatalogError("invalid_catalog", f"invalid config structure in {path}: {e}"))


def load_config_or_default(path: Path) -> Result[Config, CatalogError]:
    """Load config, falling back to defaults when the file does not exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def find_catalog_dir(explicit: Path | None = None, *, cwd: Path | None = None) -> Result[Path, CatalogError]:
    """Resolve the catalog root.

    Order: explicit path, then ``$RELCAT_CATALOG_DIR``, then the nearest
    ancestor of the working directory containing ``environments/``.
    """
    candidate = explicit
    if candidate is None:
        env = os.environ.get(CATALOG_DIR_ENV)
        if env:
            candidate = Path(env)

    if candidate is not None:
        root = candidate.expanduser().resolve()
        if not (root / "environments").is_dir():
            return Err(
                CatalogError(
                    "not_found",
                    f"not a catalog directory (missing environments/): {root}",
                )
            )
        return Ok(root)

    start = (cwd or Path.cwd()).resolve()
    for parent in (start, *start.parents):
        if (parent / "environments").is_dir():
            return Ok(parent)

    return Err(
        CatalogError(
            "not_found",
            f"no catalog found from {start}",
            hint=f"Pass --catalog-dir or set {CATALOG_DIR_ENV}.",
        )
    )
