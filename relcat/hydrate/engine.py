"""Release value hydration: interpolation, value mapping, templating."""

from __future__ import annotations

import logging

from relcat.catalog.model import Release
from relcat.core.config import ValueMapping
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import StrDict, as_str_dict

from .dsl import resolve_values
from .mapping import apply_value_mapping
from .template import render_values

__all__ = [
    "hydrate_values",
    "template_context",
]

logger = logging.getLogger(__name__)


def template_context(release: Release) -> StrDict:
    """Names visible to value templates: ``Release`` and ``Environment``."""
    env = release.environment
    return {
        "Release": {
            "Name": release.name,
            "Project": release.project,
            "Spec": {
                "Version": release.version,
                "Values": release.values,
            },
        },
        "Environment": {
            "Name": env.name,
            "Spec": {
                "Values": env.values,
            },
        },
    }


def hydrate_values(release: Release, mapping: ValueMapping | None = None) -> Result[StrDict, CatalogError]:
    """Produce the values handed to the chart renderer.

    Neither the release nor its environment is modified.
    """
    where = f"release {release.name} in {release.environment.name}"

    resolved = resolve_values(release.values, release.environment.values)
    if isinstance(resolved, Err):
        return Err(resolved.error.wrap(f"hydrating object values of {where}"))
    values = as_str_dict(resolved.value) or {}

    apply_value_mapping(values, release.name, mapping)

    rendered = render_values(values, template_context(release), name=where)
    if isinstance(rendered, Err):
        return rendered

    logger.debug("hydrated %s: %d top-level keys", where, len(rendered.value))
    return Ok(rendered.value)
