"""Value hydration for chart rendering."""

from .dsl import parse_expression, resolve_values
from .engine import hydrate_values, template_context
from .mapping import apply_value_mapping, set_in_map, split_path_segments
from .template import render_text, render_values

__all__ = [
    "apply_value_mapping",
    "hydrate_values",
    "parse_expression",
    "render_text",
    "render_values",
    "resolve_values",
    "set_in_map",
    "split_path_segments",
    "template_context",
]
