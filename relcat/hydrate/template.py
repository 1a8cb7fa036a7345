"""Jinja2 templating of release values and of commit/pull request text.

Release values may contain expressions such as ``{{ Release.Name }}`` or
``{{ Environment.Spec.Values.domain | trimPrefix("www.") }}``. The whole
value tree is dumped to YAML, rendered once, and parsed back.
"""

from __future__ import annotations

import base64
import hashlib
import json
import re
from collections.abc import Mapping
from functools import cache

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError, Undefined
from jinja2.exceptions import TemplateRuntimeError

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import StrDict, as_str_dict

__all__ = [
    "FILTERS",
    "create_environment",
    "render_text",
    "render_values",
]


def _quote(value: object) -> str:
    return json.dumps("" if value is None else str(value))


def _squote(value: object) -> str:
    return "'" + ("" if value is None else str(value)) + "'"


def _b64enc(value: object) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def _b64dec(value: object) -> str:
    return base64.b64decode(str(value).encode("ascii")).decode("utf-8")


def _sha256sum(value: object) -> str:
    return hashlib.sha256(str(value).encode("utf-8")).hexdigest()


def _trunc(value: object, length: int) -> str:
    """Keep the first ``length`` characters; negative keeps the last ones."""
    text = str(value)
    return text[:length] if length >= 0 else text[length:]


def _trim_prefix(value: object, prefix: str) -> str:
    return str(value).removeprefix(prefix)


def _trim_suffix(value: object, suffix: str) -> str:
    return str(value).removesuffix(suffix)


def _to_yaml(value: object) -> str:
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip("\n")


def _to_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"))


_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[^A-Za-z0-9]+")


def _words(value: object) -> list[str]:
    return [w.lower() for w in _WORD_BOUNDARY.split(str(value)) if w]


def _kebabcase(value: object) -> str:
    return "-".join(_words(value))


def _snakecase(value: object) -> str:
    return "_".join(_words(value))


def _nindent(value: object, width: int) -> str:
    pad = " " * width
    return "\n" + "\n".join(pad + line if line else line for line in str(value).split("\n"))


def _required(value: object, message: str = "value is required") -> object:
    if isinstance(value, Undefined) or value is None or value == "":
        raise TemplateRuntimeError(message)
    return value


FILTERS = {
    "quote": _quote,
    "squote": _squote,
    "b64enc": _b64enc,
    "b64dec": _b64dec,
    "sha256sum": _sha256sum,
    "trunc": _trunc,
    "trimPrefix": _trim_prefix,
    "trimSuffix": _trim_suffix,
    "toYaml": _to_yaml,
    "toJson": _to_json,
    "kebabcase": _kebabcase,
    "snakecase": _snakecase,
    "nindent": _nindent,
    "required": _required,
}


@cache
def create_environment() -> Environment:
    """Jinja2 environment shared by value, commit and pull request templates.

    Undefined names are errors rather than empty strings.
    """
    env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)
    env.filters.update(FILTERS)
    return env


def _describe(error: TemplateError) -> str:
    if isinstance(error, TemplateSyntaxError) and error.lineno:
        return f"line {error.lineno}: {error.message}"
    return str(error.message or error)


def render_text(source: str, context: Mapping[str, object], *, name: str = "template") -> Result[str, CatalogError]:
    try:
        return Ok(create_environment().from_string(source).render(context))
    except TemplateError as e:
        return Err(CatalogError("template", f"{name}: {_describe(e)}"))


def render_values(values: StrDict, context: Mapping[str, object], *, name: str = "values") -> Result[StrDict, CatalogError]:
    """Render ``values`` as one YAML template and parse the result."""
    source = yaml.safe_dump(values, default_flow_style=False, sort_keys=False, allow_unicode=True)
    rendered = render_text(source, context, name=name)
    if isinstance(rendered, Err):
        return rendered

    try:
        data: object = yaml.safe_load(rendered.value)
    except yaml.YAMLError as e:
        return Err(CatalogError("template", f"{name}: rendered values are not valid YAML: {e}"))

    if data is None:
        return Ok({})
    result = as_str_dict(data)
    if result is None:
        return Err(CatalogError("template", f"{name}: rendered values are not a mapping"))
    return Ok(result)
