from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from yaml.nodes import ScalarNode

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_str_list, get_table
from relcat.yml.document import YamlDocument

__all__ = [
    "ChartRef",
    "Environment",
    "PromotionPolicy",
    "Release",
    "is_standard_version",
]

# MAJOR[.MINOR[.PATCH]] with an optional "v"; anything else is a pinned build.
_STANDARD_VERSION = re.compile(r"^v?\d+(\.\d+){0,2}$")


def is_standard_version(version: str) -> bool:
    """True for plain release versions such as ``1.0`` or ``v2.3.1``."""
    return _STANDARD_VERSION.match(version.strip()) is not None


@dataclass(frozen=True, slots=True)
class PromotionPolicy:
    """Which environments may promote into an environment."""

    from_environments: tuple[str, ...] = ()
    allow_auto_merge: bool = False


@dataclass(frozen=True, slots=True)
class Environment:
    """A deployment target and its place in the promotion graph.

    Attributes:
        name: Unique environment name
        order: Display order (lower first)
        promotion: Allowed source environments and auto-merge policy
        values: Environment-wide values referenced by release values
        path: Environment file (``environments/<env>.yaml``)
    """

    name: str
    order: int = 0
    promotion: PromotionPolicy = field(default_factory=PromotionPolicy)
    values: StrDict = field(default_factory=dict, compare=False, hash=False)
    path: Path | None = None

    @property
    def releases_dir(self) -> Path | None:
        """Directory holding this environment's release files."""
        if self.path is None:
            return None
        return self.path.parent / self.path.stem / "releases"

    def is_promotable_to(self, target: Environment) -> bool:
        """True if ``target`` lists this environment as an allowed source."""
        return self.name in target.promotion.from_environments

    @classmethod
    def from_document(cls, doc: YamlDocument) -> Result[Environment, CatalogError]:
        data = as_str_dict(doc.values)
        where = doc.path or "<memory>"
        if data is None:
            return Err(CatalogError("invalid_catalog", f"environment file is not a mapping: {where}"))

        metadata: StrDict = get_table(data, "metadata") or {}
        spec: StrDict = get_table(data, "spec") or {}
        promotion: StrDict = get_table(spec, "promotion") or {}

        name = get_str(metadata, "name") or (doc.path.stem if doc.path is not None else None)
        if name is None:
            return Err(CatalogError("invalid_catalog", f"environment has no name: {where}"))

        sources = get_str_list(promotion, "fromEnvironments")
        if sources is None and "fromEnvironments" in promotion and promotion["fromEnvironments"] is not None:
            return Err(
                CatalogError(
                    "invalid_catalog",
                    f"spec.promotion.fromEnvironments must be a list of names: {where}",
                )
            )

        return Ok(
            cls(
                name=name,
                order=get_int(spec, "order") or 0,
                promotion=PromotionPolicy(
                    from_environments=tuple(sources or ()),
                    allow_auto_merge=get_bool(promotion, "allowAutoMerge"),
                ),
                values=get_table(spec, "values") or {},
                path=doc.path,
            )
        )


@dataclass(frozen=True, slots=True)
class ChartRef:
    """Helm chart a release is rendered with."""

    name: str
    repo_url: str | None = None
    version: str | None = None


def _scalar_text(doc: YamlDocument, path: str) -> str | None:
    """Raw scalar text from the node tree (``1.10`` stays ``1.10``)."""
    found = doc.find(path)
    if isinstance(found, Err) or not isinstance(found.value, ScalarNode):
        return None
    text = found.value.value.strip()
    return text or None


@dataclass(slots=True, eq=False)
class Release:
    """One release of a project in one environment.

    The release owns its parsed document, which is what promotion edits.
    """

    name: str
    project: str
    environment: Environment
    version: str | None
    values: StrDict
    document: YamlDocument
    chart: ChartRef | None = None

    @property
    def path(self) -> Path | None:
        return self.document.path

    @classmethod
    def from_document(cls, doc: YamlDocument, environment: Environment) -> Result[Release, CatalogError]:
        data = as_str_dict(doc.values)
        where = doc.path or "<memory>"
        if data is None:
            return Err(CatalogError("invalid_catalog", f"release file is not a mapping: {where}"))

        metadata: StrDict = get_table(data, "metadata") or {}
        spec: StrDict = get_table(data, "spec") or {}
        name = get_str(metadata, "name")
        if name is None:
            return Err(CatalogError("invalid_catalog", f"release has no metadata.name: {where}"))

        chart: ChartRef | None = None
        chart_data = get_table(spec, "chart")
        if chart_data is not None and get_str(chart_data, "name"):
            chart = ChartRef(
                name=get_str(chart_data, "name") or "",
                repo_url=get_str(chart_data, "repoUrl"),
                version=_scalar_text(doc, "spec.chart.version"),
            )

        return Ok(
            cls(
                name=name,
                project=_scalar_text(doc, "spec.project") or "",
                environment=environment,
                version=_scalar_text(doc, "spec.version"),
                values=get_table(spec, "values") or {},
                document=doc,
                chart=chart,
            )
        )
