"""Catalog loading.

Layout:
    environments/<env>.yaml
    environments/<env>/releases/**/<name>.release.yaml
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.filtering import AllReleases, ReleaseFilter, matches
from relcat.catalog.graph import PromotionGraph
from relcat.catalog.model import Environment, Release
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.yml.document import YamlDocument

__all__ = [
    "Catalog",
    "load_catalog",
    "load_environments",
]

logger = logging.getLogger(__name__)

RELEASE_SUFFIX = ".release.yaml"


@dataclass(frozen=True, slots=True)
class Catalog:
    """Environments, their releases and the promotion graph of one catalog.

    Attributes:
        root: Catalog root directory
        environments: Loaded environments, sorted by order then name
        releases: Releases aligned across ``environments``
        graph: Promotion graph over all environments of the catalog
    """

    root: Path
    environments: tuple[Environment, ...]
    releases: CrossReleaseList
    graph: PromotionGraph

    def environment(self, name: str) -> Result[Environment, CatalogError]:
        for env in self.environments:
            if env.name == name:
                return Ok(env)
        return Err(
            CatalogError(
                "not_found",
                f"environment not found: {name}",
                hint=f"Available: {', '.join(e.name for e in self.environments)}",
            )
        )

    def environments_by_names(self, names: Sequence[str]) -> list[Environment]:
        """Environments named in ``names`` (catalog order); all when empty."""
        if not names:
            return list(self.environments)
        wanted = set(names)
        return [env for env in self.environments if env.name in wanted]


def load_environments(root: Path) -> Result[list[Environment], CatalogError]:
    env_dir = root / "environments"
    if not env_dir.is_dir():
        return Err(CatalogError("not_found", f"environments directory not found: {env_dir}"))

    environments: list[Environment] = []
    seen: dict[str, Path] = {}
    for path in sorted(env_dir.glob("*.yaml")):
        doc = YamlDocument.load(path)
        if isinstance(doc, Err):
            return doc
        env = Environment.from_document(doc.value)
        if isinstance(env, Err):
            return env
        if env.value.name in seen:
            return Err(
                CatalogError(
                    "invalid_catalog",
                    f"duplicate environment {env.value.name}",
                    hint=f"{seen[env.value.name]} and {path}",
                )
            )
        seen[env.value.name] = path
        environments.append(env.value)

    environments.sort(key=lambda e: (e.order, e.name))
    return Ok(environments)


def _load_releases(env: Environment, release_filter: ReleaseFilter) -> Result[list[Release], CatalogError]:
    releases_dir = env.releases_dir
    if releases_dir is None or not releases_dir.is_dir():
        return Ok([])

    releases: list[Release] = []
    for path in sorted(releases_dir.rglob(f"*{RELEASE_SUFFIX}")):
        doc = YamlDocument.load(path)
        if isinstance(doc, Err):
            return doc
        release = Release.from_document(doc.value, env)
        if isinstance(release, Err):
            return release
        if matches(release_filter, release.value.name):
            releases.append(release.value)
    return Ok(releases)


def load_catalog(
    root: Path,
    *,
    env_names: Sequence[str] = (),
    release_filter: ReleaseFilter | None = None,
) -> Result[Catalog, CatalogError]:
    """Load environments and releases.

    Args:
        root: Catalog root directory
        env_names: Restrict loaded releases to these environments (all when empty)
        release_filter: Restrict loaded releases by name

    The promotion graph is always built over every environment, so that a
    restricted load still validates all ``fromEnvironments`` references.
    """
    envs = load_environments(root)
    if isinstance(envs, Err):
        return envs

    graph = PromotionGraph.from_environments(envs.value)
    if isinstance(graph, Err):
        return graph

    if env_names:
        known = {e.name for e in envs.value}
        unknown = [n for n in env_names if n not in known]
        if unknown:
            return Err(CatalogError("not_found", f"environment not found: {', '.join(unknown)}"))
        wanted = set(env_names)
        columns = [e for e in envs.value if e.name in wanted]
    else:
        columns = list(envs.value)

    releases: list[Release] = []
    for env in columns:
        loaded = _load_releases(env, release_filter or AllReleases())
        if isinstance(loaded, Err):
            return loaded
        releases.extend(loaded.value)

    cross = CrossReleaseList.build(columns, releases)
    if isinstance(cross, Err):
        return cross

    logger.debug("loaded %d environments, %d releases from %s", len(envs.value), len(releases), root)
    return Ok(
        Catalog(
            root=root,
            environments=tuple(envs.value),
            releases=cross.value,
            graph=graph.value,
        )
    )
