"""Cross-environment release alignment.

A ``CrossReleaseList`` has one column per environment and one row
(``CrossRelease``) per release name. ``get_releases_for_promotion`` narrows
it to a (source, target) pair and stages, for every row where the two
differ, the document the target release would have after promotion.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from relcat.catalog.model import Environment, Release, is_standard_version
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import same_value
from relcat.yml.document import YamlDocument

__all__ = [
    "CrossRelease",
    "CrossReleaseList",
]

logger = logging.getLogger(__name__)

VERSION_PATH = "spec.version"
VALUES_PATH = "spec.values"


@dataclass(slots=True, eq=False)
class CrossRelease:
    """A release name aligned across the environments of its list.

    Attributes:
        name: Release name
        releases: One slot per list environment, None where absent
        promoted: Target release after copying the source's version and
            values; None when the row is not promotable
    """

    name: str
    releases: list[Release | None]
    promoted: Release | None = None

    @property
    def source(self) -> Release | None:
        return self.releases[0]

    @property
    def target(self) -> Release | None:
        return self.releases[-1]

    @property
    def is_promotable(self) -> bool:
        return self.promoted is not None

    def release_in(self, env_name: str) -> Release | None:
        for release in self.releases:
            if release is not None and release.environment.name == env_name:
                return release
        return None


def _target_path(source: Release, target_env: Environment) -> Path | None:
    """Where a release copied into ``target_env`` is written, mirroring the source layout."""
    source_dir = source.environment.releases_dir
    target_dir = target_env.releases_dir
    if source.path is None or source_dir is None or target_dir is None:
        return None
    try:
        return target_dir / source.path.relative_to(source_dir)
    except ValueError:
        return target_dir / source.path.name


def _stage_promotion(
    source: Release, target: Release | None, target_env: Environment
) -> Result[Release | None, CatalogError]:
    """Build the promoted target release, or None when already in sync."""
    if target is None:
        doc = source.document.copy()
        doc.path = _target_path(source, target_env)
        return Release.from_document(doc, target_env)

    same_version = source.version == target.version
    same_values = same_value(source.values, target.values)
    if same_version and same_values:
        return Ok(None)

    doc = target.document.copy()
    if not same_version and source.version is not None:
        if isinstance(doc.find(VERSION_PATH), Ok):
            edited = doc.set_scalar(VERSION_PATH, source.version)
        else:
            edited = doc.replace_block(VERSION_PATH, source.document)
        if isinstance(edited, Err):
            return Err(edited.error.wrap(f"release {target.name} in {target_env.name}"))

    if not same_values and isinstance(source.document.find(VALUES_PATH), Ok):
        edited = doc.replace_block(VALUES_PATH, source.document)
        if isinstance(edited, Err):
            return Err(edited.error.wrap(f"release {target.name} in {target_env.name}"))

    if not doc.dirty:
        # The differing fields are absent from the source; nothing to carry over.
        logger.debug("%s: differs from %s but has nothing to promote", source.name, target_env.name)
        return Ok(None)

    synced = doc.update_values_from_tree()
    if isinstance(synced, Err):
        return Err(synced.error.wrap(f"release {target.name} in {target_env.name}"))
    return Release.from_document(doc, target_env)


@dataclass(slots=True)
class CrossReleaseList:
    environments: tuple[Environment, ...]
    items: list[CrossRelease] = field(default_factory=list)

    @classmethod
    def build(
        cls, environments: Sequence[Environment], releases: Iterable[Release]
    ) -> Result[CrossReleaseList, CatalogError]:
        """Group releases by name into rows positioned by environment."""
        envs = tuple(environments)
        index = {env.name: i for i, env in enumerate(envs)}
        rows: dict[str, CrossRelease] = {}

        for release in releases:
            column = index.get(release.environment.name)
            if column is None:
                continue
            row = rows.get(release.name)
            if row is None:
                row = CrossRelease(name=release.name, releases=[None] * len(envs))
                rows[release.name] = row
            existing = row.releases[column]
            if existing is not None:
                return Err(
                    CatalogError(
                        "invalid_catalog",
                        f"duplicate release {release.name} in environment {release.environment.name}",
                        hint=f"{existing.path} and {release.path}",
                    )
                )
            row.releases[column] = release

        return Ok(cls(environments=envs, items=[rows[name] for name in sorted(rows)]))

    @property
    def names(self) -> list[str]:
        return [item.name for item in self.items]

    def _with_items(self, items: list[CrossRelease]) -> CrossReleaseList:
        return CrossReleaseList(environments=self.environments, items=items)

    def sub_list(self, environments: Sequence[Environment]) -> CrossReleaseList:
        """Project rows onto a subset of columns, dropping rows left empty."""
        columns = [self.environments.index(env) for env in environments]
        items: list[CrossRelease] = []
        for item in self.items:
            releases = [item.releases[c] for c in columns]
            if any(r is not None for r in releases):
                items.append(CrossRelease(name=item.name, releases=releases))
        return CrossReleaseList(environments=tuple(environments), items=items)

    def get_releases_for_promotion(
        self, source: Environment, target: Environment
    ) -> Result[CrossReleaseList, CatalogError]:
        """Two-column (source, target) list with promoted releases staged."""
        if source not in self.environments or target not in self.environments:
            missing = source if source not in self.environments else target
            return Err(CatalogError("not_found", f"environment not in release list: {missing.name}"))

        pair = self.sub_list([source, target])
        for item in pair.items:
            if item.source is None:
                continue
            staged = _stage_promotion(item.source, item.target, target)
            if isinstance(staged, Err):
                return staged
            item.promoted = staged.value

        logger.debug(
            "%s -> %s: %d rows, %d promotable",
            source.name,
            target.name,
            len(pair.items),
            len(pair.only_promotable().items),
        )
        return Ok(pair)

    def has_any_promotable_releases(self) -> bool:
        return any(item.is_promotable for item in self.items)

    def only_promotable(self) -> CrossReleaseList:
        return self._with_items([item for item in self.items if item.is_promotable])

    def only_specific_releases(self, names: Iterable[str]) -> CrossReleaseList:
        """Keep rows named in ``names``, in this list's order.

        Names without a row are dropped silently.
        """
        wanted = set(names)
        kept = [item for item in self.items if item.name in wanted]
        unmatched = wanted - {item.name for item in kept}
        if unmatched:
            logger.debug("no release rows for: %s", ", ".join(sorted(unmatched)))
        return self._with_items(kept)

    def get_non_promotable_releases(self) -> list[str]:
        """Names whose target release is pinned to a non-standard version.

        Only rows that would change the target's version are considered.
        """
        names: list[str] = []
        for item in self.items:
            source, target = item.source, item.target
            if source is None or target is None or target.version is None:
                continue
            if source.version == target.version:
                continue
            if not is_standard_version(target.version):
                names.append(item.name)
        return names
