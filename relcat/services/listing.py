"""Release version table across environments."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.filtering import ReleaseFilter
from relcat.catalog.loader import Catalog
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.git.repository import GitProvider
from relcat.output.console import ConsoleProtocol

__all__ = [
    "ListOpts",
    "list_releases",
    "version_rows",
]

_MISSING = "-"


@dataclass(frozen=True, slots=True)
class ListOpts:
    environments: tuple[str, ...] = ()
    release_filter: ReleaseFilter | None = None


def version_rows(releases: CrossReleaseList) -> list[list[str]]:
    """One row per release: name then the version in each environment."""
    rows: list[list[str]] = []
    for item in releases.items:
        row = [item.name]
        for release in item.releases:
            if release is None:
                row.append(_MISSING)
            else:
                row.append(release.version or "?")
        rows.append(row)
    return rows


def list_releases(
    opts: ListOpts,
    *,
    load: Callable[[ListOpts], Result[Catalog, CatalogError]],
    git: GitProvider,
    console: ConsoleProtocol,
) -> Result[CrossReleaseList, CatalogError]:
    clean = git.ensure_clean_and_up_to_date()
    if isinstance(clean, Err):
        return clean

    loaded = load(opts)
    if isinstance(loaded, Err):
        return loaded
    releases = loaded.value.releases

    if not releases.items:
        console.warning("no releases found")
        return Ok(releases)

    columns = ["Name", *(env.name for env in releases.environments)]
    console.table(columns, version_rows(releases))
    return Ok(releases)
