"""Set the version of every release of a project in one environment.

Used by CI after building a project: the new version lands in the first
environment of the promotion chain, then flows onward through promotion.
"""

from __future__ import annotations

from dataclasses import dataclass

from relcat.catalog.cross import VERSION_PATH
from relcat.catalog.loader import Catalog
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.output.console import ConsoleProtocol

__all__ = ["BuildPromoteOpts", "promote_project_version"]


@dataclass(frozen=True, slots=True)
class BuildPromoteOpts:
    environment: str
    project: str
    version: str


def promote_project_version(
    catalog: Catalog, opts: BuildPromoteOpts, *, console: ConsoleProtocol
) -> Result[list[str], CatalogError]:
    """Returns the names of the updated releases."""
    env = catalog.environment(opts.environment)
    if isinstance(env, Err):
        return env

    promoted: list[str] = []
    for item in catalog.releases.items:
        release = item.release_in(env.value.name)
        if release is None or release.project != opts.project:
            continue

        doc = release.document
        edited = doc.set_scalar(VERSION_PATH, opts.version)
        if isinstance(edited, Err):
            return Err(edited.error.wrap(f"release {release.name} has no version property"))
        written = doc.write()
        if isinstance(written, Err):
            return Err(written.error.wrap(f"writing release {release.name}"))

        release.version = opts.version
        console.success(f"Promoted release {release.name} to version {opts.version}")
        promoted.append(release.name)

    if not promoted:
        return Err(CatalogError("not_found", f"no releases found for project {opts.project}"))

    plural = "s" if len(promoted) > 1 else ""
    console.info(
        f"Promoted {len(promoted)} release{plural} of project {opts.project} "
        f"in environment {opts.environment} to version {opts.version}"
    )
    return Ok(promoted)
