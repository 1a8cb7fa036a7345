"""Render a release's chart with its hydrated values."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import yaml

from relcat.catalog.loader import Catalog
from relcat.catalog.model import Environment, Release
from relcat.core.config import ValueMapping
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import StrDict
from relcat.hydrate.engine import hydrate_values
from relcat.output.console import ConsoleProtocol, Style
from relcat.platform.process import run as run_process

__all__ = [
    "ChartRenderer",
    "HelmChartRenderer",
    "RenderOpts",
    "find_environment",
    "find_release",
    "print_manifest",
    "render_release",
]

logger = logging.getLogger(__name__)

_HELM_TIMEOUT_SECONDS = 5 * 60.0


class ChartRenderer(Protocol):
    def render(self, release: Release, values: StrDict) -> Result[str, CatalogError]:
        """Return the rendered manifests."""
        ...


class HelmChartRenderer:
    """Renders with ``helm template`` from the chart named in ``spec.chart``."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd

    def render(self, release: Release, values: StrDict) -> Result[str, CatalogError]:
        chart = release.chart
        if chart is None:
            return Err(
                CatalogError(
                    "invalid_catalog",
                    f"release {release.name} has no spec.chart",
                    hint="Set spec.chart.name (and repoUrl/version) in the release file.",
                )
            )

        cmd = ["helm", "template", release.name, chart.name]
        if chart.repo_url:
            cmd.extend(["--repo", chart.repo_url])
        if chart.version:
            cmd.extend(["--version", chart.version])

        try:
            with tempfile.TemporaryDirectory(prefix="relcat-") as tmp:
                values_file = Path(tmp) / "values.yaml"
                values_file.write_text(
                    yaml.safe_dump(values, default_flow_style=False, sort_keys=False), encoding="utf-8"
                )
                result = run_process([*cmd, "--values", str(values_file)], cwd=self.cwd, timeout=_HELM_TIMEOUT_SECONDS)
        except OSError as e:
            return Err(CatalogError("io", f"failed to write values for {release.name}: {e}"))
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error(f"rendering {release.name}"))
        return Ok(result.value)


@dataclass(frozen=True, slots=True)
class RenderOpts:
    environment: str
    release: str
    value_mapping: ValueMapping | None = None
    values_only: bool = False


def find_environment(catalog: Catalog, name: str) -> Result[Environment, CatalogError]:
    for env in catalog.environments:
        if env.name == name:
            return Ok(env)
    return Err(CatalogError("not_found", f"not found: {name}"))


def find_release(catalog: Catalog, name: str, env: Environment) -> Result[Release, CatalogError]:
    for item in catalog.releases.items:
        if item.name != name:
            continue
        release = item.release_in(env.name)
        if release is None:
            return Err(CatalogError("not_found", f"not found within environment {env.name}: {name}"))
        return Ok(release)
    return Err(CatalogError("not_found", f"not found: {name}"))


def _is_separator(line: str) -> bool:
    return line.startswith("---") or line.startswith("# Source:")


def print_manifest(console: ConsoleProtocol, manifest: str) -> None:
    """Print manifests with document separators and source comments highlighted."""
    for line in manifest.splitlines():
        console.print(line, Style.HIGHLIGHT if _is_separator(line) else Style.DEFAULT)


def render_release(
    catalog: Catalog,
    opts: RenderOpts,
    *,
    renderer: ChartRenderer,
    console: ConsoleProtocol,
    emit: Callable[[ConsoleProtocol, str], None] = print_manifest,
) -> Result[str, CatalogError]:
    """Hydrate a release's values and render its chart.

    With ``values_only`` the hydrated values are printed as YAML instead.
    """
    env = find_environment(catalog, opts.environment)
    if isinstance(env, Err):
        return env
    release = find_release(catalog, opts.release, env.value)
    if isinstance(release, Err):
        return release

    values = hydrate_values(release.value, opts.value_mapping)
    if isinstance(values, Err):
        return values

    if opts.values_only:
        text = yaml.safe_dump(values.value, default_flow_style=False, sort_keys=False)
        emit(console, text)
        return Ok(text)

    logger.debug("rendering %s in %s", release.value.name, env.value.name)
    manifest = renderer.render(release.value, values.value)
    if isinstance(manifest, Err):
        return manifest
    emit(console, manifest.value)
    return Ok(manifest.value)
