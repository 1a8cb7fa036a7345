from __future__ import annotations

import typer

from relcat.catalog.loader import load_catalog
from relcat.cli.commands._helpers import exit_on_error
from relcat.cli.context import build_context
from relcat.services.build import BuildPromoteOpts, promote_project_version

build_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Commands used by CI builds.")


@build_app.command("promote")
def promote_cmd(
    project: str = typer.Option(..., "--project", "-p", help="Project whose releases are updated."),
    version: str = typer.Option(..., "--version", "-v", help="Version to set."),
    env: str = typer.Option(..., "--env", "-e", help="Environment to update."),
) -> None:
    """Set the version of every release of a project in one environment."""
    ctx = build_context()
    catalog = exit_on_error(load_catalog(ctx.catalog_dir, env_names=(env,)), ctx)
    exit_on_error(
        promote_project_version(
            catalog,
            BuildPromoteOpts(environment=env, project=project, version=version),
            console=ctx.console,
        ),
        ctx,
    )
