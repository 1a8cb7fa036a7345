from __future__ import annotations

import os
from pathlib import Path

import typer

from relcat import __version__
from relcat.cli.commands.build_cmd import build_app
from relcat.cli.commands.release_cmd import release_app
from relcat.cli.context import CONFIG_PATH_ENV
from relcat.core.config import CATALOG_DIR_ENV
from relcat.core.errors import ErrorCode
from relcat.output.logs import setup_logging

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Manage releases of projects across environments of a GitOps catalog.",
)

# Sub-apps
app.add_typer(release_app, name="release")
app.add_typer(build_app, name="build")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    catalog_dir: Path | None = typer.Option(
        None,
        "--catalog-dir",
        help=f"Catalog root (overrides ${CATALOG_DIR_ENV} and auto detection)",
    ),
    config: Path | None = typer.Option(None, "--config", help="Config file (default: <catalog>/relcat.toml)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logs."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    setup_logging(verbose)

    if catalog_dir is not None:
        try:
            root = catalog_dir.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --catalog-dir: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[CATALOG_DIR_ENV] = str(root)

    if config is not None:
        os.environ[CONFIG_PATH_ENV] = str(config.expanduser())


def main() -> None:
    app()
