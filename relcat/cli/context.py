from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relcat.core.config import CONFIG_FILENAME, Config, find_catalog_dir, load_config_or_default
from relcat.core.errors import exit_code_for
from relcat.core.result import Err
from relcat.git.repository import Repository
from relcat.output.console import ConsoleProtocol, RichConsole

CONFIG_PATH_ENV = "RELCAT_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    catalog_dir: Path
    config: Config
    console: ConsoleProtocol

    @property
    def repository(self) -> Repository:
        return Repository(self.catalog_dir, default_branch=self.config.default_branch)


def build_context(config_path: Path | None = None) -> CLIContext:
    """Resolve the catalog directory and load its configuration.

    Exits with the mapped error code when either step fails.
    """
    console = RichConsole()
    catalog_dir = find_catalog_dir()
    if isinstance(catalog_dir, Err):
        console.error(catalog_dir.error.message)
        raise typer.Exit(code=int(exit_code_for(catalog_dir.error)))

    if config_path is None and os.environ.get(CONFIG_PATH_ENV):
        config_path = Path(os.environ[CONFIG_PATH_ENV])
    config = load_config_or_default(config_path or catalog_dir.value / CONFIG_FILENAME)
    if isinstance(config, Err):
        console.error(config.error.message)
        raise typer.Exit(code=int(exit_code_for(config.error)))

    return CLIContext(catalog_dir=catalog_dir.value, config=config.value, console=console)
