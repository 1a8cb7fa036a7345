"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from relcat.core.errors import CatalogError, exit_code_for
from relcat.core.result import Err, Result

if TYPE_CHECKING:
    from relcat.cli.context import CLIContext


T = TypeVar("T")


def exit_on_error[T](result: Result[T, CatalogError], ctx: CLIContext) -> T:
    """Return the value of ``result`` or print the error and exit.

    The exit code follows the error kind (see ``exit_code_for``).
    """
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.message)
        if error.hint:
            ctx.console.hint(error.hint)
        raise typer.Exit(code=int(exit_code_for(error)))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
