"""Typed catalog errors and CLI exit codes.

Every fallible operation returns ``Result[T, CatalogError]``. The ``kind``
field is a closed set so callers (and the CLI exit code mapping) can branch
on it exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = [
    "CatalogError",
    "ErrorCode",
    "ErrorKind",
    "exit_code_for",
]


ErrorKind = Literal[
    "not_found",
    "graph",
    "non_promotable",
    "dsl",
    "template",
    "io",
    "external_tool",
    "invalid_catalog",
]


@dataclass(frozen=True, slots=True)
class CatalogError:
    """Error from a catalog operation.

    Attributes:
        kind: Error category
        message: Human readable message naming the offending item
        hint: Optional remediation or underlying tool output
    """

    kind: ErrorKind
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message

    def wrap(self, context: str) -> CatalogError:
        """Prefix the message with the step that failed."""
        return CatalogError(kind=self.kind, message=f"{context}: {self.message}", hint=self.hint)


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable.
    - 0: Success
    - 1: User error (bad input, disallowed promotion, broken values)
    - 2: Environment error (git, gh or helm missing or failing)
    - 5: I/O error (unreadable files, dirty working copy)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


def exit_code_for(error: CatalogError) -> ErrorCode:
    """Map an error kind to its process exit code."""
    match error.kind:
        case "io":
            return ErrorCode.IO_ERROR
        case "external_tool":
            return ErrorCode.ENV_ERROR
        case "not_found" | "graph" | "non_promotable" | "dsl" | "template" | "invalid_catalog":
            return ErrorCode.USER_ERROR
