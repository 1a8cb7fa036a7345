"""Result type used by every fallible catalog operation.

Loading files, resolving the promotion graph, editing documents and
hydrating values all return ``Result[T, CatalogError]`` instead of raising,
so a caller can decide per step whether an error is terminal.

Usage:
    match load_catalog(root):
        case Ok(catalog):
            print(len(catalog.environments))
        case Err(error):
            print(f"error: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def unwrap(self) -> None:
        """Raise, since there is no value.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
