"""Promotion graph: which environment may promote into which.

``fromEnvironments`` is resolved once into an adjacency map (source name to
target names). The relation is directed and never closed transitively:
``staging -> qa`` and ``qa -> prod`` do not allow ``staging -> prod``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from relcat.catalog.model import Environment
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result

__all__ = ["PromotionGraph"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromotionGraph:
    """Adjacency of allowed promotions, keyed by source environment name."""

    targets: dict[str, tuple[str, ...]]

    @classmethod
    def from_environments(cls, environments: Sequence[Environment]) -> Result[PromotionGraph, CatalogError]:
        names = {env.name for env in environments}
        targets: dict[str, list[str]] = {env.name: [] for env in environments}

        for env in environments:
            for source in env.promotion.from_environments:
                if source == env.name:
                    return Err(
                        CatalogError("graph", f"environment {env.name} cannot promote from itself")
                    )
                if source not in names:
                    return Err(
                        CatalogError(
                            "graph",
                            f"environment {env.name} promotes from unknown environment {source}",
                        )
                    )
                if env.name not in targets[source]:
                    targets[source].append(env.name)

        graph = cls(targets={name: tuple(t) for name, t in targets.items()})
        logger.debug("promotion graph: %s", graph.targets)
        return Ok(graph)

    def source_candidates(self, environments: Sequence[Environment]) -> Result[list[Environment], CatalogError]:
        """Environments of the given set that some other environment of the set promotes from."""
        names = {env.name for env in environments}
        sources = [
            env
            for env in environments
            if any(t in names and t != env.name for t in self.targets.get(env.name, ()))
        ]
        if not sources:
            return Err(CatalogError("graph", "no promotable source environments found"))
        return Ok(sources)

    def target_candidates(
        self, environments: Sequence[Environment], source: Environment
    ) -> Result[list[Environment], CatalogError]:
        """Environments of the given set that accept promotions from ``source``."""
        allowed = set(self.targets.get(source.name, ()))
        targets = [env for env in environments if env.name != source.name and env.name in allowed]
        if not targets:
            return Err(
                CatalogError("graph", f"no target environments found to promote from {source.name}")
            )
        return Ok(targets)

    @staticmethod
    def check_edge(source: Environment, target: Environment) -> Result[None, CatalogError]:
        if not source.is_promotable_to(target):
            return Err(
                CatalogError(
                    "graph",
                    f"environment {source.name} is not promotable to {target.name}",
                    hint=f"Add {source.name} to spec.promotion.fromEnvironments of {target.name}.",
                )
            )
        return Ok(None)

    @staticmethod
    def check_auto_merge(target: Environment, requested: bool) -> Result[None, CatalogError]:
        if requested and not target.promotion.allow_auto_merge:
            return Err(
                CatalogError("graph", f"auto-merge is not allowed for target environment {target.name}")
            )
        return Ok(None)
