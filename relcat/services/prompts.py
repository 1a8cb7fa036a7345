"""Interactive decisions taken during a promotion.

The promotion service never talks to the terminal directly: every choice
and every preview goes through a ``PromptProvider``. A user backing out of
a selection is a ``Canceled`` value, not an exception.
"""

from __future__ import annotations

import difflib
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.model import Environment
from relcat.yml.document import YamlDocument

__all__ = [
    "Canceled",
    "PromptProvider",
    "PullRequestMode",
    "Selected",
    "Selection",
    "release_diff",
]


@dataclass(frozen=True, slots=True)
class Selected[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Canceled:
    pass


type Selection[T] = Selected[T] | Canceled


class PullRequestMode(Enum):
    READY = "ready"
    DRAFT = "draft"
    CANCEL = "cancel"

    @property
    def label(self) -> str:
        match self:
            case PullRequestMode.READY:
                return "Ready for review"
            case PullRequestMode.DRAFT:
                return "Draft"
            case PullRequestMode.CANCEL:
                return "Cancel"


class PromptProvider(Protocol):
    def select_source_environment(self, environments: Sequence[Environment]) -> Selection[Environment]: ...

    def select_target_environment(self, environments: Sequence[Environment]) -> Selection[Environment]: ...

    def select_releases(self, releases: CrossReleaseList) -> Selection[CrossReleaseList]:
        """Pick rows among the promotable ones."""
        ...

    def select_pull_request_mode(self) -> PullRequestMode: ...

    def confirm_pull_request(self, auto_merge: bool, draft: bool) -> bool:
        """Confirm a PR whose mode was requested up front."""
        ...

    def confirm_auto_merge(self) -> bool: ...

    def print_no_promotable_releases(self, filtered: bool, source: Environment, target: Environment) -> None: ...

    def print_non_promotable_releases(self, names: Sequence[str], target: Environment) -> None: ...

    def print_start_preview(self) -> None: ...

    def print_release_preview(
        self,
        target: Environment,
        release_name: str,
        existing: YamlDocument | None,
        promoted: YamlDocument,
    ) -> None: ...

    def print_end_preview(self) -> None: ...

    def print_canceled(self) -> None: ...


def release_diff(release_name: str, existing: YamlDocument | None, promoted: YamlDocument) -> list[str]:
    """Unified diff lines (no trailing newlines) from the current to the promoted file."""
    before = existing.text.splitlines() if existing is not None else []
    after = promoted.text.splitlines()
    return list(
        difflib.unified_diff(
            before,
            after,
            fromfile=f"a/{release_name}" if existing is not None else "/dev/null",
            tofile=f"b/{release_name}",
            lineterm="",
        )
    )
