"""Git working copy holding the catalog.

``Repository`` implements the ``GitProvider`` protocol used by the
promotion and listing services by shelling out to ``git``.

Usage:
    repo = Repository(catalog_dir, default_branch="main")
    match repo.ensure_clean_and_up_to_date():
        case Ok(_):
            ...
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.platform.process import ProcessError
from relcat.platform.process import run as run_process

__all__ = [
    "GitProvider",
    "GitStatus",
    "Repository",
    "StatusEntry",
]

logger = logging.getLogger(__name__)

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push"})


class GitProvider(Protocol):
    """Working copy operations needed by promotion."""

    def ensure_clean_and_up_to_date(self) -> Result[None, CatalogError]: ...

    def create_branch(self, branch: str) -> Result[None, CatalogError]: ...

    def commit(self, paths: list[Path], message: str) -> Result[None, CatalogError]: ...

    def push(self, branch: str) -> Result[None, CatalogError]: ...

    def checkout_default_branch(self) -> Result[None, CatalogError]: ...


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single ``git status --porcelain`` entry.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b``.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/main"), None if not set
        ahead: Number of commits ahead of upstream
        behind: Number of commits behind upstream
        entries: Changed and untracked files
    """

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @classmethod
    def parse(cls, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return cls(branch="")

        # ## branch...upstream [ahead N, behind M]
        head = lines[0].strip().removeprefix("##").strip()
        counts = re.search(r"\[([^\]]+)\]", head)
        head = head.split(" [", 1)[0].strip()
        branch, _, upstream = head.partition("...")

        ahead = behind = 0
        if counts:
            if m := re.search(r"ahead\s+(\d+)", counts.group(1)):
                ahead = int(m.group(1))
            if m := re.search(r"behind\s+(\d+)", counts.group(1)):
                behind = int(m.group(1))

        entries = tuple(StatusEntry(xy=ln[:2], path=ln[3:]) for ln in lines[1:] if len(ln) >= 4)
        return cls(
            branch=branch.strip(),
            upstream=upstream.strip() or None,
            ahead=ahead,
            behind=behind,
            entries=entries,
        )


class Repository:
    """Catalog working copy.

    Attributes:
        path: Path to the repository root
        default_branch: Branch promotions start from and return to
    """

    def __init__(self, path: Path, *, default_branch: str = "main") -> None:
        self.path = path
        self.default_branch = default_branch

    def status(self) -> Result[GitStatus, CatalogError]:
        result = self._run(["status", "--porcelain=v1", "-b"])
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error("git status"))
        return Ok(GitStatus.parse(result.value))

    def current_branch(self) -> str | None:
        """Current branch name; None when detached or on error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def ensure_clean_and_up_to_date(self) -> Result[None, CatalogError]:
        """Fail when the working copy has changes or lags its upstream."""
        status = self.status()
        if isinstance(status, Err):
            return status
        if not status.value.is_clean:
            paths = ", ".join(e.path for e in status.value.entries[:5])
            return Err(
                CatalogError(
                    "io",
                    f"working copy is not clean: {self.path}",
                    hint=f"Commit or stash changes first ({paths}).",
                )
            )

        if status.value.upstream is None:
            logger.debug("no upstream for %s, skipping fetch", status.value.branch)
            return Ok(None)

        fetched = self._run(["fetch"])
        if isinstance(fetched, Err):
            return Err(fetched.error.to_catalog_error("git fetch"))

        status = self.status()
        if isinstance(status, Err):
            return status
        if status.value.behind:
            return Err(
                CatalogError(
                    "io",
                    f"working copy is {status.value.behind} commit(s) behind {status.value.upstream}",
                    hint="Run: git pull --ff-only",
                )
            )
        return Ok(None)

    def create_branch(self, branch: str) -> Result[None, CatalogError]:
        result = self._run(["checkout", "-b", branch])
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error(f"failed to create branch {branch}"))
        return Ok(None)

    def commit(self, paths: list[Path], message: str) -> Result[None, CatalogError]:
        rels = [str(p.resolve().relative_to(self.path.resolve())) for p in paths]
        add = self._run(["add", "-A", "--", *rels])
        if isinstance(add, Err):
            return Err(add.error.to_catalog_error("git add"))

        commit = self._run(["commit", "-m", message])
        if isinstance(commit, Err):
            error = commit.error.to_catalog_error("git commit")
            if error.hint is None:
                error = CatalogError(error.kind, error.message, hint="Configure git user.name/user.email, then retry.")
            return Err(error)
        return Ok(None)

    def push(self, branch: str) -> Result[None, CatalogError]:
        result = self._run(["push", "-u", "origin", branch])
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error("git push"))
        return Ok(None)

    def checkout_default_branch(self) -> Result[None, CatalogError]:
        result = self._run(["checkout", self.default_branch])
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error(f"git checkout {self.default_branch}"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        timeout = _GIT_NETWORK_TIMEOUT_SECONDS if args[0] in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
