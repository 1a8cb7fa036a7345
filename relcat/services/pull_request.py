"""Pull request creation through the GitHub CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.platform.process import run as run_process

__all__ = [
    "AUTO_MERGE_LABEL",
    "GitHubPullRequestProvider",
    "PullRequestProvider",
]

logger = logging.getLogger(__name__)

AUTO_MERGE_LABEL = "auto-merge"

_GH_TIMEOUT_SECONDS = 60.0


class PullRequestProvider(Protocol):
    def create(
        self, *, branch: str, title: str, body: str, draft: bool, auto_merge: bool
    ) -> Result[str, CatalogError]:
        """Open a pull request from ``branch`` and return its URL."""
        ...


class GitHubPullRequestProvider:
    """Runs ``gh pr create`` inside the catalog working copy."""

    def __init__(self, repo_root: Path, *, base_branch: str = "main") -> None:
        self.repo_root = repo_root
        self.base_branch = base_branch

    def create(
        self, *, branch: str, title: str, body: str, draft: bool, auto_merge: bool
    ) -> Result[str, CatalogError]:
        cmd = [
            "gh",
            "pr",
            "create",
            "--base",
            self.base_branch,
            "--head",
            branch,
            "--title",
            title,
            "--body",
            body,
        ]
        if draft:
            cmd.append("--draft")
        if auto_merge:
            cmd.extend(["--label", AUTO_MERGE_LABEL])

        result = run_process(cmd, cwd=self.repo_root, timeout=_GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(result.error.to_catalog_error("failed to create pull request"))

        # gh may print warnings before the URL.
        lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
        url = lines[-1] if lines else ""
        if not url.startswith("https://"):
            return Err(CatalogError("external_tool", "unexpected gh pr create output", hint=result.value.strip() or None))

        logger.debug("created pull request %s", url)
        return Ok(url)
