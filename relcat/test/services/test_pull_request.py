"""Tests for relcat.services.pull_request module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relcat.core.result import Err, Ok, Result
from relcat.platform.process import ProcessError
from relcat.services import pull_request as pr_module
from relcat.services.pull_request import AUTO_MERGE_LABEL, GitHubPullRequestProvider


class FakeGh:
    def __init__(self, result: Result[str, ProcessError]) -> None:
        self.result = result
        self.cmds: list[list[str]] = []

    def __call__(self, cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None):  # type: ignore[no-untyped-def]
        self.cmds.append(cmd)
        return self.result


def _create(provider: GitHubPullRequestProvider, *, draft: bool = False, auto_merge: bool = False):  # type: ignore[no-untyped-def]
    return provider.create(
        branch="promote-staging-to-prod-1234abcd",
        title="Promote api",
        body="body",
        draft=draft,
        auto_merge=auto_merge,
    )


class TestGitHubPullRequestProvider:
    def test_returns_url(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        gh = FakeGh(Ok("Warning: 1 uncommitted change\nhttps://github.com/acme/catalog/pull/9\n"))
        monkeypatch.setattr(pr_module, "run_process", gh)
        result = _create(GitHubPullRequestProvider(tmp_path, base_branch="trunk"))
        assert result == Ok("https://github.com/acme/catalog/pull/9")
        assert gh.cmds[0] == [
            "gh",
            "pr",
            "create",
            "--base",
            "trunk",
            "--head",
            "promote-staging-to-prod-1234abcd",
            "--title",
            "Promote api",
            "--body",
            "body",
        ]

    def test_draft_and_label(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        gh = FakeGh(Ok("https://github.com/acme/catalog/pull/9\n"))
        monkeypatch.setattr(pr_module, "run_process", gh)
        _create(GitHubPullRequestProvider(tmp_path), draft=True)
        _create(GitHubPullRequestProvider(tmp_path), auto_merge=True)
        assert gh.cmds[0][-1] == "--draft"
        assert gh.cmds[1][-2:] == ["--label", AUTO_MERGE_LABEL]

    def test_unexpected_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(pr_module, "run_process", FakeGh(Ok("something else\n")))
        result = _create(GitHubPullRequestProvider(tmp_path))
        assert isinstance(result, Err)
        assert result.error.kind == "external_tool"
        assert result.error.hint == "something else"

    def test_gh_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        error = ProcessError(command=("gh", "pr", "create"), returncode=1, stdout="", stderr="not logged in")
        monkeypatch.setattr(pr_module, "run_process", FakeGh(Err(error)))
        result = _create(GitHubPullRequestProvider(tmp_path))
        assert isinstance(result, Err)
        assert result.error.message == "failed to create pull request: gh pr create failed (exit 1)"
        assert result.error.hint == "not logged in"
