"""Tests for the relcat command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from relcat import __version__
from relcat.cli.app import app
from relcat.cli.context import CONFIG_PATH_ENV
from relcat.core.config import CATALOG_DIR_ENV
from relcat.core.result import Ok
from relcat.git.repository import Repository
from relcat.test.fixtures import PROD_API, STAGING_API, staging_prod_catalog

runner = CliRunner()


@pytest.fixture
def catalog(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = staging_prod_catalog(tmp_path)
    monkeypatch.setenv(CATALOG_DIR_ENV, str(root))
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.setattr(Repository, "ensure_clean_and_up_to_date", lambda self: Ok(None))
    return root


class TestRoot:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == __version__

    def test_help(self) -> None:
        result = runner.invoke(app, [])
        assert "release" in result.output
        assert "build" in result.output

    def test_missing_catalog(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CATALOG_DIR_ENV, str(tmp_path))
        result = runner.invoke(app, ["release", "list"])
        assert result.exit_code == 1
        assert "missing environments/" in result.output


class TestReleaseList:
    def test_table(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "list"])
        assert result.exit_code == 0, result.output
        assert "staging" in result.output
        assert "prod" in result.output
        assert "0.9" in result.output

    def test_unknown_environment(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "list", "--env", "qa"])
        assert result.exit_code == 1
        assert "environment not found: qa" in result.output


class TestReleaseRender:
    def test_values(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "render", "api", "--env", "prod", "--values"])
        assert result.exit_code == 0, result.output
        assert "tag: 0.9" in result.output
        assert "LOG_LEVEL: info" in result.output

    def test_value_mapping_from_config(self, catalog: Path) -> None:
        (catalog / "relcat.toml").write_text(
            '[value_mapping.mappings]\n"image.pullPolicy" = "Always"\n', encoding="utf-8"
        )
        result = runner.invoke(app, ["release", "render", "api", "--env", "prod", "--values"])
        assert result.exit_code == 0, result.output
        assert "pullPolicy: Always" in result.output

    def test_unknown_release(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "render", "web", "--env", "prod"])
        assert result.exit_code == 1
        assert "not found: web" in result.output


class TestReleasePromote:
    def test_auto_merge_and_draft_conflict(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "promote", "--auto-merge", "--draft"])
        assert result.exit_code == 1
        assert "cannot be combined" in result.output

    def test_no_prompt_requires_names(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "promote", "--no-prompt", "--source", "staging"])
        assert result.exit_code == 1

    def test_interactive_requires_tty(self, catalog: Path) -> None:
        result = runner.invoke(app, ["release", "promote"])
        assert result.exit_code == 1
        assert "requires a TTY" in result.output

    def test_dry_run(self, catalog: Path) -> None:
        result = runner.invoke(
            app,
            ["release", "promote", "--no-prompt", "-s", "staging", "-t", "prod", "-r", "api", "--dry-run"],
        )
        assert result.exit_code == 0, result.output
        assert "would promote api from staging to prod" in result.output
        prod = catalog / "environments/prod/releases/api.release.yaml"
        assert prod.read_text(encoding="utf-8") == PROD_API

    def test_release_names_are_matched_exactly(self, catalog: Path) -> None:
        result = runner.invoke(
            app,
            ["release", "promote", "--no-prompt", "-s", "staging", "-t", "prod", "-r", "a*", "--dry-run"],
        )
        assert result.exit_code == 0, result.output
        assert "No releases matching filter to promote from staging to prod" in result.output
        assert "would promote" not in result.output

    def test_disallowed_auto_merge(self, catalog: Path) -> None:
        result = runner.invoke(
            app,
            ["release", "promote", "--no-prompt", "-s", "staging", "-t", "prod", "-r", "api", "--auto-merge"],
        )
        assert result.exit_code == 1
        assert "auto-merge is not allowed" in result.output


class TestBuildPromote:
    def test_sets_version(self, catalog: Path) -> None:
        result = runner.invoke(app, ["build", "promote", "--project", "api", "--version", "1.1", "--env", "staging"])
        assert result.exit_code == 0, result.output
        path = catalog / "environments/staging/releases/api.release.yaml"
        assert path.read_text(encoding="utf-8") == STAGING_API.replace("version: 1.0", "version: 1.1")

    def test_unknown_project(self, catalog: Path) -> None:
        result = runner.invoke(app, ["build", "promote", "-p", "nope", "-v", "1.1", "-e", "staging"])
        assert result.exit_code == 1
        assert "no releases found for project nope" in result.output
