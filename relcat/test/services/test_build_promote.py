"""Tests for relcat.services.build module."""

from __future__ import annotations

from pathlib import Path

from relcat.catalog.loader import Catalog, load_catalog
from relcat.core.result import Err, Ok
from relcat.output.console import MockConsole
from relcat.services.build import BuildPromoteOpts, promote_project_version
from relcat.test.fixtures import STAGING_API, release_text, staging_prod_catalog, write_catalog


def _catalog(root: Path) -> Catalog:
    result = load_catalog(root)
    assert isinstance(result, Ok), result
    return result.value


class TestPromoteProjectVersion:
    def test_sets_version(self, tmp_path: Path) -> None:
        console = MockConsole()
        catalog = _catalog(staging_prod_catalog(tmp_path))
        result = promote_project_version(catalog, BuildPromoteOpts("staging", "api", "1.1"), console=console)

        assert result == Ok(["api"])
        path = tmp_path / "environments/staging/releases/api.release.yaml"
        assert path.read_text(encoding="utf-8") == STAGING_API.replace("version: 1.0", "version: 1.1")
        assert console.messages == [
            "OK Promoted release api to version 1.1",
            "info: Promoted 1 release of project api in environment staging to version 1.1",
        ]

    def test_other_environments_untouched(self, tmp_path: Path) -> None:
        catalog = _catalog(staging_prod_catalog(tmp_path))
        before = (tmp_path / "environments/prod/releases/api.release.yaml").read_text(encoding="utf-8")
        promote_project_version(catalog, BuildPromoteOpts("staging", "api", "1.1"), console=MockConsole())
        assert (tmp_path / "environments/prod/releases/api.release.yaml").read_text(encoding="utf-8") == before

    def test_every_release_of_the_project(self, tmp_path: Path) -> None:
        staging_prod_catalog(tmp_path)
        write_catalog(
            tmp_path,
            {
                "environments/staging/releases/api-worker.release.yaml": release_text(
                    "api-worker", "1.0", project="api"
                ),
                "environments/staging/releases/web.release.yaml": release_text("web", "1.0"),
            },
        )
        console = MockConsole()
        result = promote_project_version(
            _catalog(tmp_path), BuildPromoteOpts("staging", "api", "2.0"), console=console
        )
        assert result == Ok(["api", "api-worker"])
        assert console.find("Promoted 2 releases of project api")
        web = (tmp_path / "environments/staging/releases/web.release.yaml").read_text(encoding="utf-8")
        assert "version: 1.0" in web

    def test_unknown_project(self, tmp_path: Path) -> None:
        result = promote_project_version(
            _catalog(staging_prod_catalog(tmp_path)), BuildPromoteOpts("staging", "nope", "1.1"), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.kind == "not_found"
        assert result.error.message == "no releases found for project nope"

    def test_release_without_version(self, tmp_path: Path) -> None:
        write_catalog(
            tmp_path,
            {
                "environments/dev.yaml": "metadata:\n  name: dev\n",
                "environments/dev/releases/api.release.yaml": "metadata:\n  name: api\nspec:\n  project: api\n",
            },
        )
        result = promote_project_version(
            _catalog(tmp_path), BuildPromoteOpts("dev", "api", "1.1"), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.message.startswith("release api has no version property: ")

    def test_unknown_environment(self, tmp_path: Path) -> None:
        result = promote_project_version(
            _catalog(staging_prod_catalog(tmp_path)), BuildPromoteOpts("qa", "api", "1.1"), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.message == "environment not found: qa"
