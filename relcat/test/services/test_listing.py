"""Tests for relcat.services.listing module."""

from __future__ import annotations

from pathlib import Path

from relcat.catalog.filtering import NamePatternFilter
from relcat.catalog.loader import Catalog, load_catalog
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.output.console import MockConsole, Style
from relcat.services.listing import ListOpts, list_releases
from relcat.test.fixtures import RecordingGit, staging_prod_catalog, write_catalog


def _loader(root: Path, calls: list[ListOpts]):  # type: ignore[no-untyped-def]
    def load(opts: ListOpts) -> Result[Catalog, CatalogError]:
        calls.append(opts)
        return load_catalog(root, env_names=opts.environments, release_filter=opts.release_filter)

    return load


class TestListReleases:
    def test_table(self, tmp_path: Path) -> None:
        staging_prod_catalog(tmp_path)
        write_catalog(
            tmp_path,
            {
                "environments/staging/releases/web.release.yaml": "metadata:\n  name: web\nspec:\n  version: 2.0\n",
                "environments/prod/releases/web.release.yaml": "metadata:\n  name: web\nspec:\n  project: web\n",
                "environments/staging/releases/worker.release.yaml": "metadata:\n  name: worker\nspec:\n  version: 3\n",
            },
        )
        console = MockConsole()
        result = list_releases(ListOpts(), load=_loader(tmp_path, []), git=RecordingGit(), console=console)

        assert isinstance(result, Ok)
        assert console.messages == [
            "Name | staging | prod",
            "api | 1.0 | 0.9",
            "web | 2.0 | ?",
            "worker | 3 | -",
        ]
        assert console.outputs[0].style == Style.BOLD

    def test_restricted_environments(self, tmp_path: Path) -> None:
        console = MockConsole()
        list_releases(
            ListOpts(environments=("prod",)),
            load=_loader(staging_prod_catalog(tmp_path), []),
            git=RecordingGit(),
            console=console,
        )
        assert console.messages == ["Name | prod", "api | 0.9"]

    def test_no_releases(self, tmp_path: Path) -> None:
        console = MockConsole()
        result = list_releases(
            ListOpts(release_filter=NamePatternFilter(patterns=("nope*",))),
            load=_loader(staging_prod_catalog(tmp_path), []),
            git=RecordingGit(),
            console=console,
        )
        assert isinstance(result, Ok)
        assert result.value.items == []
        assert console.messages == ["warning: no releases found"]

    def test_git_check_comes_first(self, tmp_path: Path) -> None:
        calls: list[ListOpts] = []
        result = list_releases(
            ListOpts(),
            load=_loader(staging_prod_catalog(tmp_path), calls),
            git=RecordingGit(fail_on="ensure_clean_and_up_to_date"),
            console=MockConsole(),
        )
        assert isinstance(result, Err)
        assert calls == []
