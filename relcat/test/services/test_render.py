"""Tests for relcat.services.render module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relcat.catalog.loader import Catalog, load_catalog
from relcat.catalog.model import Release
from relcat.core.config import ValueMapping
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.core.structured import StrDict
from relcat.output.console import MockConsole, Style
from relcat.platform.process import ProcessError
from relcat.services import render as render_module
from relcat.services.render import HelmChartRenderer, RenderOpts, print_manifest, render_release
from relcat.test.fixtures import release_text, staging_prod_catalog, write_catalog

MANIFEST = """\
---
# Source: web/templates/service.yaml
kind: Service
---
# Source: web/templates/deployment.yaml
kind: Deployment
"""


class FakeRenderer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, StrDict]] = []

    def render(self, release: Release, values: StrDict) -> Result[str, CatalogError]:
        self.calls.append((release.name, values))
        return Ok(MANIFEST)


def _catalog(root: Path) -> Catalog:
    result = load_catalog(root)
    assert isinstance(result, Ok), result
    return result.value


class TestRenderRelease:
    def test_renders_hydrated_values(self, tmp_path: Path) -> None:
        renderer = FakeRenderer()
        console = MockConsole()
        opts = RenderOpts(
            environment="staging",
            release="api",
            value_mapping=ValueMapping(mappings={"image.pullPolicy": "Always"}),
        )
        result = render_release(_catalog(staging_prod_catalog(tmp_path)), opts, renderer=renderer, console=console)

        assert result == Ok(MANIFEST)
        assert renderer.calls == [
            ("api", {"image": {"tag": 1.0, "pullPolicy": "Always"}, "env": {"LOG_LEVEL": "debug"}})
        ]
        assert console.count(Style.HIGHLIGHT) == 4
        assert console.messages[2] == "kind: Service"

    def test_values_only(self, tmp_path: Path) -> None:
        renderer = FakeRenderer()
        console = MockConsole()
        opts = RenderOpts(environment="prod", release="api", values_only=True)
        result = render_release(_catalog(staging_prod_catalog(tmp_path)), opts, renderer=renderer, console=console)
        assert result == Ok("image:\n  tag: 0.9\nenv:\n  LOG_LEVEL: info\n")
        assert renderer.calls == []
        assert console.messages == ["image:", "  tag: 0.9", "env:", "  LOG_LEVEL: info"]

    def test_unknown_environment(self, tmp_path: Path) -> None:
        opts = RenderOpts(environment="qa", release="api")
        result = render_release(
            _catalog(staging_prod_catalog(tmp_path)), opts, renderer=FakeRenderer(), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.message == "not found: qa"

    def test_unknown_release(self, tmp_path: Path) -> None:
        opts = RenderOpts(environment="prod", release="web")
        result = render_release(
            _catalog(staging_prod_catalog(tmp_path)), opts, renderer=FakeRenderer(), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.message == "not found: web"

    def test_release_missing_in_environment(self, tmp_path: Path) -> None:
        opts = RenderOpts(environment="prod", release="api")
        result = render_release(
            _catalog(staging_prod_catalog(tmp_path, prod_api=None)),
            opts,
            renderer=FakeRenderer(),
            console=MockConsole(),
        )
        assert isinstance(result, Err)
        assert result.error.message == "not found within environment prod: api"

    def test_hydration_error_is_returned(self, tmp_path: Path) -> None:
        staging_prod_catalog(tmp_path)
        write_catalog(
            tmp_path,
            {
                "environments/staging/releases/web.release.yaml": release_text(
                    "web", "1.0", values="host: $ref(.Environment.Spec.Values.missing)"
                )
            },
        )
        renderer = FakeRenderer()
        opts = RenderOpts(environment="staging", release="web")
        result = render_release(_catalog(tmp_path), opts, renderer=renderer, console=MockConsole())
        assert isinstance(result, Err)
        assert result.error.kind == "dsl"
        assert renderer.calls == []


class TestPrintManifest:
    def test_highlights_separators(self) -> None:
        console = MockConsole()
        print_manifest(console, "---\n# Source: a.yaml\n# a comment\nkind: A\n")
        assert [o.style for o in console.outputs] == [
            Style.HIGHLIGHT,
            Style.HIGHLIGHT,
            Style.DEFAULT,
            Style.DEFAULT,
        ]


class TestHelmChartRenderer:
    @pytest.fixture
    def release(self, tmp_path: Path) -> Release:
        catalog = _catalog(staging_prod_catalog(tmp_path))
        row = catalog.releases.items[0]
        assert row.source is not None
        return row.source

    def test_command(self, release: Release, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, object] = {}

        def fake_run(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None):  # type: ignore[no-untyped-def]
            seen["cmd"] = cmd
            seen["cwd"] = cwd
            seen["values"] = Path(cmd[-1]).read_text(encoding="utf-8")
            return Ok("kind: Service\n")

        monkeypatch.setattr(render_module, "run_process", fake_run)
        result = HelmChartRenderer(tmp_path).render(release, {"replicas": 2})

        assert result == Ok("kind: Service\n")
        cmd = seen["cmd"]
        assert isinstance(cmd, list)
        assert cmd[:9] == [
            "helm",
            "template",
            "api",
            "web",
            "--repo",
            "https://charts.example.com",
            "--version",
            "2.1.0",
            "--values",
        ]
        assert seen["cwd"] == tmp_path
        assert seen["values"] == "replicas: 2\n"
        assert not Path(cmd[-1]).exists()

    def test_failure(self, release: Release, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None):  # type: ignore[no-untyped-def]
            return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr="Error: chart not found"))

        monkeypatch.setattr(render_module, "run_process", fake_run)
        result = HelmChartRenderer(tmp_path).render(release, {})
        assert isinstance(result, Err)
        assert result.error.kind == "external_tool"
        assert result.error.message.startswith("rendering api: helm template api")
        assert result.error.hint == "Error: chart not found"

    def test_release_without_chart(self, tmp_path: Path) -> None:
        write_catalog(
            tmp_path,
            {
                "environments/dev.yaml": "metadata:\n  name: dev\n",
                "environments/dev/releases/api.release.yaml": release_text("api", "1.0"),
            },
        )
        release = _catalog(tmp_path).releases.items[0].source
        assert release is not None
        result = HelmChartRenderer(tmp_path).render(release, {})
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_catalog"
        assert result.error.message == "release api has no spec.chart"
