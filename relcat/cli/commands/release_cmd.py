from __future__ import annotations

import typer

from relcat.catalog.filtering import AllReleases, NamePatternFilter, ReleaseFilter, SpecificReleasesFilter
from relcat.catalog.loader import load_catalog
from relcat.cli.commands._helpers import exit_on_error
from relcat.cli.context import build_context
from relcat.cli.prompts import InteractivePromptProvider
from relcat.cli.selector import is_interactive_terminal
from relcat.core.errors import ErrorCode
from relcat.services.listing import ListOpts, list_releases
from relcat.services.promote import PromoteOpts, Promotion
from relcat.services.pull_request import GitHubPullRequestProvider
from relcat.services.render import HelmChartRenderer, RenderOpts, render_release

release_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Manage releases.")


def _split(values: list[str]) -> tuple[str, ...]:
    """Accept both repeated options and comma-separated lists."""
    return tuple(part.strip() for v in values for part in v.split(",") if part.strip())


def _pattern_filter(releases: list[str]) -> ReleaseFilter:
    patterns = _split(releases)
    return NamePatternFilter(patterns=patterns) if patterns else AllReleases()


def _exact_filter(names: tuple[str, ...]) -> ReleaseFilter:
    return SpecificReleasesFilter.of(names) if names else AllReleases()


@release_app.command("list")
def list_cmd(
    env: list[str] = typer.Option([], "--env", "-e", help="Environments to list (default: all)."),
    releases: list[str] = typer.Option([], "--releases", "-r", help="Release names or wildcards."),
) -> None:
    """List releases and their versions across environments."""
    ctx = build_context()
    opts = ListOpts(environments=_split(env), release_filter=_pattern_filter(releases))
    exit_on_error(
        list_releases(
            opts,
            load=lambda o: load_catalog(ctx.catalog_dir, env_names=o.environments, release_filter=o.release_filter),
            git=ctx.repository,
            console=ctx.console,
        ),
        ctx,
    )


@release_app.command("promote")
def promote_cmd(
    source: str | None = typer.Option(None, "--source", "-s", help="Source environment."),
    target: str | None = typer.Option(None, "--target", "-t", help="Target environment."),
    releases: list[str] = typer.Option([], "--releases", "-r", help="Releases to promote."),
    env: list[str] = typer.Option([], "--env", "-e", help="Restrict environment choices."),
    no_prompt: bool = typer.Option(False, "--no-prompt", help="Do not prompt; requires --source, --target and --releases."),
    auto_merge: bool = typer.Option(False, "--auto-merge", help="Label the pull request for auto-merge."),
    draft: bool = typer.Option(False, "--draft", help="Open the pull request as a draft."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be promoted without changing anything."),
) -> None:
    """Promote releases from one environment to another through a pull request."""
    ctx = build_context()

    if auto_merge and draft:
        ctx.console.error("--auto-merge and --draft cannot be combined")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    if no_prompt and (source is None or target is None or not releases):
        ctx.console.error("--no-prompt requires --source, --target and --releases")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    if not no_prompt and not is_interactive_terminal():
        ctx.console.error("interactive promotion requires a TTY")
        ctx.console.hint("Use --no-prompt with --source, --target and --releases.")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    names = _split(releases)
    release_filter = _exact_filter(names)
    promotion = Promotion(
        prompts=InteractivePromptProvider(ctx.console),
        git=ctx.repository,
        pull_requests=GitHubPullRequestProvider(ctx.catalog_dir, base_branch=ctx.config.default_branch),
        console=ctx.console,
        commit_template=ctx.config.commit_template,
        pull_request_template=ctx.config.pull_request_template,
    )
    opts = PromoteOpts(
        source=source,
        target=target,
        releases=names,
        releases_filtered=bool(names),
        environments=_split(env),
        no_prompt=no_prompt,
        auto_merge=auto_merge,
        draft=draft,
        dry_run=dry_run,
    )
    outcome = exit_on_error(
        promotion.promote(opts, lambda: load_catalog(ctx.catalog_dir, release_filter=release_filter)),
        ctx,
    )
    if outcome.pr_url:
        ctx.console.success(f"Pull request: {outcome.pr_url}")


@release_app.command("render")
def render_cmd(
    release: str = typer.Argument(..., help="Release name."),
    env: str = typer.Option(..., "--env", "-e", help="Environment of the release."),
    values_only: bool = typer.Option(False, "--values", help="Print hydrated values instead of manifests."),
) -> None:
    """Render a release's chart with its hydrated values."""
    ctx = build_context()
    catalog = exit_on_error(load_catalog(ctx.catalog_dir, env_names=(env,)), ctx)
    opts = RenderOpts(
        environment=env,
        release=release,
        value_mapping=ctx.config.value_mapping,
        values_only=values_only,
    )
    exit_on_error(
        render_release(
            catalog,
            opts,
            renderer=HelmChartRenderer(ctx.catalog_dir),
            console=ctx.console,
        ),
        ctx,
    )
