"""Catalog operations behind the CLI commands."""

from .build import BuildPromoteOpts, promote_project_version
from .listing import ListOpts, list_releases
from .promote import PromoteOpts, Promotion, PromotionOutcome
from .prompts import Canceled, PromptProvider, PullRequestMode, Selected
from .pull_request import GitHubPullRequestProvider, PullRequestProvider
from .render import ChartRenderer, HelmChartRenderer, RenderOpts, render_release

__all__ = [
    "BuildPromoteOpts",
    "Canceled",
    "ChartRenderer",
    "GitHubPullRequestProvider",
    "HelmChartRenderer",
    "ListOpts",
    "PromoteOpts",
    "PromptProvider",
    "Promotion",
    "PromotionOutcome",
    "PullRequestMode",
    "PullRequestProvider",
    "RenderOpts",
    "Selected",
    "list_releases",
    "promote_project_version",
    "render_release",
]
