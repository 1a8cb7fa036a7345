"""Terminal implementation of the promotion prompts."""

from __future__ import annotations

from collections.abc import Sequence

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.model import Environment
from relcat.cli.selector import SelectorOption, confirm_yn, select_many, select_one
from relcat.output.console import ConsoleProtocol, Style
from relcat.services.prompts import Canceled, PullRequestMode, Selected, Selection, release_diff
from relcat.yml.document import YamlDocument


def _env_options(environments: Sequence[Environment]) -> list[SelectorOption[Environment]]:
    return [SelectorOption(value=env, label=env.name) for env in environments]


def _diff_style(line: str) -> Style:
    if line.startswith(("+++", "---")):
        return Style.BOLD
    if line.startswith("@@"):
        return Style.INFO
    if line.startswith("+"):
        return Style.DIFF_ADD
    if line.startswith("-"):
        return Style.DIFF_REMOVE
    return Style.DIM


class InteractivePromptProvider:
    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def select_source_environment(self, environments: Sequence[Environment]) -> Selection[Environment]:
        result = select_one(title="Select source environment to promote from", options=_env_options(environments))
        if result.action == "cancel" or result.value is None:
            return Canceled()
        return Selected(result.value)

    def select_target_environment(self, environments: Sequence[Environment]) -> Selection[Environment]:
        if len(environments) == 1:
            self._console.info(f"Only one target environment: {environments[0].name}")
            return Selected(environments[0])
        result = select_one(title="Select target environment to promote to", options=_env_options(environments))
        if result.action == "cancel" or result.value is None:
            return Canceled()
        return Selected(result.value)

    def select_releases(self, releases: CrossReleaseList) -> Selection[CrossReleaseList]:
        options: list[SelectorOption[str]] = []
        for item in releases.items:
            source = item.source.version if item.source is not None else None
            target = item.target.version if item.target is not None else None
            detail = f"{target or '(new)'} -> {source or '?'}"
            options.append(SelectorOption(value=item.name, label=item.name, detail=detail))

        result = select_many(title="Select releases to promote", options=options)
        if result.action == "cancel":
            return Canceled()
        return Selected(releases.only_specific_releases(result.values))

    def select_pull_request_mode(self) -> PullRequestMode:
        modes = list(PullRequestMode)
        result = select_one(
            title="Create promotion pull request?",
            options=[SelectorOption(value=m, label=m.label) for m in modes],
        )
        if result.action == "cancel" or result.value is None:
            return PullRequestMode.CANCEL
        return result.value

    def confirm_pull_request(self, auto_merge: bool, draft: bool) -> bool:
        kind = "auto-merge" if auto_merge else "draft" if draft else "ready"
        return confirm_yn(prompt=f"Create {kind} promotion pull request?")

    def confirm_auto_merge(self) -> bool:
        return confirm_yn(prompt="Auto-merge the pull request once checks pass?")

    def print_no_promotable_releases(self, filtered: bool, source: Environment, target: Environment) -> None:
        suffix = " matching filter" if filtered else ""
        self._console.info(f"No releases{suffix} to promote from {source.name} to {target.name}")

    def print_non_promotable_releases(self, names: Sequence[str], target: Environment) -> None:
        self._console.error(
            f"These releases have a non-standard version in {target.name} and cannot be promoted: "
            + ", ".join(names)
        )

    def print_start_preview(self) -> None:
        self._console.header("Preview")

    def print_release_preview(
        self,
        target: Environment,
        release_name: str,
        existing: YamlDocument | None,
        promoted: YamlDocument,
    ) -> None:
        self._console.print(f"{release_name} ({target.name})", Style.BOLD)
        for line in release_diff(release_name, existing, promoted):
            self._console.print(line, _diff_style(line))
        self._console.newline()

    def print_end_preview(self) -> None:
        self._console.print("End of preview", Style.DIM)

    def print_canceled(self) -> None:
        self._console.warning("Promotion canceled")
