"""Release promotion between environments.

``Promotion.promote`` walks the whole flow: working copy check, source and
target selection, release matching and selection, validation, preview, pull
request mode, then file edits, commit, push and pull request. Dry runs stop
right before the first file is written.
"""

from __future__ import annotations

import logging
import stat
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.graph import PromotionGraph
from relcat.catalog.loader import Catalog
from relcat.catalog.model import Environment
from relcat.core.config import DEFAULT_COMMIT_TEMPLATE, DEFAULT_PULL_REQUEST_TEMPLATE
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.git.repository import GitProvider
from relcat.hydrate.template import render_text
from relcat.output.console import ConsoleProtocol
from relcat.services.prompts import Canceled, PromptProvider, PullRequestMode, Selected
from relcat.services.pull_request import PullRequestProvider

__all__ = [
    "PromoteOpts",
    "PromotedItem",
    "Promotion",
    "PromotionOutcome",
]

logger = logging.getLogger(__name__)

type CatalogLoader = Callable[[], Result[Catalog, CatalogError]]


@dataclass(frozen=True, slots=True)
class PromoteOpts:
    """Promotion request.

    Attributes:
        source: Source environment name; prompted when None
        target: Target environment name; prompted when None
        releases: Release names to promote; prompted when empty
        releases_filtered: The catalog was loaded with a release filter
        environments: Restrict source/target candidates (all when empty)
        no_prompt: Skip preview and confirmations
        auto_merge: Label the pull request for auto-merge
        draft: Open the pull request as a draft
        dry_run: Stop before writing any file
    """

    source: str | None = None
    target: str | None = None
    releases: tuple[str, ...] = ()
    releases_filtered: bool = False
    environments: tuple[str, ...] = ()
    no_prompt: bool = False
    auto_merge: bool = False
    draft: bool = False
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class PromotionOutcome:
    """Result of a promotion run.

    ``pr_url`` is None when nothing was promoted (canceled, nothing to
    promote) and for dry runs.
    """

    pr_url: str | None = None
    promoted: tuple[str, ...] = ()
    dry_run: bool = False
    canceled: bool = False


@dataclass(frozen=True, slots=True)
class PromotedItem:
    """A promoted release as exposed to commit and pull request templates."""

    name: str
    project: str
    source_version: str | None
    target_version: str | None


def _source_mode(path: Path | None) -> int | None:
    """Permission bits a release copied into a new environment inherits."""
    if path is None:
        return None
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except OSError:
        return None


def _branch_name(source: Environment, target: Environment) -> str:
    return f"promote-{source.name}-to-{target.name}-{uuid.uuid4().hex[:8]}"


class Promotion:
    def __init__(
        self,
        *,
        prompts: PromptProvider,
        git: GitProvider,
        pull_requests: PullRequestProvider,
        console: ConsoleProtocol,
        commit_template: str = DEFAULT_COMMIT_TEMPLATE,
        pull_request_template: str = DEFAULT_PULL_REQUEST_TEMPLATE,
        branch_name: Callable[[Environment, Environment], str] = _branch_name,
    ) -> None:
        self._prompts = prompts
        self._git = git
        self._pull_requests = pull_requests
        self._console = console
        self._commit_template = commit_template
        self._pull_request_template = pull_request_template
        self._branch_name = branch_name

    def promote(self, opts: PromoteOpts, load: CatalogLoader) -> Result[PromotionOutcome, CatalogError]:
        """Run a promotion.

        Args:
            opts: What to promote
            load: Loads the catalog once the working copy has been checked

        Returns:
            Ok(outcome) on success, cancel or nothing to promote;
            Err(CatalogError) otherwise
        """
        if opts.dry_run:
            self._console.info("Dry-run mode enabled: no changes will be made.")

        clean = self._git.ensure_clean_and_up_to_date()
        if isinstance(clean, Err):
            return clean

        loaded = load()
        if isinstance(loaded, Err):
            return loaded
        catalog = loaded.value
        environments = catalog.environments_by_names(opts.environments)

        source = self._resolve_source(catalog, environments, opts.source)
        if isinstance(source, Err):
            return source
        if source.value is None:
            self._prompts.print_canceled()
            return Ok(PromotionOutcome(canceled=True, dry_run=opts.dry_run))

        target = self._resolve_target(catalog, environments, source.value, opts.target)
        if isinstance(target, Err):
            return target
        if target.value is None:
            self._prompts.print_canceled()
            return Ok(PromotionOutcome(canceled=True, dry_run=opts.dry_run))

        return self._promote_between(catalog, source.value, target.value, opts)

    def _resolve_source(
        self, catalog: Catalog, environments: Sequence[Environment], name: str | None
    ) -> Result[Environment | None, CatalogError]:
        if name is not None:
            return catalog.environment(name)
        candidates = catalog.graph.source_candidates(environments)
        if isinstance(candidates, Err):
            return candidates
        match self._prompts.select_source_environment(candidates.value):
            case Selected(value=env):
                return Ok(env)
            case Canceled():
                return Ok(None)

    def _resolve_target(
        self,
        catalog: Catalog,
        environments: Sequence[Environment],
        source: Environment,
        name: str | None,
    ) -> Result[Environment | None, CatalogError]:
        if name is not None:
            return catalog.environment(name)
        candidates = catalog.graph.target_candidates(environments, source)
        if isinstance(candidates, Err):
            return candidates
        match self._prompts.select_target_environment(candidates.value):
            case Selected(value=env):
                return Ok(env)
            case Canceled():
                return Ok(None)

    def _promote_between(
        self, catalog: Catalog, source: Environment, target: Environment, opts: PromoteOpts
    ) -> Result[PromotionOutcome, CatalogError]:
        auto_merge = PromotionGraph.check_auto_merge(target, opts.auto_merge)
        if isinstance(auto_merge, Err):
            return auto_merge
        edge = PromotionGraph.check_edge(source, target)
        if isinstance(edge, Err):
            return edge

        pair = catalog.releases.get_releases_for_promotion(source, target)
        if isinstance(pair, Err):
            return Err(pair.error.wrap("getting releases for promotion"))
        releases = pair.value

        nothing = PromotionOutcome(dry_run=opts.dry_run)
        if not releases.has_any_promotable_releases():
            self._prompts.print_no_promotable_releases(opts.releases_filtered, source, target)
            return Ok(nothing)

        if opts.releases:
            selected = releases.only_specific_releases(opts.releases)
            if not selected.has_any_promotable_releases():
                self._prompts.print_no_promotable_releases(True, source, target)
                return Ok(nothing)
        else:
            match self._prompts.select_releases(releases.only_promotable()):
                case Selected(value=chosen):
                    selected = chosen
                case Canceled():
                    self._prompts.print_canceled()
                    return Ok(PromotionOutcome(canceled=True, dry_run=opts.dry_run))

        invalid = selected.get_non_promotable_releases()
        if invalid:
            self._prompts.print_non_promotable_releases(invalid, target)
            return Err(
                CatalogError(
                    "non_promotable",
                    f"cannot promote releases with non-standard version to {target.name} environment",
                    hint=", ".join(invalid),
                )
            )

        if not opts.no_prompt:
            self._preview(selected, target)

        mode = self._pull_request_mode(target, opts)
        if mode is None:
            self._prompts.print_canceled()
            return Ok(PromotionOutcome(canceled=True, dry_run=opts.dry_run))
        draft, auto_merge_label = mode

        return self._perform(selected, source, target, draft=draft, auto_merge=auto_merge_label, dry_run=opts.dry_run)

    def _preview(self, releases: CrossReleaseList, target: Environment) -> None:
        self._prompts.print_start_preview()
        for item in releases.items:
            if item.promoted is None:
                continue
            existing = item.target.document if item.target is not None else None
            self._prompts.print_release_preview(target, item.name, existing, item.promoted.document)
        self._prompts.print_end_preview()

    def _pull_request_mode(self, target: Environment, opts: PromoteOpts) -> tuple[bool, bool] | None:
        """(draft, auto_merge) for the pull request, or None when canceled."""
        if opts.no_prompt:
            return opts.draft, opts.auto_merge

        if opts.auto_merge or opts.draft:
            if not self._prompts.confirm_pull_request(opts.auto_merge, opts.draft):
                return None
            return opts.draft, opts.auto_merge

        match self._prompts.select_pull_request_mode():
            case PullRequestMode.READY:
                auto_merge = target.promotion.allow_auto_merge and self._prompts.confirm_auto_merge()
                return False, auto_merge
            case PullRequestMode.DRAFT:
                return True, False
            case PullRequestMode.CANCEL:
                return None

    def _perform(
        self,
        releases: CrossReleaseList,
        source: Environment,
        target: Environment,
        *,
        draft: bool,
        auto_merge: bool,
        dry_run: bool,
    ) -> Result[PromotionOutcome, CatalogError]:
        promotable = releases.only_promotable()
        items = [
            PromotedItem(
                name=item.name,
                project=item.promoted.project if item.promoted is not None else "",
                source_version=item.source.version if item.source is not None else None,
                target_version=item.target.version if item.target is not None else None,
            )
            for item in promotable.items
        ]
        names = tuple(item.name for item in items)
        context = {"source": source, "target": target, "releases": list(names), "items": items}

        message = render_text(self._commit_template, context, name="commit template")
        if isinstance(message, Err):
            return message
        body = render_text(self._pull_request_template, context, name="pull request template")
        if isinstance(body, Err):
            return body
        title = message.value.strip().splitlines()[0] if message.value.strip() else f"Promote to {target.name}"

        if dry_run:
            self._console.info(f"Dry run: would promote {', '.join(names)} from {source.name} to {target.name}")
            return Ok(PromotionOutcome(promoted=names, dry_run=True))

        branch = self._branch_name(source, target)
        created = self._git.create_branch(branch)
        if isinstance(created, Err):
            return created

        written: list[Path] = []
        for item in promotable.items:
            promoted = item.promoted
            if promoted is None:
                continue
            mode = _source_mode(item.source.path) if item.target is None and item.source is not None else None
            result = promoted.document.write(mode=mode)
            if isinstance(result, Err):
                return result
            if promoted.path is not None:
                written.append(promoted.path)
            self._console.success(f"Promoted {item.name} to {target.name}")

        committed = self._git.commit(written, message.value.strip())
        if isinstance(committed, Err):
            return committed
        pushed = self._git.push(branch)
        if isinstance(pushed, Err):
            return pushed

        url = self._pull_requests.create(
            branch=branch, title=title, body=body.value, draft=draft, auto_merge=auto_merge
        )
        if isinstance(url, Err):
            return url

        back = self._git.checkout_default_branch()
        if isinstance(back, Err):
            return back

        logger.debug("promotion %s -> %s opened %s", source.name, target.name, url.value)
        return Ok(PromotionOutcome(pr_url=url.value, promoted=names))
