"""Catalog builders and protocol doubles shared by the tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from relcat.catalog.cross import CrossReleaseList
from relcat.catalog.model import Environment
from relcat.core.errors import CatalogError
from relcat.core.result import Err, Ok, Result
from relcat.services.prompts import Canceled, PullRequestMode, Selected, Selection
from relcat.yml.document import YamlDocument

STAGING_ENV = """\
metadata:
  name: staging
spec:
  order: 1
  promotion:
    fromEnvironments: []
  values:
    domain: staging.example.com
    replicas: 1
"""

PROD_ENV = """\
metadata:
  name: prod
spec:
  order: 2
  promotion:
    fromEnvironments: [staging]
    allowAutoMerge: false
  values:
    domain: example.com
    replicas: 3
"""

STAGING_API = """\
metadata:
  name: api
spec:
  project: api
  version: 1.0
  chart:
    name: web
    repoUrl: https://charts.example.com
    version: 2.1.0
  values:
    image:
      tag: 1.0
    env:
      LOG_LEVEL: debug
"""

PROD_API = """\
# Production API release.
metadata:
  name: api
spec:
  project: api

  # Bumped by promotion.
  version: 0.9  # current
  chart:
    name: web
    repoUrl: https://charts.example.com
    version: 2.1.0
  values:
    image:
      tag: 0.9
    env:
      LOG_LEVEL: info
"""

PROMOTED_PROD_API = (
    PROD_API.replace("version: 0.9  # current", "version: 1.0  # current")
    .replace("      tag: 0.9\n", "      tag: 1.0\n")
    .replace("LOG_LEVEL: info", "LOG_LEVEL: debug")
)


def release_text(name: str, version: str, *, project: str | None = None, values: str = "") -> str:
    body = f"metadata:\n  name: {name}\nspec:\n  project: {project or name}\n  version: {version}\n"
    if values:
        body += "  values:\n" + "".join(f"    {line}\n" for line in values.splitlines())
    return body


def write_catalog(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path to text) under ``root``."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def staging_prod_catalog(root: Path, *, prod_api: str | None = PROD_API) -> Path:
    files = {
        "environments/staging.yaml": STAGING_ENV,
        "environments/prod.yaml": PROD_ENV,
        "environments/staging/releases/api.release.yaml": STAGING_API,
    }
    if prod_api is not None:
        files["environments/prod/releases/api.release.yaml"] = prod_api
    return write_catalog(root, files)


def env_named(name: str, *, sources: Sequence[str] = (), auto_merge: bool = False) -> Environment:
    text = (
        f"metadata:\n  name: {name}\nspec:\n  promotion:\n"
        f"    fromEnvironments: [{', '.join(sources)}]\n"
        f"    allowAutoMerge: {'true' if auto_merge else 'false'}\n"
    )
    return Environment.from_document(YamlDocument.parse(text).unwrap()).unwrap()  # type: ignore[union-attr]


@dataclass
class ScriptedPrompts:
    """PromptProvider answering from a script and recording every call."""

    source: Selection[Environment] | None = None
    target: Selection[Environment] | None = None
    releases: Sequence[str] | None = None
    mode: PullRequestMode = PullRequestMode.READY
    confirm: bool = True
    auto_merge: bool = False
    calls: list[str] = field(default_factory=list)
    previews: list[tuple[str, str, str]] = field(default_factory=list)

    def select_source_environment(self, environments: Sequence[Environment]) -> Selection[Environment]:
        self.calls.append("select_source_environment")
        if self.source is not None:
            return self.source
        return Selected(environments[0])

    def select_target_environment(self, environments: Sequence[Environment]) -> Selection[Environment]:
        self.calls.append("select_target_environment")
        if self.target is not None:
            return self.target
        return Selected(environments[0])

    def select_releases(self, releases: CrossReleaseList) -> Selection[CrossReleaseList]:
        self.calls.append("select_releases")
        if self.releases is None:
            return Canceled()
        return Selected(releases.only_specific_releases(self.releases))

    def select_pull_request_mode(self) -> PullRequestMode:
        self.calls.append("select_pull_request_mode")
        return self.mode

    def confirm_pull_request(self, auto_merge: bool, draft: bool) -> bool:
        self.calls.append("confirm_pull_request")
        return self.confirm

    def confirm_auto_merge(self) -> bool:
        self.calls.append("confirm_auto_merge")
        return self.auto_merge

    def print_no_promotable_releases(self, filtered: bool, source: Environment, target: Environment) -> None:
        self.calls.append("print_no_promotable_releases")

    def print_non_promotable_releases(self, names: Sequence[str], target: Environment) -> None:
        self.calls.append("print_non_promotable_releases")

    def print_start_preview(self) -> None:
        self.calls.append("print_start_preview")

    def print_release_preview(
        self,
        target: Environment,
        release_name: str,
        existing: YamlDocument | None,
        promoted: YamlDocument,
    ) -> None:
        self.calls.append("print_release_preview")
        self.previews.append((release_name, existing.text if existing else "", promoted.text))

    def print_end_preview(self) -> None:
        self.calls.append("print_end_preview")

    def print_canceled(self) -> None:
        self.calls.append("print_canceled")


@dataclass
class RecordingGit:
    """GitProvider recording calls; ``fail_on`` makes one step fail."""

    fail_on: str | None = None
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)

    def _step(self, name: str, *args: object) -> Result[None, CatalogError]:
        self.calls.append((name, args))
        if name == self.fail_on:
            kind = "io" if name == "ensure_clean_and_up_to_date" else "external_tool"
            return Err(CatalogError(kind, f"{name} failed"))
        return Ok(None)

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def ensure_clean_and_up_to_date(self) -> Result[None, CatalogError]:
        return self._step("ensure_clean_and_up_to_date")

    def create_branch(self, branch: str) -> Result[None, CatalogError]:
        return self._step("create_branch", branch)

    def commit(self, paths: list[Path], message: str) -> Result[None, CatalogError]:
        return self._step("commit", tuple(paths), message)

    def push(self, branch: str) -> Result[None, CatalogError]:
        return self._step("push", branch)

    def checkout_default_branch(self) -> Result[None, CatalogError]:
        return self._step("checkout_default_branch")


@dataclass
class RecordingPullRequests:
    url: str = "https://github.com/acme/catalog/pull/7"
    created: list[dict[str, object]] = field(default_factory=list)

    def create(
        self, *, branch: str, title: str, body: str, draft: bool, auto_merge: bool
    ) -> Result[str, CatalogError]:
        self.created.append(
            {"branch": branch, "title": title, "body": body, "draft": draft, "auto_merge": auto_merge}
        )
        return Ok(self.url)
