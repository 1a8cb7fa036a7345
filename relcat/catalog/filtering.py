"""Release selection strategies.

A ``ReleaseFilter`` is one of three variants; ``matches`` is the single
capability every consumer uses.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from fnmatch import fnmatchcase

__all__ = [
    "AllReleases",
    "NamePatternFilter",
    "ReleaseFilter",
    "SpecificReleasesFilter",
    "matches",
]


@dataclass(frozen=True, slots=True)
class AllReleases:
    pass


@dataclass(frozen=True, slots=True)
class NamePatternFilter:
    """Shell-style wildcards, e.g. ``api-*``."""

    patterns: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SpecificReleasesFilter:
    names: frozenset[str]

    @classmethod
    def of(cls, names: Iterable[str]) -> SpecificReleasesFilter:
        return cls(names=frozenset(names))


type ReleaseFilter = AllReleases | NamePatternFilter | SpecificReleasesFilter


def matches(release_filter: ReleaseFilter, name: str) -> bool:
    match release_filter:
        case AllReleases():
            return True
        case NamePatternFilter(patterns=patterns):
            return any(fnmatchcase(name, p) for p in patterns)
        case SpecificReleasesFilter(names=names):
            return name in names
