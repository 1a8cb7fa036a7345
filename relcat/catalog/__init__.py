"""Catalog of environments and releases."""

from relcat.catalog.cross import CrossRelease, CrossReleaseList
from relcat.catalog.filtering import (
    AllReleases,
    NamePatternFilter,
    ReleaseFilter,
    SpecificReleasesFilter,
    matches,
)
from relcat.catalog.graph import PromotionGraph
from relcat.catalog.loader import Catalog, load_catalog, load_environments
from relcat.catalog.model import ChartRef, Environment, PromotionPolicy, Release, is_standard_version

__all__ = [
    # model
    "ChartRef",
    "Environment",
    "PromotionPolicy",
    "Release",
    "is_standard_version",
    # cross
    "CrossRelease",
    "CrossReleaseList",
    # filtering
    "AllReleases",
    "NamePatternFilter",
    "ReleaseFilter",
    "SpecificReleasesFilter",
    "matches",
    # graph
    "PromotionGraph",
    # loader
    "Catalog",
    "load_catalog",
    "load_environments",
]
