"""Tests for relcat.catalog.filtering module."""

from relcat.catalog.filtering import AllReleases, NamePatternFilter, SpecificReleasesFilter, matches


class TestMatches:
    def test_all(self) -> None:
        assert matches(AllReleases(), "anything")

    def test_patterns(self) -> None:
        f = NamePatternFilter(patterns=("api", "worker-*"))
        assert matches(f, "api")
        assert matches(f, "worker-eu")
        assert not matches(f, "api-gateway")

    def test_patterns_are_case_sensitive(self) -> None:
        assert not matches(NamePatternFilter(patterns=("API",)), "api")

    def test_specific(self) -> None:
        f = SpecificReleasesFilter.of(["api", "web"])
        assert matches(f, "web")
        assert not matches(f, "web-*")

    def test_specific_treats_glob_characters_literally(self) -> None:
        f = SpecificReleasesFilter.of(["api[eu]", "job*"])
        assert matches(f, "api[eu]")
        assert not matches(f, "apie")
        assert not matches(f, "job-nightly")
