"""Tests for json_path.py - JSONPath subset tokenizing and matching."""

import pytest

from manip.errors import InvalidPathError, PathNotFoundError
from manip.json_path import (
    INDEX,
    KEY,
    WILDCARD,
    Segment,
    find_first,
    get_by_json_path,
    iter_locations,
    tokenize,
)


class TestTokenize:
    def test_dot_and_index(self):
        assert tokenize("$.a.b[2]") == [Segment(KEY, "a"), Segment(KEY, "b"), Segment(INDEX, 2)]

    def test_quoted_keys(self):
        assert tokenize("$['key.with.dots'][\"it\\\"s\"]") == [
            Segment(KEY, "key.with.dots"),
            Segment(KEY, 'it"s'),
        ]

    def test_recursive_descent(self):
        assert tokenize("$..plugins[0].description") == [
            Segment(KEY, "plugins", recursive=True),
            Segment(INDEX, 0),
            Segment(KEY, "description"),
        ]

    def test_wildcards(self):
        assert tokenize("$.a.*[*]..*") == [
            Segment(KEY, "a"),
            Segment(WILDCARD),
            Segment(WILDCARD),
            Segment(WILDCARD, recursive=True),
        ]

    def test_root_only(self):
        assert tokenize("$") == []

    @pytest.mark.parametrize("path", ["a.b", "", "$.", "$[", "$[x]", "$['open", "$a", "$.a[1"])
    def test_invalid(self, path):
        with pytest.raises(InvalidPathError):
            tokenize(path)


class TestMatching:
    def test_get_nested_value(self, plugin_registry):
        assert get_by_json_path(plugin_registry, "$.repository.url").startswith("https://")

    def test_recursive_descent_first_match(self, plugin_registry):
        assert get_by_json_path(plugin_registry, "$..plugins[0].name") == "cors"

    def test_recursive_descent_all_matches(self, npm_shrinkwrap):
        versions = [c[k] for c, k in iter_locations(npm_shrinkwrap, "$..version")]
        assert versions == ["0.0.1", "2.2.0", "1.2.6"]

    def test_wildcard_over_list(self, plugin_registry):
        names = [c[k] for c, k in iter_locations(plugin_registry, "$.plugins[*].name")]
        assert names == ["cors", "rate-limiting"]

    def test_index_out_of_range(self, plugin_registry):
        assert find_first(plugin_registry, "$.plugins[5].name") is None

    def test_key_on_list_does_not_match(self, plugin_registry):
        assert find_first(plugin_registry, "$.plugins.name") is None

    def test_missing_path_raises(self, npm_shrinkwrap):
        with pytest.raises(PathNotFoundError):
            get_by_json_path(npm_shrinkwrap, "$.I.really.do.not.exist.repository.url")

    def test_root_has_no_location(self, plugin_registry):
        assert find_first(plugin_registry, "$") is None
