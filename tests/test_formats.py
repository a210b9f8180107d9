"""Tests for the type capability table."""

import pytest

from fragments.formats import (
    get_content_type_from_extension,
    is_supported_conversion,
    is_supported_type,
    reachable_formats,
)


SUPPORTED_TYPES = [
    "text/plain",
    "text/markdown",
    "text/html",
    "text/csv",
    "application/json",
    "text/x-custom",
]

EXPECTED_TARGETS = {
    "text/plain": {"text/plain"},
    "text/markdown": {"text/markdown", "text/html", "text/plain"},
    "text/html": {"text/html", "text/plain"},
    "text/csv": {"text/csv", "text/plain", "application/json"},
    "application/json": {"application/json", "application/yaml", "text/plain"},
    "text/x-custom": {"text/x-custom", "text/plain"},
}

ALL_TARGETS = {
    "text/plain",
    "text/markdown",
    "text/html",
    "text/csv",
    "text/x-custom",
    "application/json",
    "application/yaml",
    "image/png",
}


class TestIsSupportedType:
    @pytest.mark.parametrize("value", [
        "text/plain",
        "text/plain; charset=utf-8",
        "text/markdown",
        "text/html",
        "text/csv",
        "text/anything",
        "application/json",
        "application/json; charset=utf-8",
    ])
    def test_accepts_text_and_json(self, value):
        assert is_supported_type(value) is True

    @pytest.mark.parametrize("value", [
        "image/png",
        "image/jpeg",
        "application/yaml",
        "application/octet-stream",
        "invalid-content-type",
        "",
        None,
    ])
    def test_rejects_everything_else(self, value):
        assert is_supported_type(value) is False


class TestReachableFormats:
    @pytest.mark.parametrize("source", SUPPORTED_TYPES)
    def test_source_is_listed_first(self, source):
        assert reachable_formats(source)[0] == source

    @pytest.mark.parametrize("source,targets", EXPECTED_TARGETS.items())
    def test_matches_capability_table(self, source, targets):
        formats = reachable_formats(source)
        assert set(formats) == targets
        assert len(formats) == len(targets)

    def test_non_text_types_only_reach_themselves(self):
        assert reachable_formats("image/png") == ["image/png"]


class TestIsSupportedConversion:
    @pytest.mark.parametrize("media_type", SUPPORTED_TYPES + ["image/png", "application/yaml"])
    def test_identity_is_always_supported(self, media_type):
        assert is_supported_conversion(media_type, media_type) is True

    @pytest.mark.parametrize("source,targets", EXPECTED_TARGETS.items())
    def test_agrees_with_table_for_every_target(self, source, targets):
        for target in ALL_TARGETS | targets:
            assert is_supported_conversion(source, target) is (target in targets), target

    def test_unsupported_pairs(self):
        assert is_supported_conversion("text/plain", "image/png") is False
        assert is_supported_conversion("image/png", "text/html") is False
        assert is_supported_conversion("application/json", "text/html") is False
        assert is_supported_conversion("text/plain", "text/html") is False


class TestGetContentTypeFromExtension:
    def test_known_extensions(self):
        assert get_content_type_from_extension(".html") == "text/html"
        assert get_content_type_from_extension(".txt") == "text/plain"
        assert get_content_type_from_extension(".md") == "text/markdown"
        assert get_content_type_from_extension(".csv") == "text/csv"
        assert get_content_type_from_extension(".json") == "application/json"
        assert get_content_type_from_extension(".yaml") == "application/yaml"
        assert get_content_type_from_extension(".yml") == "application/yaml"
        assert get_content_type_from_extension(".png") == "image/png"
        assert get_content_type_from_extension(".jpeg") == "image/jpeg"

    def test_case_insensitive(self):
        assert get_content_type_from_extension(".HTML") == "text/html"
        assert get_content_type_from_extension(".Json") == "application/json"

    def test_leading_dot_is_optional(self):
        assert get_content_type_from_extension("md") == "text/markdown"

    def test_unknown_extensions(self):
        assert get_content_type_from_extension(".unknown") is None
        assert get_content_type_from_extension(".xyz") is None
        assert get_content_type_from_extension("") is None
