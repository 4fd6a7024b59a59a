"""
Unit tests for localization module.
"""

import pytest

from schemaform.localization import resolve, available_languages
from schemaform.schema_loader import parse_schema
from test_fixtures import SchemaFixtures


class TestResolve:
    """Test cases for resolve function."""

    def test_preferred_language_present(self):
        assert resolve({"en": "A", "ja": "B"}, "ja") == "B"

    def test_falls_back_to_first_language(self):
        assert resolve({"en": "A"}, "ja") == "A"
        assert resolve({"fr": "F", "en": "A"}, "ja") == "F"

    def test_bare_string_returned_unchanged(self):
        assert resolve("plain", "ja") == "plain"

    def test_missing_text_is_empty(self):
        assert resolve(None, "ja") == ""
        assert resolve({}, "ja") == ""

    def test_empty_preferred_value_falls_back(self):
        assert resolve({"en": "A", "ja": ""}, "ja") == "A"

    @pytest.mark.parametrize("lang", ["en", "ja", "de"])
    def test_resolve_is_total(self, lang):
        assert isinstance(resolve({"en": "A"}, lang), str)


class TestAvailableLanguages:
    """Test cases for available_languages."""

    def test_collects_languages_in_first_seen_order(self):
        root = parse_schema(SchemaFixtures.get("LOGIN_SCHEMA"))
        assert available_languages(root) == ["en", "ja"]

    def test_bare_strings_contribute_nothing(self):
        root = parse_schema({
            "type": "object",
            "properties": {"a": {"title": "A", "type": "string", "x-ui-type": "text"}},
        })
        assert available_languages(root) == []
