"""
Unit tests for property_filter module.
"""

from schemaform.property_filter import filter_properties, filter_schema
from schemaform.schema_loader import parse_schema
from test_fixtures import SchemaFixtures


class TestFilterProperties:
    """Test cases for filter_properties function."""

    def setup_method(self):
        self.root = parse_schema(SchemaFixtures.get("LOGIN_SCHEMA"))
        self.children = self.root.children

    def test_empty_term_keeps_everything(self):
        result = filter_properties(self.children, "", "en")
        assert result == self.children
        assert result is not self.children

    def test_case_insensitive_title_match(self):
        result = filter_properties(self.children, "COLORS", "en", self.root.order)
        assert list(result) == ["colors"]

    def test_description_match(self):
        result = filter_properties(self.children, "draw your", "en", self.root.order)
        assert list(result) == ["signature"]

    def test_matching_group_kept_whole(self):
        result = filter_properties(self.children, "login", "en", self.root.order)
        assert list(result["loginCredentials"].children) == ["username", "password"]
        assert result["loginCredentials"] is self.children["loginCredentials"]

    def test_group_narrowed_to_matching_children(self):
        result = filter_properties(self.children, "pass", "en", self.root.order)
        group = result["loginCredentials"]
        assert list(group.children) == ["password"]
        # The original tree is untouched.
        assert list(self.children["loginCredentials"].children) == ["username", "password"]

    def test_uses_selected_language(self):
        assert list(filter_properties(self.children, "ユーザー名", "ja", self.root.order)) == ["loginCredentials"]
        assert filter_properties(self.children, "ユーザー名", "en", self.root.order) == {}

    def test_result_in_traversal_order(self):
        result = filter_properties(self.children, "e", "en", self.root.order)
        assert list(result) == ["loginCredentials", "colors", "signature", "rememberMe"]


class TestFilterSchema:

    def test_nested_groups(self):
        root = parse_schema(SchemaFixtures.get("NESTED_SCHEMA"))
        filtered = filter_schema(root, "port", "en")
        assert filtered.find(("network", "proxy", "port")) is not None
        assert filtered.find(("network", "proxy", "host")) is None
        assert filtered.find(("network", "offline")) is None
        assert filtered.find(("theme",)) is None

    def test_no_match(self):
        root = parse_schema(SchemaFixtures.get("NESTED_SCHEMA"))
        assert filter_schema(root, "nothing here", "en").children == {}

    def test_repeated_order_keys_kept_once(self):
        root = parse_schema({
            "type": "object",
            "propertyOrder": ["theme", "theme"],
            "properties": {
                "theme": {"title": {"en": "Theme"}, "type": "string", "x-ui-type": "text"},
                "tone": {"title": {"en": "Tone"}, "type": "string", "x-ui-type": "text"},
            },
        })
        assert root.child_order() == ["theme", "tone"]
        assert list(filter_properties(root.children, "t", "en", root.order)) == ["theme", "tone"]
