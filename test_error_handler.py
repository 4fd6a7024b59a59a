"""
Unit tests for error_handler and exceptions modules.
"""

import json
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest
import yaml

from schemaform.error_handler import ErrorHandler, ErrorType
from schemaform.exceptions import SchemaFormError, SchemaLoadError, log_error_details


class TestErrorHandler:
    """Test class for error handler."""

    def test_get_user_friendly_message_schema(self):
        """Test user-friendly messages for schema errors."""
        error = SchemaLoadError(Path("schemas/missing.json"))
        message = ErrorHandler._get_user_friendly_message(error, ErrorType.SCHEMA)
        assert "could not be loaded" in message
        assert "📋" in message

        error = json.JSONDecodeError("Expecting value", "doc", 0)
        message = ErrorHandler._get_user_friendly_message(error, ErrorType.SCHEMA)
        assert "invalid json" in message.lower()

        error = yaml.YAMLError("bad")
        message = ErrorHandler._get_user_friendly_message(error, ErrorType.SCHEMA)
        assert "invalid yaml" in message.lower()

    def test_get_user_friendly_message_drawing(self):
        """Test user-friendly messages for drawing errors."""
        message = ErrorHandler._get_user_friendly_message(ValueError("bad event"), ErrorType.DRAWING)
        assert "✏️" in message
        assert "ignored" in message

        message = ErrorHandler._get_user_friendly_message(RuntimeError("boom"), ErrorType.DRAWING)
        assert "clearing the canvas" in message

    def test_get_user_friendly_message_default(self):
        """Unknown error types use the system messages."""
        message = ErrorHandler._get_user_friendly_message(RuntimeError("boom"), "unknown")
        assert "system error" in message.lower()

    def test_handle_error_shows_message(self):
        """handle_error reports the friendly message through Streamlit."""
        with patch("schemaform.error_handler.st") as mock_st:
            ErrorHandler.handle_error(RuntimeError("boom"), "rendering field a", ErrorType.RENDERING)

        mock_st.error.assert_called_once_with(ErrorHandler.ERROR_MESSAGES[ErrorType.RENDERING]["default"])

    def test_handle_error_custom_message_and_suggestions(self):
        """Recovery suggestions of SchemaFormError are listed."""
        error = SchemaFormError("broken", recovery_suggestions=["Fix it", "Reload"])
        with patch("schemaform.error_handler.st") as mock_st:
            mock_st.expander.return_value = MagicMock()
            ErrorHandler.handle_error(error, "schema", ErrorType.SCHEMA, user_message="Custom")

        mock_st.error.assert_called_once_with("Custom")
        assert mock_st.write.call_count == 2

    @pytest.mark.parametrize("context,expected", [
        ("schema", "Select another schema"),
        ("draw events for roi", "Press Clear"),
        ("application startup", "Reload the page"),
    ])
    def test_recovery_hints(self, context, expected):
        hints = ErrorHandler.recovery_hints(context)
        assert any(expected in hint for hint in hints)


class TestExceptions:
    """Test class for custom exceptions."""

    def test_schema_form_error_details(self):
        error = SchemaFormError("message", context={'a': 1}, recovery_suggestions=["x"])
        assert str(error) == "message"
        assert error.get_full_details() == {
            'error_type': 'SchemaFormError',
            'message': 'message',
            'context': {'a': 1},
            'recovery_suggestions': ["x"],
        }

    def test_schema_load_error_with_original(self):
        original = ValueError("unexpected token")
        error = SchemaLoadError(Path("schemas/a.json"), original)

        assert "unexpected token" in str(error)
        assert error.context['original_error_type'] == 'ValueError'
        assert error.context['schema_path'] == str(Path("schemas/a.json"))
        assert error.recovery_suggestions

    def test_schema_load_error_custom_message(self):
        error = SchemaLoadError(Path("a.txt"), message="Unsupported schema file format: .txt")
        assert str(error) == "Unsupported schema file format: .txt"
        assert 'original_error_type' not in error.context

    def test_log_error_details(self, caplog):
        with caplog.at_level("DEBUG", logger="schemaform.exceptions"):
            log_error_details(SchemaLoadError(Path("a.json")))
        assert "SchemaLoadError" in caplog.text
        assert "Suggestion:" in caplog.text
