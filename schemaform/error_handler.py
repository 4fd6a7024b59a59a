"""
Error handling utilities for the schema form app.
Maps exceptions raised at the application edge to user-friendly messages.
"""

import streamlit as st
import logging
import traceback
from typing import Dict, Any, Optional, List
import json

import yaml

from .exceptions import SchemaFormError, SchemaLoadError

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    SCHEMA = "schema"
    CONFIGURATION = "configuration"
    RENDERING = "rendering"
    DRAWING = "drawing"
    USER_INPUT = "user_input"
    SYSTEM = "system"


class ErrorHandler:
    """Error handling for the schema form app."""

    ERROR_MESSAGES: Dict[str, Dict[Any, str]] = {
        ErrorType.SCHEMA: {
            SchemaLoadError: "📋 The schema document could not be loaded. The built-in schema is used instead.",
            json.JSONDecodeError: "📋 Schema file contains invalid JSON format. Please check the schema file.",
            yaml.YAMLError: "📋 Schema file contains invalid YAML. Please check the schema file.",
            KeyError: "📋 Required schema entry is missing. Please verify the schema document.",
            "default": "📋 Schema error occurred. Please check your schema files."
        },
        ErrorType.CONFIGURATION: {
            yaml.YAMLError: "⚙️ config.yaml contains invalid YAML. Default settings are used.",
            "default": "⚙️ Configuration error. Default settings are used."
        },
        ErrorType.RENDERING: {
            "default": "🖼️ Part of the form could not be displayed."
        },
        ErrorType.DRAWING: {
            ValueError: "✏️ The drawing canvas sent an unexpected event and it was ignored.",
            "default": "✏️ Drawing error occurred. Try clearing the canvas."
        },
        ErrorType.USER_INPUT: {
            ValueError: "⚠️ Invalid input provided. Please check your data and try again.",
            TypeError: "⚠️ Incorrect data format. Please ensure your input matches the expected format.",
            "default": "⚠️ Input error. Please review your data and try again."
        },
        ErrorType.SYSTEM: {
            MemoryError: "💻 System is running low on memory. Please try again or contact support.",
            ImportError: "💻 Required system component is missing. Please contact support.",
            "default": "💻 System error occurred. Please try again or contact support."
        }
    }

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        error_type: str = ErrorType.SYSTEM,
        user_message: Optional[str] = None,
        show_details: bool = False
    ) -> None:
        """
        Handle errors with user-friendly messages.

        Args:
            error: The exception that occurred
            context: Context where the error occurred
            error_type: Type of error (from ErrorType constants)
            user_message: Custom user-friendly message
            show_details: Whether to show technical details
        """
        logger.error(f"Error in {context}: {str(error)}", exc_info=True)

        if not user_message:
            user_message = ErrorHandler._get_user_friendly_message(error, error_type)

        st.error(user_message)

        if isinstance(error, SchemaFormError) and error.recovery_suggestions:
            with st.expander("🔧 Suggested Actions"):
                for suggestion in error.recovery_suggestions:
                    st.write(f"• {suggestion}")

        if show_details:
            with st.expander("🔍 Technical Details"):
                st.write(f"**Error Type:** {type(error).__name__}")
                st.write(f"**Context:** {context}")
                st.write(f"**Error Message:** {str(error)}")
                st.code(traceback.format_exc())

    @staticmethod
    def _get_user_friendly_message(error: Exception, error_type: str) -> str:
        """Generate user-friendly error messages based on error type."""
        messages = ErrorHandler.ERROR_MESSAGES.get(error_type, ErrorHandler.ERROR_MESSAGES[ErrorType.SYSTEM])

        for exception_type, message in messages.items():
            if exception_type != "default" and isinstance(error, exception_type):
                return message

        return messages.get("default", "An unexpected error occurred.")

    @staticmethod
    def recovery_hints(context: str) -> List[str]:
        """Context-specific recovery hints shown next to an error."""
        hints: List[str] = []
        if "schema" in context.lower():
            hints.append("Select another schema in the sidebar or fix the schema file and reload")
        if "draw" in context.lower():
            hints.append("Press Clear to reset the drawing canvas")
        if not hints:
            hints.append("Reload the page to start a new session")
        return hints
