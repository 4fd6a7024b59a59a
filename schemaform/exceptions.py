"""
Custom exception classes for schema form errors.

The form core never raises on malformed input (unknown field kinds render as
placeholders, validation is advisory). These exceptions cover the loading
edge of the application: schema documents and configuration files.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class SchemaFormError(Exception):
    """
    Base exception for schema form errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class SchemaLoadError(SchemaFormError):
    """
    Exception raised when a schema document cannot be loaded.

    This includes missing files, unsupported file formats and JSON/YAML
    parsing errors.
    """

    def __init__(self, schema_path: Path, original_error: Optional[Exception] = None,
                 message: Optional[str] = None):
        self.schema_path = schema_path
        self.original_error = original_error

        if message is None:
            if original_error is not None:
                message = f"Failed to load schema from {schema_path}: {str(original_error)}"
            else:
                message = f"Failed to load schema from {schema_path}"

        context = {'schema_path': str(schema_path)}
        if original_error is not None:
            context['original_error_type'] = type(original_error).__name__
            context['original_error_message'] = str(original_error)

        recovery_suggestions = [
            "Check that the schema file exists in the schemas directory",
            "Verify the JSON or YAML syntax is correct",
            "Make sure the root declares 'type: object' with 'properties'",
            "The built-in fallback schema will be used instead"
        ]

        super().__init__(message, context, recovery_suggestions)


def log_error_details(error: SchemaFormError) -> None:
    """Log an error together with its context and recovery suggestions."""
    details = error.get_full_details()
    logger.error(f"{details['error_type']}: {details['message']}")
    if details['context']:
        logger.debug(f"Error context: {details['context']}")
    for suggestion in details['recovery_suggestions']:
        logger.info(f"Suggestion: {suggestion}")
