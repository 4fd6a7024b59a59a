"""
Field validation for string inputs.
"""

from typing import Any, Optional

from .schema_model import FieldKind, LengthConstraints, STRING_KINDS


def is_validated_kind(kind: FieldKind) -> bool:
    """Only text and password fields are validated."""
    return kind in STRING_KINDS


def validate(value: Any, constraints: Optional[LengthConstraints]) -> Optional[str]:
    """
    Check a string value against its length constraints.

    The minimum is checked before the maximum; the first failure wins.

    Args:
        value: Current field value; None (never touched) and non-string
            values such as a numeric schema default are not checked
        constraints: Length limits, or None

    Returns:
        Error message, or None when the value is acceptable
    """
    if constraints is None or not isinstance(value, str):
        return None

    length = len(value)
    if constraints.min_length is not None and length < constraints.min_length:
        return f"Minimum length is {constraints.min_length}"
    if constraints.max_length is not None and length > constraints.max_length:
        return f"Maximum length is {constraints.max_length}"
    return None
