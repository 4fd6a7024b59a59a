"""
Diff utilities for the live form preview.
Compares the synthesized defaults with the current form value using DeepDiff
and turns the result into short, readable change lines.
"""

from typing import Dict, Any, List
from deepdiff import DeepDiff
import json
import re
import logging

logger = logging.getLogger(__name__)

_PATH_TOKEN = re.compile(r"\['((?:[^'\\]|\\.)*)'\]|\[(\d+)\]")


def _clean_path(path: str) -> str:
    """
    Turn a DeepDiff path into a dotted path.

    Example: root['g']['name'] -> g.name, root['roi'][3] -> roi[3]
    """
    parts: List[str] = []
    for key, index in _PATH_TOKEN.findall(path):
        if index:
            parts.append(f"[{index}]")
        elif parts:
            parts.append(f".{key}")
        else:
            parts.append(key)
    return "".join(parts) or path


def calculate_changes(defaults: Dict[str, Any], current: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Calculate what the user changed relative to the initial form value.

    List order is significant (drawn points are ordered).

    Args:
        defaults: Synthesized initial value tree
        current: Current value tree

    Returns:
        Dict with 'changed' ({path: {'old', 'new'}}), 'added' ({path: value})
        and 'removed' ({path: value}); empty sections are omitted
    """
    diff = DeepDiff(defaults, current, ignore_order=False, verbose_level=2)

    changes: Dict[str, Dict[str, Any]] = {}

    changed: Dict[str, Any] = {}
    for section in ('values_changed', 'type_changes'):
        for path, detail in diff.get(section, {}).items():
            changed[_clean_path(path)] = {
                'old': detail.get('old_value'),
                'new': detail.get('new_value'),
            }
    if changed:
        changes['changed'] = changed

    added: Dict[str, Any] = {}
    for section in ('iterable_item_added', 'dictionary_item_added'):
        for path, value in diff.get(section, {}).items():
            added[_clean_path(path)] = value
    if added:
        changes['added'] = added

    removed: Dict[str, Any] = {}
    for section in ('iterable_item_removed', 'dictionary_item_removed'):
        for path, value in diff.get(section, {}).items():
            removed[_clean_path(path)] = value
    if removed:
        changes['removed'] = removed

    logger.debug(f"Calculated changes: {sum(len(v) for v in changes.values())} entries")
    return changes


def has_changes(changes: Dict[str, Dict[str, Any]]) -> bool:
    """Check if a change dict from calculate_changes has any entries."""
    return any(changes.get(section) for section in ('changed', 'added', 'removed'))


def _format_value(value: Any, max_length: int = 60) -> str:
    """Format a value for a change line, truncating long values."""
    if value is None:
        text = "(empty)"
    elif isinstance(value, str):
        text = f'"{value}"'
    else:
        text = json.dumps(value, ensure_ascii=False, default=str)
    if len(text) > max_length:
        text = text[:max_length - 3] + "..."
    return text


def format_changes(changes: Dict[str, Dict[str, Any]]) -> List[str]:
    """
    Format changes as display lines.

    Returns:
        Lines such as 'g.name: (empty) -> "abc"', '+ colors[0]: "red"'
    """
    lines: List[str] = []
    for path, detail in changes.get('changed', {}).items():
        lines.append(f"{path}: {_format_value(detail['old'])} -> {_format_value(detail['new'])}")
    for path, value in changes.get('added', {}).items():
        lines.append(f"+ {path}: {_format_value(value)}")
    for path, value in changes.get('removed', {}).items():
        lines.append(f"- {path}: {_format_value(value)}")
    return lines
