"""
Initial form values synthesized from a schema tree.
"""

import copy
from typing import Any

from .schema_model import FieldKind, SchemaNode

# Leaves with no default start as None ("never touched"); an emptied text
# field is "" instead.
ABSENT = None


def synthesize(node: SchemaNode) -> Any:
    """
    Build the initial value for a schema node.

    Groups become dicts keyed like their children (in traversal order);
    leaves use their declared default, list-like leaves fall back to an
    empty list and everything else to ABSENT.
    """
    if node.kind == FieldKind.OBJECT_GROUP:
        return {key: synthesize(child) for key, child in node.ordered_children()}
    if node.has_default:
        return copy.deepcopy(node.default)
    if node.kind in (FieldKind.STRING_LIST, FieldKind.REGION_DRAW):
        return []
    return ABSENT


def shape_matches(node: SchemaNode, value: Any) -> bool:
    """
    Check that a value has the group/leaf shape of a schema tree.

    Group nodes need a dict with exactly the children's keys; list-like
    leaves need a list. Scalar leaves accept anything.
    """
    if node.kind == FieldKind.OBJECT_GROUP:
        if not isinstance(value, dict):
            return False
        if set(value) != set(node.children or {}):
            return False
        return all(shape_matches(child, value[key]) for key, child in node.ordered_children())
    if node.kind in (FieldKind.STRING_LIST, FieldKind.REGION_DRAW):
        return isinstance(value, list)
    return True
