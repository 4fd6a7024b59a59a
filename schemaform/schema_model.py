"""
Typed schema nodes for the form engine.

A raw schema entry declares an ``x-ui-type``/``type`` pair. The pair is
resolved once into a closed FieldKind; anything that does not resolve becomes
FieldKind.UNSUPPORTED so rendering can show a placeholder instead of failing.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    """Closed set of editor kinds."""
    OBJECT_GROUP = "object-group"
    STRING_TEXT = "string-text"
    STRING_PASSWORD = "string-password"
    BOOLEAN_CHECKBOX = "boolean-checkbox"
    STRING_LIST = "string-list"
    REGION_DRAW = "region-draw"
    UNSUPPORTED = "unsupported"


# (x-ui-type, type) -> kind
_KIND_TABLE: Dict[Tuple[str, str], FieldKind] = {
    ("group", "object"): FieldKind.OBJECT_GROUP,
    ("text", "string"): FieldKind.STRING_TEXT,
    ("textarea", "string"): FieldKind.STRING_TEXT,
    ("password", "string"): FieldKind.STRING_PASSWORD,
    ("checkbox", "boolean"): FieldKind.BOOLEAN_CHECKBOX,
    ("list", "array"): FieldKind.STRING_LIST,
    ("draw", "array"): FieldKind.REGION_DRAW,
}

STRING_KINDS = frozenset({FieldKind.STRING_TEXT, FieldKind.STRING_PASSWORD})

ITEM_KINDS = {
    FieldKind.STRING_LIST: "string",
    FieldKind.REGION_DRAW: "point",
}


def ordered_keys(children: Dict[str, Any], order: Optional[List[str]] = None) -> List[str]:
    """
    Traversal order of a children mapping.

    Keys from ``order`` come first (unknown and repeated keys skipped),
    followed by any keys the list left out, in insertion order.
    """
    ordered: List[str] = []
    seen = set()
    for key in list(order or []) + list(children):
        if key in children and key not in seen:
            seen.add(key)
            ordered.append(key)
    return ordered


def resolve_kind(ui_type: Optional[str], type_: Optional[str]) -> FieldKind:
    """Map a declared ui-type/type pair onto a FieldKind."""
    kind = _KIND_TABLE.get((ui_type, type_))
    if kind is None:
        logger.debug(f"Unresolved field kind for ui-type={ui_type!r}, type={type_!r}")
        return FieldKind.UNSUPPORTED
    return kind


class LengthConstraints(BaseModel):
    """Length limits for string kinds."""
    model_config = ConfigDict(frozen=True)

    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def is_empty(self) -> bool:
        return self.min_length is None and self.max_length is None


class SchemaNode(BaseModel):
    """
    One field or group of a form schema.

    Groups carry ``children`` (and optionally an explicit ``order``); leaves
    carry ``item_kind`` for array kinds and ``constraints`` for string kinds.
    ``has_default`` tells an explicit ``default: null`` apart from no default.
    """
    model_config = ConfigDict(frozen=True)

    kind: FieldKind
    title: Optional[Union[str, Dict[str, str]]] = None
    description: Optional[Union[str, Dict[str, str]]] = None
    children: Optional[Dict[str, "SchemaNode"]] = None
    order: Optional[List[str]] = None
    item_kind: Optional[str] = None
    constraints: Optional[LengthConstraints] = None
    default: Any = None
    has_default: bool = False
    raw_ui_type: Optional[str] = None
    raw_type: Optional[str] = None
    multiline: bool = False
    required: bool = False

    @model_validator(mode="after")
    def _check_shape(self) -> "SchemaNode":
        if self.kind == FieldKind.OBJECT_GROUP:
            if self.children is None:
                raise ValueError("object-group nodes require children")
            if self.item_kind is not None or self.constraints is not None:
                raise ValueError("object-group nodes cannot declare items or constraints")
        elif self.children is not None:
            raise ValueError(f"{self.kind.value} nodes cannot have children")
        return self

    @property
    def is_group(self) -> bool:
        return self.kind == FieldKind.OBJECT_GROUP

    def child_order(self) -> List[str]:
        """Traversal order of the children, see ordered_keys."""
        if not self.children:
            return []
        return ordered_keys(self.children, self.order)

    def ordered_children(self) -> List[Tuple[str, "SchemaNode"]]:
        """Children as (key, node) pairs in traversal order."""
        if not self.children:
            return []
        return [(key, self.children[key]) for key in self.child_order()]

    def find(self, path: Tuple[str, ...]) -> Optional["SchemaNode"]:
        """Locate the node at a key path, or None when the path does not exist."""
        node: SchemaNode = self
        for key in path:
            if not node.children or key not in node.children:
                return None
            node = node.children[key]
        return node


SchemaNode.model_rebuild()
