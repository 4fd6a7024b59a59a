"""
Search filtering of schema properties by localized title/description.
"""

from typing import Dict, List, Optional
import logging

from .localization import resolve
from .schema_model import SchemaNode, ordered_keys

logger = logging.getLogger(__name__)


def _matches(node: SchemaNode, needle: str, lang: str) -> bool:
    title = resolve(node.title, lang).lower()
    description = resolve(node.description, lang).lower()
    return needle in title or needle in description


def filter_properties(children: Dict[str, SchemaNode], term: str, lang: str,
                      order: Optional[List[str]] = None) -> Dict[str, SchemaNode]:
    """
    Keep the properties whose title or description contains ``term``.

    A matching property is kept whole. A non-matching group is kept only if
    some descendant matches, with its children narrowed to the matches.
    The input mapping and its nodes are never modified.

    Args:
        children: Property key -> node mapping
        term: Search term (case-insensitive); empty keeps everything
        lang: Language used to resolve titles and descriptions
        order: Explicit traversal order of ``children``

    Returns:
        New mapping in traversal order
    """
    if not term:
        return dict(children)

    needle = term.lower()
    result: Dict[str, SchemaNode] = {}
    for key in ordered_keys(children, order):
        child = children[key]
        if _matches(child, needle, lang):
            result[key] = child
        elif child.is_group:
            narrowed = filter_properties(child.children or {}, term, lang, child.order)
            if narrowed:
                result[key] = child.model_copy(update={'children': narrowed})
    return result


def filter_schema(root: SchemaNode, term: str, lang: str) -> SchemaNode:
    """Apply filter_properties to the children of a root group."""
    if not root.is_group:
        return root
    filtered = filter_properties(root.children or {}, term, lang, root.order)
    logger.debug(f"Filter '{term}' ({lang}) kept {len(filtered)} of {len(root.children or {})} top-level properties")
    return root.model_copy(update={'children': filtered})
