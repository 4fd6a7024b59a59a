"""
Form engine: owns the form value tree, validation errors and the drawing
surfaces of one form session, and produces presentation units for the UI.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import logging

from .defaults import synthesize, shape_matches
from .localization import DEFAULT_LANGUAGE, resolve
from .property_filter import filter_schema
from .regions import DrawMode, RegionSurface
from .schema_model import FieldKind, SchemaNode
from .validators import is_validated_kind, validate

logger = logging.getLogger(__name__)

Path = Tuple[str, ...]


@dataclass
class FieldView:
    """Presentation unit for one schema node."""
    key: str
    path: Path
    kind: FieldKind
    title: str
    description: str
    value: Any = None
    error: Optional[str] = None
    children: List["FieldView"] = field(default_factory=list)
    raw_ui_type: Optional[str] = None
    raw_type: Optional[str] = None
    multiline: bool = False
    required: bool = False


def _get_in(tree: Any, path: Path, default: Any = None) -> Any:
    current = tree
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def _assoc_in(tree: Dict[str, Any], path: Path, value: Any) -> Dict[str, Any]:
    """Return a copy of ``tree`` with ``path`` set, sharing untouched branches."""
    key = path[0]
    updated = dict(tree)
    if len(path) == 1:
        updated[key] = value
    else:
        child = tree.get(key)
        updated[key] = _assoc_in(child if isinstance(child, dict) else {}, path[1:], value)
    return updated


class FormEngine:
    """
    Schema-driven form state.

    Values are never modified in place: ``set_leaf`` rebuilds the dicts on
    the path to the leaf and keeps every other branch as-is. Validation is
    advisory, ``submit`` returns the tree even when errors are present.
    """

    def __init__(self, schema: SchemaNode, language: str = DEFAULT_LANGUAGE,
                 initial_data: Optional[Dict[str, Any]] = None,
                 drawing_options: Optional[Dict[str, Any]] = None):
        self.schema = schema
        self.language = language
        self.search_term = ""
        self._defaults = synthesize(schema)
        self._data = self._adopt(initial_data)
        self._errors: Dict[Path, str] = {}
        self._listeners: List[Callable[[Dict[str, Any]], None]] = []
        self._submit_listeners: List[Callable[[Dict[str, Any]], None]] = []
        self._surfaces: Dict[Path, RegionSurface] = {}
        self._drawing_options = dict(drawing_options or {})

    def _adopt(self, initial_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if initial_data is None:
            return copy.deepcopy(self._defaults)
        if not shape_matches(self.schema, initial_data):
            logger.warning("Initial data does not match the schema shape, using defaults")
            return copy.deepcopy(self._defaults)
        return copy.deepcopy(initial_data)

    # -- state access ----------------------------------------------------

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    @property
    def defaults(self) -> Dict[str, Any]:
        return self._defaults

    @property
    def errors(self) -> Dict[Path, str]:
        return dict(self._errors)

    def error_for(self, path: Sequence[str]) -> Optional[str]:
        return self._errors.get(tuple(path))

    def has_errors(self) -> bool:
        return bool(self._errors)

    def get_value(self, path: Sequence[str]) -> Any:
        """Current value at ``path``, falling back to the synthesized default."""
        path = tuple(path)
        missing = object()
        value = _get_in(self._data, path, missing)
        if value is missing:
            return copy.deepcopy(_get_in(self._defaults, path))
        return value

    def set_language(self, language: str) -> None:
        if language != self.language:
            logger.info(f"Language changed: {self.language} -> {language}")
            self.language = language

    def set_search_term(self, term: str) -> None:
        self.search_term = (term or "").strip()

    def subscribe(self, callback: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        """
        Register a listener called with the new value tree after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def on_submit(self, callback: Callable[[Dict[str, Any]], None]) -> Callable[[], None]:
        """Register a listener called with the submitted tree; returns its remover."""
        self._submit_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._submit_listeners:
                self._submit_listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self._data)

    # -- edits -----------------------------------------------------------

    def set_leaf(self, path: Sequence[str], value: Any) -> bool:
        """
        Replace the value of one leaf.

        Args:
            path: Keys from the root to the leaf
            value: New leaf value

        Returns:
            True when the value was stored, False for paths that do not name
            a leaf of the schema
        """
        path = tuple(path)
        node = self.schema.find(path) if path else None
        if node is None or node.is_group:
            logger.warning(f"Ignoring update for unknown leaf path: {'.'.join(path)}")
            return False

        self._data = _assoc_in(self._data, path, value)

        if is_validated_kind(node.kind):
            error = validate(value, node.constraints)
            if error:
                self._errors[path] = error
            else:
                self._errors.pop(path, None)

        logger.debug(f"Set {'.'.join(path)} ({node.kind.value})")
        self._notify()
        return True

    def reset(self) -> None:
        """Return to the synthesized defaults and drop errors and drawings."""
        self._data = copy.deepcopy(self._defaults)
        self._errors = {}
        self._surfaces = {}
        logger.info("Form reset to defaults")
        self._notify()

    def submit(self) -> Dict[str, Any]:
        """
        Return the complete value tree.

        Submission is not blocked by validation errors; they are reported in
        the log only.
        """
        if self._errors:
            logger.warning(f"Submitting with {len(self._errors)} validation error(s): "
                           f"{sorted('.'.join(p) for p in self._errors)}")
        else:
            logger.info("Submitting form")
        for callback in list(self._submit_listeners):
            callback(self._data)
        return self._data

    # -- drawing ---------------------------------------------------------

    def surface_for(self, path: Sequence[str]) -> Optional[RegionSurface]:
        """
        Drawing surface for a region-draw leaf, created on first use.

        The surface starts from the leaf's current value and writes every
        change back through set_leaf.
        """
        path = tuple(path)
        if path in self._surfaces:
            return self._surfaces[path]

        node = self.schema.find(path)
        if node is None or node.kind != FieldKind.REGION_DRAW:
            logger.warning(f"No drawing field at {'.'.join(path)}")
            return None

        options = self._drawing_options
        surface = RegionSurface(
            close_threshold=options.get('close_threshold', 10),
            mode=DrawMode(options.get('mode', 'drag')),
            palette=options.get('palette'),
            provisional_color=options.get('provisional_color', '#FF0000'),
        )
        current = self.get_value(path)
        surface.load(current if isinstance(current, list) else [])
        surface.on_change = lambda value: self.set_leaf(path, value)
        self._surfaces[path] = surface
        return surface

    # -- rendering -------------------------------------------------------

    def active_schema(self) -> SchemaNode:
        """The schema narrowed by the current search term."""
        if not self.search_term:
            return self.schema
        return filter_schema(self.schema, self.search_term, self.language)

    def render(self, active_schema: Optional[SchemaNode] = None) -> List[FieldView]:
        """
        Build presentation units for the visible schema.

        Args:
            active_schema: Schema to render; defaults to active_schema()

        Returns:
            FieldViews for the root's children in traversal order
        """
        root = active_schema if active_schema is not None else self.active_schema()
        if not root.is_group:
            return [self._view("", (), root)]
        return [self._view(key, (key,), child) for key, child in root.ordered_children()]

    def _view(self, key: str, path: Path, node: SchemaNode) -> FieldView:
        view = FieldView(
            key=key,
            path=path,
            kind=node.kind,
            title=resolve(node.title, self.language) or key,
            description=resolve(node.description, self.language),
            raw_ui_type=node.raw_ui_type,
            raw_type=node.raw_type,
            multiline=node.multiline,
            required=node.required,
        )
        if node.kind == FieldKind.OBJECT_GROUP:
            view.children = [
                self._view(child_key, path + (child_key,), child)
                for child_key, child in node.ordered_children()
            ]
        else:
            view.value = self.get_value(path)
            view.error = self._errors.get(path)
        return view

    def visible_paths(self) -> List[Path]:
        """Leaf paths shown under the current search term."""
        paths: List[Path] = []

        def collect(views: List[FieldView]) -> None:
            for view in views:
                if view.kind == FieldKind.OBJECT_GROUP:
                    collect(view.children)
                else:
                    paths.append(view.path)

        collect(self.render())
        return paths
