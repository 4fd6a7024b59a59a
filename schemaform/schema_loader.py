"""
Schema loader for the schema form app.
Reads JSON/YAML schema documents and converts them into SchemaNode trees.
"""

import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging

from .config_loader import load_config
from .exceptions import SchemaLoadError, log_error_details
from .schema_model import FieldKind, ITEM_KINDS, LengthConstraints, SchemaNode, STRING_KINDS, resolve_kind

logger = logging.getLogger(__name__)

SCHEMA_SUFFIXES = ('.json', '.yaml', '.yml')

FALLBACK_SCHEMA: Dict[str, Any] = {
    "$schema": "https://awl.co.jp/schema/v1/setting_schema.json",
    "type": "object",
    "propertyOrder": ["loginCredentials", "colors", "roi", "rememberMe"],
    "properties": {
        "loginCredentials": {
            "title": {"en": "Login Credentials", "ja": "ログイン情報"},
            "description": {"en": "Please enter user credentials", "ja": "ユーザー情報を入力してください"},
            "type": "object",
            "x-ui-type": "group",
            "properties": {
                "username": {
                    "title": {"en": "Username", "ja": "ユーザー名"},
                    "type": "string",
                    "x-ui-type": "text",
                    "default": "",
                    "minLength": 3,
                    "maxLength": 8,
                },
                "password": {
                    "title": {"en": "Password", "ja": "パスワード"},
                    "type": "string",
                    "x-ui-type": "password",
                },
            },
        },
        "colors": {
            "title": {"en": "Favorite Colors", "ja": "好きな色"},
            "description": {"en": "Pick some colors you like", "ja": "好きな色を選んでください"},
            "type": "array",
            "x-ui-type": "list",
            "items": {"type": "string"},
        },
        "roi": {
            "title": {"en": "Region of Interest", "ja": "関心のある地域"},
            "description": {"en": "Draw ROI", "ja": "関心領域の描画"},
            "type": "array",
            "x-ui-type": "draw",
            "items": {
                "type": "array",
                "items": {"type": "number"},
                "minItems": 2,
                "maxItems": 2,
            },
        },
        "rememberMe": {
            "title": {"en": "Remember Me", "ja": "私を覚えてますか"},
            "type": "boolean",
            "x-ui-type": "checkbox",
            "default": False,
        },
    },
    "required": ["loginCredentials"],
}


def _is_root_object(raw: Dict[str, Any]) -> bool:
    return raw.get('type') == 'object' and 'x-ui-type' not in raw and isinstance(raw.get('properties'), dict)


def _parse_constraints(raw: Dict[str, Any]) -> Optional[LengthConstraints]:
    """Extract minLength/maxLength, ignoring values that are not integers."""
    limits: Dict[str, int] = {}
    for source, target in (('minLength', 'min_length'), ('maxLength', 'max_length')):
        if source not in raw:
            continue
        value = raw[source]
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            limits[target] = value
        else:
            logger.warning(f"Ignoring invalid {source} value: {value!r}")
    if not limits:
        return None
    return LengthConstraints(**limits)


def parse_schema(raw: Any, required: bool = False, is_root: bool = True) -> SchemaNode:
    """
    Convert a raw schema document (or one of its entries) into a SchemaNode.

    Entries whose ui-type/type pair does not resolve become UNSUPPORTED nodes;
    they keep their raw types so the form can report them.

    Args:
        raw: Schema document or property entry
        required: Whether the parent's ``required`` list names this entry
        is_root: Whether ``raw`` is the document root; only the root may be a
            group without ``x-ui-type: group``

    Returns:
        SchemaNode tree
    """
    if not isinstance(raw, dict):
        logger.warning(f"Schema entry is not a mapping: {type(raw).__name__}")
        return SchemaNode(kind=FieldKind.UNSUPPORTED, required=required)

    ui_type = raw.get('x-ui-type')
    type_ = raw.get('type')

    if is_root and _is_root_object(raw):
        kind = FieldKind.OBJECT_GROUP
    else:
        kind = resolve_kind(ui_type, type_)

    common: Dict[str, Any] = {
        'kind': kind,
        'title': raw.get('title'),
        'description': raw.get('description'),
        'raw_ui_type': ui_type,
        'raw_type': type_,
        'required': required,
    }
    if 'default' in raw:
        common['default'] = raw['default']
        common['has_default'] = True

    if kind == FieldKind.OBJECT_GROUP:
        properties = raw.get('properties') or {}
        if not isinstance(properties, dict):
            logger.warning("Group 'properties' must be a mapping, treating as empty")
            properties = {}
        required_keys = raw.get('required') or []
        children = {
            key: parse_schema(child, required=key in required_keys, is_root=False)
            for key, child in properties.items()
        }
        order = raw.get('propertyOrder')
        if order is not None and not isinstance(order, list):
            logger.warning("'propertyOrder' must be a list, falling back to natural order")
            order = None
        elif order is not None:
            order = [key for key in order if isinstance(key, str)]
        # Defaults on groups are ignored; their value is built from children.
        common.pop('default', None)
        common.pop('has_default', None)
        return SchemaNode(children=children, order=order, **common)

    if kind in STRING_KINDS:
        common['constraints'] = _parse_constraints(raw)
        common['multiline'] = ui_type == 'textarea'

    if kind in ITEM_KINDS:
        common['item_kind'] = ITEM_KINDS[kind]

    return SchemaNode(**common)


def validate_schema(schema: Any) -> bool:
    """
    Validate the structure of a raw schema document.

    Args:
        schema: Schema dictionary to validate

    Returns:
        True if schema is valid, False otherwise
    """
    if not isinstance(schema, dict):
        logger.error("Schema must be a dictionary")
        return False

    if schema.get('type') != 'object':
        logger.error("Schema root must declare type 'object'")
        return False

    properties = schema.get('properties')
    if not isinstance(properties, dict):
        logger.error("Schema must contain a 'properties' mapping")
        return False

    order = schema.get('propertyOrder')
    if order is not None and not isinstance(order, list):
        logger.error("Schema 'propertyOrder' must be a list")
        return False

    for field_name, field_config in properties.items():
        if not isinstance(field_config, dict):
            logger.error(f"Field '{field_name}' config must be a dictionary")
            return False

    return True


def get_schemas_dir() -> Path:
    """Directory holding schema documents, from configuration."""
    return Path(load_config().get('schema', {}).get('schemas_dir', 'schemas'))


def read_schema_document(full_path: Path) -> Dict[str, Any]:
    """
    Read and check one schema document.

    Raises:
        SchemaLoadError: If the file is missing, unreadable or malformed
    """
    if not full_path.exists():
        raise SchemaLoadError(full_path, message=f"Schema file not found: {full_path}")

    suffix = full_path.suffix.lower()
    if suffix not in SCHEMA_SUFFIXES:
        raise SchemaLoadError(full_path, message=f"Unsupported schema file format: {suffix}")

    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            if suffix == '.json':
                schema = json.load(f)
            else:
                schema = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
        raise SchemaLoadError(full_path, e) from e

    if not validate_schema(schema):
        raise SchemaLoadError(full_path, message=f"Invalid schema structure in {full_path}")

    return schema


def load_schema(schema_path: str, schemas_dir: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """
    Load a schema from a YAML or JSON file.

    Args:
        schema_path: Path to schema file (relative to the schemas directory)
        schemas_dir: Directory override, defaults to the configured one

    Returns:
        Schema dictionary or None if loading fails
    """
    full_path = (schemas_dir or get_schemas_dir()) / schema_path
    try:
        schema = read_schema_document(full_path)
    except SchemaLoadError as e:
        log_error_details(e)
        return None

    logger.info(f"Successfully loaded schema: {schema_path}")
    return schema


def get_configured_schema(schemas_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Get the schema specified in the configuration.

    Returns:
        Schema dictionary (never None - returns the built-in schema if the
        configured files cannot be loaded)
    """
    schema_config = load_config().get('schema', {})
    primary_schema = schema_config.get('primary_schema', 'setting_schema.json')
    fallback_schema = schema_config.get('fallback_schema', 'setting_schema.json')

    schema = load_schema(primary_schema, schemas_dir)
    if schema:
        logger.info(f"Using primary schema: {primary_schema}")
        return schema

    logger.warning(f"Primary schema {primary_schema} not found, trying fallback: {fallback_schema}")
    schema = load_schema(fallback_schema, schemas_dir)
    if schema:
        logger.info(f"Using fallback schema: {fallback_schema}")
        return schema

    logger.error("No valid schemas found, using built-in schema")
    return create_fallback_schema()


def create_fallback_schema() -> Dict[str, Any]:
    """Return a copy of the built-in example schema."""
    return json.loads(json.dumps(FALLBACK_SCHEMA))


def list_available_schemas(schemas_dir: Optional[Path] = None) -> List[str]:
    """
    List schema documents in the schemas directory.

    Returns:
        Sorted file names with a supported suffix
    """
    directory = schemas_dir or get_schemas_dir()
    if not directory.is_dir():
        logger.warning(f"Schemas directory not found: {directory}")
        return []
    return sorted(
        path.name for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in SCHEMA_SUFFIXES
    )
