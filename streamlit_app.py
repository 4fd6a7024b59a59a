"""
Main Streamlit application for the schema form app.
Renders an input form from a JSON/YAML schema document, including canvas
fields for drawing regions, and shows the collected value live.
"""

import streamlit as st
import json
import logging

from schemaform.config_loader import load_config, get_config_value, validate_config
from schemaform.diff_utils import calculate_changes, format_changes, has_changes
from schemaform.error_handler import ErrorHandler, ErrorType
from schemaform.form_engine import FormEngine
from schemaform.form_view import FormView
from schemaform.localization import available_languages
from schemaform.schema_loader import (
    create_fallback_schema,
    get_configured_schema,
    list_available_schemas,
    load_schema,
    parse_schema,
)
from schemaform.session_manager import SessionManager

BUILTIN_SCHEMA = "(built-in example)"


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


# Configure logging dynamically from config
try:
    log_level_str = get_config_value('logging', 'level', 'INFO')
    log_format = get_config_value('logging', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logging.basicConfig(level=get_logging_level(log_level_str), format=log_format)
    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured to level: {log_level_str}")
except Exception as e:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)
    logger.error(f"Failed to configure logging from config: {e}, using INFO level")

config = load_config()
if not validate_config(config):
    logger.warning("Configuration failed validation, some settings may fall back to defaults")

st.set_page_config(
    page_title=get_config_value('ui', 'page_title', 'Schema Form'),
    page_icon="📝",
    layout="wide",
)


def main():
    """Main application entry point."""
    try:
        SessionManager.initialize(get_config_value('ui', 'default_language', 'en'))
        render_sidebar()
        render_main_content()
    except Exception as e:
        ErrorHandler.handle_error(e, "application startup", ErrorType.SYSTEM)
        for hint in ErrorHandler.recovery_hints("application startup"):
            st.info(hint)


def load_engine(schema_name: str) -> None:
    """Load a schema document and install a fresh form engine for it."""
    if schema_name == BUILTIN_SCHEMA:
        raw_schema = create_fallback_schema()
    else:
        raw_schema = load_schema(schema_name)
        if raw_schema is None:
            st.warning(f"Schema '{schema_name}' could not be loaded, using the configured schema instead.")
            for hint in ErrorHandler.recovery_hints("schema"):
                st.caption(hint)
            raw_schema = get_configured_schema()

    engine = FormEngine(
        parse_schema(raw_schema),
        language=SessionManager.get_language(),
        drawing_options=config.get('drawing', {}),
    )
    engine.set_search_term(SessionManager.get_search_term())
    engine.on_submit(SessionManager.set_last_submission)
    FormView.clear_widget_state()
    SessionManager.set_engine(engine, schema_name)


def render_sidebar():
    """Schema, language and search controls."""
    with st.sidebar:
        st.title(get_config_value('app', 'name', 'Schema Form Studio'))

        schema_options = list_available_schemas() + [BUILTIN_SCHEMA]
        primary = get_config_value('schema', 'primary_schema', BUILTIN_SCHEMA)
        default_index = schema_options.index(primary) if primary in schema_options else 0
        schema_name = st.selectbox("Schema", schema_options, index=default_index)

        if SessionManager.get_engine() is None or SessionManager.get_schema_name() != schema_name:
            load_engine(schema_name)

        engine = SessionManager.get_engine()

        languages = list(get_config_value('ui', 'languages', ['en']))
        for lang in available_languages(engine.schema):
            if lang not in languages:
                languages.append(lang)
        current = SessionManager.get_language()
        language = st.selectbox(
            "Language",
            languages,
            index=languages.index(current) if current in languages else 0,
        )
        SessionManager.set_language(language)

        term = st.text_input("Search fields", value=SessionManager.get_search_term())
        SessionManager.set_search_term(term)
        if term:
            st.caption(f"{len(engine.visible_paths())} matching field(s)")

        st.divider()
        st.caption(f"Session: {SessionManager.get_session_id()}")
        if st.button("New session"):
            SessionManager.reset_session()
            st.rerun()

        if get_config_value('app', 'debug', False):
            with st.expander("Session info"):
                st.json(SessionManager.get_session_info())


def render_main_content():
    """Form on the left, live value and changes on the right."""
    engine = SessionManager.get_engine()
    drawing = config.get('drawing', {})

    col_form, col_preview = st.columns([3, 2])

    with col_form:
        st.subheader("Form")
        FormView.render_form(engine, drawing)

        col_submit, col_reset = st.columns(2)
        with col_submit:
            submitted = st.button("Submit", type="primary")
        with col_reset:
            if st.button("Reset"):
                engine.reset()
                FormView.clear_widget_state()
                st.rerun()

        if submitted:
            data = engine.submit()
            logger.info(f"Form submitted with data: {json.dumps(data, ensure_ascii=False)}")
            if engine.has_errors():
                st.warning("Submitted with validation errors; they are advisory only.")
            else:
                st.success("Form submitted.")

    with col_preview:
        st.subheader("Live Value")
        st.json(engine.data)

        changes = calculate_changes(engine.defaults, engine.data)
        st.subheader("Changes")
        if has_changes(changes):
            for line in format_changes(changes):
                st.text(line)
        else:
            st.caption("No changes from the defaults.")

        submission = SessionManager.get_last_submission()
        if submission is not None:
            st.subheader("Last Submission")
            st.json(submission)


if __name__ == "__main__":
    main()
