"""
Session state management for the Streamlit schema form app.
Keeps the form engine, language, search term and canvas bookkeeping of one
browser session.
"""

import streamlit as st
from typing import Dict, Any, Optional, Set
from datetime import datetime
import logging

from .form_engine import FormEngine
from .localization import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages Streamlit session state for the schema form app."""

    @staticmethod
    def initialize(default_language: str = DEFAULT_LANGUAGE):
        """Initialize all session state variables with default values."""
        defaults = {
            'engine': None,
            'schema_name': None,
            'language': default_language,
            'search_term': "",
            'last_submission': None,
            'processed_batches': {},
            'last_activity': datetime.now(),
            'session_id': None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if not st.session_state['session_id']:
            st.session_state['session_id'] = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
            logger.info(f"Session initialized: {st.session_state['session_id']}")

    @staticmethod
    def get_engine() -> Optional[FormEngine]:
        """Get the form engine of this session."""
        return st.session_state.get('engine')

    @staticmethod
    def set_engine(engine: FormEngine, schema_name: Optional[str] = None):
        """Install a new form engine; drawing bookkeeping starts over."""
        st.session_state['engine'] = engine
        st.session_state['schema_name'] = schema_name
        st.session_state['processed_batches'] = {}
        st.session_state['last_submission'] = None
        logger.info(f"Form engine installed for schema: {schema_name}")
        SessionManager.update_activity()

    @staticmethod
    def get_schema_name() -> Optional[str]:
        return st.session_state.get('schema_name')

    @staticmethod
    def get_language() -> str:
        """Get the preferred language."""
        return st.session_state.get('language', DEFAULT_LANGUAGE)

    @staticmethod
    def set_language(language: str):
        """Set the preferred language and propagate it to the engine."""
        old_language = st.session_state.get('language')
        if old_language != language:
            logger.info(f"Language changed: {old_language} -> {language}")
            st.session_state['language'] = language
        engine = SessionManager.get_engine()
        if engine is not None:
            engine.set_language(language)

    @staticmethod
    def get_search_term() -> str:
        return st.session_state.get('search_term', "")

    @staticmethod
    def set_search_term(term: str):
        """Set the search term and propagate it to the engine."""
        st.session_state['search_term'] = term
        engine = SessionManager.get_engine()
        if engine is not None:
            engine.set_search_term(term)

    @staticmethod
    def get_last_submission() -> Optional[Dict[str, Any]]:
        return st.session_state.get('last_submission')

    @staticmethod
    def set_last_submission(data: Dict[str, Any]):
        st.session_state['last_submission'] = data
        SessionManager.update_activity()

    @staticmethod
    def is_batch_processed(field_key: str, batch_id: Any) -> bool:
        """Check whether a canvas event batch was already applied for a field."""
        processed: Dict[str, Set[Any]] = st.session_state.get('processed_batches', {})
        return batch_id in processed.get(field_key, set())

    @staticmethod
    def mark_batch_processed(field_key: str, batch_id: Any):
        """Remember that a canvas event batch was applied for a field."""
        processed: Dict[str, Set[Any]] = st.session_state.setdefault('processed_batches', {})
        processed.setdefault(field_key, set()).add(batch_id)

    @staticmethod
    def update_activity():
        """Update last activity timestamp."""
        st.session_state['last_activity'] = datetime.now()

    @staticmethod
    def get_session_id() -> str:
        """Get the session ID."""
        return st.session_state.get('session_id', 'unknown')

    @staticmethod
    def reset_session():
        """Reset the session, keeping the language preference."""
        logger.info(f"Resetting session: {SessionManager.get_session_id()}")
        language = SessionManager.get_language()

        for key in list(st.session_state.keys()):
            del st.session_state[key]

        SessionManager.initialize(language)

    @staticmethod
    def get_session_info() -> Dict[str, Any]:
        """Get session information for debugging."""
        engine = SessionManager.get_engine()
        return {
            'session_id': SessionManager.get_session_id(),
            'schema_name': SessionManager.get_schema_name(),
            'language': SessionManager.get_language(),
            'search_term': SessionManager.get_search_term(),
            'engine_loaded': engine is not None,
            'validation_errors_count': len(engine.errors) if engine is not None else 0,
            'has_submission': SessionManager.get_last_submission() is not None,
        }
