"""
Unit tests for session_manager module.
"""

from unittest.mock import patch

import pytest

from schemaform.form_engine import FormEngine
from schemaform.schema_loader import parse_schema
from schemaform.session_manager import SessionManager
from test_fixtures import SchemaFixtures


@pytest.fixture
def session_state():
    state = {}
    with patch("streamlit.session_state", state):
        yield state


def _engine() -> FormEngine:
    return FormEngine(parse_schema(SchemaFixtures.get("LOGIN_SCHEMA")))


class TestSessionManager:
    """Test class for session state handling."""

    def test_initialize_sets_defaults(self, session_state):
        SessionManager.initialize("ja")

        assert session_state['engine'] is None
        assert session_state['language'] == "ja"
        assert session_state['search_term'] == ""
        assert session_state['processed_batches'] == {}
        assert session_state['session_id'].startswith("session_")

    def test_initialize_keeps_existing_values(self, session_state):
        session_state['language'] = "ja"
        session_state['session_id'] = "session_existing"

        SessionManager.initialize("en")

        assert session_state['language'] == "ja"
        assert SessionManager.get_session_id() == "session_existing"

    def test_set_engine_resets_bookkeeping(self, session_state):
        SessionManager.initialize()
        SessionManager.mark_batch_processed("roi", "b1")
        SessionManager.set_last_submission({"a": 1})

        engine = _engine()
        SessionManager.set_engine(engine, "login.json")

        assert SessionManager.get_engine() is engine
        assert SessionManager.get_schema_name() == "login.json"
        assert SessionManager.get_last_submission() is None
        assert not SessionManager.is_batch_processed("roi", "b1")

    def test_language_propagates_to_engine(self, session_state):
        SessionManager.initialize()
        engine = _engine()
        SessionManager.set_engine(engine)

        SessionManager.set_language("ja")

        assert SessionManager.get_language() == "ja"
        assert engine.language == "ja"

    def test_search_term_propagates_to_engine(self, session_state):
        SessionManager.initialize()
        engine = _engine()
        SessionManager.set_engine(engine)

        SessionManager.set_search_term(" color ")

        assert SessionManager.get_search_term() == " color "
        assert engine.search_term == "color"

    def test_batch_tracking_per_field(self, session_state):
        SessionManager.initialize()

        assert not SessionManager.is_batch_processed("roi", "1-1")
        SessionManager.mark_batch_processed("roi", "1-1")

        assert SessionManager.is_batch_processed("roi", "1-1")
        assert not SessionManager.is_batch_processed("zones", "1-1")

    def test_reset_session_keeps_language(self, session_state):
        SessionManager.initialize()
        SessionManager.set_language("ja")
        SessionManager.set_engine(_engine(), "login.json")

        SessionManager.reset_session()

        assert SessionManager.get_engine() is None
        assert SessionManager.get_language() == "ja"

    def test_session_info(self, session_state):
        SessionManager.initialize()
        engine = _engine()
        engine.set_leaf(("loginCredentials", "username"), "ab")
        SessionManager.set_engine(engine, "login.json")

        info = SessionManager.get_session_info()

        assert info['schema_name'] == "login.json"
        assert info['engine_loaded'] is True
        assert info['validation_errors_count'] == 1
        assert info['has_submission'] is False
