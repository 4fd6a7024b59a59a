"""
Streamlit rendering of form engine output.
Turns FieldView trees into widgets and routes widget changes back into the
FormEngine.
"""

import streamlit as st
from typing import Any, Dict, List
import logging

import pandas as pd

from .canvas_component import region_canvas
from .error_handler import ErrorHandler, ErrorType
from .form_engine import FieldView, FormEngine
from .schema_model import FieldKind
from .session_manager import SessionManager

logger = logging.getLogger(__name__)

WIDGET_PREFIXES = ("field_", "list_", "canvas_", "regions_")


def _dotted(view: FieldView) -> str:
    return ".".join(view.path)


def _label(view: FieldView) -> str:
    return f"{view.title} *" if view.required else view.title


class FormView:
    """Renders a form engine with Streamlit widgets."""

    @staticmethod
    def render_form(engine: FormEngine, drawing: Dict[str, Any]) -> None:
        """
        Render every visible field of the engine.

        Args:
            engine: Form engine of the session
            drawing: 'drawing' configuration section (canvas size, mode)
        """
        views = engine.render()
        if not views:
            st.info("No fields match the search term.")
            return
        for view in views:
            FormView._render_field(engine, view, drawing)

    @staticmethod
    def clear_widget_state() -> None:
        """Forget widget state so widgets pick up engine values again."""
        for key in list(st.session_state.keys()):
            if str(key).startswith(WIDGET_PREFIXES):
                del st.session_state[key]

    @staticmethod
    def _render_field(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        """Render a single field based on its kind."""
        renderers = {
            FieldKind.OBJECT_GROUP: FormView._render_group,
            FieldKind.STRING_TEXT: FormView._render_text_input,
            FieldKind.STRING_PASSWORD: FormView._render_text_input,
            FieldKind.BOOLEAN_CHECKBOX: FormView._render_checkbox,
            FieldKind.STRING_LIST: FormView._render_string_list,
            FieldKind.REGION_DRAW: FormView._render_region_draw,
        }
        renderer = renderers.get(view.kind, FormView._render_unsupported)
        try:
            renderer(engine, view, drawing)
        except Exception as e:
            ErrorHandler.handle_error(e, f"rendering field {_dotted(view)}", ErrorType.RENDERING)

    @staticmethod
    def _render_group(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        with st.container(border=True):
            st.markdown(f"**{_label(view)}**")
            if view.description:
                st.caption(view.description)
            for child in view.children:
                FormView._render_field(engine, child, drawing)

    @staticmethod
    def _render_text_input(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        """Render text, text area or password input."""
        key = f"field_{_dotted(view)}"
        path = view.path

        def on_change() -> None:
            engine.set_leaf(path, st.session_state[key])

        kwargs = {
            'label': _label(view),
            'value': "" if view.value is None else str(view.value),
            'help': view.description or None,
            'key': key,
            'on_change': on_change,
        }
        if view.multiline:
            st.text_area(height=100, **kwargs)
        elif view.kind == FieldKind.STRING_PASSWORD:
            st.text_input(type="password", **kwargs)
        else:
            st.text_input(**kwargs)

        if view.error:
            st.error(view.error)

    @staticmethod
    def _render_checkbox(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        key = f"field_{_dotted(view)}"
        path = view.path

        def on_change() -> None:
            engine.set_leaf(path, st.session_state[key])

        st.checkbox(_label(view), value=bool(view.value), key=key, on_change=on_change)
        if view.description:
            st.caption(view.description)

    @staticmethod
    def _render_string_list(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        """
        String list editor using Streamlit's data_editor for in-table editing.

        The editor is fed the list as it was when the editor widget appeared;
        data_editor keeps the user's edits on top of that frame. A widget that
        was unmounted (for example hidden by the search) starts again from
        the current value.
        """
        dotted = _dotted(view)
        source_key = f"list_{dotted}_source"
        editor_key = f"list_{dotted}_editor"
        if source_key not in st.session_state or editor_key not in st.session_state:
            st.session_state[source_key] = list(view.value or [])

        data_source = pd.DataFrame({"value": pd.Series(st.session_state[source_key], dtype="object")})

        st.markdown(f"**{_label(view)}**")
        if view.description:
            st.caption(view.description)

        edited_df = st.data_editor(
            data_source,
            column_config={"value": st.column_config.TextColumn(label=view.title, required=False)},
            num_rows="dynamic",
            use_container_width=True,
            hide_index=True,
            key=editor_key,
        )

        updated_values = FormView._collect_list_values(edited_df)
        if updated_values != list(view.value or []):
            engine.set_leaf(view.path, updated_values)

    @staticmethod
    def _collect_list_values(edited_df: pd.DataFrame) -> List[str]:
        """Read the edited column, dropping rows the user left empty."""
        raw_values = edited_df["value"].tolist() if "value" in edited_df else []
        values: List[str] = []
        for raw_value in raw_values:
            if raw_value is None or (isinstance(raw_value, float) and pd.isna(raw_value)):
                continue
            values.append(str(raw_value))
        return values

    @staticmethod
    def _render_region_draw(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        """Render the drawing canvas with its region list and controls."""
        dotted = _dotted(view)
        surface = engine.surface_for(view.path)
        if surface is None:
            FormView._render_unsupported(engine, view, drawing)
            return

        st.markdown(f"**{_label(view)}**")
        if view.description:
            st.caption(view.description)

        col_canvas, col_list = st.columns([3, 1])

        with col_canvas:
            batch = region_canvas(
                surface.shapes(),
                width=int(drawing.get('canvas_width', 400)),
                height=int(drawing.get('canvas_height', 200)),
                mode=surface.mode.value,
                key=f"canvas_{dotted}",
            )
            if isinstance(batch, dict) and not SessionManager.is_batch_processed(dotted, batch.get('batch_id')):
                SessionManager.mark_batch_processed(dotted, batch.get('batch_id'))
                try:
                    surface.apply_events(batch.get('events') or [])
                except ValueError as e:
                    ErrorHandler.handle_error(e, f"draw events for {dotted}", ErrorType.DRAWING)
                else:
                    st.rerun()

        with col_list:
            summaries = surface.summaries()
            selected = st.radio(
                "Regions",
                options=list(range(len(summaries))),
                format_func=lambda index: summaries[index],
                index=surface.selected_index,
                key=f"regions_{dotted}_{len(summaries)}",
            )
            surface.select(selected)
            st.button("Remove Selected", key=f"regions_{dotted}_remove",
                      on_click=surface.remove_selected, disabled=selected is None)
            st.button("Clear", key=f"regions_{dotted}_clear", on_click=surface.clear)

    @staticmethod
    def _render_unsupported(engine: FormEngine, view: FieldView, drawing: Dict[str, Any]) -> None:
        st.error(f"Unsupported field: {view.key} ({view.raw_ui_type}, {view.raw_type})")
