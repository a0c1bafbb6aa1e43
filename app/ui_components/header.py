"""Shared explorer header component."""
import streamlit as st


def render_explorer_header(rows: int, groups: int, group_label: str, detail: str = ""):
    """
    Render a consistent header above each explorer's outputs.

    Args:
        rows: Number of rows currently shown
        groups: Number of distinct groups in the selection
        group_label: Name of the grouping (e.g. "Continents")
        detail: Free-text description of the current selection
    """
    st.markdown("---")

    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Rows shown", f"{rows:,}")

    with col2:
        st.metric(group_label, groups)

    with col3:
        st.metric("Selection", detail or "All")

    st.markdown("---")
