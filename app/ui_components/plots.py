"""Lesson gallery rendering utilities."""
import streamlit as st
from pathlib import Path
from collections import defaultdict

from vizlessons.models import RenderManifest
from vizlessons.pipeline import load_manifest


def discover_lessons(output_dir: Path) -> dict:
    """Scan <output_dir>/<lesson>/manifest.json for rendered lessons."""
    lessons = {}
    if not output_dir.exists():
        return lessons

    for lesson_dir in sorted(output_dir.iterdir()):
        if lesson_dir.is_dir() and (lesson_dir / "manifest.json").exists():
            manifest = load_manifest(lesson_dir)
            lessons[manifest.lesson] = manifest
    return lessons


def render_lesson_figures(lesson_path: Path, manifest: RenderManifest) -> bool:
    """
    Render a lesson's figures with a selection or grid view.

    Args:
        lesson_path: Path to the lesson directory containing figures/
        manifest: The lesson's manifest

    Returns:
        True if figures were found and rendered, False otherwise
    """
    figures = [f for f in manifest.figures if (lesson_path / f.path).exists()]
    if not figures:
        st.info("No figures rendered for this lesson.")
        return False

    by_kind = defaultdict(list)
    for fig in figures:
        by_kind["Compound figures" if fig.kind == "composition" else "Charts"].append(fig)

    st.markdown(f"**{len(figures)} figures available**")

    view_mode = st.radio(
        "View mode:",
        ["Select Figure", "Grid View"],
        horizontal=True,
        key=f"figure_view_mode_{manifest.lesson}"
    )

    if view_mode == "Select Figure":
        by_name = {f.name: f for f in figures}
        selected = st.selectbox(
            "Figure:",
            list(by_name),
            format_func=lambda n: by_name[n].title,
            key=f"selected_figure_{manifest.lesson}"
        )
        if selected:
            fig = by_name[selected]
            st.image(str(lesson_path / fig.path), caption=fig.title, width="stretch")
    else:
        for kind, items in sorted(by_kind.items()):
            st.markdown(f"**{kind}**")
            num_cols = min(len(items), 2)
            cols = st.columns(num_cols)
            for i, fig in enumerate(items):
                with cols[i % num_cols]:
                    st.image(str(lesson_path / fig.path), caption=fig.title, width="stretch")

    return True
