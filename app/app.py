"""vizlessons - Reactive explorers and lesson gallery"""
import matplotlib.pyplot as plt
import streamlit as st
from pathlib import Path

from vizlessons.config import load_settings
from vizlessons.dashboard import (
    GAPMINDER_METRICS,
    ExplorerState,
    continent_choices,
    continent_summary,
    default_state,
    explorer_chart,
    filter_gapminder,
    filter_regions,
    murder_rates,
    murders_chart,
    region_summary,
    year_choices,
)
from vizlessons.datasets import DatasetError, load_dataset
from vizlessons.plots import draw_plot
from vizlessons.samples import make_sample

st.set_page_config(
    page_title="Data Visualization Lessons",
    page_icon="📊",
    layout="wide"
)


@st.cache_data(show_spinner="Loading data...")
def load_data(name: str, use_samples: bool):
    """Read a dataset once per session; reruns reuse the cached frame."""
    if use_samples:
        return make_sample(name)
    return load_dataset(name, settings=load_settings())


def get_data(name: str, use_samples: bool):
    try:
        return load_data(name, use_samples)
    except (DatasetError, FileNotFoundError) as e:
        st.error(f"Could not load `{name}`: {e}")
        st.info("Tick **Use synthetic sample data** in the sidebar to explore offline.")
        return None


def render_gapminder_explorer(use_samples: bool):
    """Every widget change reruns this function with the new values."""
    import sys
    app_dir = Path(__file__).parent
    if str(app_dir) not in sys.path:
        sys.path.insert(0, str(app_dir))
    from ui_components.header import render_explorer_header

    st.header("Gapminder explorer")
    df = get_data("gapminder", use_samples)
    if df is None:
        return

    years = year_choices(df)
    continents = continent_choices(df)
    defaults = default_state(df)
    metrics = list(GAPMINDER_METRICS)

    col1, col2 = st.columns([2, 3])
    with col1:
        year = st.select_slider("Year", options=years, value=defaults.year)
    with col2:
        chosen = st.multiselect("Continents", continents, default=continents)

    col3, col4, col5, col6 = st.columns(4)
    with col3:
        x = st.selectbox("X axis", metrics, index=metrics.index(defaults.x), format_func=GAPMINDER_METRICS.get)
    with col4:
        y = st.selectbox("Y axis", metrics, index=metrics.index(defaults.y), format_func=GAPMINDER_METRICS.get)
    with col5:
        log_x = st.toggle("Log x axis", value=x in ("gdp_per_capita", "population"))
    with col6:
        sized = st.toggle("Size by population", value=True)

    state = ExplorerState(year=year, continents=chosen, x=x, y=y, log_x=log_x, size_by_population=sized)
    shown = filter_gapminder(df, state.year, state.continents)
    render_explorer_header(
        rows=len(shown),
        groups=shown["continent"].nunique() if not shown.empty else 0,
        group_label="Continents",
        detail=f"Year {state.year}",
    )

    if shown.dropna(subset=[x, y]).empty:
        st.info("No countries have both values for this year and selection.")
        return

    fig = draw_plot(explorer_chart(df, state))
    st.pyplot(fig)
    plt.close(fig)

    st.subheader("Summary by continent")
    summary = continent_summary(shown, y)
    st.dataframe(summary, hide_index=True, width="stretch")


def render_murders_explorer(use_samples: bool):
    import sys
    app_dir = Path(__file__).parent
    if str(app_dir) not in sys.path:
        sys.path.insert(0, str(app_dir))
    from ui_components.header import render_explorer_header

    st.header("US murders explorer")
    df = get_data("murders", use_samples)
    if df is None:
        return

    regions = sorted(df["region"].unique().tolist())
    col1, col2 = st.columns([3, 1])
    with col1:
        chosen = st.multiselect("Regions", regions, default=regions)
    with col2:
        labels = st.toggle("Label states", value=True)

    rates = filter_regions(murder_rates(df), chosen)
    render_explorer_header(
        rows=len(rates),
        groups=rates["region"].nunique(),
        group_label="Regions",
        detail=f"Median rate {rates['rate'].median():.2f}" if not rates.empty else "No states",
    )
    if rates.empty:
        st.info("Select at least one region.")
        return

    fig = draw_plot(murders_chart(df, regions=chosen, labels=labels))
    st.pyplot(fig)
    plt.close(fig)

    col3, col4 = st.columns(2)
    with col3:
        st.markdown("**Highest murder rates**")
        table = rates[["state", "region", "rate"]].head(10).copy()
        table.columns = ["State", "Region", "Per 100,000"]
        st.dataframe(table, hide_index=True, width="stretch")
    with col4:
        st.markdown("**Regions**")
        st.dataframe(region_summary(df), hide_index=True, width="stretch")


def render_gallery(output_dir: Path):
    import sys
    app_dir = Path(__file__).parent
    if str(app_dir) not in sys.path:
        sys.path.insert(0, str(app_dir))
    from ui_components.plots import discover_lessons, render_lesson_figures

    st.header("Lesson gallery")
    lessons = discover_lessons(output_dir)
    if not lessons:
        st.warning(f"No rendered lessons under `{output_dir}`. Run `vizlessons render --all` first.")
        return

    selected = st.selectbox("Lesson", list(lessons), format_func=lambda n: lessons[n].title)
    manifest = lessons[selected]
    lesson_path = Path(manifest.lesson_dir)

    render_lesson_figures(lesson_path, manifest)

    md_path = Path(manifest.lesson_md)
    if md_path.exists():
        with st.expander("Lesson text"):
            st.markdown(md_path.read_text(encoding="utf-8"))


def main():
    st.title("📊 Data Visualization Lessons")
    st.caption("Reactive explorers built on the same plotnine charts as the lessons")

    settings = load_settings()

    st.sidebar.header("Data")
    use_samples = st.sidebar.checkbox("Use synthetic sample data", value=settings.offline)
    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Output dir:** `{settings.output_dir}`")

    tab1, tab2, tab3 = st.tabs([
        "Gapminder",
        "US murders",
        "Lesson gallery",
    ])

    with tab1:
        render_gapminder_explorer(use_samples)

    with tab2:
        render_murders_explorer(use_samples)

    with tab3:
        render_gallery(settings.output_dir)


if __name__ == "__main__":
    main()
