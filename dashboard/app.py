"""CartoSense — Streamlit map and coordinated bar chart."""

from __future__ import annotations

import io
import logging

import pandas as pd
import streamlit as st

from cartosense import config
from cartosense.ingestion.loaders import DatasetLoadError, LoadedDatasets, load_datasets
from cartosense.pipeline import MapBundle, build_bundle
from cartosense.render.figures import build_chart_figure, build_map_figure

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="CartoSense — Regions de France",
    page_icon="🗺️",
    layout="wide",
)


@st.cache_data(ttl=600)
def load_inputs() -> LoadedDatasets:
    """Fetch the stats table and both boundary sets (cached 10 min)."""
    return load_datasets()


def get_bundle() -> MapBundle | None:
    if "bundle" not in st.session_state:
        try:
            datasets = load_inputs()
        except DatasetLoadError as exc:
            logger.error("Dataset loading failed: %s", exc)
            st.error(f"Impossible de charger les donnees : {exc}")
            return None
        st.session_state["bundle"] = build_bundle(datasets)
    return st.session_state["bundle"]


def download_button_csv(df: pd.DataFrame, filename: str, label: str = "Telecharger CSV"):
    """Render a CSV download button."""
    buf = io.BytesIO()
    df.to_csv(buf, index=False)
    st.download_button(label, buf.getvalue(), file_name=filename, mime="text/csv")


def download_button_excel(df: pd.DataFrame, filename: str, label: str = "Telecharger Excel"):
    """Render an Excel download button."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name="data")
    st.download_button(label, buf.getvalue(), file_name=filename, mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


# ---------------------------------------------------------------------------
# Callbacks (run before the script reruns)
# ---------------------------------------------------------------------------


def on_attribute_change():
    attribute = st.session_state.get("attribute")
    if attribute is None:
        return
    bundle: MapBundle = st.session_state["bundle"]
    bundle.select(attribute)
    layer = bundle.interaction
    if layer.highlighted is not None:
        # Refresh the label with the newly expressed value
        layer.highlight(bundle.view, layer.highlighted)


def selected_key(chart_key: str) -> str | None:
    event = st.session_state.get(chart_key) or {}
    points = (event.get("selection") or {}).get("points") or []
    for point in points:
        # Background points carry no customdata
        customdata = point.get("customdata")
        if customdata:
            return str(customdata[0])
    return None


def on_chart_select(chart_key: str):
    """A point selection enters an element; an empty selection leaves it."""
    bundle: MapBundle = st.session_state["bundle"]
    layer = bundle.interaction
    key = selected_key(chart_key)
    if layer.highlighted is not None and layer.highlighted != key:
        layer.dehighlight(bundle.view, layer.highlighted)
    if key is not None:
        layer.highlight(bundle.view, key)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


def page_map():
    st.title("🗺️ Regions de France")

    bundle = get_bundle()
    if bundle is None:
        return

    st.selectbox(
        "Attribut",
        list(bundle.session.attributes),
        index=None,
        placeholder="Select Attribute",
        key="attribute",
        on_change=on_attribute_change,
    )

    view = bundle.view
    styles = bundle.interaction.styles

    col_map, col_chart = st.columns([0.54, 0.46])
    with col_map:
        st.plotly_chart(
            build_map_figure(view, bundle.features, bundle.background, styles),
            key="map_chart",
            on_select=lambda: on_chart_select("map_chart"),
            selection_mode="points",
        )
    with col_chart:
        st.plotly_chart(
            build_chart_figure(view, styles, bundle.coordinator.frame),
            key="bar_chart",
            on_select=lambda: on_chart_select("bar_chart"),
            selection_mode="points",
        )

    label = bundle.interaction.label
    if label is not None:
        st.markdown(
            f'<div class="infolabel" id="{label.element_id}">{label.html}</div>',
            unsafe_allow_html=True,
        )

    st.subheader("Donnees")
    st.dataframe(bundle.records, use_container_width=True, hide_index=True)
    col1, col2 = st.columns(2)
    with col1:
        download_button_csv(bundle.records, "regions.csv")
    with col2:
        download_button_excel(bundle.records, "regions.xlsx")


page_map()
