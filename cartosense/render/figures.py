"""Plotly figures for the map and the coordinated bar chart."""

from __future__ import annotations

import copy
from typing import Any

import plotly.graph_objects as go

from cartosense import config
from cartosense.render.schemas import Bar, ChartFrame, ElementStyle, ViewState

BACKGROUND_FILL = "#eeeeee"
BACKGROUND_STROKE = "#ffffff"
GRATICULE_COLOR = "#d9d9d9"


def stepped_colorscale(colors: list[str]) -> list[list[Any]]:
    """Discrete colorscale: integer ``z`` ``i`` in ``[-0.5, n-0.5]`` picks ``colors[i]``."""
    n = len(colors)
    scale: list[list[Any]] = []
    for i, color in enumerate(colors):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale


def format_value(value: float | None) -> str:
    return "No data" if value is None else f"{value:g}"


def plotted_value(bar: Bar, y_domain: tuple[float, float]) -> float:
    """Bar value clamped to the y domain, as in the bar geometry.

    Missing and negative values sit on the baseline.
    """
    if bar.value is None:
        return 0.0
    return min(max(bar.value, 0.0), y_domain[1])


def _transition(view: ViewState) -> dict[str, Any]:
    return {"duration": view.transition_ms, "easing": "cubic-in-out"}


def _background_trace(background: dict[str, Any]) -> go.Choropleth:
    """Reference boundaries: drawn once, no hover, no data."""
    features = copy.deepcopy(background.get("features", []))
    for i, feature in enumerate(features):
        feature["id"] = i
    return go.Choropleth(
        geojson={"type": "FeatureCollection", "features": features},
        locations=list(range(len(features))),
        z=[0] * len(features),
        colorscale=[[0, BACKGROUND_FILL], [1, BACKGROUND_FILL]],
        showscale=False,
        marker_line_color=BACKGROUND_STROKE,
        marker_line_width=0.5,
        hoverinfo="skip",
        name="countries",
    )


def build_map_figure(
    view: ViewState,
    features: list[dict[str, Any]],
    background: dict[str, Any] | None,
    styles: dict[str, ElementStyle],
    key: str = config.KEY_FIELD,
) -> go.Figure:
    """Choropleth of the joined regions over the background boundaries."""
    fig = go.Figure()
    if background and background.get("features"):
        fig.add_trace(_background_trace(background))

    palette = list(dict.fromkeys(
        [config.NO_DATA_COLOR, *config.COLOR_CLASSES, *(r.fill for r in view.regions)]
    ))
    region_styles = [styles[r.element_id] for r in view.regions]
    fig.add_trace(go.Choropleth(
        geojson={"type": "FeatureCollection", "features": features},
        featureidkey=f"properties.{key}",
        locations=[r.key for r in view.regions],
        z=[palette.index(r.fill) for r in view.regions],
        zmin=-0.5,
        zmax=len(palette) - 0.5,
        colorscale=stepped_colorscale(palette),
        showscale=False,
        marker_line_color=[s.stroke for s in region_styles],
        marker_line_width=[s.stroke_width for s in region_styles],
        customdata=[[r.key, r.name or r.key, format_value(r.value)] for r in view.regions],
        hovertemplate=(
            "<b>%{customdata[1]}</b><br>"
            f"{view.attribute}: " "%{customdata[2]}<extra></extra>"
        ),
        name="regions",
    ))

    grid = {"showgrid": True, "dtick": config.GRATICULE_STEP, "gridcolor": GRATICULE_COLOR}
    fig.update_geos(
        projection_type="conic equal area",
        projection_parallels=list(config.PROJECTION_PARALLELS),
        projection_rotation={"lon": config.PROJECTION_CENTER["lon"]},
        center=config.PROJECTION_CENTER,
        lataxis={**grid, "range": list(config.MAP_LAT_RANGE)},
        lonaxis={**grid, "range": list(config.MAP_LON_RANGE)},
        showcoastlines=False,
        showcountries=False,
        showland=False,
        showframe=False,
    )
    fig.update_layout(
        width=config.MAP_WIDTH,
        height=config.MAP_HEIGHT,
        margin=dict(l=0, r=0, t=0, b=0),
        showlegend=False,
        template="plotly_white",
        transition=_transition(view),
        uirevision="map",
    )
    return fig


def build_chart_figure(
    view: ViewState,
    styles: dict[str, ElementStyle],
    frame: ChartFrame | None = None,
) -> go.Figure:
    """Bar chart sorted by descending value, colored like the map.

    Bars carry stable ``ids`` so that plotly tweens each bar to its new slot
    when the expressed attribute changes.
    """
    frame = frame or ChartFrame()
    bars = sorted(view.bars, key=lambda b: b.rank)
    bar_styles = [styles[b.element_id] for b in bars]

    fig = go.Figure(go.Bar(
        ids=[b.element_id for b in bars],
        x=[b.rank for b in bars],
        y=[plotted_value(b, view.y_domain) for b in bars],
        marker=dict(
            color=[b.fill for b in bars],
            line=dict(
                color=[s.stroke for s in bar_styles],
                width=[s.stroke_width for s in bar_styles],
            ),
        ),
        customdata=[[b.key, b.name or b.key, format_value(b.value)] for b in bars],
        hovertemplate=(
            "<b>%{customdata[1]}</b><br>"
            f"{view.attribute}: " "%{customdata[2]}<extra></extra>"
        ),
    ))
    fig.update_layout(
        title=dict(text=view.title, x=0.07, y=0.95),
        width=frame.width,
        height=frame.height,
        margin=dict(l=frame.left_padding + 35, r=frame.right_padding, t=60, b=110),
        xaxis=dict(
            tickvals=[b.rank for b in bars],
            ticktext=[b.name or b.key for b in bars],
            tickangle=-45,
        ),
        yaxis=dict(range=list(view.y_domain)),
        bargap=0.05,
        template="plotly_white",
        transition=_transition(view),
    )
    return fig
