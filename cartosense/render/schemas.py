"""Pydantic models describing the rendered visual state."""

from __future__ import annotations

from html import escape

from pydantic import BaseModel

from cartosense import config

# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class ElementStyle(BaseModel):
    stroke: str
    stroke_width: float

    model_config = {"frozen": True}


DEFAULT_REGION_STYLE = ElementStyle(stroke="#000", stroke_width=0.5)
DEFAULT_BAR_STYLE = ElementStyle(stroke="#fff", stroke_width=0.0)
HIGHLIGHT_STYLE = ElementStyle(stroke="blue", stroke_width=2.0)


# ---------------------------------------------------------------------------
# Chart frame
# ---------------------------------------------------------------------------


class ChartFrame(BaseModel):
    width: float = config.CHART_WIDTH
    height: float = config.CHART_HEIGHT
    left_padding: float = config.CHART_LEFT_PADDING
    right_padding: float = config.CHART_RIGHT_PADDING
    top_bottom_padding: float = config.CHART_TOP_BOTTOM_PADDING

    @property
    def inner_width(self) -> float:
        return self.width - self.left_padding - self.right_padding

    @property
    def inner_height(self) -> float:
        return self.height - self.top_bottom_padding * 2


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class RegionShape(BaseModel):
    element_id: str
    key: str
    name: str | None = None
    value: float | None = None
    fill: str


class Bar(BaseModel):
    element_id: str
    key: str
    name: str | None = None
    value: float | None = None
    rank: int
    x: float
    y: float
    width: float
    height: float
    fill: str


class ViewState(BaseModel):
    attribute: str
    title: str
    regions: list[RegionShape]
    bars: list[Bar]
    y_domain: tuple[float, float]
    transition_ms: int = 0

    def bar_order(self) -> list[str]:
        """Bar keys from left to right."""
        return [bar.key for bar in sorted(self.bars, key=lambda b: b.rank)]


# ---------------------------------------------------------------------------
# Info label
# ---------------------------------------------------------------------------


class InfoLabel(BaseModel):
    element_id: str
    key: str
    attribute: str
    value: float | None = None
    name: str | None = None

    @property
    def html(self) -> str:
        value = "No data" if self.value is None else f"{self.value:g}"
        return (
            f"<h1>{value}</h1><b>{escape(self.attribute)}</b>"
            f'<div class="labelname">{escape(self.name or self.key)}</div>'
        )


class LabelPosition(BaseModel):
    left: float
    top: float
