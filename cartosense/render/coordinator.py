"""Render coordinator: drives the map and the bar chart from one session.

Lifecycle is a two-state machine. ``render`` moves ``UNRENDERED`` to
``RENDERED``; ``rerender`` and ``dispatch`` keep it ``RENDERED`` and may be
repeated indefinitely. Joined features and stat rows are never modified.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

import pandas as pd

from cartosense import config
from cartosense.geo import region_name
from cartosense.processing.classify import ColorClassification, build_classification, fill_for
from cartosense.processing.cleaner import parse_numeric
from cartosense.render.schemas import Bar, ChartFrame, RegionShape, ViewState
from cartosense.state import MapSession, SelectionChanged

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    UNRENDERED = "unrendered"
    RENDERED = "rendered"


class RenderStateError(RuntimeError):
    """A render operation was called in the wrong state."""


def chart_title(attribute: str) -> str:
    return f"Number of Variable {attribute} in each region"


def y_domain_max(values: list[float | None], headroom: float = config.Y_HEADROOM) -> float:
    """Upper bound of the bar scale: 10% above the largest value."""
    valid = [v for v in values if v is not None]
    top = max(valid) if valid else 0.0
    return top * headroom if top > 0 else 1.0


def linear_scale(domain_max: float, inner_height: float) -> Callable[[float], float]:
    """Map ``[0, domain_max]`` onto ``[inner_height, 0]`` (SVG y grows downward)."""
    def scale(value: float) -> float:
        return inner_height * (1 - value / domain_max)
    return scale


def rank_rows(values: list[float | None]) -> list[int]:
    """Row positions sorted by descending value, missing values last."""
    return sorted(
        range(len(values)),
        key=lambda i: (values[i] is None, -(values[i] or 0.0)),
    )


def _text(value: Any) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


class RenderCoordinator:
    """Builds ``ViewState`` snapshots for the current session attribute."""

    def __init__(
        self,
        features: list[dict[str, Any]],
        records: pd.DataFrame,
        key: str = config.KEY_FIELD,
        frame: ChartFrame | None = None,
        transition_ms: int = config.TRANSITION_MS,
    ):
        self.features = features
        self.records = records
        self.key = key
        self.frame = frame or ChartFrame()
        self.transition_ms = transition_ms
        self.state = RenderState.UNRENDERED
        self.classification: ColorClassification | None = None
        self.view: ViewState | None = None

        self._rows = records.to_dict("records")
        self._names: dict[str, str] = {}
        for row in self._rows:
            name = _text(row.get("name"))
            if name:
                self._names[str(row[key])] = name

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def render(self, session: MapSession) -> ViewState:
        """Initial render, drawn without transition."""
        if self.state is not RenderState.UNRENDERED:
            raise RenderStateError("Views are already rendered; use rerender()")
        self.view = self._build(session.expressed, transition_ms=0)
        self.state = RenderState.RENDERED
        logger.info(
            "Rendered %d regions and %d bars for %s",
            len(self.view.regions),
            len(self.view.bars),
            session.expressed,
        )
        return self.view

    def rerender(self, session: MapSession) -> ViewState:
        """Recompute colors, bar geometry and bar order for the session attribute."""
        if self.state is not RenderState.RENDERED:
            raise RenderStateError("Nothing rendered yet; call render() first")
        self.view = self._build(session.expressed, transition_ms=self.transition_ms)
        return self.view

    def dispatch(self, command: SelectionChanged, session: MapSession) -> ViewState:
        """Apply a selection change, then re-render synchronously."""
        session.select(command.attribute)
        return self.rerender(session)

    # ------------------------------------------------------------------
    # View building
    # ------------------------------------------------------------------

    def _build(self, attribute: str, transition_ms: int) -> ViewState:
        self.classification = build_classification(self.records, attribute)
        regions = self._build_regions(attribute, self.classification)
        bars, domain_max = self._build_bars(attribute, self.classification)
        return ViewState(
            attribute=attribute,
            title=chart_title(attribute),
            regions=regions,
            bars=bars,
            y_domain=(0.0, domain_max),
            transition_ms=transition_ms,
        )

    def _name_for(self, key: str, props: dict[str, Any] | None = None) -> str | None:
        if key in self._names:
            return self._names[key]
        if props:
            for field in ("name", "nom"):
                name = _text(props.get(field))
                if name:
                    return name
        return region_name(key)

    def _build_regions(
        self,
        attribute: str,
        classification: ColorClassification,
    ) -> list[RegionShape]:
        regions = []
        for i, feature in enumerate(self.features):
            props = feature.get("properties") or {}
            key = str(props.get(self.key, ""))
            value = parse_numeric(props.get(attribute))
            regions.append(RegionShape(
                element_id=f"region-{i}",
                key=key,
                name=self._name_for(key, props),
                value=value,
                fill=fill_for(value, classification),
            ))
        return regions

    def _build_bars(
        self,
        attribute: str,
        classification: ColorClassification,
    ) -> tuple[list[Bar], float]:
        values = [parse_numeric(row.get(attribute)) for row in self._rows]
        domain_max = y_domain_max(values)
        inner_height = self.frame.inner_height
        y_scale = linear_scale(domain_max, inner_height)

        n = len(self._rows)
        slot = self.frame.inner_width / n if n else 0.0

        # Bars stay in record order; ``rank`` carries the visual order.
        bars: list[Bar | None] = [None] * n
        for rank, i in enumerate(rank_rows(values)):
            row = self._rows[i]
            value = values[i]
            top = inner_height if value is None else min(max(y_scale(value), 0.0), inner_height)
            key = str(row[self.key])
            bars[i] = Bar(
                element_id=f"bar-{i}",
                key=key,
                name=self._name_for(key),
                value=value,
                rank=rank,
                x=rank * slot + self.frame.left_padding,
                y=top + self.frame.top_bottom_padding,
                width=max(slot - 1, 0.0),
                height=inner_height - top,
                fill=fill_for(value, classification),
            )
        return bars, domain_max
