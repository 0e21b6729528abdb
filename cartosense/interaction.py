"""Linked highlighting across map and chart, and the floating info label."""

from __future__ import annotations

import logging

from cartosense.render.schemas import (
    DEFAULT_BAR_STYLE,
    DEFAULT_REGION_STYLE,
    HIGHLIGHT_STYLE,
    ElementStyle,
    InfoLabel,
    LabelPosition,
    ViewState,
)

logger = logging.getLogger(__name__)

# Offsets between the pointer and the label, in pixels
LABEL_OFFSET_X = 10
LABEL_OFFSET_ABOVE = 75
LABEL_OFFSET_BELOW = 25
RIGHT_EDGE_MARGIN = 20
TOP_EDGE_THRESHOLD = 75


def position_label(
    client_x: float,
    client_y: float,
    label_width: float,
    viewport_width: float,
) -> LabelPosition:
    """Place the label next to the pointer without running off screen.

    The label sits to the right of and above the pointer, flipping left near
    the right edge and below near the top edge.
    """
    if client_x > viewport_width - label_width - RIGHT_EDGE_MARGIN:
        left = client_x - label_width - LABEL_OFFSET_X
    else:
        left = client_x + LABEL_OFFSET_X
    if client_y < TOP_EDGE_THRESHOLD:
        top = client_y + LABEL_OFFSET_BELOW
    else:
        top = client_y - LABEL_OFFSET_ABOVE
    return LabelPosition(left=left, top=top)


class InteractionLayer:
    """Hover state shared by both views.

    ``styles`` is the current style of every element. Before an element is
    highlighted its style goes into a side table, so that leaving restores
    that exact style rather than a single default.
    """

    def __init__(self, view: ViewState):
        self.styles: dict[str, ElementStyle] = {}
        for region in view.regions:
            self.styles[region.element_id] = DEFAULT_REGION_STYLE
        for bar in view.bars:
            self.styles[bar.element_id] = DEFAULT_BAR_STYLE
        self._saved: dict[str, ElementStyle] = {}
        self.label: InfoLabel | None = None
        self.highlighted: str | None = None

    @staticmethod
    def elements_for(view: ViewState, key: str) -> list[str]:
        """Ids of every region and bar bearing *key*."""
        ids = [r.element_id for r in view.regions if r.key == key]
        ids += [b.element_id for b in view.bars if b.key == key]
        return ids

    def highlight(self, view: ViewState, key: str) -> InfoLabel:
        """Outline every element sharing *key* and raise the info label."""
        for element_id in self.elements_for(view, key):
            self._saved.setdefault(element_id, self.styles[element_id])
            self.styles[element_id] = HIGHLIGHT_STYLE
        self.highlighted = key
        self.label = self._make_label(view, key)
        logger.debug("Highlighted %s", key)
        return self.label

    def dehighlight(self, view: ViewState, key: str) -> None:
        """Restore the saved style of every element sharing *key*."""
        for element_id in self.elements_for(view, key):
            saved = self._saved.pop(element_id, None)
            if saved is not None:
                self.styles[element_id] = saved
        if self.highlighted == key:
            self.highlighted = None
        self.label = None

    def move_label(
        self,
        client_x: float,
        client_y: float,
        label_width: float,
        viewport_width: float,
    ) -> LabelPosition | None:
        """Follow the pointer; None when no label is shown.

        Called by hosts that report pointer coordinates on every move.
        The Streamlit dashboard has no such events and shows the label in a
        fixed panel instead.
        """
        if self.label is None:
            return None
        return position_label(client_x, client_y, label_width, viewport_width)

    @staticmethod
    def _make_label(view: ViewState, key: str) -> InfoLabel:
        # Chart rows carry the stats value even for keys without geometry;
        # with duplicate keys the last row wins, as in the join.
        bars = [b for b in view.bars if b.key == key]
        source = bars[-1] if bars else next((r for r in view.regions if r.key == key), None)
        return InfoLabel(
            element_id=f"{key}_label",
            key=key,
            attribute=view.attribute,
            value=source.value if source else None,
            name=source.name if source else None,
        )
