"""Quantile color classification of the expressed attribute."""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any

import pandas as pd

from cartosense import config
from cartosense.processing.cleaner import parse_numeric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorClassification:
    """Maps a number to one of ``len(colors)`` ordered color classes.

    ``thresholds`` holds the ``i/n`` quantiles of the sorted domain; a value
    belongs to class ``bisect_right(thresholds, value)``.
    """

    attribute: str
    colors: tuple[str, ...]
    domain: tuple[float, ...]
    thresholds: tuple[float, ...]

    def classify(self, value: Any) -> int:
        number = parse_numeric(value)
        if number is None:
            return 0
        return bisect_right(self.thresholds, number)

    def __call__(self, value: Any) -> str:
        return self.colors[self.classify(value)]


def quantile_thresholds(domain: list[float], n_classes: int) -> tuple[float, ...]:
    """Linear-interpolation quantiles at 1/n, 2/n, ... (n-1)/n."""
    if not domain or n_classes < 2:
        return ()
    probs = [i / n_classes for i in range(1, n_classes)]
    return tuple(float(q) for q in pd.Series(domain, dtype=float).quantile(probs))


def valid_values(records: pd.DataFrame, attribute: str) -> list[float]:
    """Sorted parseable, finite values of *attribute* across all rows."""
    if attribute not in records.columns:
        return []
    values = (parse_numeric(v) for v in records[attribute].tolist())
    return sorted(v for v in values if v is not None)


def build_classification(
    records: pd.DataFrame,
    attribute: str,
    colors: tuple[str, ...] = config.COLOR_CLASSES,
) -> ColorClassification:
    """Build the quantile classification of *attribute* over every stat row.

    Rows that did not join to any feature still contribute to the domain.
    """
    domain = valid_values(records, attribute)
    thresholds = quantile_thresholds(domain, len(colors))
    logger.debug("Classification for %s: %d values, thresholds %s", attribute, len(domain), thresholds)
    return ColorClassification(
        attribute=attribute,
        colors=tuple(colors),
        domain=tuple(domain),
        thresholds=thresholds,
    )


def fill_for(value: Any, classification: ColorClassification) -> str:
    """Fill color for a rendered element, gray when the value is missing."""
    if parse_numeric(value) is None:
        return config.NO_DATA_COLOR
    return classification(value)
