"""Join of the stats table onto the region features."""

from __future__ import annotations

import copy
import logging
from collections import Counter
from typing import Any

import pandas as pd

from cartosense.processing.cleaner import parse_numeric

logger = logging.getLogger(__name__)


def index_records(records: pd.DataFrame, key: str) -> dict[str, dict[str, Any]]:
    """Index stat rows by key. With duplicate keys the last row wins."""
    rows = records.to_dict("records")
    counts = Counter(str(row[key]) for row in rows)
    duplicates = sorted(k for k, n in counts.items() if n > 1)
    if duplicates:
        logger.warning(
            "Duplicate '%s' value(s) in stats table, keeping the last row: %s",
            key,
            duplicates,
        )
    return {str(row[key]): row for row in rows}


def join_data(
    features: list[dict[str, Any]],
    records: pd.DataFrame,
    key: str,
    attributes: tuple[str, ...] | list[str],
) -> list[dict[str, Any]]:
    """Copy every tracked attribute of the matching stat row onto each feature.

    Returns new feature dicts; the inputs are left untouched. A feature
    without a matching row gets no tracked attribute at all, while a
    matching row with a missing value contributes ``None``.
    """
    index = index_records(records, key)
    joined = copy.deepcopy(features)

    unmatched = 0
    for feature in joined:
        props = feature.setdefault("properties", {})
        row = index.get(str(props.get(key)))
        if row is None:
            unmatched += 1
            continue
        for attr in attributes:
            props[attr] = parse_numeric(row.get(attr))

    if unmatched:
        logger.info("%d of %d feature(s) have no matching stats row", unmatched, len(joined))
    return joined
