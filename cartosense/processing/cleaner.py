"""Data cleaning and normalization utilities.

Missing numeric values stay missing (NaN); they are never filled with zero.
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip whitespace from column names, keeping their case."""
    df = df.copy()
    df.columns = [str(col).strip() for col in df.columns]
    return df


def strip_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Strip leading/trailing whitespace from string columns."""
    df = df.copy()
    str_cols = df.select_dtypes(include=["object", "string"]).columns
    for col in str_cols:
        df[col] = df[col].str.strip()
    return df


def coerce_numeric(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Force columns to numeric, coercing errors to NaN."""
    df = df.copy()
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def parse_numeric(value: Any) -> float | None:
    """Parse a single value, returning None when missing or malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clean_stats(
    df: pd.DataFrame,
    key_field: str,
    attributes: tuple[str, ...] | list[str],
) -> pd.DataFrame:
    """Prepare the stats table for the join.

    The key becomes a stripped string, tracked attributes become floats with
    NaN for anything unparseable. A tracked attribute absent from the table
    becomes an all-missing column.
    """
    df = normalize_columns(df)
    df = strip_strings(df)

    if key_field not in df.columns:
        raise KeyError(f"Missing key column '{key_field}'. Available: {list(df.columns)}")
    before = len(df)
    df = df.dropna(subset=[key_field])
    if len(df) < before:
        logger.warning("Dropped %d row(s) without a '%s' value", before - len(df), key_field)
    df[key_field] = df[key_field].astype(str).str.strip()

    for attr in attributes:
        if attr not in df.columns:
            logger.warning("Attribute column '%s' not found, treated as missing", attr)
            df[attr] = float("nan")

    raw = df[list(attributes)]
    df = coerce_numeric(df, list(attributes))
    for attr in attributes:
        df[attr] = df[attr].replace([math.inf, -math.inf], math.nan)
        bad = int((raw[attr].notna() & df[attr].isna()).sum())
        if bad:
            logger.warning("%d unparseable value(s) in '%s' treated as missing", bad, attr)

    logger.info("Cleaning complete: %d rows x %d cols", len(df), len(df.columns))
    return df


def normalize_feature_keys(
    geojson: dict[str, Any],
    source_key: str,
    key_field: str,
) -> list[dict[str, Any]]:
    """Return copies of the features with the join key stored under *key_field*.

    Region GeoJSON files name their identifier differently (``code``,
    ``adm1_code``...). Features already carrying *key_field* keep it.
    """
    features = copy.deepcopy(geojson.get("features", []))
    for feature in features:
        props = feature.setdefault("properties", {})
        if key_field in props:
            props[key_field] = str(props[key_field]).strip()
        elif source_key in props:
            props[key_field] = str(props[source_key]).strip()
    missing = sum(1 for f in features if key_field not in f["properties"])
    if missing:
        logger.warning("%d feature(s) have no '%s' property", missing, key_field)
    return features
