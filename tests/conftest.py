"""Shared fixtures: three regions A, B, C and their stats rows."""

from __future__ import annotations

import pandas as pd
import pytest

from cartosense.config import ATTRIBUTES
from cartosense.processing.cleaner import clean_stats


def square(x0: float, y0: float, size: float = 1.0) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[
            [x0, y0],
            [x0 + size, y0],
            [x0 + size, y0 + size],
            [x0, y0 + size],
            [x0, y0],
        ]],
    }


def make_feature(key: str, x0: float, **props) -> dict:
    return {
        "type": "Feature",
        "geometry": square(x0, 45.0),
        "properties": {"regionCode": key, **props},
    }


@pytest.fixture
def raw_stats_df() -> pd.DataFrame:
    """Stats as read from CSV: every column is text."""
    return pd.DataFrame({
        "regionCode": ["A", "B", "C"],
        "name": ["Alpha", "Bravo", "Charlie"],
        "varA": ["10", "30", "x"],
        "varB": ["5", "1", "3"],
        "varC": ["2", "2", "2"],
        "varD": ["0", "7", ""],
        "varE": ["1.5", "n/a", "4"],
    })


@pytest.fixture
def records(raw_stats_df) -> pd.DataFrame:
    return clean_stats(raw_stats_df, "regionCode", ATTRIBUTES)


@pytest.fixture
def features() -> list[dict]:
    return [
        make_feature("A", 0.0),
        make_feature("B", 1.0),
        make_feature("C", 2.0),
    ]


@pytest.fixture
def regions_geojson(features) -> dict:
    return {"type": "FeatureCollection", "features": features}


@pytest.fixture
def background_geojson() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": square(-5.0, 40.0, 20.0), "properties": {"name": "Land"}},
        ],
    }


@pytest.fixture
def region_factory():
    return make_feature
