"""Runtime configuration, read from environment variables."""

from __future__ import annotations

import os

import httpx

from cartosense.geo import EUROPE_GEOJSON_URL, REGIONS_GEOJSON_URL

# ---------------------------------------------------------------------------
# Data sources (HTTP(S) URL or local path)
# ---------------------------------------------------------------------------

STATS_SOURCE = os.getenv("CARTOSENSE_STATS_SOURCE", "data/unitsData.csv")
REGIONS_SOURCE = os.getenv("CARTOSENSE_REGIONS_SOURCE", REGIONS_GEOJSON_URL)
BACKGROUND_SOURCE = os.getenv("CARTOSENSE_BACKGROUND_SOURCE", EUROPE_GEOJSON_URL)
CSV_SEPARATOR = os.getenv("CARTOSENSE_CSV_SEPARATOR", ",")

# Join key shared by the stats table and the region features
KEY_FIELD = os.getenv("CARTOSENSE_KEY_FIELD", "regionCode")
# Property holding the key in the raw region GeoJSON (copied into KEY_FIELD)
FEATURE_KEY = os.getenv("CARTOSENSE_FEATURE_KEY", "code")

LOG_LEVEL = os.getenv("CARTOSENSE_LOG_LEVEL", "INFO")

# Timeouts (connect, read) in seconds
TIMEOUT = httpx.Timeout(15.0, read=120.0)

# ---------------------------------------------------------------------------
# Attributes and classification
# ---------------------------------------------------------------------------

ATTRIBUTES: tuple[str, ...] = ("varA", "varB", "varC", "varD", "varE")

COLOR_CLASSES: tuple[str, ...] = (
    "#D4B9DA",
    "#C994C7",
    "#DF65B0",
    "#DD1C77",
    "#980043",
)
NO_DATA_COLOR = "#ccc"

# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

TRANSITION_MS = 1000
Y_HEADROOM = 1.1

MAP_WIDTH = 720
MAP_HEIGHT = 460

CHART_WIDTH = 612
CHART_HEIGHT = 473
CHART_LEFT_PADDING = 25
CHART_RIGHT_PADDING = 2
CHART_TOP_BOTTOM_PADDING = 5

GRATICULE_STEP = 5

# Conic equal-area projection centered on France
PROJECTION_PARALLELS = (43, 62)
PROJECTION_CENTER = {"lat": 46.2, "lon": 2.0}
MAP_LAT_RANGE = (41.0, 51.5)
MAP_LON_RANGE = (-5.5, 10.0)
