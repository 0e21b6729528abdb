"""GeoJSON sources and region code mapping for France choropleth maps."""

from __future__ import annotations

# URL of the official GeoJSON for French regions (IGN simplified).
# Features carry ``code`` (INSEE region code) and ``nom`` properties.
REGIONS_GEOJSON_URL = (
    "https://raw.githubusercontent.com/gregoiredavid/france-geojson/master/regions.geojson"
)

# Country outlines drawn once behind the regions
EUROPE_GEOJSON_URL = (
    "https://raw.githubusercontent.com/leakyMirror/map-of-europe/master/GeoJSON/europe.geojson"
)

# INSEE region codes to display names, used when neither the stats row
# nor the feature carries a name.
REGION_CODE_TO_NAME = {
    "01": "Guadeloupe",
    "02": "Martinique",
    "03": "Guyane",
    "04": "La Reunion",
    "06": "Mayotte",
    "11": "Ile-de-France",
    "24": "Centre-Val de Loire",
    "27": "Bourgogne-Franche-Comte",
    "28": "Normandie",
    "32": "Hauts-de-France",
    "44": "Grand Est",
    "52": "Pays de la Loire",
    "53": "Bretagne",
    "75": "Nouvelle-Aquitaine",
    "76": "Occitanie",
    "84": "Auvergne-Rhone-Alpes",
    "93": "Provence-Alpes-Cote d'Azur",
    "94": "Corse",
}


def region_name(code: str) -> str | None:
    """Look up a region name, tolerating codes stripped of leading zeros."""
    code = str(code).strip()
    return REGION_CODE_TO_NAME.get(code) or REGION_CODE_TO_NAME.get(code.zfill(2))
