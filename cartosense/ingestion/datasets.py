"""Registry of the input datasets and their configurations."""

from __future__ import annotations

from dataclasses import dataclass

from cartosense import config


@dataclass
class DatasetConfig:
    name: str
    source: str
    kind: str  # "csv" or "geojson"
    description: str
    csv_separator: str = ","

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))


def default_registry() -> dict[str, DatasetConfig]:
    """Build the registry from the current configuration."""
    return {
        "stats": DatasetConfig(
            name="Statistiques regionales",
            source=config.STATS_SOURCE,
            kind="csv",
            description="One row per region: key, display name and numeric attributes.",
            csv_separator=config.CSV_SEPARATOR,
        ),
        "background": DatasetConfig(
            name="Pays d'Europe",
            source=config.BACKGROUND_SOURCE,
            kind="geojson",
            description="Reference country boundaries drawn once behind the map.",
        ),
        "regions": DatasetConfig(
            name="Regions de France",
            source=config.REGIONS_SOURCE,
            kind="geojson",
            description="Administrative region boundaries, joined and colored.",
        ),
    }
