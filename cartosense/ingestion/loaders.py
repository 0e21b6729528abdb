"""Loading of the stats table and the two boundary sets.

The three inputs are fetched concurrently and the caller is gated on all of
them: if any one fails, the whole load fails with ``DatasetLoadError``.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
import pandas as pd

from cartosense import config
from cartosense.ingestion.datasets import DatasetConfig, default_registry

logger = logging.getLogger(__name__)

REQUIRED_DATASETS = ("stats", "background", "regions")


class DatasetLoadError(RuntimeError):
    """An input dataset could not be fetched or parsed."""

    def __init__(self, name: str, source: str, reason: Exception):
        super().__init__(f"Failed to load dataset '{name}' from {source}: {reason}")
        self.name = name
        self.source = source


@dataclass
class LoadedDatasets:
    stats: pd.DataFrame
    background: dict[str, Any]
    regions: dict[str, Any]


def parse_csv(raw: str, sep: str | None = None) -> pd.DataFrame:
    """Parse CSV text, keeping every column as text.

    Numeric coercion happens in the cleaner so that region codes keep their
    leading zeros. Detects the separator if not provided.
    """
    if sep is None:
        first_line = raw.split("\n", maxsplit=1)[0]
        sep = ";" if first_line.count(";") > first_line.count(",") else ","
    df = pd.read_csv(io.StringIO(raw), sep=sep, dtype=str)
    logger.info("Parsed %d rows x %d columns", len(df), len(df.columns))
    return df


def parse_geojson(raw: str) -> dict[str, Any]:
    """Parse a GeoJSON FeatureCollection."""
    data = json.loads(raw)
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise ValueError("not a GeoJSON FeatureCollection (missing 'features' list)")
    return data


async def _read_source(client: httpx.AsyncClient, dataset: DatasetConfig) -> str:
    if dataset.is_remote:
        logger.info("Downloading %s from %s", dataset.name, dataset.source)
        resp = await client.get(dataset.source, follow_redirects=True)
        resp.raise_for_status()
        return resp.text
    logger.info("Reading %s from %s", dataset.name, dataset.source)
    return await asyncio.to_thread(Path(dataset.source).read_text, encoding="utf-8")


async def _load_one(client: httpx.AsyncClient, name: str, dataset: DatasetConfig) -> Any:
    try:
        raw = await _read_source(client, dataset)
        if dataset.kind == "csv":
            return parse_csv(raw, sep=dataset.csv_separator)
        return parse_geojson(raw)
    except (httpx.HTTPError, OSError, ValueError) as exc:
        raise DatasetLoadError(name, dataset.source, exc) from exc


async def load_all(
    registry: dict[str, DatasetConfig],
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Fetch every dataset of *registry* concurrently.

    All fetches run to completion before the first failure (in registry
    order) is raised.
    """
    async with httpx.AsyncClient(timeout=config.TIMEOUT, transport=transport) as client:
        results = await asyncio.gather(
            *(_load_one(client, name, ds) for name, ds in registry.items()),
            return_exceptions=True,
        )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return dict(zip(registry, results))


def load_datasets(
    registry: dict[str, DatasetConfig] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LoadedDatasets:
    """Load the stats table, background boundaries and target regions."""
    registry = registry if registry is not None else default_registry()
    missing = [name for name in REQUIRED_DATASETS if name not in registry]
    if missing:
        raise KeyError(f"Dataset registry is missing: {missing}")

    data = asyncio.run(load_all(registry, transport=transport))
    logger.info(
        "Loaded %d stat rows, %d background features, %d region features",
        len(data["stats"]),
        len(data["background"]["features"]),
        len(data["regions"]["features"]),
    )
    return LoadedDatasets(
        stats=data["stats"],
        background=data["background"],
        regions=data["regions"],
    )
