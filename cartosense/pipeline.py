"""Startup pipeline: load → clean → join → classify → render."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pandas as pd

from cartosense import config
from cartosense.ingestion.loaders import LoadedDatasets, load_datasets
from cartosense.interaction import InteractionLayer
from cartosense.processing.cleaner import clean_stats, normalize_feature_keys
from cartosense.processing.join import join_data
from cartosense.render.coordinator import RenderCoordinator
from cartosense.render.schemas import ViewState
from cartosense.state import MapSession, SelectionChanged

logger = logging.getLogger(__name__)


@dataclass
class MapBundle:
    """Everything a surface needs to draw and update both views."""

    records: pd.DataFrame
    features: list[dict[str, Any]]
    background: dict[str, Any]
    session: MapSession
    coordinator: RenderCoordinator
    interaction: InteractionLayer

    @property
    def view(self) -> ViewState:
        return self.coordinator.view

    def select(self, attribute: str) -> ViewState:
        """Handle a dropdown change: update the session, then re-render."""
        return self.coordinator.dispatch(SelectionChanged(attribute), self.session)


def build_bundle(
    datasets: LoadedDatasets,
    key: str = config.KEY_FIELD,
    feature_key: str = config.FEATURE_KEY,
    attributes: tuple[str, ...] = config.ATTRIBUTES,
) -> MapBundle:
    """Run clean, join and the initial render over already loaded datasets."""
    logger.info("=== STEP 2: Cleaning data ===")
    records = clean_stats(datasets.stats, key, attributes)
    features = normalize_feature_keys(datasets.regions, feature_key, key)

    logger.info("=== STEP 3: Joining stats to regions ===")
    joined = join_data(features, records, key, attributes)

    logger.info("=== STEP 4: Rendering ===")
    session = MapSession(attributes=attributes)
    coordinator = RenderCoordinator(joined, records, key=key)
    view = coordinator.render(session)

    return MapBundle(
        records=records,
        features=joined,
        background=datasets.background,
        session=session,
        coordinator=coordinator,
        interaction=InteractionLayer(view),
    )


def run_pipeline(**kwargs: Any) -> MapBundle:
    """Load the three datasets and build the initial map bundle.

    Any load failure aborts the whole pipeline with ``DatasetLoadError``.
    """
    logger.info("=== STEP 1: Loading datasets ===")
    datasets = load_datasets(**kwargs)
    bundle = build_bundle(datasets)
    logger.info("=== Pipeline complete ===")
    return bundle
