"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from basketpool.models.config import load_asset_configs
from basketpool.pool import ReservePool
from basketpool.pricing.ticks import AssetConfig
from tests.helpers import SEED_AMOUNT

FIXTURES_DIR = Path(__file__).parent / "fixtures"
ASSETS_DIR = FIXTURES_DIR / "assets"
THREE_ASSETS = ASSETS_DIR / "three_assets.json"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


@pytest.fixture
def three_assets_document() -> dict:
    """Raw asset parameters of the three-asset fixture pool."""
    with open(THREE_ASSETS) as f:
        return json.load(f)


@pytest.fixture
def asset_configs() -> list[AssetConfig]:
    """Packed configs of the three-asset fixture pool."""
    return load_asset_configs(THREE_ASSETS)


@pytest.fixture
def config_a(asset_configs: list[AssetConfig]) -> AssetConfig:
    """The 18-decimal fixture asset."""
    return asset_configs[0]


@pytest.fixture
def pool(asset_configs: list[AssetConfig]) -> ReservePool:
    """An empty pool over the fixture assets."""
    return ReservePool(asset_configs)


@pytest.fixture
def seeded_pool(pool: ReservePool) -> ReservePool:
    """A fixture pool seeded with a proportional mint of SEED_AMOUNT."""
    pool.mint(SEED_AMOUNT)
    return pool
