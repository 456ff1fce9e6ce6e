#!/usr/bin/env python3
"""Simulate winding an asset out of a pool through equalization.

Seeds a pool with a proportional mint, sets one asset's target allocation to
zero, then moves that asset towards its new target in equal equalizing swaps
before equalizing the rest of the pool in one go. Allocations are logged after
every step.

Usage:
    python scripts/simulate_allocation_change.py

    python scripts/simulate_allocation_change.py \
        --config tests/fixtures/assets/three_assets.json \
        --drop 0x8e9c43c72ab3a49fdd242e5bb44b337e94979dd1 \
        --steps 5 --log-level debug
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from basketpool.constants import ALLOCATION_ONE, CANONICAL_DECIMALS  # noqa: E402
from basketpool.errors import PoolError  # noqa: E402
from basketpool.math.fixed_point import (  # noqa: E402
    allocation_from_decimal,
    fixed_to_decimal,
)
from basketpool.models.config import PoolParams, load_asset_configs  # noqa: E402
from basketpool.pool import ReservePool  # noqa: E402
from basketpool.pricing.ticks import AssetConfig  # noqa: E402

logger = structlog.get_logger()

DEFAULT_CONFIG = project_root / "tests" / "fixtures" / "assets" / "three_assets.json"


def retarget(params: PoolParams, dropped: str) -> list[AssetConfig]:
    """Asset configs with the dropped asset at target zero and the rest split evenly."""
    remaining = [p for p in params.assets if p.asset != dropped]
    share = allocation_from_decimal(Decimal(1) / len(remaining))
    configs = []
    assigned = 0
    for i, asset_params in enumerate(remaining):
        target = share if i < len(remaining) - 1 else ALLOCATION_ONE - assigned
        assigned += target
        configs.append(asset_params.to_asset_config(target_allocation=target))
    dropped_params = next(p for p in params.assets if p.asset == dropped)
    configs.append(dropped_params.to_asset_config(target_allocation=0))
    return configs


def log_allocations(pool: ReservePool, stage: str) -> None:
    logger.info(
        "allocations",
        stage=stage,
        total_reserves=pool.total_reserves,
        **{asset: f"{fixed_to_decimal(pool.allocation(asset)):.6f}" for asset in pool.assets},
    )


def simulate(config_path: Path, dropped: str | None, mint: int, steps: int) -> ReservePool:
    params = PoolParams.model_validate_json(config_path.read_text())
    pool = ReservePool(load_asset_configs(config_path))
    dropped = dropped or params.assets[0].asset
    if dropped not in pool.assets:
        raise SystemExit(f"unknown asset: {dropped}")

    pool.mint(mint)
    log_allocations(pool, "seeded")

    pool.update_asset_configs(retarget(params, dropped))
    logger.info("retargeted", dropped=dropped, discrepancy=pool.total_reserves_discrepancy())

    chunk = pool.native_reserves(dropped) // steps
    for step in range(steps):
        if chunk == 0:
            break
        try:
            pool.swap_towards_target(dropped, -chunk)
        except PoolError as err:
            logger.warning("equalizing_swap_rejected", step=step, error=str(err))
            break
        log_allocations(pool, f"step_{step + 1}")

    if not pool.is_equalized():
        receipt = pool.equalize_to_target()
        logger.info(
            "equalized",
            legs=len(receipt.legs),
            minted=receipt.basket_minted,
            burned=receipt.basket_burned,
        )
    log_allocations(pool, "final")
    return pool


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Simulate winding an asset out of a pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Asset parameters JSON ({\"assets\": [...]})",
    )
    parser.add_argument(
        "--drop",
        default=None,
        help="Asset whose target allocation becomes zero (default: first asset)",
    )
    parser.add_argument(
        "--mint",
        type=int,
        default=1_000_000,
        help="Basket units to seed the pool with, in whole units (default: 1,000,000)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=4,
        help="Number of equalizing swaps for the dropped asset (default: 4)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )
    args = parser.parse_args()

    log_level = getattr(logging, args.log_level.upper())
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    pool = simulate(args.config, args.drop, args.mint * 10**CANONICAL_DECIMALS, max(args.steps, 1))
    return 0 if pool.is_equalized() else 1


if __name__ == "__main__":
    sys.exit(main())
