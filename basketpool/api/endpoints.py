"""Quote endpoints.

Quotes are stateless: each request carries the asset parameters and the
reserve levels to price against, so the service never holds pool state.
"""

import structlog
from fastapi import APIRouter, HTTPException

from basketpool.errors import ConfigurationError, PoolMathError
from basketpool.models.quote import (
    QuoteKind,
    QuoteRequest,
    QuoteResponse,
    SwapKind,
    SwapRequest,
    SwapResponse,
)
from basketpool.pricing.crossing import (
    compute_burn_given_withdrawal,
    compute_deposit_given_mint,
    compute_mint_given_deposit,
    compute_withdrawal_given_burn,
)
from basketpool.pricing.swap import (
    compute_swap_underlying_given_in,
    compute_swap_underlying_given_out,
)

logger = structlog.get_logger()

router = APIRouter()

_CROSSING_FUNCTIONS = {
    QuoteKind.MINT_GIVEN_DEPOSIT: compute_mint_given_deposit,
    QuoteKind.DEPOSIT_GIVEN_MINT: compute_deposit_given_mint,
    QuoteKind.WITHDRAWAL_GIVEN_BURN: compute_withdrawal_given_burn,
    QuoteKind.BURN_GIVEN_WITHDRAWAL: compute_burn_given_withdrawal,
}


@router.post("/quote/swap/{kind}", response_model_exclude_none=True)
async def quote_swap(kind: SwapKind, request: SwapRequest) -> SwapResponse:
    """Price an asset-for-asset swap.

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Unpriceable swap (outside the tick domain, same asset twice): 422
    """
    logger.info(
        "received_swap_quote",
        kind=kind.value,
        asset_in=request.asset_in.asset,
        asset_out=request.asset_out.asset,
    )
    compute = (
        compute_swap_underlying_given_in
        if kind is SwapKind.GIVEN_IN
        else compute_swap_underlying_given_out
    )
    try:
        quote = compute(
            request.asset_in.to_asset_config(),
            int(request.reserves_in),
            request.asset_out.to_asset_config(),
            int(request.reserves_out),
            int(request.total_reserves),
            int(request.amount),
        )
    except (PoolMathError, ConfigurationError) as err:
        logger.warning("swap_quote_rejected", kind=kind.value, error=str(err))
        raise HTTPException(status_code=422, detail=str(err)) from err

    return SwapResponse(
        kind=kind,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        basket_amount=quote.basket_amount,
        fee=quote.fee,
    )


@router.post("/quote/{kind}", response_model_exclude_none=True)
async def quote(kind: QuoteKind, request: QuoteRequest) -> QuoteResponse:
    """Price a single-asset deposit or withdrawal.

    Args:
        kind: Which side of the operation is given
        request: Asset parameters, reserve levels and the given amount

    Returns:
        QuoteResponse with the solved amount, fee and tick span

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Amount leaves the tick domain: 422 with the pricing error as detail
    """
    logger.info("received_quote", kind=kind.value, asset=request.asset.asset)
    try:
        result = _CROSSING_FUNCTIONS[kind](
            request.asset.to_asset_config(),
            int(request.specific_reserves),
            int(request.total_reserves),
            int(request.amount),
        )
    except (PoolMathError, ConfigurationError) as err:
        logger.warning("quote_rejected", kind=kind.value, error=str(err))
        raise HTTPException(status_code=422, detail=str(err)) from err

    return QuoteResponse(
        kind=kind,
        amount=result.amount,
        fee=result.fee,
        start_tick=result.start_tick,
        end_tick=result.end_tick,
    )
