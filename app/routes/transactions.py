import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_pipeline
from app.providers.base import UnsignedTransaction
from app.schemas.common import ErrorResponse
from app.schemas.transactions import (
    QuoteRequest,
    QuoteResponse,
    StakeRequest,
    SwapRequest,
    SwapResponse,
    TransactionData,
    TransferRequest,
    TransferResponse,
)
from app.services.intents import QuoteIntent, StakeIntent, SwapIntent, TransferIntent
from app.services.pipeline import SwapResult, TransactionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _transaction_data(tx: UnsignedTransaction) -> TransactionData:
    return TransactionData(
        payload=tx.payload_base64,
        fee_payer=tx.fee_payer,
        last_valid_block_height=tx.expiry_block_reference,
        recent_blockhash=tx.recent_blockhash,
    )


def _quote_fields(result: SwapResult) -> dict:
    pi = result.quote.raw.get("priceImpactPct")
    return dict(
        input_token=result.input_token.symbol,
        input_mint=result.input_token.mint,
        input_decimals=result.input_token.decimals,
        output_token=result.output_token.symbol,
        output_mint=result.output_token.mint,
        output_decimals=result.output_token.decimals,
        input_amount=result.input_amount,
        input_amount_base_units=result.quote.input_amount,
        expected_output_amount=result.expected_output_amount,
        expected_output_base_units=result.quote.output_amount,
        slippage_bps=result.quote.slippage_bps,
        price_impact_pct=float(pi) if pi is not None else None,
        decimals_fallback=result.decimals_fallback,
        timestamp=result.timestamp,
    )


@router.post("/transactions/transfer", response_model=TransferResponse, responses=ERROR_RESPONSES)
async def transfer(req: TransferRequest, pipeline: TransactionPipeline = Depends(get_pipeline)):
    result = await pipeline.execute(
        TransferIntent(destination=req.to_address, amount=req.amount, caller=req.user_public_key)
    )
    return TransferResponse(
        transaction=_transaction_data(result.transaction),
        from_address=result.sender,
        to_address=result.recipient.address,
        destination=result.destination_input,
        resolved_via=result.recipient.source,
        amount=result.amount,
        lamports=result.lamports,
        unit=result.unit,
        timestamp=result.timestamp,
    )


@router.post("/transactions/swap", response_model=SwapResponse, responses=ERROR_RESPONSES)
async def swap(req: SwapRequest, pipeline: TransactionPipeline = Depends(get_pipeline)):
    result = await pipeline.execute(
        SwapIntent(
            input_token=req.input_token,
            output_token=req.output_token,
            amount=req.amount,
            caller=req.user_public_key,
            slippage_bps=req.slippage_bps,
        )
    )
    return SwapResponse(transaction=_transaction_data(result.transaction), **_quote_fields(result))


@router.post("/transactions/stake", response_model=SwapResponse, responses=ERROR_RESPONSES)
async def stake(req: StakeRequest, pipeline: TransactionPipeline = Depends(get_pipeline)):
    result = await pipeline.execute(
        StakeIntent(amount=req.amount, lst=req.lst, caller=req.user_public_key, slippage_bps=req.slippage_bps)
    )
    return SwapResponse(transaction=_transaction_data(result.transaction), **_quote_fields(result))


@router.post("/quote", response_model=QuoteResponse, responses=ERROR_RESPONSES)
async def quote(req: QuoteRequest, pipeline: TransactionPipeline = Depends(get_pipeline)):
    result = await pipeline.preview(
        QuoteIntent(
            input_token=req.input_token,
            output_token=req.output_token,
            amount=req.amount,
            slippage_bps=req.slippage_bps,
        )
    )
    return QuoteResponse(**_quote_fields(result))
