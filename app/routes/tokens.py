from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import get_token_resolver
from app.errors import InvalidInput, ProviderError, Unexpected
from app.schemas.common import ErrorResponse
from app.schemas.tokens import PriceResponse, ResolvedTokenResponse, TokenResponse, TokenSearchResponse
from app.services.pipeline import utc_timestamp
from app.services.tokens import TokenResolver, validate_search_limit

router = APIRouter()


@router.get("/tokens/search", response_model=TokenSearchResponse, responses={400: {"model": ErrorResponse}})
async def search_tokens(
    query: str = "",
    limit: int = 10,
    tokens: TokenResolver = Depends(get_token_resolver),
):
    validate_search_limit(limit)
    q = query.strip()

    # Not-yet-typed input gets the fixed list instead of a search call
    if len(q) < settings.min_search_query_length:
        results, kind = tokens.suggestions(limit), "suggestions"
    else:
        results, kind = await tokens.search_tokens(q, limit), "search"

    return TokenSearchResponse(
        tokens=[TokenResponse(**asdict(t)) for t in results],
        query=q,
        count=len(results),
        type=kind,
    )


@router.get("/tokens/resolve", response_model=ResolvedTokenResponse, responses={400: {"model": ErrorResponse}})
async def resolve_token(identifier: str = "", tokens: TokenResolver = Depends(get_token_resolver)):
    if not identifier.strip():
        raise InvalidInput("identifier is required")
    token = await tokens.resolve_token(identifier, fallback_symbol="")
    return ResolvedTokenResponse(
        identifier=identifier.strip(),
        mint=token.mint,
        symbol=token.symbol,
        decimals=token.decimals,
        decimals_source=token.decimals_source.value,
    )


@router.get("/tokens/price", response_model=PriceResponse, responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def token_price(token_id: str = "", tokens: TokenResolver = Depends(get_token_resolver)):
    if not token_id.strip():
        raise InvalidInput("token_id (mint address or symbol) is required")
    token = await tokens.resolve_token(token_id, fallback_symbol="")

    try:
        price = await tokens.jupiter.get_usd_price(token.mint)
    except ProviderError as e:
        raise Unexpected(f"Failed to fetch price: {e.message}")

    if price is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error=f"Price not available for {token.symbol}", kind="PriceUnavailable").model_dump(),
        )
    return PriceResponse(mint=token.mint, symbol=token.symbol, price=price, timestamp=utc_timestamp())
