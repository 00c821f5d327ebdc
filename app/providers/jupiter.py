"""
Jupiter adapter: quote oracle, swap-transaction assembler, token metadata,
token search and USD price.
"""

import logging
from typing import Optional

import httpx

from app.config import settings
from app.errors import ProviderError, QuoteFailed, TransactionBuildFailed
from app.providers.base import BaseProvider, ProviderSlug, Quote, TokenInfo

logger = logging.getLogger(__name__)


def _float_or_none(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class JupiterProvider(BaseProvider):
    slug = ProviderSlug.JUPITER
    name = "Jupiter"

    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self._http = http

    async def initialize(self) -> None:
        if self._http is not None:
            return
        headers = {"Content-Type": "application/json"}
        if settings.jupiter_api_key:
            headers["x-api-key"] = settings.jupiter_api_key
        self._http = httpx.AsyncClient(timeout=settings.http_timeout_seconds, headers=headers)

    async def close(self) -> None:
        if self._http:
            await self._http.aclose()

    async def _get_json(self, url: str, **kwargs):
        try:
            resp = await self._http.get(url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(str(e) or type(e).__name__, "jupiter") from e
        if resp.status_code == 429:
            raise ProviderError("Rate limit exceeded", "jupiter", 429, resp.text)
        if resp.is_error:
            raise ProviderError(f"HTTP {resp.status_code}", "jupiter", resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"Invalid JSON: {resp.text[:200]}", "jupiter", resp.status_code, resp.text) from e

    def _parse_token(self, data: dict) -> TokenInfo:
        decimals = data.get("decimals")
        holders = data.get("holderCount")
        return TokenInfo(
            mint=data.get("id") or data.get("address") or data.get("mint", ""),
            symbol=data.get("symbol", ""),
            name=data.get("name"),
            decimals=int(decimals) if decimals is not None else None,
            icon=data.get("icon") or data.get("logoURI"),
            is_verified=data.get("isVerified"),
            tags=list(data.get("tags") or []),
            usd_price=_float_or_none(data.get("usdPrice")),
            mcap=_float_or_none(data.get("mcap")),
            liquidity=_float_or_none(data.get("liquidity")),
            organic_score=_float_or_none(data.get("organicScore")),
            organic_score_label=data.get("organicScoreLabel"),
            holder_count=int(holders) if holders is not None else None,
            fdv=_float_or_none(data.get("fdv")),
        )

    async def get_quote(self, input_mint: str, output_mint: str, amount: int, slippage_bps: int = 50) -> Quote:
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
        }
        try:
            resp = await self._http.get(settings.jupiter_quote_url, params=params)
        except httpx.HTTPError as e:
            raise QuoteFailed(f"Failed to get quote: {e}", stage="quote") from e

        if resp.is_error:
            raise QuoteFailed(f"Failed to get quote: {resp.text}", stage="quote")

        try:
            data = resp.json()
        except ValueError:
            raise QuoteFailed(f"Failed to get quote: {resp.text}", stage="quote")
        try:
            out_amount = int(data["outAmount"])
        except (KeyError, TypeError, ValueError):
            raise QuoteFailed(f"Quote response has no outAmount: {data}", stage="quote")

        logger.info(f"Got quote {input_mint} -> {output_mint}, outAmount: {out_amount}")
        return Quote(
            input_mint=input_mint,
            output_mint=output_mint,
            input_amount=int(data.get("inAmount", amount)),
            output_amount=out_amount,
            slippage_bps=int(data.get("slippageBps", slippage_bps)),
            raw=data,
        )

    async def build_swap_transaction(self, quote: Quote, user_public_key: str) -> dict:
        body = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": "auto",
        }
        try:
            resp = await self._http.post(settings.jupiter_swap_url, json=body)
        except httpx.HTTPError as e:
            raise TransactionBuildFailed(f"Failed to create swap transaction: {e}", stage="build") from e

        if resp.is_error:
            raise TransactionBuildFailed(f"Failed to create swap transaction: {resp.text}", stage="build")

        try:
            data = resp.json()
        except ValueError:
            raise TransactionBuildFailed(f"Failed to create swap transaction: {resp.text}", stage="build")
        if not isinstance(data, dict) or not data.get("swapTransaction"):
            raise TransactionBuildFailed(f"Swap response has no swapTransaction: {data}", stage="build")
        return data

    async def search_tokens(self, query: str) -> list[TokenInfo]:
        data = await self._get_json(f"{settings.jupiter_tokens_url}/search", params={"query": query})
        items = data if isinstance(data, list) else data.get("tokens", data.get("data", []))
        tokens = []
        for item in items:
            try:
                tokens.append(self._parse_token(item))
            except (TypeError, ValueError):
                continue
        return tokens

    async def get_token(self, mint: str) -> Optional[TokenInfo]:
        for token in await self.search_tokens(mint):
            if token.mint == mint:
                return token
        return None

    async def get_usd_price(self, mint: str) -> Optional[float]:
        data = await self._get_json(settings.jupiter_price_url, params={"ids": mint})
        node = data.get(mint) or (data.get("data") or {}).get(mint)
        if not node:
            return None
        return _float_or_none(node.get("usdPrice", node.get("price")))
