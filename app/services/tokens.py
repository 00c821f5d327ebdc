"""
Token identifier resolution: tickers, $tickers and mint addresses to
mint + decimals + symbol. Also token search and suggestions.
"""

import logging
from typing import Optional

from app.config import settings
from app.errors import InvalidInput, ProviderError, Unexpected, UnknownToken
from app.providers.base import DecimalsSource, ResolvedToken, TokenInfo
from app.providers.jupiter import JupiterProvider
from app.services.amounts import DEFAULT_TOKEN_DECIMALS, NATIVE_DECIMALS
from app.services.addresses import is_address

logger = logging.getLogger(__name__)

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
JUPSOL_MINT = "jupSoLaHXQiZZTSfEWMTRRgpnyFm8f6sZdosWBjx93v"

# High-liquidity tokens answered without a network call. Order is the suggestion order.
KNOWN_TOKENS: dict[str, dict] = {
    "SOL": {"mint": SOL_MINT, "decimals": 9, "name": "Wrapped SOL"},
    "USDC": {"mint": USDC_MINT, "decimals": 6, "name": "USD Coin"},
    "USDT": {"mint": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", "decimals": 6, "name": "USDT"},
    "JUP": {"mint": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", "decimals": 6, "name": "Jupiter"},
    "JupSOL": {"mint": JUPSOL_MINT, "decimals": 9, "name": "Jupiter Staked SOL"},
    "mSOL": {"mint": "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So", "decimals": 9, "name": "Marinade staked SOL"},
    "JitoSOL": {"mint": "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn", "decimals": 9, "name": "Jito Staked SOL"},
    "BONK": {"mint": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "decimals": 5, "name": "Bonk"},
    "WIF": {"mint": "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm", "decimals": 6, "name": "dogwifhat"},
}
LIQUID_STAKING_TOKENS = ("JupSOL", "mSOL", "JitoSOL")
DEFAULT_LST = "JupSOL"

_BY_SYMBOL = {symbol.lower(): symbol for symbol in KNOWN_TOKENS}
_BY_MINT = {info["mint"]: symbol for symbol, info in KNOWN_TOKENS.items()}

MAX_SEARCH_LIMIT = 100


def normalize_symbol(identifier: str) -> str:
    return identifier.strip().lstrip("$").strip()


def known_token(symbol: str) -> ResolvedToken:
    info = KNOWN_TOKENS[symbol]
    return ResolvedToken(mint=info["mint"], symbol=symbol, decimals=info["decimals"])


def validate_search_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_SEARCH_LIMIT:
        raise InvalidInput(f"Limit must be between 1 and {MAX_SEARCH_LIMIT}")
    return limit


def _rank(tokens: list[TokenInfo]) -> list[TokenInfo]:
    # Stable: upstream relevance order breaks ties and places unscored tokens last
    return sorted(tokens, key=lambda t: (t.organic_score is None, -(t.organic_score or 0.0)))


class TokenResolver:
    def __init__(self, jupiter: JupiterProvider):
        self.jupiter = jupiter

    async def _resolve_mint(self, mint: str, default_decimals: int) -> ResolvedToken:
        if mint in _BY_MINT:
            return known_token(_BY_MINT[mint])

        try:
            info = await self.jupiter.get_token(mint)
        except Exception as e:
            logger.warning(f"Token metadata lookup failed for {mint}: {e}")
            info = None

        if info and info.decimals is not None:
            return ResolvedToken(
                mint=mint, symbol=info.symbol or mint, decimals=info.decimals,
                decimals_source=DecimalsSource.METADATA,
            )

        logger.warning(f"No decimals for mint {mint}, using default of {default_decimals}")
        return ResolvedToken(
            mint=mint, symbol=(info.symbol if info and info.symbol else mint),
            decimals=default_decimals, decimals_source=DecimalsSource.DEFAULT,
        )

    async def resolve_token(
        self, identifier: Optional[str], fallback_symbol: str, default_decimals: int = DEFAULT_TOKEN_DECIMALS
    ) -> ResolvedToken:
        raw = (identifier or "").strip() or fallback_symbol

        if is_address(raw):
            return await self._resolve_mint(raw, default_decimals)

        symbol = normalize_symbol(raw)
        if not symbol:
            raise UnknownToken(f"Token {raw!r} not found", stage="resolve")

        if symbol.lower() in _BY_SYMBOL:
            return known_token(_BY_SYMBOL[symbol.lower()])

        try:
            candidates = await self.jupiter.search_tokens(symbol)
        except ProviderError as e:
            raise UnknownToken(f"Token {symbol!r} could not be looked up: {e.message}", stage="resolve")

        for token in _rank(candidates):
            if token.symbol.lower() == symbol.lower() and is_address(token.mint):
                if token.decimals is None:
                    logger.warning(f"No decimals for {token.symbol} ({token.mint}), using default of {default_decimals}")
                    return ResolvedToken(
                        mint=token.mint, symbol=token.symbol, decimals=default_decimals,
                        decimals_source=DecimalsSource.DEFAULT,
                    )
                return ResolvedToken(
                    mint=token.mint, symbol=token.symbol, decimals=token.decimals,
                    decimals_source=DecimalsSource.METADATA,
                )

        raise UnknownToken(f"Token {symbol!r} not found. Provide a mint address or a known symbol.", stage="resolve")

    async def resolve_lst(self, identifier: Optional[str]) -> ResolvedToken:
        raw = (identifier or "").strip() or DEFAULT_LST
        if is_address(raw):
            # LSTs are SOL-denominated, so 9 is the sensible default
            return await self._resolve_mint(raw, NATIVE_DECIMALS)

        symbol = normalize_symbol(raw).lower()
        for lst in LIQUID_STAKING_TOKENS:
            if lst.lower() == symbol:
                return known_token(lst)

        raise UnknownToken(
            f"Unknown LST {raw!r}. Provide a mint address or one of: {', '.join(LIQUID_STAKING_TOKENS)}.",
            stage="resolve",
        )

    def suggestions(self, limit: int) -> list[TokenInfo]:
        limit = validate_search_limit(limit)
        count = min(limit, settings.token_suggestion_count)
        return [
            TokenInfo(mint=info["mint"], symbol=symbol, name=info["name"], decimals=info["decimals"], is_verified=True)
            for symbol, info in list(KNOWN_TOKENS.items())[:count]
        ]

    async def search_tokens(self, query: str, limit: int) -> list[TokenInfo]:
        limit = validate_search_limit(limit)
        try:
            tokens = await self.jupiter.search_tokens(query.strip())
        except ProviderError as e:
            raise Unexpected(f"Token search failed: {e.message} {e.body or ''}".strip(), stage="search")
        return _rank(tokens)[:limit]
