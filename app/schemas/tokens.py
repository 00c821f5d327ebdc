from pydantic import BaseModel


class TokenResponse(BaseModel):
    mint: str
    symbol: str
    name: str | None = None
    decimals: int | None = None
    icon: str | None = None
    is_verified: bool | None = None
    tags: list[str] = []
    usd_price: float | None = None
    mcap: float | None = None
    liquidity: float | None = None
    organic_score: float | None = None
    organic_score_label: str | None = None
    holder_count: int | None = None
    fdv: float | None = None


class TokenSearchResponse(BaseModel):
    success: bool = True
    tokens: list[TokenResponse]
    query: str
    count: int
    type: str  # "search" or "suggestions"


class ResolvedTokenResponse(BaseModel):
    success: bool = True
    identifier: str
    mint: str
    symbol: str
    decimals: int
    decimals_source: str


class PriceResponse(BaseModel):
    success: bool = True
    mint: str
    symbol: str
    price: float
    timestamp: str


class ResolvedAccountResponse(BaseModel):
    success: bool = True
    input: str
    address: str
    source: str
