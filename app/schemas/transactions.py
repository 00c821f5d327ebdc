from pydantic import BaseModel


class TransferRequest(BaseModel):
    to_address: str | None = None  # wallet address or domain (alice.sol, bob.superteam)
    amount: str | int | float | None = None  # in SOL
    user_public_key: str | None = None


class SwapRequest(BaseModel):
    input_token: str | None = None  # ticker, $ticker or mint; defaults to SOL
    output_token: str | None = None  # defaults to USDC
    amount: str | int | float | None = None  # in input token units
    user_public_key: str | None = None
    slippage_bps: int | None = None


class StakeRequest(BaseModel):
    amount: str | int | float | None = None  # in SOL
    lst: str | None = None  # LST symbol or mint; defaults to JupSOL
    user_public_key: str | None = None
    slippage_bps: int | None = None


class QuoteRequest(BaseModel):
    input_token: str | None = None
    output_token: str | None = None
    amount: str | int | float | None = None
    slippage_bps: int | None = None


class TransactionData(BaseModel):
    payload: str  # base64, unsigned
    fee_payer: str
    last_valid_block_height: int | None = None
    recent_blockhash: str | None = None


class TransferResponse(BaseModel):
    success: bool = True
    transaction: TransactionData
    from_address: str
    to_address: str
    destination: str  # as the caller typed it
    resolved_via: str
    amount: float
    lamports: int
    unit: str = "SOL"
    timestamp: str


class QuoteResponse(BaseModel):
    success: bool = True
    input_token: str
    input_mint: str
    input_decimals: int
    output_token: str
    output_mint: str
    output_decimals: int
    input_amount: float
    input_amount_base_units: int
    expected_output_amount: float
    expected_output_base_units: int
    slippage_bps: int
    price_impact_pct: float | None = None
    decimals_fallback: bool = False
    timestamp: str


class SwapResponse(QuoteResponse):
    transaction: TransactionData
