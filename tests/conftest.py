from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey

from app.providers.base import NameProvider, ProviderSlug, Quote
from app.providers.jupiter import JupiterProvider
from app.providers.solana_rpc import SolanaRpcProvider
from app.services.addresses import AddressResolver
from app.services.pipeline import TransactionPipeline
from app.services.tokens import TokenResolver
from app.services.transactions import TransactionBuilder

USER = str(Pubkey(bytes([1] * 32)))
RECIPIENT = str(Pubkey(bytes([2] * 32)))
DOMAIN_OWNER = str(Pubkey(bytes([5] * 32)))
BLOCKHASH = Hash(bytes([7] * 32))


class FakeNameProvider(NameProvider):
    def __init__(self, slug: ProviderSlug, result: Optional[str] = None, error: Optional[Exception] = None):
        self.slug = slug
        self.name = slug.value
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def try_resolve(self, domain: str) -> Optional[str]:
        self.calls.append(domain)
        if self.error:
            raise self.error
        return self.result


def make_quote(input_mint: str, output_mint: str, amount: int, out_amount: int, slippage_bps: int = 50) -> Quote:
    raw = {
        "inputMint": input_mint,
        "outputMint": output_mint,
        "inAmount": str(amount),
        "outAmount": str(out_amount),
        "slippageBps": slippage_bps,
        "priceImpactPct": "0.001",
    }
    return Quote(
        input_mint=input_mint, output_mint=output_mint, input_amount=amount,
        output_amount=out_amount, slippage_bps=slippage_bps, raw=raw,
    )


@pytest.fixture
def jupiter():
    mock = MagicMock(spec=JupiterProvider)

    async def quote(input_mint, output_mint, amount, slippage_bps=50):
        return make_quote(input_mint, output_mint, amount, 150_000_000, slippage_bps)

    mock.get_quote = AsyncMock(side_effect=quote)
    mock.build_swap_transaction = AsyncMock(
        return_value={"swapTransaction": "AQAAAA==", "lastValidBlockHeight": 300_000_123}
    )
    mock.search_tokens = AsyncMock(return_value=[])
    mock.get_token = AsyncMock(return_value=None)
    mock.get_usd_price = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def rpc():
    mock = MagicMock(spec=SolanaRpcProvider)
    mock.get_latest_blockhash = AsyncMock(return_value=(BLOCKHASH, 250_000_000))
    mock.get_account_data = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def name_providers():
    return [
        FakeNameProvider(ProviderSlug.ALLDOMAINS),
        FakeNameProvider(ProviderSlug.SNS, result=DOMAIN_OWNER),
    ]


@pytest.fixture
def pipeline(jupiter, rpc, name_providers):
    return TransactionPipeline(
        addresses=AddressResolver(name_providers),
        tokens=TokenResolver(jupiter),
        jupiter=jupiter,
        builder=TransactionBuilder(rpc, jupiter),
    )
