"""
Intent orchestration.

    validate -> resolve identifiers -> scale amount -> (quote) -> build -> respond

Each stage is terminal on failure. Validation never touches the network.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Optional, TypeVar

from app.config import settings
from app.errors import InvalidInput, PipelineError, Unexpected
from app.providers.base import Quote, ResolvedAccount, ResolvedToken, UnsignedTransaction
from app.providers.jupiter import JupiterProvider
from app.providers.registry import ProviderRegistry
from app.services.addresses import AddressResolver, parse_address
from app.services.amounts import NATIVE_DECIMALS, parse_amount, scale, unscale
from app.services.intents import QuoteIntent, StakeIntent, SwapIntent, TransactionIntent, TransferIntent
from app.services.tokens import SOL_MINT, TokenResolver
from app.services.transactions import TransactionBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_SLIPPAGE_BPS = 10_000


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TransferResult:
    transaction: UnsignedTransaction
    sender: str
    recipient: ResolvedAccount
    destination_input: str
    amount: float
    lamports: int
    timestamp: str
    unit: str = "SOL"


@dataclass
class SwapResult:
    transaction: Optional[UnsignedTransaction]
    quote: Quote
    input_token: ResolvedToken
    output_token: ResolvedToken
    input_amount: float
    expected_output_amount: float
    timestamp: str

    @property
    def decimals_fallback(self) -> bool:
        return self.input_token.decimals_defaulted or self.output_token.decimals_defaulted


class TransactionPipeline:
    def __init__(
        self,
        addresses: AddressResolver,
        tokens: TokenResolver,
        jupiter: JupiterProvider,
        builder: TransactionBuilder,
    ):
        self.addresses = addresses
        self.tokens = tokens
        self.jupiter = jupiter
        self.builder = builder

    @classmethod
    def from_registry(cls, registry: ProviderRegistry) -> "TransactionPipeline":
        return cls(
            addresses=AddressResolver(registry.name_providers()),
            tokens=TokenResolver(registry.jupiter),
            jupiter=registry.jupiter,
            builder=TransactionBuilder(registry.rpc, registry.jupiter),
        )

    # -- validation ---------------------------------------------------------

    @staticmethod
    def _require_amount(amount) -> None:
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            raise InvalidInput("Amount is required", stage="validate")
        parse_amount(amount)

    @staticmethod
    def _require_caller(caller: Optional[str]) -> str:
        if not caller or not caller.strip():
            raise InvalidInput("user_public_key is required", stage="validate")
        pubkey = parse_address(caller)
        if pubkey is None:
            raise InvalidInput(f"user_public_key is not a valid public key: {caller!r}", stage="validate")
        return str(pubkey)

    @staticmethod
    def _slippage(slippage_bps: Optional[int]) -> int:
        if slippage_bps is None:
            return settings.default_slippage_bps
        if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int) or not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
            raise InvalidInput(f"slippage_bps must be between 0 and {MAX_SLIPPAGE_BPS}", stage="validate")
        return slippage_bps

    # -- stages -------------------------------------------------------------

    async def _stage(self, name: str, aw: Awaitable[T]) -> T:
        try:
            return await aw
        except PipelineError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in {name} stage")
            raise Unexpected(f"{name} failed: {e}", stage=name) from e

    async def execute(self, intent: TransactionIntent):
        if isinstance(intent, TransferIntent):
            return await self.transfer(intent)
        if isinstance(intent, SwapIntent):
            return await self.swap(intent)
        if isinstance(intent, StakeIntent):
            return await self.stake(intent)
        raise TypeError(f"Unsupported intent: {type(intent).__name__}")

    async def transfer(self, intent: TransferIntent) -> TransferResult:
        if not intent.destination or not intent.destination.strip():
            raise InvalidInput("to_address is required", stage="validate")
        self._require_amount(intent.amount)
        sender = self._require_caller(intent.caller)

        # SOL decimals are fixed, so sub-lamport amounts fail before any network call
        lamports = scale(intent.amount, NATIVE_DECIMALS)
        recipient = await self._stage("resolve", self.addresses.resolve(intent.destination))
        tx = await self._stage("build", self.builder.build_transfer(sender, recipient.address, lamports))

        return TransferResult(
            transaction=tx,
            sender=sender,
            recipient=recipient,
            destination_input=intent.destination.strip(),
            amount=unscale(lamports, NATIVE_DECIMALS),
            lamports=lamports,
            timestamp=utc_timestamp(),
        )

    async def _quote(
        self, input_token: ResolvedToken, output_token: ResolvedToken, amount, slippage_bps: int
    ) -> tuple[Quote, int]:
        base_units = scale(amount, input_token.decimals)
        logger.info(
            f"Quoting {base_units} {input_token.symbol} ({input_token.mint}) -> "
            f"{output_token.symbol} ({output_token.mint}), slippage {slippage_bps} bps"
        )
        quote = await self._stage(
            "quote", self.jupiter.get_quote(input_token.mint, output_token.mint, base_units, slippage_bps)
        )
        return quote, base_units

    async def _resolve_pair(self, input_token: Optional[str], output_token: Optional[str]):
        return await self._stage(
            "resolve",
            asyncio.gather(
                self.tokens.resolve_token(input_token, "SOL"),
                self.tokens.resolve_token(output_token, "USDC"),
            ),
        )

    def _swap_result(
        self, tx: Optional[UnsignedTransaction], quote: Quote, base_units: int,
        input_token: ResolvedToken, output_token: ResolvedToken,
    ) -> SwapResult:
        return SwapResult(
            transaction=tx,
            quote=quote,
            input_token=input_token,
            output_token=output_token,
            input_amount=unscale(base_units, input_token.decimals),
            expected_output_amount=unscale(quote.output_amount, output_token.decimals),
            timestamp=utc_timestamp(),
        )

    async def swap(self, intent: SwapIntent) -> SwapResult:
        self._require_amount(intent.amount)
        user = self._require_caller(intent.caller)
        slippage = self._slippage(intent.slippage_bps)

        input_token, output_token = await self._resolve_pair(intent.input_token, intent.output_token)
        quote, base_units = await self._quote(input_token, output_token, intent.amount, slippage)
        tx = await self._stage("build", self.builder.build_from_quote(quote, user))
        return self._swap_result(tx, quote, base_units, input_token, output_token)

    async def stake(self, intent: StakeIntent) -> SwapResult:
        self._require_amount(intent.amount)
        user = self._require_caller(intent.caller)
        slippage = self._slippage(intent.slippage_bps)

        sol = ResolvedToken(mint=SOL_MINT, symbol="SOL", decimals=NATIVE_DECIMALS)
        lst = await self._stage("resolve", self.tokens.resolve_lst(intent.lst))
        logger.info(f"Staking into {lst.symbol} ({lst.mint})")

        quote, base_units = await self._quote(sol, lst, intent.amount, slippage)
        tx = await self._stage("build", self.builder.build_from_quote(quote, user))
        return self._swap_result(tx, quote, base_units, sol, lst)

    async def preview(self, intent: QuoteIntent) -> SwapResult:
        self._require_amount(intent.amount)
        slippage = self._slippage(intent.slippage_bps)

        input_token, output_token = await self._resolve_pair(intent.input_token, intent.output_token)
        quote, base_units = await self._quote(input_token, output_token, intent.amount, slippage)
        return self._swap_result(None, quote, base_units, input_token, output_token)
