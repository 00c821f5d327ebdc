"""
Provider abstraction layer for the external services the pipeline consumes.
Name services, the quoting oracle and the chain RPC all implement BaseProvider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ProviderSlug(str, Enum):
    JUPITER = "jupiter"
    SOLANA_RPC = "solana_rpc"
    ALLDOMAINS = "alldomains"
    SNS = "sns"


class DecimalsSource(str, Enum):
    KNOWN = "known"
    METADATA = "metadata"
    DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedAccount:
    address: str
    source: str = "address"


@dataclass(frozen=True)
class ResolvedToken:
    mint: str
    symbol: str
    decimals: int
    decimals_source: DecimalsSource = DecimalsSource.KNOWN

    @property
    def decimals_defaulted(self) -> bool:
        return self.decimals_source == DecimalsSource.DEFAULT


@dataclass
class TokenInfo:
    mint: str
    symbol: str
    name: Optional[str]
    decimals: Optional[int]
    icon: Optional[str] = None
    is_verified: Optional[bool] = None
    tags: list[str] = field(default_factory=list)
    usd_price: Optional[float] = None
    mcap: Optional[float] = None
    liquidity: Optional[float] = None
    organic_score: Optional[float] = None
    organic_score_label: Optional[str] = None
    holder_count: Optional[int] = None
    fdv: Optional[float] = None


@dataclass(frozen=True)
class Quote:
    input_mint: str
    output_mint: str
    input_amount: int
    output_amount: int
    slippage_bps: int
    raw: dict


@dataclass(frozen=True)
class UnsignedTransaction:
    payload_base64: str
    fee_payer: str
    expiry_block_reference: Optional[int]
    recent_blockhash: Optional[str] = None


class BaseProvider(ABC):
    slug: ProviderSlug
    name: str

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class NameProvider(BaseProvider):
    """A naming system that can map a domain to its owner account."""

    @abstractmethod
    async def try_resolve(self, domain: str) -> Optional[str]:
        """Return the owner address for ``domain``, or None when not found.

        Implementations may raise; the address resolver treats any exception
        as "not found" and moves on to the next provider.
        """
