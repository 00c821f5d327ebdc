"""Caller intents. A closed set: the pipeline rejects anything else."""

from dataclasses import dataclass
from typing import Optional, Union

Amount = Union[str, int, float]


@dataclass(frozen=True)
class TransferIntent:
    destination: Optional[str]
    amount: Optional[Amount]
    caller: Optional[str]


@dataclass(frozen=True)
class SwapIntent:
    input_token: Optional[str]
    output_token: Optional[str]
    amount: Optional[Amount]
    caller: Optional[str]
    slippage_bps: Optional[int] = None


@dataclass(frozen=True)
class StakeIntent:
    amount: Optional[Amount]
    caller: Optional[str]
    lst: Optional[str] = None
    slippage_bps: Optional[int] = None


@dataclass(frozen=True)
class QuoteIntent:
    """Read-only price preview; never turned into a transaction."""

    input_token: Optional[str]
    output_token: Optional[str]
    amount: Optional[Amount]
    slippage_bps: Optional[int] = None


TransactionIntent = Union[TransferIntent, SwapIntent, StakeIntent]
