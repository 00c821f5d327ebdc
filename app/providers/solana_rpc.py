"""Solana JSON-RPC adapter. Reads only: blockhashes and raw account data."""

import logging
from typing import Optional

from solana.rpc.async_api import AsyncClient as SolanaClient
from solana.rpc.commitment import Confirmed
from solders.hash import Hash
from solders.pubkey import Pubkey

from app.config import settings
from app.providers.base import BaseProvider, ProviderSlug

logger = logging.getLogger(__name__)


class SolanaRpcProvider(BaseProvider):
    slug = ProviderSlug.SOLANA_RPC
    name = "Solana RPC"

    def __init__(self, client: Optional[SolanaClient] = None):
        self._client = client

    async def initialize(self) -> None:
        if self._client is None:
            self._client = SolanaClient(settings.solana_rpc_url, commitment=Confirmed)

    async def close(self) -> None:
        if self._client:
            await self._client.close()

    async def get_latest_blockhash(self) -> tuple[Hash, int]:
        resp = await self._client.get_latest_blockhash()
        return resp.value.blockhash, resp.value.last_valid_block_height

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        resp = await self._client.get_account_info(address)
        if resp.value is None:
            return None
        return bytes(resp.value.data)
