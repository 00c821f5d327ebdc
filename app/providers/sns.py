"""
Solana Name Service (Bonfida) adapter for .sol domains.

Three lookups are tried in order, each failing over to the next:
  1. direct resolve through the SNS SDK proxy
  2. SOL record (v2) under the fully qualified name
  3. derive the name registry key on our side and read its owner over RPC
"""

import hashlib
import logging
from typing import Awaitable, Callable, Optional

import httpx
from solders.pubkey import Pubkey

from app.config import settings
from app.errors import ProviderError
from app.providers.base import NameProvider, ProviderSlug
from app.providers.solana_rpc import SolanaRpcProvider

logger = logging.getLogger(__name__)

NAME_PROGRAM_ID = Pubkey.from_string("namesLPneVptA9Z5rqUDD9tMTWEJwofgaYwp8cawRkX")
ROOT_DOMAIN_ACCOUNT = Pubkey.from_string("58PwtjSDuFHuUkYjH9BYnnQKHfwo9reZhC2zMJv9JPkx")
HASH_PREFIX = "SPL Name Service"
SOL_SUFFIX = ".sol"

# NameRegistryState header: parent_name (32) | owner (32) | class (32)
OWNER_OFFSET = 32
HEADER_LEN = 96


def strip_sol_suffix(domain: str) -> str:
    if domain.endswith(SOL_SUFFIX):
        return domain[: -len(SOL_SUFFIX)]
    return domain


def get_hashed_name(name: str) -> bytes:
    return hashlib.sha256((HASH_PREFIX + name).encode()).digest()


def get_name_account_key(
    hashed_name: bytes, name_class: Optional[Pubkey] = None, parent: Optional[Pubkey] = None
) -> Pubkey:
    seeds = [
        hashed_name,
        bytes(name_class) if name_class else bytes(32),
        bytes(parent) if parent else bytes(32),
    ]
    key, _ = Pubkey.find_program_address(seeds, NAME_PROGRAM_ID)
    return key


def get_domain_key(name: str) -> Pubkey:
    """Registry key for ``name`` (``bonfida`` or ``dex.bonfida``, no .sol)."""
    labels = strip_sol_suffix(name).split(".")
    if len(labels) == 1:
        return get_name_account_key(get_hashed_name(labels[0]), parent=ROOT_DOMAIN_ACCOUNT)
    if len(labels) == 2:
        parent_key = get_name_account_key(get_hashed_name(labels[1]), parent=ROOT_DOMAIN_ACCOUNT)
        return get_name_account_key(get_hashed_name("\0" + labels[0]), parent=parent_key)
    raise ValueError(f"Unsupported domain depth: {name}")


def _proxy_result(data) -> Optional[str]:
    if not isinstance(data, dict) or data.get("s") != "ok":
        return None
    result = data.get("result")
    if isinstance(result, dict):
        result = result.get("deserialized") or result.get("data") or result.get("value")
    return result if isinstance(result, str) and result else None


class SnsProvider(NameProvider):
    slug = ProviderSlug.SNS
    name = "SNS"

    def __init__(self, rpc: SolanaRpcProvider, http: Optional[httpx.AsyncClient] = None):
        self._rpc = rpc
        self._http = http

    async def initialize(self) -> None:
        if self._http is None:
            self._http = httpx.AsyncClient(base_url=settings.sns_proxy_url, timeout=settings.http_timeout_seconds)

    async def close(self) -> None:
        if self._http:
            await self._http.aclose()

    async def _proxy_get(self, path: str) -> Optional[str]:
        resp = await self._http.get(path)
        if resp.is_error:
            raise ProviderError(f"HTTP {resp.status_code}", "sns", resp.status_code, resp.text)
        return _proxy_result(resp.json())

    async def resolve_direct(self, domain: str) -> Optional[str]:
        if not domain.endswith(SOL_SUFFIX):
            return None
        return await self._proxy_get(f"/resolve/{strip_sol_suffix(domain)}")

    async def resolve_sol_record(self, domain: str) -> Optional[str]:
        return await self._proxy_get(f"/record-v2/{domain}/SOL")

    async def resolve_registry_owner(self, domain: str) -> Optional[str]:
        if not domain.endswith(SOL_SUFFIX):
            return None
        key = get_domain_key(domain)
        data = await self._rpc.get_account_data(key)
        if not data or len(data) < HEADER_LEN:
            return None
        owner = Pubkey.from_bytes(data[OWNER_OFFSET : OWNER_OFFSET + 32])
        if owner == Pubkey.default():
            return None
        return str(owner)

    @property
    def strategies(self) -> list[tuple[str, Callable[[str], Awaitable[Optional[str]]]]]:
        return [
            ("resolve", self.resolve_direct),
            ("sol-record", self.resolve_sol_record),
            ("registry", self.resolve_registry_owner),
        ]

    async def try_resolve(self, domain: str) -> Optional[str]:
        for label, strategy in self.strategies:
            try:
                owner = await strategy(domain)
            except Exception as e:
                logger.debug(f"SNS {label} lookup failed for {domain}: {e}")
                continue
            if owner:
                # Normalise and reject anything that is not a public key
                try:
                    return str(Pubkey.from_string(owner))
                except ValueError:
                    logger.debug(f"SNS {label} returned a non-address for {domain}: {owner}")
                    continue
        raise ProviderError(f"Failed to resolve domain {domain}", "sns")
