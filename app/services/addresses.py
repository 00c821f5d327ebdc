"""Resolve a wallet address or domain name to its canonical account."""

import logging
from typing import Optional

from solders.pubkey import Pubkey

from app.errors import InvalidDestination, UnresolvableDestination
from app.providers.base import NameProvider, ResolvedAccount

logger = logging.getLogger(__name__)


def parse_address(value: str) -> Optional[Pubkey]:
    try:
        return Pubkey.from_string(value.strip())
    except ValueError:
        return None


def is_address(value: str) -> bool:
    return parse_address(value) is not None


class AddressResolver:
    """Tries the raw address first, then each name provider in order."""

    def __init__(self, providers: list[NameProvider]):
        self.providers = providers

    async def resolve(self, value: str) -> ResolvedAccount:
        raw = (value or "").strip()
        pubkey = parse_address(raw)
        if pubkey is not None:
            return ResolvedAccount(address=str(pubkey), source="address")

        domain = raw.lower()
        if "." not in domain:
            raise InvalidDestination(f"Invalid address or domain: {raw!r}", stage="resolve")

        for provider in self.providers:
            try:
                owner = await provider.try_resolve(domain)
            except Exception as e:
                logger.debug(f"{provider.name} could not resolve {domain}: {e}")
                continue
            if owner:
                logger.info(f"Resolved {domain} -> {owner} via {provider.name}")
                return ResolvedAccount(address=owner, source=provider.slug.value)

        chain = " -> ".join(p.slug.value for p in self.providers)
        logger.warning(f"No provider could resolve {domain} (tried {chain})")
        raise UnresolvableDestination(f"Failed to resolve domain {domain!r} (tried {chain})", stage="resolve")
