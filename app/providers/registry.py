"""Provider registry: singleton that owns the shared outbound clients."""

import logging

from app.providers.alldomains import AllDomainsProvider
from app.providers.base import BaseProvider, NameProvider, ProviderSlug
from app.providers.jupiter import JupiterProvider
from app.providers.sns import SnsProvider
from app.providers.solana_rpc import SolanaRpcProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    def __init__(self):
        self.rpc = SolanaRpcProvider()
        self.jupiter = JupiterProvider()
        self._providers: dict[str, BaseProvider] = {
            ProviderSlug.SOLANA_RPC: self.rpc,
            ProviderSlug.JUPITER: self.jupiter,
            ProviderSlug.ALLDOMAINS: AllDomainsProvider(),
            ProviderSlug.SNS: SnsProvider(self.rpc),
        }

    def name_providers(self) -> list[NameProvider]:
        # Broad coverage first, then the .sol service with its own fallbacks
        return [self._providers[ProviderSlug.ALLDOMAINS], self._providers[ProviderSlug.SNS]]

    async def initialize_all(self) -> None:
        for slug, p in self._providers.items():
            try:
                await p.initialize()
                logger.info(f"Initialized provider: {p.name}")
            except Exception as e:
                logger.warning(f"Failed to initialize {p.name}: {e}")

    async def close_all(self) -> None:
        for p in self._providers.values():
            try:
                await p.close()
            except Exception as e:
                logger.debug(f"Error closing {p.name}: {e}")


provider_registry = ProviderRegistry()
