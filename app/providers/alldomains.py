"""
AllDomains adapter. Covers arbitrary TLDs (.abc, .bonk, .superteam, ...),
so it runs before the .sol-specific name service.
"""

import logging
from typing import Optional

import httpx
from solders.pubkey import Pubkey

from app.config import settings
from app.errors import ProviderError
from app.providers.base import NameProvider, ProviderSlug

logger = logging.getLogger(__name__)


def _extract_owner(data) -> Optional[str]:
    if isinstance(data, str):
        return data or None
    if not isinstance(data, dict):
        return None
    for key in ("owner", "result", "address"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict):
            nested = _extract_owner(value)
            if nested:
                return nested
    if isinstance(data.get("data"), (dict, str)):
        return _extract_owner(data["data"])
    return None


class AllDomainsProvider(NameProvider):
    slug = ProviderSlug.ALLDOMAINS
    name = "AllDomains"

    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self._http = http

    async def initialize(self) -> None:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    async def close(self) -> None:
        if self._http:
            await self._http.aclose()

    async def try_resolve(self, domain: str) -> Optional[str]:
        resp = await self._http.get(f"{settings.alldomains_api_url}/{domain}")
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise ProviderError(f"HTTP {resp.status_code}", "alldomains", resp.status_code, resp.text)

        owner = _extract_owner(resp.json())
        if not owner:
            return None
        # Raises ValueError on garbage, which the resolver treats as not found
        return str(Pubkey.from_string(owner))
