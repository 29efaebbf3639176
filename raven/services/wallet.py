"""
raven.services.wallet — Address display helpers
=================================================

Turns raw wallet addresses into something readable in a notification:
an ENS-style name when a reverse-lookup API is configured and knows the
address, the elided ``0x1a...beef`` form otherwise.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

import httpx

from raven.constants import EXPLORER_ADDRESS_URL

logger = logging.getLogger(__name__)

ADDRESS_LENGTH = 42
DEFAULT_MAX_NAMES = 1024


def get_short_address(address: str) -> str:
    """``0x1a2b...`` → ``0x1a...beef``.  Anything that isn't a full address is returned as-is."""
    if len(address) < ADDRESS_LENGTH:
        return address
    return f"{address[0:4]}...{address[38:42]}"


def get_explorer_address(address: str) -> str:
    return EXPLORER_ADDRESS_URL.format(address=address)


class AddressResolver:
    """Resolves addresses to display names, memoising successful lookups.

    The memo is an LRU holding at most *max_names* entries.

    Parameters
    ----------
    client:
        Shared HTTP client.  When ``None`` no lookups are attempted.
    ens_api_url:
        Base URL of a reverse-lookup API answering ``GET <url>/<address>``
        with a JSON object carrying a ``name`` field.
    max_names:
        Most resolved names kept; the least recently used is dropped first.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        ens_api_url: str | None = None,
        max_names: int = DEFAULT_MAX_NAMES,
    ) -> None:
        self._client = client
        self._ens_api_url = ens_api_url.rstrip("/") if ens_api_url else None
        self._max_names = max_names
        self._names: OrderedDict[str, str] = OrderedDict()

    async def resolve(self, address: str) -> str:
        """Return the display name for *address* (never raises)."""
        cached = self._names.get(address)
        if cached is not None:
            self._names.move_to_end(address)
            return cached

        name = await self._lookup(address)
        if name:
            self._names[address] = name
            if len(self._names) > self._max_names:
                self._names.popitem(last=False)
            return name
        return get_short_address(address)

    async def _lookup(self, address: str) -> str | None:
        if self._client is None or not self._ens_api_url:
            return None
        try:
            response = await self._client.get(f"{self._ens_api_url}/{address}")
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Name lookup failed for %s: %s", address, exc)
            return None
        if not isinstance(payload, dict):
            return None
        return payload.get("name") or None
