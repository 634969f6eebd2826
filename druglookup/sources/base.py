from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..utils.config import Settings
from ..utils.rate_limit import TokenBucket
from ..utils.schemas import SearchCandidate


# transport-level failures an adapter recovers from locally
TRANSPORT_ERRORS = (httpx.HTTPError, ValueError)


class SourceAdapter:
    """
    Common plumbing for the async data providers.

    Subclasses implement `search` and `fetch_by_id`. Both must degrade to an
    empty result (or None) on transport failure; nothing raises to callers.
    The httpx client is shared and owned by whoever constructed it.
    """

    name: str = "base"

    def __init__(self, client: httpx.AsyncClient, settings: Optional[Settings] = None) -> None:
        self.client = client
        self.settings = settings or Settings()
        self.timeout = self.settings.request_timeout
        self.bucket = TokenBucket(self.settings.rate_limit_per_sec)

    @property
    def base_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None,
                   headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        await self.bucket.take(1)
        merged = self.base_headers.copy()
        if headers:
            merged.update(headers)
        return await self.client.get(url, params=params, headers=merged, timeout=self.timeout)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        response = await self._get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

    async def search(self, query: str, limit: int) -> List[SearchCandidate]:  # pragma: no cover - subclasses
        raise NotImplementedError

    async def fetch_by_id(self, drug_id: str) -> Optional[SearchCandidate]:  # pragma: no cover - subclasses
        raise NotImplementedError
