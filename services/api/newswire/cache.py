from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence

import httpx

from .config import settings
from .errors import AggregateFetchError
from .models import NewsItem
from .sources import RssSource, fetch_one
from .utils import canonicalize_url, sort_key

logger = logging.getLogger(__name__)


def merge_items(batches: Iterable[Sequence[NewsItem]], limit: int) -> List[NewsItem]:
    """Flatten per-source batches, drop repeated links, newest first, capped."""
    seen: set[str] = set()
    merged: List[NewsItem] = []
    for batch in batches:
        for it in batch:
            if it.link:
                key = canonicalize_url(it.link)
                if key in seen:
                    continue
                seen.add(key)
            merged.append(it)
    # stable: equal dates keep source order
    merged.sort(key=lambda it: sort_key(it.pub_date), reverse=True)
    return merged[:limit]


class NewsCache:
    """In-memory aggregate of all feed sources with a fixed expiry window.

    Not synchronized: two requests that both see an expired cache each run a
    refresh and the last one to finish wins.
    """

    def __init__(
        self,
        sources: Sequence[RssSource],
        *,
        ttl_seconds: Optional[float] = None,
        limit: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sources = list(sources)
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.limit = settings.feed_limit if limit is None else limit
        self._transport = transport
        self._clock = clock
        self.items: List[NewsItem] = []
        self.last_fetch_time: float = 0.0

    def is_fresh(self) -> bool:
        return bool(self.items) and (self._clock() - self.last_fetch_time) < self.ttl_seconds

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent},
            timeout=settings.request_timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def refresh(self) -> List[NewsItem]:
        now = self._clock()
        t0 = time.time()
        async with self._client() as client:
            batches = await asyncio.gather(*(fetch_one(s, client) for s in self.sources))

        items = merge_items(batches, self.limit)
        if not items:
            # Leave the cache as is so the next request retries right away.
            raise AggregateFetchError("No news items found from any source")

        self.items = items
        self.last_fetch_time = now
        logger.info(
            "feed cache refreshed sources=%d items=%d took=%.2fs",
            len(self.sources), len(items), time.time() - t0,
        )
        return items

    async def get_items(self) -> List[NewsItem]:
        if self.is_fresh():
            return self.items
        return await self.refresh()
