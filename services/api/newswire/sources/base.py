from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..errors import SourceFetchError
from ..extractors import extract_image, fetch_rss
from ..models import NewsItem
from ..utils import encode_id, normalize_pub_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceConfig:
    name: str
    url: str
    category: str
    kind: str = "rss"


def _first_url(entries: List[Dict[str, str]]) -> Optional[str]:
    if entries:
        return entries[0].get("url") or None
    return None


def resolve_image(entry: Dict[str, Any]) -> Optional[str]:
    """Pick an image for an entry.

    Order: media:content, media:thumbnail, enclosure, first image inside a
    media:group, then an <img>/<enclosure> found in the markup itself.
    """
    url = _first_url(entry.get("media_content") or [])
    if url:
        return url
    url = _first_url(entry.get("media_thumbnail") or [])
    if url:
        return url
    enclosure = entry.get("enclosure") or {}
    if enclosure.get("url"):
        return enclosure["url"]
    for group in (entry.get("media_group") or [])[:1]:
        for media in group:
            if (media.get("type") or "").startswith("image/") and media.get("url"):
                return media["url"]
    return extract_image(entry.get("content") or entry.get("description"))


class SourceParser:
    config: SourceConfig

    def __init__(self, config: SourceConfig):
        self.config = config


class RssSource(SourceParser):
    def normalize(self, entry: Dict[str, Any]) -> NewsItem:
        title = entry.get("title") or ""
        body = entry.get("content") or entry.get("description") or ""
        return NewsItem(
            id=encode_id(title),
            title=title,
            link=entry.get("link") or "",
            description=body,
            pub_date=normalize_pub_date(entry.get("pub_date")),
            # Always the configured values, never what the feed says about itself.
            source=self.config.name,
            category=self.config.category,
            image_url=resolve_image(entry),
            full_content=body,
        )

    async def fetch_items(self, client: httpx.AsyncClient) -> List[NewsItem]:
        try:
            entries = await fetch_rss(client, self.config.url)
            return [self.normalize(e) for e in entries]
        except Exception as e:
            raise SourceFetchError(self.config.name, str(e) or type(e).__name__) from e


async def fetch_one(source: RssSource, client: httpx.AsyncClient) -> List[NewsItem]:
    """Fetch a single source; failures are logged and yield no items."""
    try:
        items = await source.fetch_items(client)
    except SourceFetchError as e:
        logger.warning("feed fetch failed source=%s url=%s: %s", source.config.name, source.config.url, e)
        return []
    except Exception:
        logger.exception("unexpected feed error source=%s", source.config.name)
        return []
    logger.info("feed fetched source=%s items=%d", source.config.name, len(items))
    return items
