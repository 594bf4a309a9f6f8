from __future__ import annotations

import logging

from .cache import NewsCache
from .errors import NotFoundError
from .models import NewsItem
from .utils import decode_id, encode_id

logger = logging.getLogger(__name__)


async def resolve_item(cache: NewsCache, item_id: str) -> NewsItem:
    """Find a cached item by id.

    Ids travel through URL path segments, so the caller may hand us the raw
    title, the encoded id, or something in between. Tried in order: exact
    match, encoding the given id, decoding the stored id.
    """
    items = await cache.get_items()
    encoded = encode_id(item_id)
    for it in items:
        if it.id == item_id or it.id == encoded or decode_id(it.id) == item_id:
            return it

    logger.warning(
        "news item not found id=%r encoded=%r available=%d",
        item_id, encoded, len(items),
    )
    raise NotFoundError(item_id)
