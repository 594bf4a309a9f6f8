from __future__ import annotations

import pytest

from newswire.cache import NewsCache
from newswire.errors import NotFoundError
from newswire.resolver import resolve_item
from newswire.utils import decode_id, encode_id

from conftest import FakeClock, FakeSource, make_item


def _cache(*titles: str) -> NewsCache:
    items = [make_item(t, f"2024-01-0{i + 1}T00:00:00Z") for i, t in enumerate(titles)]
    return NewsCache([FakeSource("A", items)], clock=FakeClock())


def test_encode_id_matches_uri_component_rules():
    assert encode_id("A B") == "A%20B"
    assert encode_id("Q&A: what's new? (part 1/2)") == "Q%26A%3A%20what's%20new%3F%20(part%201%2F2)"
    assert encode_id("café") == "caf%C3%A9"
    assert decode_id(encode_id("Q&A: 100% sure")) == "Q&A: 100% sure"


@pytest.mark.asyncio
async def test_encoded_and_raw_title_resolve_to_same_item():
    title = "Markets rally: 5% up"
    cache = _cache("Other story", title)

    by_id = await resolve_item(cache, encode_id(title))
    by_title = await resolve_item(cache, title)

    assert by_id is by_title
    assert by_id.title == title


@pytest.mark.asyncio
async def test_unknown_id_raises_not_found():
    cache = _cache("Known")
    with pytest.raises(NotFoundError):
        await resolve_item(cache, "unknown-id")


@pytest.mark.asyncio
async def test_resolve_populates_cache_first():
    src = FakeSource("A", [make_item("Fresh", "2024-01-01T00:00:00Z")])
    cache = NewsCache([src], clock=FakeClock())

    item = await resolve_item(cache, "Fresh")

    assert item.id == "Fresh"
    assert src.calls == 1
