from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from newswire.config import Settings
from newswire.errors import EnrichmentError, SourceFetchError
from newswire.models import NewsItem
from newswire.utils import encode_id
from newswire.sources import SourceConfig


def make_item(title: str, pub_date: str, *, source: str = "Test", category: str = "world", link: Optional[str] = None, **extra: Any) -> NewsItem:
    return NewsItem(
        id=encode_id(title),
        title=title,
        link=link if link is not None else f"https://example.com/{encode_id(title)}",
        description=extra.pop("description", f"<p>{title} body</p>"),
        pub_date=pub_date,
        source=source,
        category=category,
        full_content=extra.pop("full_content", f"<p>{title} body</p>"),
        **extra,
    )


class FakeSource:
    """Stands in for RssSource; returns canned items or raises."""

    def __init__(self, name: str, items: Optional[List[NewsItem]] = None, *, fail: bool = False, category: str = "world"):
        self.config = SourceConfig(name=name, url=f"https://{name.lower()}.example/rss", category=category)
        self.items = items or []
        self.fail = fail
        self.calls = 0

    async def fetch_items(self, client) -> List[NewsItem]:
        self.calls += 1
        if self.fail:
            raise SourceFetchError(self.config.name, "boom")
        return list(self.items)


class FakeCompletion:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def summarize(self, content: str, target_words: int = 200) -> str:
        self.calls.append({"op": "summarize", "content": content, "target_words": target_words})
        if self.fail:
            raise EnrichmentError("summarize failed")
        return f"summary:{target_words}"

    async def fact_check(self, title: str, content: str) -> str:
        self.calls.append({"op": "fact_check", "title": title, "content": content})
        if self.fail:
            raise EnrichmentError("fact-check failed")
        return f"report:{title}"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


RSS_SAMPLE = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Sample feed</title>
    <item>
      <title>A B</title>
      <link>https://example.com/a-b</link>
      <description>Short description</description>
      <pubDate>2024-01-01T00:00:00Z</pubDate>
      <media:thumbnail url="https://img.example.com/thumb.jpg" width="240"/>
    </item>
    <item>
      <title>Second story</title>
      <link>https://example.com/second</link>
      <description><![CDATA[<p>Intro <img src="https://img.example.com/inline.png" /></p>]]></description>
      <content:encoded><![CDATA[<p>Full <b>body</b> text</p>]]></content:encoded>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <media:group>
        <media:content url="https://video.example.com/clip.mp4" type="video/mp4"/>
        <media:content url="https://img.example.com/group.jpg" type="image/jpeg"/>
      </media:group>
    </item>
    <item>
      <description>No title or date here</description>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        llm_api_url="https://llm.example.com/openai/deployments/test/chat/completions",
        llm_api_version="2024-12-01-preview",
        llm_api_key="test-key",
        llm_timeout=5.0,
        llm_attempts=3,
        llm_retry_delay=0.0,
        search_url="https://search.example.com",
    )
