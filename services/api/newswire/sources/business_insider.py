from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='Business Insider',
    url='https://markets.businessinsider.com/rss/news',
    category='business',
))
