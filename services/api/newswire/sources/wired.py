from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='Wired',
    url='https://www.wired.com/feed/rss',
    category='technology',
))
