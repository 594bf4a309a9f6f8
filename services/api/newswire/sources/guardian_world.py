from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='The Guardian',
    url='https://www.theguardian.com/world/rss',
    category='world',
))
