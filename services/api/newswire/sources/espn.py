from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='ESPN',
    url='https://www.espn.com/espn/rss/news',
    category='sports',
))
