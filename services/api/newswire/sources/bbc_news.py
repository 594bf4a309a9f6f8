from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='BBC News',
    url='http://feeds.bbci.co.uk/news/rss.xml',
    category='world',
))
