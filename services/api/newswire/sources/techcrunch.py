from __future__ import annotations

from .base import SourceConfig, RssSource

PARSER = RssSource(SourceConfig(
    name='TechCrunch',
    url='https://techcrunch.com/feed/',
    category='technology',
))
