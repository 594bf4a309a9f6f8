from __future__ import annotations

from typing import Dict, List

from .base import RssSource, SourceConfig, fetch_one
from .bbc_news import PARSER as bbc_news
from .guardian_world import PARSER as guardian_world
from .techcrunch import PARSER as techcrunch
from .wired import PARSER as wired
from .business_insider import PARSER as business_insider
from .espn import PARSER as espn

# Registry keyed by display name; insertion order is the fetch order.
REGISTRY: Dict[str, RssSource] = {
    bbc_news.config.name: bbc_news,
    guardian_world.config.name: guardian_world,
    techcrunch.config.name: techcrunch,
    wired.config.name: wired,
    business_insider.config.name: business_insider,
    espn.config.name: espn,
}

def list_source_names() -> List[str]:
    return list(REGISTRY.keys())

def list_sources() -> List[RssSource]:
    return list(REGISTRY.values())

def get_parser(source_name: str) -> RssSource:
    try:
        return REGISTRY[source_name]
    except KeyError:
        raise KeyError(f"Unknown source: {source_name}")


__all__ = [
    "REGISTRY",
    "RssSource",
    "SourceConfig",
    "fetch_one",
    "get_parser",
    "list_source_names",
    "list_sources",
]
