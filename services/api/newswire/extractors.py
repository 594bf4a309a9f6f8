import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from .utils import normalize_whitespace

# NOTE: Feeds are parsed with the standard library XML parser rather than
# `feedparser`; we only need a handful of RSS/Atom/Media RSS fields.
import xml.etree.ElementTree as ET

logger = logging.getLogger(__name__)

_IMG_RE = re.compile(r'<img[^>]+src="([^">]+)"')
_ENCLOSURE_RE = re.compile(r'<enclosure[^>]+url="([^">]+)"')


def extract_image(content: Optional[str]) -> Optional[str]:
    """Best-effort image URL from item markup: <img src> first, then <enclosure url>."""
    if not content:
        return None
    for rx in (_IMG_RE, _ENCLOSURE_RE):
        m = rx.search(content)
        if m:
            return m.group(1)
    return None


def html_to_text(html: str) -> str:
    if not html:
        return ""
    if "<" not in html:
        return normalize_whitespace(html)
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return normalize_whitespace(soup.get_text(" ", strip=True))


def _strip_ns(tag: str) -> str:
    return tag.split('}', 1)[1] if tag.startswith('{') and '}' in tag else tag


def _prefix(tag: str) -> str:
    # "{http://search.yahoo.com/mrss/}content" -> "http://search.yahoo.com/mrss/"
    return tag[1:].split('}', 1)[0] if tag.startswith('{') and '}' in tag else ""


_MEDIA_NS = "http://search.yahoo.com/mrss/"
_CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"


def _is_media(ch: ET.Element, name: str) -> bool:
    return _prefix(ch.tag) == _MEDIA_NS and _strip_ns(ch.tag) == name


def _raw_text(node: Optional[ET.Element]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def _find_child(parent: ET.Element, names: List[str], ns: Optional[str] = None) -> Optional[ET.Element]:
    # Without an explicit namespace, Media RSS elements (media:title,
    # media:description, ...) never shadow the plain ones.
    for ch in list(parent):
        if _strip_ns(ch.tag) not in names:
            continue
        prefix = _prefix(ch.tag)
        if (ns is None and prefix != _MEDIA_NS) or prefix == ns:
            return ch
    return None


def _find_children(parent: ET.Element, name: str) -> List[ET.Element]:
    return [ch for ch in list(parent) if _strip_ns(ch.tag) == name]


def _parse_entry(e: ET.Element) -> Dict[str, Any]:
    title = normalize_whitespace(_raw_text(_find_child(e, ["title"])))

    # link: RSS <link>text</link>, Atom <link rel="alternate" href="..."/>
    link = ""
    for link_el in _find_children(e, "link"):
        if _prefix(link_el.tag) not in ("", "http://www.w3.org/2005/Atom"):
            continue
        rel = link_el.attrib.get("rel", "alternate")
        href = (link_el.attrib.get("href") or "").strip()
        if href and rel == "alternate":
            link = href
            break
        if not href and _raw_text(link_el):
            link = _raw_text(link_el)
            break

    # rich content: RSS <content:encoded>, Atom <content>
    content = _raw_text(_find_child(e, ["encoded"], ns=_CONTENT_NS))
    if not content:
        content = _raw_text(_find_child(e, ["content"]))

    description = ""
    for name in ["description", "summary"]:
        val = _raw_text(_find_child(e, [name]))
        if val:
            description = val
            break

    pub_date = ""
    for name in ["pubDate", "published", "updated", "date"]:
        v = _raw_text(_find_child(e, [name]))
        if v:
            pub_date = v
            break

    media_content = [dict(ch.attrib) for ch in list(e) if _is_media(ch, "content")]
    media_thumbnail = [dict(ch.attrib) for ch in list(e) if _is_media(ch, "thumbnail")]
    media_group = [
        [dict(mc.attrib) for mc in list(g) if _is_media(mc, "content")]
        for g in list(e) if _is_media(g, "group")
    ]
    enclosure_el = _find_child(e, ["enclosure"], ns="")

    return {
        "title": title,
        "link": link,
        "content": content,
        "description": description,
        "pub_date": pub_date,
        "media_content": media_content,
        "media_thumbnail": media_thumbnail,
        "enclosure": dict(enclosure_el.attrib) if enclosure_el is not None else None,
        "media_group": media_group,
    }


def parse_feed(data: bytes) -> List[Dict[str, Any]]:
    """Parse RSS 2.0 / Atom bytes into raw entry dicts, keeping feed order."""
    root = ET.fromstring(data)
    root_tag = _strip_ns(root.tag)

    entries: List[ET.Element] = []
    if root_tag == "rss":
        channel = _find_child(root, ["channel"])
        entries = _find_children(channel if channel is not None else root, "item")
    elif root_tag == "feed":
        entries = _find_children(root, "entry")
    else:
        # RDF / unknown containers
        entries = _find_children(root, "item") or _find_children(root, "entry")
        if not entries:
            channel = _find_child(root, ["channel"])
            if channel is not None:
                entries = _find_children(channel, "item")

    return [_parse_entry(e) for e in entries]


async def fetch_rss(client: httpx.AsyncClient, url: str) -> List[Dict[str, Any]]:
    r = await client.get(url)
    r.raise_for_status()
    items = parse_feed(r.content)
    logger.debug("parsed %d entries from %s", len(items), url)
    return items
