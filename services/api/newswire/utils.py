import re
import datetime as dt
from typing import Optional
from urllib.parse import quote, unquote, urlparse, urlunparse, parse_qsl, urlencode

from dateutil import parser as dtparser

# Characters left alone by JavaScript's encodeURIComponent; ids must stay
# compatible with links produced by existing clients.
_ID_SAFE = "-_.!~*'()"

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def encode_id(value: str) -> str:
    return quote(value or "", safe=_ID_SAFE)


def decode_id(value: str) -> str:
    return unquote(value or "")


def canonicalize_url(url: str) -> str:
    try:
        p = urlparse(url)
        q = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True)
             if not k.lower().startswith("utm_") and k.lower() not in ("yclid", "gclid", "fbclid")]
        new = p._replace(query=urlencode(q, doseq=True), fragment="")
        return urlunparse(new)
    except ValueError:
        return url


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def utc_now_iso() -> str:
    now = dt.datetime.now(dt.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: Optional[str]) -> Optional[dt.datetime]:
    """Parse an ISO-8601 or RFC 822 date; naive values are taken as UTC."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = dtparser.parse(raw)
    except (ValueError, OverflowError):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def normalize_pub_date(raw: Optional[str]) -> str:
    """Return an ISO-8601 publication date, falling back to the current time.

    Dates that already are ISO-8601 are returned verbatim so clients see the
    exact value the publisher sent.
    """
    raw = (raw or "").strip()
    if not raw:
        return utc_now_iso()
    try:
        dtparser.isoparse(raw)
        return raw
    except (ValueError, OverflowError):
        pass
    value = parse_timestamp(raw)
    if value is None:
        return utc_now_iso()
    return value.astimezone(dt.timezone.utc).isoformat()


def sort_key(raw: Optional[str]) -> dt.datetime:
    return parse_timestamp(raw) or _EPOCH
