from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import json
import logging
import time
from typing import Any, Dict, Optional

from . import __version__
from .cache import NewsCache
from .config import settings
from .errors import AggregateFetchError, EnrichmentError, NotFoundError, SearchBridgeError
from .llm_client import DEFAULT_SUMMARY_WORDS, CompletionClient
from .models import FeedActionIn, NewsItem, SearchIn
from .resolver import resolve_item
from .search import SearchBridge
from .sources import list_sources

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def _setup_logging() -> None:
    level = (settings.log_level or "INFO").upper().strip() or "INFO"
    logging.basicConfig(level=level, format="%(message)s")

    class JsonFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            payload: Dict[str, Any] = {
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info:
                payload["exc"] = self.formatException(record.exc_info)
            return json.dumps(payload, ensure_ascii=False)

    root = logging.getLogger()
    for h in root.handlers:
        h.setFormatter(JsonFormatter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Process-wide state lives on app.state; handlers get it through Depends.
    _setup_logging()
    completion = CompletionClient(settings)
    app.state.news_cache = NewsCache(list_sources())
    app.state.completion = completion
    app.state.search_bridge = SearchBridge(completion, settings)
    if not completion.configured:
        logger.warning("LLM_API_URL / LLM_API_KEY not set; summaries and fact-checks will fail")
    logger.info("newswire started sources=%d", len(app.state.news_cache.sources))
    yield
    logger.info("newswire stopped")


app = FastAPI(title="Newswire", version=__version__, lifespan=lifespan)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    body: Dict[str, Any] = {"error": exc.error}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": str(exc.errors())[:500]},
    )


# Dependencies: handlers never reach for module globals so tests can swap these.

def get_news_cache(request: Request) -> NewsCache:
    return request.app.state.news_cache


def get_completion(request: Request) -> CompletionClient:
    return request.app.state.completion


def get_search_bridge(request: Request) -> SearchBridge:
    return request.app.state.search_bridge


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/sources")
def sources(cache: NewsCache = Depends(get_news_cache)):
    return {
        "ok": True,
        "sources": [
            {"name": s.config.name, "url": s.config.url, "category": s.config.category}
            for s in cache.sources
        ],
    }


@app.get("/feed")
async def read_feed(cache: NewsCache = Depends(get_news_cache)):
    try:
        items = await cache.get_items()
    except AggregateFetchError as e:
        logger.error("feed unavailable: %s", e)
        raise ApiError(500, "Failed to process news", details=str(e))
    return [it.to_json() for it in items]


async def _fact_check(item: NewsItem, completion: CompletionClient) -> Dict[str, Any]:
    try:
        report = await completion.fact_check(item.title, item.body)
    except EnrichmentError:
        logger.exception("fact-check failed id=%s", item.id)
        raise ApiError(500, "Failed to generate fact-check report")
    return {
        "id": item.id,
        "title": item.title,
        "factCheck": report,
        "source": item.source,
        "category": item.category,
        "pubDate": item.pub_date,
    }


async def _custom_summary(item: NewsItem, length: int, completion: CompletionClient) -> Dict[str, Any]:
    try:
        summary = await completion.summarize(item.body, length)
    except EnrichmentError:
        logger.exception("custom summary failed id=%s length=%d", item.id, length)
        raise ApiError(500, "Failed to generate summary")
    return {
        "id": item.id,
        "title": item.title,
        "summary": summary,
        "source": item.source,
        "category": item.category,
        "pubDate": item.pub_date,
    }


async def _default_summary(item: NewsItem, completion: CompletionClient) -> Dict[str, Any]:
    try:
        summary = await completion.summarize(item.body)
    except EnrichmentError:
        logger.exception("summary failed id=%s", item.id)
        raise ApiError(500, "Failed to generate default summary")
    out = {
        "id": item.id,
        "title": item.title,
        "content": item.body,
        "summary": summary,
        "imageUrl": item.image_url,
        "source": item.source,
        "category": item.category,
        "pubDate": item.pub_date,
    }
    if item.image_url is None:
        del out["imageUrl"]
    return out


@app.post("/feed")
async def enrich_item(
    body: FeedActionIn,
    cache: NewsCache = Depends(get_news_cache),
    completion: CompletionClient = Depends(get_completion),
):
    """Summarize or fact-check one cached item.

    action: none (default summary) | "fact-check" | "custom-summary" (uses `length`).
    """
    t0 = time.time()
    logger.info("/feed enrich id=%r action=%s length=%s", body.id, body.action, body.length)
    if not body.id:
        raise ApiError(400, "News item ID is required and cannot be empty")

    try:
        item = await resolve_item(cache, body.id)
        if body.action == "fact-check":
            out = await _fact_check(item, completion)
        elif body.action == "custom-summary":
            out = await _custom_summary(item, body.length or DEFAULT_SUMMARY_WORDS, completion)
        else:
            out = await _default_summary(item, completion)
    except ApiError:
        raise
    except NotFoundError:
        raise ApiError(404, "News item not found")
    except AggregateFetchError as e:
        logger.error("feed unavailable while resolving id=%r: %s", body.id, e)
        raise ApiError(500, "Failed to process news item", details=str(e))
    except Exception as e:
        logger.exception("news item processing failed id=%r action=%s", body.id, body.action)
        raise ApiError(500, "Failed to process news item", details=str(e) or type(e).__name__)
    logger.info("/feed enrich done id=%r action=%s took=%.2fs", item.id, body.action, time.time() - t0)
    return out


@app.post("/search")
async def search(body: SearchIn, bridge: SearchBridge = Depends(get_search_bridge)):
    try:
        result = await bridge.answer(body.query)
    except SearchBridgeError:
        logger.exception("search failed query=%r", body.query[:200])
        raise ApiError(500, "Failed to process your request")
    return {"response": result["text"], "searchResults": result["results"]}


# ---------------------------------------------------------------------------
# Compatibility routes: expose the same API under /api/* as well, plus the
# route names older frontends call (/api/rss, /api/llm-search).
# ---------------------------------------------------------------------------

_API_PREFIX = "/api"

def _register_prefixed_routes(prefix: str = _API_PREFIX) -> None:
    app.add_api_route(f"{prefix}/health", health, methods=["GET"])
    app.add_api_route(f"{prefix}/sources", sources, methods=["GET"])

    app.add_api_route(f"{prefix}/feed", read_feed, methods=["GET"])
    app.add_api_route(f"{prefix}/feed", enrich_item, methods=["POST"])
    app.add_api_route(f"{prefix}/search", search, methods=["POST"])

    # Legacy names
    app.add_api_route(f"{prefix}/rss", read_feed, methods=["GET"])
    app.add_api_route(f"{prefix}/rss", enrich_item, methods=["POST"])
    app.add_api_route(f"{prefix}/llm-search", search, methods=["POST"])

_register_prefixed_routes()
