from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings, settings as default_settings
from .errors import SearchBridgeError
from .llm_client import CompletionClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions about news. "
    "Use the provided search results to inform your response. Be concise and accurate."
)

ANSWER_PARAMS: Dict[str, Any] = {
    "temperature": 0.7,
    "max_tokens": 500,
    "top_p": 0.95,
    "frequency_penalty": 0,
    "presence_penalty": 0,
}


class SearchBridge:
    """Query -> news search -> one grounded completion. No retries."""

    def __init__(
        self,
        completion: CompletionClient,
        cfg: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.completion = completion
        self.cfg = cfg or default_settings
        self._transport = transport

    async def search(self, query: str) -> List[Dict[str, Any]]:
        if not self.cfg.search_url:
            raise SearchBridgeError("search backend is not configured (SEARCH_URL)")
        payload = {
            "q": query,
            "format": "json",
            "engines": ["news"],
            "categories": ["news"],
        }
        try:
            async with httpx.AsyncClient(timeout=self.cfg.search_timeout, transport=self._transport) as client:
                r = await client.post(f"{self.cfg.search_url.rstrip('/')}/search", json=payload)
        except httpx.HTTPError as e:
            raise SearchBridgeError(f"search request failed: {e}") from e
        if r.status_code >= 400:
            raise SearchBridgeError(f"search backend returned status {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise SearchBridgeError("search backend returned non-JSON response") from e
        results = data.get("results") if isinstance(data, dict) else None
        return results if isinstance(results, list) else []

    async def answer(self, query: str) -> Dict[str, Any]:
        results = await self.search(query)
        logger.info("search results=%d query=%r", len(results), query[:200])

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Question: {query}\n\nSearch Results: {json.dumps(results, ensure_ascii=False)}",
            },
        ]
        try:
            text = await self.completion.complete(messages, **ANSWER_PARAMS)
        except Exception as e:
            raise SearchBridgeError(f"completion failed: {e}") from e
        return {"text": text, "results": results}
