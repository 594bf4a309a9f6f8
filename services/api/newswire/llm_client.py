from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings, settings as default_settings
from .errors import EnrichmentError, UpstreamError
from .extractors import html_to_text
from .retry import call_with_retries

logger = logging.getLogger(__name__)

Message = Dict[str, str]

DEFAULT_SUMMARY_WORDS = 200
MAX_COMPLETION_TOKENS = 1000

FACT_CHECK_SYSTEM_PROMPT = (
    "You are a fact-checking assistant. Analyze the news article and provide a fact-check report. Include:\n"
    "1. Key claims in the article\n"
    "2. Verification status of each claim\n"
    "3. Supporting evidence or sources\n"
    "4. Any potential biases or limitations\n"
    "5. Overall credibility assessment"
)


def _truncate(text: str, max_chars: int) -> str:
    if not text:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n\n[TRUNCATED]"


def summary_token_budget(target_words: int) -> int:
    return min(target_words * 2, MAX_COMPLETION_TOKENS)


def build_summary_messages(content: str, target_words: int = DEFAULT_SUMMARY_WORDS) -> List[Message]:
    return [
        {
            "role": "system",
            "content": (
                "You are a helpful assistant that summarizes news articles. "
                f"Generate a summary that is approximately {target_words} words long."
            ),
        },
        {
            "role": "user",
            "content": f"Please summarize this news article in about {target_words} words: {content}",
        },
    ]


def build_fact_check_messages(title: str, content: str) -> List[Message]:
    return [
        {"role": "system", "content": FACT_CHECK_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": f"Please fact-check this news article:\nTitle: {title}\nContent: {content}",
        },
    ]


class CompletionClient:
    """Chat-completions client (Azure OpenAI wire format).

    The endpoint, API version and key come from configuration only.
    """

    def __init__(self, cfg: Optional[Settings] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg or default_settings
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.cfg.llm_api_url and self.cfg.llm_api_key)

    async def complete(self, messages: List[Message], **params: Any) -> str:
        """One completion request, no retries."""
        if not self.configured:
            raise UpstreamError("completion backend is not configured (LLM_API_URL / LLM_API_KEY)")
        payload: Dict[str, Any] = {"messages": messages, **params}
        async with httpx.AsyncClient(timeout=self.cfg.llm_timeout, transport=self._transport) as client:
            r = await client.post(
                self.cfg.llm_api_url,
                params={"api-version": self.cfg.llm_api_version},
                headers={"api-key": self.cfg.llm_api_key},
                json=payload,
            )
            if r.status_code >= 400:
                logger.error("completion backend error status=%d body=%s", r.status_code, r.text[:500])
                raise UpstreamError(
                    f"completion backend returned status {r.status_code}",
                    status_code=r.status_code,
                    detail=r.text[:500],
                )
            data = r.json()
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamError("completion backend returned an unexpected body", detail=str(data)[:500])

    def _prepare(self, content: str) -> str:
        return _truncate(html_to_text(content), self.cfg.llm_max_chars)

    async def _complete_with_retries(self, label: str, messages: List[Message], **params: Any) -> str:
        if not self.configured:
            raise EnrichmentError("completion backend is not configured")
        return await call_with_retries(
            lambda: self.complete(messages, **params),
            attempts=self.cfg.llm_attempts,
            timeout=self.cfg.llm_timeout,
            delay=self.cfg.llm_retry_delay,
            label=label,
        )

    async def summarize(self, content: str, target_words: int = DEFAULT_SUMMARY_WORDS) -> str:
        messages = build_summary_messages(self._prepare(content), target_words)
        return await self._complete_with_retries(
            "summarize",
            messages,
            max_completion_tokens=summary_token_budget(target_words),
        )

    async def fact_check(self, title: str, content: str) -> str:
        messages = build_fact_check_messages(title, self._prepare(content))
        return await self._complete_with_retries(
            "fact-check",
            messages,
            max_completion_tokens=MAX_COMPLETION_TOKENS,
        )
