from pydantic import BaseModel
import os

class Settings(BaseModel):
    user_agent: str = os.getenv("USER_AGENT", "newswire/1.0")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "25"))
    cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "300"))
    feed_limit: int = int(os.getenv("FEED_LIMIT", "20"))
    # SEARXNG_URL kept for existing deployments
    search_url: str = os.getenv("SEARCH_URL", os.getenv("SEARXNG_URL", ""))
    search_timeout: float = float(os.getenv("SEARCH_TIMEOUT", "30"))
    llm_api_url: str = os.getenv("LLM_API_URL", "")
    llm_api_version: str = os.getenv("LLM_API_VERSION", "2024-12-01-preview")
    llm_api_key: str = os.getenv("LLM_API_KEY", "")
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "60"))
    llm_attempts: int = int(os.getenv("LLM_ATTEMPTS", "3"))
    llm_retry_delay: float = float(os.getenv("LLM_RETRY_DELAY", "1"))
    llm_max_chars: int = int(os.getenv("LLM_MAX_CHARS", "60000"))  # hard safety cap
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
