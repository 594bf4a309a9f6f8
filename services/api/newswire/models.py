"""Shared API types.

Field names are snake_case in Python; the JSON wire format keeps the camelCase
keys existing frontends read (`pubDate`, `imageUrl`, `fullContent`).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class NewsItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    link: str
    description: str
    pub_date: str = Field(alias="pubDate")
    source: str
    category: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    full_content: Optional[str] = Field(default=None, alias="fullContent")

    @property
    def body(self) -> str:
        return self.full_content or self.description

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FeedActionIn(BaseModel):
    id: Optional[str] = None
    action: Optional[str] = None  # None | "fact-check" | "custom-summary"
    length: Optional[int] = Field(default=None, ge=0)


class SearchIn(BaseModel):
    query: str
