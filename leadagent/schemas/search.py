"""Schemas for POST /search (company search pass-through)."""

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=5000)


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str
    title: str | None = None
    summary: str | None = None
    text: str | None = None
    highlights: list[str] | None = None
    published_date: str | None = Field(None, alias="publishedDate")
    author: str | None = None
    score: float | None = None


class SearchResponse(BaseModel):
    results: list[SearchResult]
