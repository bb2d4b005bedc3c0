"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from models.search_request import (
    MAX_CONTEXT_TURNS,
    MAX_QUERY_CHARS,
    QueryIntent,
    SearchFilters,
    SearchRequest,
    TimeRange,
)


class SearchFiltersRequest(BaseModel):
    time_range: Optional[TimeRange] = None
    language: Optional[str] = Field(None, pattern="^[a-zA-Z]{2}(-[a-zA-Z]{2})?$")
    region: Optional[str] = Field(None, pattern="^[a-zA-Z]{2}$")


class SearchRequestBody(BaseModel):
    # Blank queries pass the schema and are rejected with 400 by the pipeline
    query: str = Field(..., max_length=MAX_QUERY_CHARS)
    intent: Optional[QueryIntent] = None
    context: list[str] = Field(default_factory=list, max_length=MAX_CONTEXT_TURNS)
    filters: Optional[SearchFiltersRequest] = None

    def to_domain(self) -> SearchRequest:
        filters = None
        if self.filters:
            filters = SearchFilters(
                time_range=self.filters.time_range,
                language=self.filters.language.lower() if self.filters.language else None,
                region=self.filters.region.lower() if self.filters.region else None,
            )
        return SearchRequest(
            query=self.query,
            intent=self.intent,
            context=tuple(self.context),
            filters=filters,
        )
