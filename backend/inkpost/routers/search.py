"""Search endpoint, mounted on both the dashboard and the public router."""
from __future__ import annotations

from fastapi import Body, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from inkpost.dependencies import get_search_engine
from inkpost.models.post import PostRead
from inkpost.models.tag import TagRead
from inkpost.services.search import SearchEngine, SearchQuery


class SearchBody(BaseModel):
    """JSON body accepted on GET for older clients that send filters there."""
    model_config = ConfigDict(populate_by_name=True)

    keyword: str | None = Field(default=None, max_length=128)
    tag_id: int | None = Field(default=None, alias="tagId", ge=1)


class SearchResponse(BaseModel):
    posts: list[PostRead]
    tags: list[TagRead]


def search_query(
    keyword: str | None = Query(None, max_length=128, description="Case-insensitive title substring"),
    tag_id: int | None = Query(None, alias="tagId", ge=1, description="Only posts carrying this tag"),
    body: SearchBody | None = Body(None),
) -> SearchQuery:
    """Query parameters win; the body is used only when both are absent."""
    if keyword is None and tag_id is None and body is not None:
        return SearchQuery(keyword=body.keyword, tag_id=body.tag_id)
    return SearchQuery(keyword=keyword, tag_id=tag_id)


async def search(
    query: SearchQuery = Depends(search_query),
    engine: SearchEngine = Depends(get_search_engine),
) -> SearchResponse:
    result = engine.search(query)
    return SearchResponse(posts=result.posts, tags=result.tags)


ROUTE_OPTIONS = {
    "methods": ["GET"],
    "response_model": SearchResponse,
    "response_model_exclude_none": True,
    "summary": "Search published posts and tags",
}
