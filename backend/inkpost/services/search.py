"""Search service — keyword and tag filters over posts and tags.

Policy:

1. Posts are always restricted to published ones. A keyword adds a
   case-insensitive substring match on the title; a tag id adds "has this
   tag". Both together are ANDed.
2. Tags are searched only when a keyword is given, by case-insensitive
   substring on the title. The tag id never filters tags, and a tag id
   without a keyword never touches the tag table.
3. No pagination: callers get the full matching set.

The post query runs first and the tag query after it. A database failure
in either surfaces as ``CriticalError`` and no partial result is returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.sql.expression import SelectOfScalar

from inkpost.models.post import Post, PostRead, PostTag
from inkpost.models.tag import Tag, TagRead
from inkpost.services.content import ContentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchQuery:
    keyword: str | None = None
    tag_id: int | None = None

    def __post_init__(self) -> None:
        # An empty keyword means "no keyword"
        if not self.keyword:
            object.__setattr__(self, "keyword", None)


@dataclass(frozen=True, slots=True)
class SearchResult:
    posts: list[PostRead] = field(default_factory=list)
    tags: list[TagRead] = field(default_factory=list)


def _title_contains(column, keyword: str):
    return func.lower(column).contains(keyword.lower(), autoescape=True)


def build_post_filter(query: SearchQuery) -> SelectOfScalar[Post]:
    statement = select(Post).where(Post.published == True)  # noqa: E712
    if query.keyword is not None:
        statement = statement.where(_title_contains(col(Post.title), query.keyword))
    if query.tag_id is not None:
        tagged = select(PostTag.post_id).where(PostTag.tag_id == query.tag_id)
        statement = statement.where(col(Post.id).in_(tagged))
    return statement


def build_tag_filter(keyword: str) -> SelectOfScalar[Tag]:
    return select(Tag).where(_title_contains(col(Tag.title), keyword))


class SearchEngine:
    """Resolves a SearchQuery into posts and tags from the content store."""

    __slots__ = ("store",)

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def search(self, query: SearchQuery) -> SearchResult:
        posts = self.store.find_posts(build_post_filter(query))
        if query.keyword is None:
            tags: list[TagRead] = []
        else:
            tags = self.store.find_tags(build_tag_filter(query.keyword))

        logger.debug(
            "Search keyword=%r tag_id=%r: %d post(s), %d tag(s)",
            query.keyword, query.tag_id, len(posts), len(tags),
        )
        return SearchResult(posts=posts, tags=tags)
