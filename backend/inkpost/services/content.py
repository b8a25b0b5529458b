"""Content store — posts, tags and their many-to-many association.

Every method either returns the entity or raises: ``NotFound`` for a
missing id, ``TagExists`` for a duplicate tag title and ``CriticalError``
for any unexpected database failure (logged here with context, hidden from
clients).
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select
from sqlmodel.sql.expression import SelectOfScalar

from inkpost.errors import CriticalError, NotFound, TagExists
from inkpost.models.post import Post, PostRead, PostTag, PostWrite
from inkpost.models.tag import Tag, TagRead

logger = logging.getLogger(__name__)


class ContentStore:
    """Post and tag persistence on top of a single SQLModel session."""

    __slots__ = ("session",)

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _critical(self, message: str) -> Iterator[None]:
        """Roll back and raise CriticalError(message) on database failure."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("%s", message)
            raise CriticalError(message) from exc

    # --- Posts ---

    def get_post(
        self,
        post_id: int,
        *,
        with_content: bool = True,
        include_unpublished: bool = False,
    ) -> PostRead:
        with self._critical("Critical error fetching post"):
            post = self.session.get(Post, post_id)
            if post is None or (not post.published and not include_unpublished):
                raise NotFound("Post not found")
            return self._to_read(post, self._tags_for([post.id])[post.id], with_content)

    def list_posts(
        self,
        *,
        with_content: bool = False,
        include_unpublished: bool = False,
    ) -> list[PostRead]:
        statement = select(Post)
        if not include_unpublished:
            statement = statement.where(Post.published == True)  # noqa: E712
        return self.find_posts(statement, with_content=with_content)

    def find_posts(
        self,
        statement: SelectOfScalar[Post],
        *,
        with_content: bool = False,
    ) -> list[PostRead]:
        """Run a post query newest first and attach each post's tags."""
        statement = statement.order_by(
            col(Post.created_at).desc(), col(Post.id).desc()
        )
        with self._critical("Critical error querying posts"):
            posts = self.session.exec(statement).all()
            tags_by_post = self._tags_for([p.id for p in posts])
        return [self._to_read(p, tags_by_post[p.id], with_content) for p in posts]

    def insert_post(self, data: PostWrite) -> PostRead:
        with self._critical("Critical error inserting post"):
            post = Post(
                title=data.title,
                content=data.content,
                published=data.published,
            )
            self.session.add(post)
            self.session.flush()
            tags = self._connect_or_create(data.tags)
            for tag in tags:
                self.session.add(PostTag(post_id=post.id, tag_id=tag.id))
            self.session.commit()
            self.session.refresh(post)
            logger.info("Inserted post %d with %d tag(s)", post.id, len(tags))
            return self._to_read(post, _sorted_reads(tags), True)

    def edit_post(self, post_id: int, data: PostWrite) -> PostRead:
        with self._critical("Critical error editing post"):
            post = self.session.get(Post, post_id)
            if post is None:
                raise NotFound("Post not found")

            post.title = data.title
            post.content = data.content
            post.published = data.published
            post.updated_at = datetime.now(timezone.utc)

            # Replace the tag set wholesale
            for assoc in self.session.exec(
                select(PostTag).where(PostTag.post_id == post_id)
            ).all():
                self.session.delete(assoc)
            self.session.flush()
            tags = self._connect_or_create(data.tags)
            for tag in tags:
                self.session.add(PostTag(post_id=post_id, tag_id=tag.id))

            self.session.add(post)
            self.session.commit()
            self.session.refresh(post)
            return self._to_read(post, _sorted_reads(tags), True)

    def delete_post(self, post_id: int) -> PostRead:
        with self._critical("Critical error deleting post"):
            post = self.session.get(Post, post_id)
            if post is None:
                raise NotFound("Post not found")
            deleted = self._to_read(post, self._tags_for([post_id])[post_id], True)

            # Junction rows go first; foreign keys are enforced
            self.session.execute(delete(PostTag).where(PostTag.post_id == post_id))
            self.session.delete(post)
            self.session.commit()
            logger.info("Deleted post %d", post_id)
            return deleted

    # --- Tags ---

    def list_tags(self) -> list[TagRead]:
        return self.find_tags(select(Tag))

    def find_tags(self, statement: SelectOfScalar[Tag]) -> list[TagRead]:
        statement = statement.order_by(col(Tag.title))
        with self._critical("Critical error querying tags"):
            tags = self.session.exec(statement).all()
        return [TagRead.model_validate(t) for t in tags]

    def insert_tag(self, title: str) -> TagRead:
        title = title.strip()
        with self._critical("Critical error inserting tag"):
            existing = self.session.exec(select(Tag).where(Tag.title == title)).first()
            if existing is not None:
                raise TagExists()
            tag = Tag(title=title)
            self.session.add(tag)
            try:
                self.session.commit()
            except IntegrityError as exc:
                # Lost a race against a concurrent insert of the same title
                self.session.rollback()
                raise TagExists() from exc
            self.session.refresh(tag)
            return TagRead.model_validate(tag)

    def delete_tag(self, tag_id: int) -> TagRead:
        with self._critical("Critical error deleting tag"):
            tag = self.session.get(Tag, tag_id)
            if tag is None:
                raise NotFound("Tag not found")
            deleted = TagRead.model_validate(tag)

            self.session.execute(delete(PostTag).where(PostTag.tag_id == tag_id))
            self.session.delete(tag)
            self.session.commit()
            return deleted

    # --- Helpers ---

    def _connect_or_create(self, titles: Iterable[str]) -> list[Tag]:
        """Resolve tag titles to rows, creating the missing ones.

        Titles are stripped; blanks and duplicates are dropped. Must be called
        inside an open transaction; the caller commits.
        """
        wanted: list[str] = []
        for raw in titles:
            title = raw.strip()
            if title and title not in wanted:
                wanted.append(title)
        if not wanted:
            return []

        existing = {
            t.title: t
            for t in self.session.exec(select(Tag).where(col(Tag.title).in_(wanted))).all()
        }
        tags: list[Tag] = []
        for title in wanted:
            tag = existing.get(title)
            if tag is None:
                tag = Tag(title=title)
                self.session.add(tag)
                self.session.flush()
            tags.append(tag)
        return tags

    def _tags_for(self, post_ids: Sequence[int]) -> dict[int, list[TagRead]]:
        """Fetch the tags of several posts in one query, ordered by title."""
        result: dict[int, list[TagRead]] = {pid: [] for pid in post_ids}
        if not post_ids:
            return result
        rows = self.session.exec(
            select(PostTag, Tag)
            .where(col(PostTag.post_id).in_(post_ids))
            .where(PostTag.tag_id == Tag.id)
            .order_by(col(Tag.title))
        ).all()
        for assoc, tag in rows:
            result[assoc.post_id].append(TagRead.model_validate(tag))
        return result

    @staticmethod
    def _to_read(post: Post, tags: list[TagRead], with_content: bool) -> PostRead:
        return PostRead(
            id=post.id,
            title=post.title,
            content=post.content if with_content else None,
            published=post.published,
            tags=tags,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


def _sorted_reads(tags: Iterable[Tag]) -> list[TagRead]:
    return sorted((TagRead.model_validate(t) for t in tags), key=lambda t: t.title)
