"""Post model, the post/tag junction table and post schemas."""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from inkpost.models.tag import TagRead


class PostTag(SQLModel, table=True):
    """Many-to-many junction table between posts and tags."""
    __tablename__ = "post_tags"

    post_id: int = Field(foreign_key="posts.id", primary_key=True)
    tag_id: int = Field(foreign_key="tags.id", primary_key=True)


class Post(SQLModel, table=True):
    __tablename__ = "posts"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True)
    content: str
    published: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# --- Pydantic schemas ---

class PostWrite(BaseModel):
    """Body for both creating and editing a post. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    title: str = PydanticField(min_length=2, max_length=128)
    content: str = PydanticField(min_length=16)
    published: bool = False
    tags: list[str] = PydanticField(default_factory=list)  # tag titles, connect-or-create


class PostRead(BaseModel):
    """Post as returned to clients, keys in camelCase (createdAt, updatedAt)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    content: str | None = None  # None in the summary view
    published: bool
    tags: list[TagRead]
    created_at: datetime
    updated_at: datetime
