"""Tag model — unique titled labels attached to posts."""
from __future__ import annotations

from pydantic import BaseModel
from sqlmodel import Field, SQLModel


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True, unique=True)


# --- Pydantic schemas ---

class TagCreate(BaseModel):
    title: str | None = None


class TagRead(BaseModel):
    id: int
    title: str

    model_config = {"from_attributes": True}
