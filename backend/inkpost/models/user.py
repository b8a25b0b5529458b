"""User model and schemas for the credential store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    login: str = Field(index=True, unique=True)
    hashed_password: str  # argon2 PHC string, never returned to clients
    is_admin: bool = Field(default=False)


# --- Pydantic request/response schemas ---


class UserCreate(BaseModel):
    login: str = PydanticField(min_length=1, max_length=64)
    password: str = PydanticField(min_length=1)


class UserRead(BaseModel):
    id: int
    login: str
    is_admin: bool

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class LoginRequest(BaseModel):
    login: str
    password: str


class TokenResponse(BaseModel):
    """Bearer token returned on successful login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
