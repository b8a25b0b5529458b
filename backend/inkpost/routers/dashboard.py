"""Dashboard router — administrative CRUD for posts, tags and users.

Every route here sits behind the authorization gate.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from inkpost.dependencies import get_content_store, get_credential_store, require_auth
from inkpost.errors import ValidationError
from inkpost.models.post import PostRead, PostWrite
from inkpost.models.tag import TagCreate, TagRead
from inkpost.models.user import UserCreate, UserRead
from inkpost.routers import search as search_routes
from inkpost.services.content import ContentStore
from inkpost.services.credentials import CredentialStore
from inkpost.services.tokens import TokenClaims

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_auth)],
)


# --- Posts ---


@router.post("/posts", response_model=PostRead, status_code=201)
async def create_post(
    body: PostWrite,
    store: ContentStore = Depends(get_content_store),
) -> PostRead:
    return store.insert_post(body)


@router.get("/posts", response_model=list[PostRead], response_model_exclude_none=True)
async def list_posts(
    store: ContentStore = Depends(get_content_store),
) -> list[PostRead]:
    """All posts, unpublished included, in the summary view."""
    return store.list_posts(include_unpublished=True)


@router.get("/posts/{post_id}", response_model=PostRead)
async def get_post(
    post_id: int = Path(..., gt=0),
    store: ContentStore = Depends(get_content_store),
) -> PostRead:
    return store.get_post(post_id, with_content=True, include_unpublished=True)


@router.put("/posts/{post_id}", response_model=PostRead)
async def edit_post(
    body: PostWrite,
    post_id: int = Path(..., gt=0),
    store: ContentStore = Depends(get_content_store),
) -> PostRead:
    return store.edit_post(post_id, body)


@router.delete("/posts/{post_id}", response_model=PostRead)
async def delete_post(
    post_id: int = Path(..., gt=0),
    store: ContentStore = Depends(get_content_store),
) -> PostRead:
    return store.delete_post(post_id)


# --- Tags ---


@router.post("/tags", response_model=TagRead, status_code=201)
async def create_tag(
    body: TagCreate,
    store: ContentStore = Depends(get_content_store),
) -> TagRead:
    if not body.title or not body.title.strip():
        raise ValidationError("Invalid or missing tag title")
    return store.insert_tag(body.title)


@router.get("/tags", response_model=list[TagRead])
async def list_tags(
    store: ContentStore = Depends(get_content_store),
) -> list[TagRead]:
    return store.list_tags()


@router.delete("/tags/{tag_id}", response_model=TagRead)
async def delete_tag(
    tag_id: int = Path(..., gt=0),
    store: ContentStore = Depends(get_content_store),
) -> TagRead:
    return store.delete_tag(tag_id)


# --- Users ---


@router.post("/user", response_model=UserRead, status_code=201)
async def register_user(
    body: UserCreate,
    credentials: CredentialStore = Depends(get_credential_store),
) -> UserRead:
    user = credentials.register(body.login, body.password)
    return UserRead.model_validate(user)


@router.get("/me")
async def whoami(claims: TokenClaims | None = Depends(require_auth)) -> dict:
    """Claims the gate attached to this request (empty when bypassed)."""
    return claims.to_dict() if claims is not None else {}


router.add_api_route("/search", search_routes.search, **search_routes.ROUTE_OPTIONS)
