"""Public router — unauthenticated reads of published content, and login."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from inkpost.dependencies import get_content_store, get_credential_store, get_token_service
from inkpost.errors import Unauthorized
from inkpost.models.post import PostRead
from inkpost.models.tag import TagRead
from inkpost.models.user import LoginRequest, TokenResponse
from inkpost.routers import search as search_routes
from inkpost.services.content import ContentStore
from inkpost.services.credentials import CredentialStore
from inkpost.services.tokens import TokenService

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/")
async def index() -> dict:
    return {"message": "Public routes accessible without authentication"}


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    credentials: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    user = credentials.authenticate(body.login, body.password)
    if user is None:
        raise Unauthorized("Invalid credentials")
    issued = tokens.issue(user.id, user.login, user.is_admin)
    return TokenResponse(access_token=issued.token, expires_in=issued.expires_in)


@router.get("/posts", response_model=list[PostRead], response_model_exclude_none=True)
async def list_published_posts(
    store: ContentStore = Depends(get_content_store),
) -> list[PostRead]:
    return store.list_posts()


@router.get("/posts/{post_id}", response_model=PostRead)
async def get_published_post(
    post_id: int = Path(..., gt=0),
    store: ContentStore = Depends(get_content_store),
) -> PostRead:
    return store.get_post(post_id, with_content=True)


@router.get("/tags", response_model=list[TagRead])
async def list_tags(
    store: ContentStore = Depends(get_content_store),
) -> list[TagRead]:
    return store.list_tags()


router.add_api_route("/search", search_routes.search, **search_routes.ROUTE_OPTIONS)
