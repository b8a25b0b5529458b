"""FastAPI dependency injection for the auth gate and the stores."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request
from sqlmodel import Session

from inkpost.db import get_session
from inkpost.errors import CriticalError, Unauthorized
from inkpost.services.content import ContentStore
from inkpost.services.credentials import CredentialStore
from inkpost.services.gate import AuthGate
from inkpost.services.search import SearchEngine
from inkpost.services.tokens import TokenClaims, TokenService


def get_token_service(request: Request) -> TokenService:
    """Inject the TokenService built by create_app."""
    svc = getattr(request.app.state, "token_service", None)
    if svc is None:
        raise HTTPException(status_code=503, detail="Token service unavailable")
    return svc


def get_auth_gate(request: Request) -> AuthGate:
    gate = getattr(request.app.state, "auth_gate", None)
    if gate is None:
        raise HTTPException(status_code=503, detail="Authorization gate unavailable")
    return gate


def require_auth(
    request: Request,
    authorization: str | None = Header(default=None),
    gate: AuthGate = Depends(get_auth_gate),
) -> TokenClaims | None:
    """Admit the request or reject it with 401.

    On success the decoded claims are attached to ``request.state.claims``
    and returned. With a bypassed gate the claims are None.
    """
    decision = gate.check(authorization)
    if not decision.admitted:
        if decision.status_code == 500:
            raise CriticalError(decision.reason)
        raise Unauthorized(decision.reason)
    request.state.claims = decision.claims
    return decision.claims


def get_content_store(session: Session = Depends(get_session)) -> ContentStore:
    return ContentStore(session)


def get_credential_store(session: Session = Depends(get_session)) -> CredentialStore:
    return CredentialStore(session)


def get_search_engine(
    store: ContentStore = Depends(get_content_store),
) -> SearchEngine:
    return SearchEngine(store)
