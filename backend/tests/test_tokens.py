"""Token service — issue/verify round trip, expiry, signature, configuration."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from inkpost.errors import ConfigurationError, ExpiredToken, MalformedToken
from inkpost.services.tokens import DEFAULT_TTL, JWT_ALGORITHM, TokenService


class TestIssue:
    @pytest.mark.parametrize(
        "user_id,username,is_admin",
        [(1, "admin", True), (42, "writer", False), (7, "zażółć", True)],
    )
    def test_issue_then_verify_returns_input_claims(
        self, token_service, user_id, username, is_admin
    ):
        issued = token_service.issue(user_id, username, is_admin)
        claims = token_service.verify(issued.token)
        assert claims.user_id == user_id
        assert claims.username == username
        assert claims.is_admin is is_admin
        assert claims.token_id
        assert claims == issued.claims

    def test_token_ids_are_unique_for_identical_users(self, token_service):
        first = token_service.issue(1, "admin", True)
        second = token_service.issue(1, "admin", True)
        assert first.token != second.token
        assert first.claims.token_id != second.claims.token_id

    def test_default_expiry_is_fifteen_minutes(self, token_service):
        issued = token_service.issue(1, "admin", True)
        assert DEFAULT_TTL == timedelta(minutes=15)
        assert issued.claims.expires_at - issued.claims.issued_at == DEFAULT_TTL
        assert issued.expires_in == 900

    def test_payload_uses_wire_claim_names(self, token_service):
        """Other services decode the token directly; claim names are part of the contract."""
        issued = token_service.issue(3, "someone", False)
        payload = jwt.get_unverified_claims(issued.token)
        assert payload["userId"] == 3
        assert payload["username"] == "someone"
        assert payload["isAdmin"] is False
        assert isinstance(payload["tokenId"], str)
        assert payload["exp"] - payload["iat"] == 900

    def test_issue_without_secret_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TokenService("").issue(1, "admin", True)

    def test_whitespace_secret_counts_as_missing(self):
        svc = TokenService("   ")
        assert svc.configured is False
        with pytest.raises(ConfigurationError):
            svc.issue(1, "admin", True)

    def test_ensure_configured_follows_configured(self):
        assert TokenService("secret").configured is True
        TokenService("secret").ensure_configured()
        with pytest.raises(ConfigurationError):
            TokenService("").ensure_configured()


class TestVerify:
    def test_negative_ttl_is_expired(self):
        svc = TokenService("secret", ttl=timedelta(minutes=-1))
        token = svc.issue(1, "admin", True).token
        with pytest.raises(ExpiredToken):
            svc.verify(token)

    def test_zero_ttl_is_expired(self):
        svc = TokenService("secret", ttl=timedelta(0))
        token = svc.issue(1, "admin", True).token
        with pytest.raises(ExpiredToken):
            svc.verify(token)

    def test_valid_until_just_before_expiry(self):
        issued_at = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        now = [issued_at]
        svc = TokenService("secret", clock=lambda: now[0])
        token = svc.issue(1, "admin", True).token

        now[0] = issued_at + DEFAULT_TTL - timedelta(seconds=1)
        assert svc.verify(token).user_id == 1

        now[0] = issued_at + DEFAULT_TTL
        with pytest.raises(ExpiredToken):
            svc.verify(token)

    def test_wrong_secret_is_malformed(self):
        token = TokenService("secret-a").issue(1, "admin", True).token
        with pytest.raises(MalformedToken):
            TokenService("secret-b").verify(token)

    def test_garbage_is_malformed(self, token_service):
        with pytest.raises(MalformedToken):
            token_service.verify("not-a-jwt")

    def test_tampered_payload_is_malformed(self, token_service):
        token = token_service.issue(1, "writer", False).token
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"userId": 1, "username": "writer", "isAdmin": True, "tokenId": "x",
             "iat": 0, "exp": 2**40},
            "attacker-secret",
            algorithm=JWT_ALGORITHM,
        )
        forged_payload = forged.split(".")[1]
        with pytest.raises(MalformedToken):
            token_service.verify(f"{header}.{forged_payload}.{signature}")

    def test_missing_claims_are_malformed(self):
        token = jwt.encode({"sub": "1", "exp": 2**40}, "secret", algorithm=JWT_ALGORITHM)
        with pytest.raises(MalformedToken, match="missing"):
            TokenService("secret").verify(token)

    def test_wrong_claim_types_are_malformed(self):
        token = jwt.encode(
            {"userId": "1", "username": "admin", "isAdmin": "yes", "tokenId": "t",
             "iat": 0, "exp": 2**40},
            "secret",
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(MalformedToken):
            TokenService("secret").verify(token)

    def test_verify_without_secret_raises_configuration_error(self, token_service):
        token = token_service.issue(1, "admin", True).token
        with pytest.raises(ConfigurationError):
            TokenService("").verify(token)
