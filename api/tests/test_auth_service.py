# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for JWT and password handling.
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone

from services.auth import AuthService, TokenValidationError
from models.entities import UserProfile


class TestPasswords:
    """bcrypt hashing."""

    def test_hash_and_verify(self, auth_service):
        hashed = auth_service.hash_password("segredo123")

        assert hashed != "segredo123"
        assert auth_service.verify_password("segredo123", hashed)
        assert not auth_service.verify_password("errada", hashed)

    def test_missing_or_malformed_hash(self, auth_service):
        assert not auth_service.verify_password("x", None)
        assert not auth_service.verify_password("x", "not-a-bcrypt-hash")


class TestTokens:
    """Token issue, validation and refresh."""

    def test_access_token_claims(self, auth_service, viewer_profile):
        tokens = auth_service.generate_tokens(viewer_profile)

        payload = auth_service.validate_token(tokens["access_token"])

        assert payload["sub"] == viewer_profile.id
        assert payload["role"] == "user"
        assert payload["department"] == "SAUDE"
        assert "contracts:view" in payload["permissions"]
        assert "contracts:manage" not in payload["permissions"]
        assert payload["jti"]
        assert tokens["expires_in"] == 900

    def test_wrong_token_type(self, auth_service, viewer_profile):
        tokens = auth_service.generate_tokens(viewer_profile)

        with pytest.raises(TokenValidationError, match="Expected access"):
            auth_service.validate_token(tokens["refresh_token"])

    def test_expired_token(self, auth_service):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"sub": "u1", "type": "access", "iat": past, "exp": past + timedelta(minutes=1)},
            auth_service.private_key,
            algorithm="RS256"
        )

        with pytest.raises(TokenValidationError, match="expired"):
            auth_service.validate_token(token)

    def test_foreign_signature_rejected(self, auth_service, viewer_profile):
        other = AuthService(bcrypt_rounds=4)
        token = other.generate_tokens(viewer_profile)["access_token"]

        with pytest.raises(TokenValidationError, match="Invalid token"):
            auth_service.validate_token(token)

    def test_refresh_rebuilds_claims(self, auth_service, viewer_profile):
        """Role changes apply to the refreshed access token."""
        refresh_token = auth_service.generate_tokens(viewer_profile)["refresh_token"]
        promoted = viewer_profile.model_copy(update={"role": "super_admin"})

        refreshed = auth_service.refresh_access_token(refresh_token, promoted)

        payload = auth_service.validate_token(refreshed["access_token"])
        assert payload["role"] == "super_admin"
        assert "users:manage" in payload["permissions"]
        assert "refresh_token" not in refreshed

    def test_refresh_for_other_user(self, auth_service, viewer_profile, admin_profile):
        refresh_token = auth_service.generate_tokens(viewer_profile)["refresh_token"]

        with pytest.raises(TokenValidationError, match="does not belong"):
            auth_service.refresh_access_token(refresh_token, admin_profile)

    def test_token_id_and_ttl(self, auth_service, viewer_profile):
        tokens = auth_service.generate_tokens(viewer_profile)
        access, refresh = tokens["access_token"], tokens["refresh_token"]

        assert auth_service.extract_token_id(access) != auth_service.extract_token_id(refresh)
        assert 0 < auth_service.token_ttl_seconds(access) <= 900
        assert auth_service.token_ttl_seconds(refresh) > 900

    def test_malformed_token_id(self, auth_service):
        with pytest.raises(TokenValidationError):
            auth_service.extract_token_id("garbage")


class TestKeyConfiguration:
    """Key pair handling."""

    def test_configured_keys_used(self):
        private_key, public_key = AuthService.generate_key_pair()

        service = AuthService(private_key, public_key, bcrypt_rounds=4)

        assert service.private_key == private_key
        assert "BEGIN PUBLIC KEY" in service.public_key

    def test_tokens_verify_across_instances_sharing_keys(self):
        private_key, public_key = AuthService.generate_key_pair()
        issuer = AuthService(private_key, public_key, bcrypt_rounds=4)
        verifier = AuthService(private_key, public_key, bcrypt_rounds=4)

        token = issuer.generate_tokens(UserProfile(id="u1", email="a@b.gov.br"))["access_token"]

        assert verifier.validate_token(token)["sub"] == "u1"
