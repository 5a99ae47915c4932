# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for user administration, login and logout.
"""

import pytest
from unittest.mock import MagicMock

from services.mongodb import DuplicateDocumentError
from services.users import UserService, INVALID_CREDENTIALS
from middleware.error_handler import AuthenticationException, ConflictException
from models.requests import CreateUserRequest, UpdateUserRequest


@pytest.fixture
def audit():
    return MagicMock()


@pytest.fixture
def service(mock_mongo, audit, auth_service, mock_redis):
    return UserService(mock_mongo, audit, auth_service, mock_redis)


@pytest.fixture
def stored_user(auth_service, make_row):
    return make_row({
        "email": "gestor@prefeitura.gov.br",
        "name": "Gestor",
        "role": "manager",
        "department": "OBRAS",
        "is_active": True,
        "password_hash": auth_service.hash_password("segredo123")
    })


class TestUserAdministration:
    """Profile CRUD."""

    def test_create_hashes_password(self, service, mock_mongo, audit, auth_service):
        payload = CreateUserRequest(email="Novo@Prefeitura.gov.br", password="segredo123", role="admin")

        profile = service.create_user(payload)

        _, row = mock_mongo.create.call_args.args
        assert "password" not in row
        assert auth_service.verify_password("segredo123", row["password_hash"])
        assert row["is_active"] is True
        assert profile.email == "novo@prefeitura.gov.br"
        assert profile.role == "admin"
        assert audit.log_action.call_args.args[2] == "novo@prefeitura.gov.br"

    def test_create_duplicate_email(self, service, mock_mongo, stored_user):
        mock_mongo.find_one_by.return_value = stored_user

        with pytest.raises(ConflictException):
            service.create_user(CreateUserRequest(email=stored_user["email"], password="segredo123"))

        mock_mongo.create.assert_not_called()

    def test_create_race_on_unique_index(self, service, mock_mongo):
        mock_mongo.create.side_effect = DuplicateDocumentError("duplicate")

        with pytest.raises(ConflictException):
            service.create_user(CreateUserRequest(email="a@b.gov.br", password="segredo123"))

    def test_update(self, service, mock_mongo, stored_user, audit):
        mock_mongo.update.return_value = stored_user

        service.update_user(stored_user["id"], UpdateUserRequest(role="pgm", is_active=False))

        _, _, row = mock_mongo.update.call_args.args
        assert row == {"role": "pgm", "is_active": False}
        assert "is_active, role" in audit.log_action.call_args.args[3]

    def test_delete_missing(self, service, mock_mongo):
        mock_mongo.delete.return_value = None
        assert service.delete_user("missing") is False

    def test_change_password(self, service, mock_mongo, stored_user, auth_service):
        mock_mongo.update.return_value = stored_user

        assert service.change_password(stored_user["id"], "nova-senha") is True

        _, _, row = mock_mongo.update.call_args.args
        assert auth_service.verify_password("nova-senha", row["password_hash"])


class TestLogin:
    """Credential checks and token issue."""

    def test_authenticate(self, service, mock_mongo, stored_user, audit, auth_service):
        mock_mongo.find_one_by.return_value = stored_user

        result = service.authenticate("GESTOR@prefeitura.gov.br", "segredo123", {"ip_address": "10.0.0.9"})

        assert mock_mongo.find_one_by.call_args.args[1] == {"email": "gestor@prefeitura.gov.br"}
        assert result["user"].email == stored_user["email"]
        assert auth_service.validate_token(result["access_token"])["role"] == "manager"
        action, resource, _, _, ctx = audit.log_action.call_args.args
        assert (action, resource) == ("LOGIN", "SYSTEM")
        assert ctx.ip_address == "10.0.0.9"

    def test_wrong_password(self, service, mock_mongo, stored_user):
        mock_mongo.find_one_by.return_value = stored_user

        with pytest.raises(AuthenticationException, match=INVALID_CREDENTIALS):
            service.authenticate(stored_user["email"], "errada")

    def test_unknown_email(self, service):
        with pytest.raises(AuthenticationException, match=INVALID_CREDENTIALS):
            service.authenticate("ninguem@prefeitura.gov.br", "x")

    def test_inactive_account(self, service, mock_mongo, stored_user):
        stored_user["is_active"] = False
        mock_mongo.find_one_by.return_value = stored_user

        with pytest.raises(AuthenticationException, match="inactive"):
            service.authenticate(stored_user["email"], "segredo123")


class TestRefreshAndLogout:
    """Token refresh and revocation."""

    def test_refresh(self, service, mock_mongo, stored_user, auth_service):
        mock_mongo.find_one_by.return_value = stored_user
        mock_mongo.find_one.return_value = stored_user
        tokens = service.authenticate(stored_user["email"], "segredo123")

        refreshed = service.refresh(tokens["refresh_token"])

        assert auth_service.validate_token(refreshed["access_token"])["sub"] == stored_user["id"]

    def test_refresh_revoked(self, service, mock_mongo, mock_redis, stored_user, auth_service):
        mock_mongo.find_one.return_value = stored_user
        mock_redis.is_token_blocked.return_value = True
        profile = service.get_user(stored_user["id"])
        refresh_token = auth_service.generate_tokens(profile)["refresh_token"]

        with pytest.raises(AuthenticationException, match="revoked"):
            service.refresh(refresh_token)

    def test_refresh_with_access_token(self, service, stored_user, mock_mongo, auth_service):
        mock_mongo.find_one.return_value = stored_user
        access_token = auth_service.generate_tokens(service.get_user(stored_user["id"]))["access_token"]

        with pytest.raises(AuthenticationException):
            service.refresh(access_token)

    def test_refresh_deleted_user(self, service, stored_user, mock_mongo, auth_service):
        mock_mongo.find_one.return_value = stored_user
        refresh_token = auth_service.generate_tokens(service.get_user(stored_user["id"]))["refresh_token"]
        mock_mongo.find_one.return_value = None

        with pytest.raises(AuthenticationException, match="inactive"):
            service.refresh(refresh_token)

    def test_logout_blocks_tokens(self, service, mock_redis, admin_profile, auth_service):
        tokens = auth_service.generate_tokens(admin_profile)

        assert service.logout(tokens["access_token"], tokens["refresh_token"], None, "garbage") == 2

        assert mock_redis.block_token.call_count == 2
        token_id, ttl = mock_redis.block_token.call_args_list[0].args
        assert token_id == auth_service.extract_token_id(tokens["access_token"])
        assert 0 < ttl <= 900

    def test_logout_without_redis(self, mock_mongo, audit, auth_service, admin_profile):
        service = UserService(mock_mongo, audit, auth_service)
        tokens = auth_service.generate_tokens(admin_profile)

        assert service.logout(tokens["access_token"]) == 0
