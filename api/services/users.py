# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User profile service: administration, login and password management.
"""

import logging
from typing import Dict, List, Optional, Any
from opentelemetry import trace

from .mongodb import MongoDBService, DuplicateDocumentError
from .audit import AuditService
from .auth import AuthService, TokenValidationError
from .redis import RedisService
from domain.records import PROFILES, row_to_record, record_to_row
from middleware.error_handler import AuthenticationException, ConflictException
from models.entities import UserProfile, UserContext
from models.enums import AuditAction, AuditResource
from models.requests import CreateUserRequest, UpdateUserRequest

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """Console user administration backed by the ``profiles`` collection."""

    def __init__(self, mongo_service: MongoDBService, audit_service: AuditService,
                 auth_service: AuthService, redis_service: Optional[RedisService] = None):
        self.mongo_service = mongo_service
        self.audit_service = audit_service
        self.auth_service = auth_service
        self.redis_service = redis_service
        self.collection_name = PROFILES.collection

    def list_users(self) -> List[UserProfile]:
        """List profiles ordered by email."""
        rows = self.mongo_service.find(self.collection_name, sort=PROFILES.sort)
        return [row_to_record(PROFILES, row) for row in rows]

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        row = self.mongo_service.find_one(self.collection_name, user_id)
        return row_to_record(PROFILES, row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserProfile]:
        row = self.mongo_service.find_one_by(self.collection_name, {"email": email.strip().lower()})
        return row_to_record(PROFILES, row) if row else None

    def create_user(self, payload: CreateUserRequest,
                    user_context: Optional[UserContext] = None) -> UserProfile:
        """
        Create a console user with an initial password.

        Raises:
            ConflictException: If the email is already registered
        """
        with tracer.start_as_current_span("users.create") as span:
            span.set_attribute("user.email", payload.email)

            if self.get_user_by_email(payload.email):
                raise ConflictException(f"Email already registered: {payload.email}")

            data = payload.model_dump(exclude={"password"})
            data["name"] = data.get("name") or ''
            data["is_active"] = True
            data["password_hash"] = self.auth_service.hash_password(payload.password)

            try:
                stored = self.mongo_service.create(self.collection_name, record_to_row(PROFILES, data))
            except DuplicateDocumentError:
                raise ConflictException(f"Email already registered: {payload.email}")

            profile = row_to_record(PROFILES, stored)
            self.audit_service.log_action(
                AuditAction.CREATE, AuditResource.USER, profile.email,
                "Usuário criado.", user_context
            )
            logger.info("User created", extra={"user_id": profile.id, "role": profile.role})
            return profile

    def update_user(self, user_id: str, payload: UpdateUserRequest,
                    user_context: Optional[UserContext] = None) -> Optional[UserProfile]:
        """Update the sent profile fields; None when the user is missing."""
        with tracer.start_as_current_span("users.update") as span:
            span.set_attribute("user.id", user_id)

            row = record_to_row(PROFILES, payload.changed_fields())
            if row:
                stored = self.mongo_service.update(self.collection_name, user_id, row)
            else:
                stored = self.mongo_service.find_one(self.collection_name, user_id)
            if stored is None:
                return None

            profile = row_to_record(PROFILES, stored)
            self.audit_service.log_action(
                AuditAction.UPDATE, AuditResource.USER, profile.email,
                f"Perfil atualizado: {', '.join(sorted(row)) or 'sem alterações'}.", user_context
            )
            return profile

    def delete_user(self, user_id: str, user_context: Optional[UserContext] = None) -> bool:
        """Delete a profile; False when it did not exist."""
        removed = self.mongo_service.delete(self.collection_name, user_id)
        if removed is None:
            return False

        self.audit_service.log_action(
            AuditAction.DELETE, AuditResource.USER, removed.get("email") or user_id,
            "Usuário excluído.", user_context
        )
        return True

    def change_password(self, user_id: str, new_password: str) -> bool:
        """Replace a user's password hash; False when the user is missing."""
        with tracer.start_as_current_span("users.change_password") as span:
            span.set_attribute("user.id", user_id)
            stored = self.mongo_service.update(
                self.collection_name,
                user_id,
                {"password_hash": self.auth_service.hash_password(new_password)}
            )
            if stored:
                logger.info("Password changed", extra={"user_id": user_id})
            return stored is not None

    def authenticate(self, email: str, password: str,
                     request_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Verify credentials and issue a token pair.

        Args:
            email: Login email
            password: Plain text password
            request_info: Client IP and user agent for the audit entry

        Returns:
            Token pair plus the authenticated profile

        Raises:
            AuthenticationException: On unknown email, wrong password or inactive account
        """
        with tracer.start_as_current_span("users.authenticate") as span:
            profile = self.get_user_by_email(email)

            if profile is None or not self.auth_service.verify_password(password, profile.password_hash):
                span.set_attribute("auth.result", "invalid_credentials")
                logger.warning("Login attempt with invalid credentials", extra={"email": email})
                raise AuthenticationException(INVALID_CREDENTIALS)

            if not profile.is_active:
                span.set_attribute("auth.result", "inactive")
                logger.warning("Login attempt on inactive account", extra={"user_id": profile.id})
                raise AuthenticationException("User account is inactive")

            tokens = self.auth_service.generate_tokens(profile)
            span.set_attributes({"auth.result": "success", "user.id": profile.id})

            info = request_info or {}
            self.audit_service.log_action(
                AuditAction.LOGIN, AuditResource.SYSTEM, profile.email,
                "Login realizado.",
                UserContext(
                    user_id=profile.id,
                    email=profile.email,
                    ip_address=info.get("ip_address"),
                    user_agent=info.get("user_agent")
                )
            )
            return {**tokens, "user": profile}

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """
        Issue a new access token from a refresh token.

        Raises:
            AuthenticationException: If the token is invalid, revoked or the user inactive
        """
        try:
            payload = self.auth_service.validate_token(refresh_token, "refresh")
            if self.redis_service and self.redis_service.is_token_blocked(
                    self.auth_service.extract_token_id(refresh_token)):
                raise AuthenticationException("Token has been revoked")

            profile = self.get_user(payload.get("sub"))
            if profile is None or not profile.is_active:
                raise AuthenticationException("User account is inactive")

            return self.auth_service.refresh_access_token(refresh_token, profile)
        except TokenValidationError as e:
            raise AuthenticationException(str(e))

    def logout(self, *tokens: Optional[str]) -> int:
        """Block the given tokens until they expire; returns how many were blocked."""
        if self.redis_service is None:
            return 0

        blocked = 0
        for token in tokens:
            if not token:
                continue
            try:
                token_id = self.auth_service.extract_token_id(token)
                ttl = self.auth_service.token_ttl_seconds(token)
            except TokenValidationError:
                logger.warning("Ignoring malformed token on logout")
                continue
            if self.redis_service.block_token(token_id, ttl):
                blocked += 1
        return blocked
