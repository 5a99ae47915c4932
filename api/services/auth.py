# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token management and password hashing.

This module provides JWT token generation, validation, refresh, and password
hashing utilities using RS256 signing and bcrypt for secure authentication.
"""

import os
import uuid
import jwt
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List, Tuple
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from opentelemetry import trace
import logging

from models.entities import UserProfile
from domain.permissions import permissions_for_profile

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """
    JWT authentication service with RS256 signing and bcrypt password hashing.

    Provides token generation, validation and refresh plus password management
    for console users.
    """

    def __init__(self, private_key: Optional[str] = None, public_key: Optional[str] = None,
                 bcrypt_rounds: int = 12):
        """
        Initialize the authentication service.

        Args:
            private_key: RS256 private key for token signing (PEM format)
            public_key: RS256 public key for token verification (PEM format)
            bcrypt_rounds: bcrypt cost factor
        """
        private_key = private_key or os.getenv("JWT_PRIVATE_KEY")
        public_key = public_key or os.getenv("JWT_PUBLIC_KEY")

        if not private_key or not public_key:
            # Both halves must come from the same pair
            logger.warning("No JWT key pair configured, generating development key pair")
            private_key, public_key = self.generate_key_pair()

        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = "RS256"
        self.access_token_expire_minutes = 15
        self.refresh_token_expire_days = 7
        self.bcrypt_rounds = bcrypt_rounds

    @staticmethod
    def generate_key_pair() -> Tuple[str, str]:
        """Generate an RS256 key pair (PEM private and public key)."""
        private_key = rsa.generate_private_key(
            public_exponent=65537,
            key_size=2048
        )

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        ).decode('utf-8')

        public_key = private_key.public_key()
        public_pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        ).decode('utf-8')

        return private_pem, public_pem

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt with salt.

        Args:
            password: Plain text password to hash

        Returns:
            Hashed password string
        """
        with tracer.start_as_current_span("auth.hash_password") as span:
            span.set_attribute("auth.operation", "hash_password")

            salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
            hashed = bcrypt.hashpw(password.encode('utf-8'), salt)

            logger.debug("Password hashed successfully")
            return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise
        """
        with tracer.start_as_current_span("auth.verify_password") as span:
            span.set_attribute("auth.operation", "verify_password")

            if not hashed_password:
                span.set_attribute("auth.verification_result", "no_password")
                return False

            try:
                result = bcrypt.checkpw(
                    password.encode('utf-8'),
                    hashed_password.encode('utf-8')
                )

                span.set_attribute("auth.verification_result", "success" if result else "failed")
                logger.debug(f"Password verification: {'success' if result else 'failed'}")

                return result
            except ValueError as e:
                span.set_attribute("auth.verification_result", "error")
                logger.error(f"Password verification error: {str(e)}")
                return False

    def _access_payload(self, profile: UserProfile, permissions: List[str], now: datetime) -> Dict[str, Any]:
        return {
            "sub": profile.id,
            "email": profile.email,
            "name": profile.name,
            "role": profile.role,
            "department": profile.department,
            "permissions": permissions,
            "iat": now,
            "exp": now + timedelta(minutes=self.access_token_expire_minutes),
            "jti": uuid.uuid4().hex,
            "type": "access"
        }

    def generate_tokens(self, profile: UserProfile) -> Dict[str, Any]:
        """
        Generate access and refresh tokens for a user.

        Args:
            profile: Stored user profile

        Returns:
            Dictionary containing access_token, refresh_token, and metadata
        """
        with tracer.start_as_current_span("auth.generate_tokens") as span:
            span.set_attributes({
                "auth.operation": "generate_tokens",
                "user.id": profile.id or ""
            })

            now = datetime.now(timezone.utc)
            permissions = permissions_for_profile(profile)
            access_payload = self._access_payload(profile, permissions, now)
            refresh_exp = now + timedelta(days=self.refresh_token_expire_days)

            refresh_payload = {
                "sub": profile.id,
                "iat": now,
                "exp": refresh_exp,
                "jti": uuid.uuid4().hex,
                "type": "refresh"
            }

            try:
                access_token = jwt.encode(access_payload, self.private_key, algorithm=self.algorithm)
                refresh_token = jwt.encode(refresh_payload, self.private_key, algorithm=self.algorithm)

                span.set_attribute("auth.tokens_generated", "success")

                logger.info(
                    "JWT tokens generated successfully",
                    extra={
                        "user_id": profile.id,
                        "access_expires_at": access_payload["exp"].isoformat(),
                        "refresh_expires_at": refresh_exp.isoformat()
                    }
                )

                return {
                    "access_token": access_token,
                    "refresh_token": refresh_token,
                    "token_type": "Bearer",
                    "expires_in": self.access_token_expire_minutes * 60
                }

            except Exception as e:
                span.set_attribute("auth.tokens_generated", "error")
                logger.error(f"Token generation failed: {str(e)}")
                raise AuthenticationError(f"Failed to generate tokens: {str(e)}")

    def validate_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Args:
            token: JWT token string to validate
            token_type: Expected token type ("access" or "refresh")

        Returns:
            Decoded token payload

        Raises:
            TokenValidationError: If token is invalid or expired
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attributes({
                "auth.operation": "validate_token",
                "auth.token_type": token_type
            })

            try:
                payload = jwt.decode(
                    token,
                    self.public_key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": True}
                )
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")

            if payload.get("type") != token_type:
                span.set_attribute("auth.validation_result", "wrong_type")
                raise TokenValidationError(f"Invalid token type. Expected {token_type}")

            span.set_attributes({
                "auth.validation_result": "success",
                "user.id": payload.get("sub") or ""
            })

            logger.debug(
                "Token validated successfully",
                extra={"user_id": payload.get("sub"), "token_type": token_type}
            )

            return payload

    def refresh_access_token(self, refresh_token: str, profile: UserProfile) -> Dict[str, Any]:
        """
        Issue a new access token for a profile holding a valid refresh token.

        Claims are rebuilt from the current profile, so role and permission
        changes apply on the next refresh.

        Args:
            refresh_token: Valid refresh token
            profile: Profile the refresh token was issued to

        Returns:
            New access token and metadata

        Raises:
            TokenValidationError: If refresh token is invalid or belongs to another user
        """
        with tracer.start_as_current_span("auth.refresh_access_token") as span:
            span.set_attribute("auth.operation", "refresh_access_token")

            refresh_payload = self.validate_token(refresh_token, "refresh")
            if refresh_payload.get("sub") != profile.id:
                raise TokenValidationError("Refresh token does not belong to this user")

            now = datetime.now(timezone.utc)
            access_payload = self._access_payload(profile, permissions_for_profile(profile), now)

            try:
                access_token = jwt.encode(access_payload, self.private_key, algorithm=self.algorithm)
            except Exception as e:
                span.set_attribute("auth.refresh_result", "error")
                logger.error(f"Token refresh failed: {str(e)}")
                raise AuthenticationError(f"Failed to refresh token: {str(e)}")

            span.set_attribute("auth.refresh_result", "success")
            logger.info(
                "Access token refreshed successfully",
                extra={
                    "user_id": profile.id,
                    "new_expires_at": access_payload["exp"].isoformat()
                }
            )

            return {
                "access_token": access_token,
                "token_type": "Bearer",
                "expires_in": self.access_token_expire_minutes * 60
            }

    def decode_unverified(self, token: str) -> Dict[str, Any]:
        """Decode a token without checking its signature."""
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise TokenValidationError(f"Invalid token format: {str(e)}")

    def extract_token_id(self, token: str) -> str:
        """
        Extract a unique identifier from a token for blocklist purposes.

        Args:
            token: JWT token string

        Returns:
            Unique token identifier
        """
        payload = self.decode_unverified(token)
        if payload.get("jti"):
            return payload["jti"]
        return f"{payload.get('sub')}:{payload.get('iat')}:{payload.get('type')}"

    def token_ttl_seconds(self, token: str) -> int:
        """Seconds until the token expires, at least one."""
        payload = self.decode_unverified(token)
        exp = payload.get("exp")
        if not exp:
            return self.access_token_expire_minutes * 60
        remaining = int(exp - datetime.now(timezone.utc).timestamp())
        return max(remaining, 1)
