# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and user context extraction.

The middleware instance lives on the application (``app.auth_middleware``);
the decorators below look it up per request, so routes never import a
module-level service.
"""

from functools import wraps
from flask import request, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from middleware.error_handler import AuthenticationException, AuthorizationException
from models.entities import UserContext
from services.auth import AuthService, TokenValidationError
from services.redis import RedisService
from utils.request import HeaderUtils, RequestParser

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation, blocklist checking, and user context
    building for protected endpoints.
    """

    def __init__(self, auth_service: AuthService, redis_service: Optional[RedisService] = None):
        self.auth_service = auth_service
        self.redis_service = redis_service

    def extract_token_from_request(self) -> Optional[str]:
        """Bearer token from the Authorization header, if any."""
        return HeaderUtils.get_bearer_token()

    def is_token_blocked(self, token: str) -> bool:
        """
        Check if token is in the Redis blocklist.

        Without a Redis service tokens are never considered blocked.
        """
        if self.redis_service is None:
            return False
        token_id = self.auth_service.extract_token_id(token)
        return self.redis_service.is_token_blocked(token_id)

    def build_user_context(self, token_payload: Dict[str, Any], request_info: Dict[str, Any]) -> UserContext:
        """
        Build user context from validated token payload and request information.

        Args:
            token_payload: Decoded JWT payload
            request_info: Request metadata (IP, user agent, session)

        Returns:
            UserContext object for request processing
        """
        return UserContext(
            user_id=token_payload["sub"],
            email=token_payload.get("email"),
            name=token_payload.get("name"),
            role=token_payload.get("role"),
            department=token_payload.get("department"),
            permissions=token_payload.get("permissions", []),
            token_payload=token_payload,
            ip_address=request_info.get("ip_address"),
            user_agent=request_info.get("user_agent"),
            session_id=request_info.get("session_id")
        )

    def authenticate_request(self) -> UserContext:
        """
        Validate the request's bearer token and build its user context.

        Raises:
            AuthenticationException: Missing, invalid, expired or revoked token
        """
        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            span.set_attribute("auth.operation", "validate_request")

            token = self.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token", extra={"path": request.path})
                raise AuthenticationException("Missing authorization token")

            try:
                token_payload = self.auth_service.validate_token(token, "access")
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}")
                raise AuthenticationException(str(e), "invalid-token", "Invalid Token")

            if self.is_token_blocked(token):
                span.set_attribute("auth.result", "token_blocked")
                logger.warning("Authentication failed: token is blocked")
                raise AuthenticationException("Token has been revoked", "token-revoked", "Token Revoked")

            user_context = self.build_user_context(token_payload, RequestParser.get_client_info())
            g.user_context = user_context

            span.set_attributes({
                "auth.result": "success",
                "user.id": user_context.user_id
            })
            logger.debug(
                "Authentication successful",
                extra={"user_id": user_context.user_id, "ip_address": user_context.ip_address}
            )
            return user_context

    def authorize(self, user_context: UserContext, permission: str) -> None:
        """
        Require a permission on an authenticated context.

        Raises:
            AuthorizationException: When the permission is missing
        """
        with tracer.start_as_current_span("auth.middleware.check_permission") as span:
            span.set_attributes({
                "auth.required_permission": permission,
                "user.id": user_context.user_id
            })

            if not user_context.has_permission(permission):
                span.set_attribute("auth.permission_result", "denied")
                logger.warning(
                    f"Authorization failed: missing permission '{permission}'",
                    extra={
                        "user_id": user_context.user_id,
                        "required_permission": permission,
                        "user_permissions": user_context.permissions
                    }
                )
                raise AuthorizationException(f"Missing required permission: {permission}")

            span.set_attribute("auth.permission_result", "granted")


def get_auth_middleware() -> AuthMiddleware:
    """The application's configured AuthMiddleware."""
    return current_app.auth_middleware


def require_auth(f: Callable) -> Callable:
    """
    Decorator requiring a valid access token.

    The wrapped view receives the UserContext as its first argument.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user_context = get_auth_middleware().authenticate_request()
        return f(user_context, *args, **kwargs)
    return decorated_function


def require_permission(permission: str) -> Callable:
    """
    Decorator requiring a valid access token carrying a permission.

    Args:
        permission: Required permission string, e.g. ``contracts:manage``
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            middleware = get_auth_middleware()
            user_context = middleware.authenticate_request()
            middleware.authorize(user_context, permission)
            return f(user_context, *args, **kwargs)
        return decorated_function
    return decorator
