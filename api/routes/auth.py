# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication endpoints for login, logout, and token refresh.
"""

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from middleware.auth import require_auth
from middleware.validation import parse_json_body
from models.entities import UserContext
from models.requests import LoginRequest, RefreshTokenRequest
from models.responses import AuthTokenResponse
from utils.request import RequestParser

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

auth_tag = Tag(name="Authentication", description="User authentication and token management")
auth_bp = APIBlueprint(
    'auth',
    __name__,
    url_prefix='/api/auth',
    abp_tags=[auth_tag]
)


@auth_bp.post('/login')
def login():
    """
    Authenticate user and return JWT tokens.

    Validates the credentials and returns an access/refresh token pair plus
    the user's profile. Wrong credentials and inactive accounts answer 401.
    """
    credentials = parse_json_body(LoginRequest)
    with tracer.start_as_current_span("auth.route.login") as span:
        span.set_attribute("auth.email", credentials.email)

        result = current_app.user_service.authenticate(
            credentials.email,
            credentials.password,
            RequestParser.get_client_info()
        )
        profile = result.pop("user")

        body = AuthTokenResponse(**result).model_dump(exclude_none=True)
        body["user"] = profile.to_api()
        return jsonify(body), 200


@auth_bp.post('/refresh')
def refresh_token():
    """Exchange a refresh token for a new access token."""
    payload = parse_json_body(RefreshTokenRequest)
    tokens = current_app.user_service.refresh(payload.refresh_token)
    return jsonify(AuthTokenResponse(**tokens).model_dump(exclude_none=True)), 200


@auth_bp.post('/logout')
@require_auth
def logout(user_context: UserContext):
    """
    Revoke the current access token and, when sent, the refresh token.

    Revoked tokens stay blocked until their natural expiry.
    """
    body = request.get_json(silent=True) or {}
    access_token = current_app.auth_middleware.extract_token_from_request()
    refresh = body.get("refresh_token") or body.get("refreshToken")

    revoked = current_app.user_service.logout(access_token, refresh)
    logger.info("User logged out", extra={"user_id": user_context.user_id, "revoked_tokens": revoked})
    return jsonify({"message": "Logged out", "revokedTokens": revoked}), 200
