# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User administration endpoints and the current user's own profile.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
import logging

from domain.permissions import permission_name, VIEW, MANAGE
from middleware.auth import require_auth, require_permission
from middleware.error_handler import NotFoundException
from middleware.validation import parse_json_body
from models.entities import UserContext
from models.enums import PermissionModule
from models.requests import CreateUserRequest, UpdateUserRequest, ChangePasswordRequest, RecordPath
from routes.common import hal_record, hal_collection
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

COLLECTION_PATH = '/api/users'
USERS_VIEW = permission_name(PermissionModule.USERS, VIEW)
USERS_MANAGE = permission_name(PermissionModule.USERS, MANAGE)

users_tag = Tag(name="Users", description="Console user administration")
users_bp = APIBlueprint(
    'users',
    __name__,
    url_prefix=COLLECTION_PATH,
    abp_tags=[users_tag]
)


def _not_found(user_id: str) -> NotFoundException:
    return NotFoundException(f"User not found: {user_id}")


@users_bp.get('')
@require_permission(USERS_VIEW)
def list_users(user_context: UserContext):
    """List console users ordered by email."""
    users = current_app.user_service.list_users()
    return ResponseBuilder.hal(hal_collection(users, COLLECTION_PATH, user_context, USERS_MANAGE))


@users_bp.get('/me')
@require_auth
def get_current_user(user_context: UserContext):
    """Profile of the authenticated user, with their effective permissions."""
    profile = current_app.user_service.get_user(user_context.user_id)
    if profile is None:
        raise _not_found(user_context.user_id)

    body = hal_record(profile, COLLECTION_PATH, user_context, USERS_MANAGE)
    body["effectivePermissions"] = user_context.permissions
    return ResponseBuilder.hal(body)


@users_bp.put('/me/password')
@require_auth
def change_own_password(user_context: UserContext):
    """Replace the authenticated user's password."""
    payload = parse_json_body(ChangePasswordRequest)
    if not current_app.user_service.change_password(user_context.user_id, payload.new_password):
        raise _not_found(user_context.user_id)
    return ResponseBuilder.no_content()


@users_bp.get('/<record_id>')
@require_permission(USERS_VIEW)
def get_user(user_context: UserContext, path: RecordPath):
    profile = current_app.user_service.get_user(path.record_id)
    if profile is None:
        raise _not_found(path.record_id)
    return ResponseBuilder.hal(hal_record(profile, COLLECTION_PATH, user_context, USERS_MANAGE))


@users_bp.post('')
@require_permission(USERS_MANAGE)
def create_user(user_context: UserContext):
    """Create a console user; a duplicate email answers 409."""
    payload = parse_json_body(CreateUserRequest)
    profile = current_app.user_service.create_user(payload, user_context)
    return ResponseBuilder.hal(hal_record(profile, COLLECTION_PATH, user_context, USERS_MANAGE), 201)


@users_bp.put('/<record_id>')
@require_permission(USERS_MANAGE)
def update_user(user_context: UserContext, path: RecordPath):
    payload = parse_json_body(UpdateUserRequest)
    profile = current_app.user_service.update_user(path.record_id, payload, user_context)
    if profile is None:
        raise _not_found(path.record_id)
    return ResponseBuilder.hal(hal_record(profile, COLLECTION_PATH, user_context, USERS_MANAGE))


@users_bp.delete('/<record_id>')
@require_permission(USERS_MANAGE)
def delete_user(user_context: UserContext, path: RecordPath):
    if not current_app.user_service.delete_user(path.record_id, user_context):
        raise _not_found(path.record_id)
    logger.info("User deleted", extra={"deleted_user_id": path.record_id, "user_id": user_context.user_id})
    return ResponseBuilder.no_content()
