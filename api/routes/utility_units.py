# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Utility consumer unit endpoints (water, energy and telephone accounts).
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag

from domain.permissions import permission_name, VIEW, MANAGE
from middleware.auth import require_permission
from middleware.error_handler import NotFoundException
from middleware.validation import parse_json_body, parse_query_params
from models.entities import UserContext
from models.enums import PermissionModule
from models.requests import (
    CreateUtilityUnitRequest,
    UpdateUtilityUnitRequest,
    UtilityUnitFilters,
    RecordPath
)
from routes.common import hal_record, hal_collection
from utils.request import ResponseBuilder

COLLECTION_PATH = '/api/utility-units'
UTILITY_VIEW = permission_name(PermissionModule.UTILITY_BILLS, VIEW)
UTILITY_MANAGE = permission_name(PermissionModule.UTILITY_BILLS, MANAGE)

utility_units_tag = Tag(name="Utility Units", description="Utility consumer units")
utility_units_bp = APIBlueprint(
    'utility_units',
    __name__,
    url_prefix=COLLECTION_PATH,
    abp_tags=[utility_units_tag]
)


def _not_found(record_id: str) -> NotFoundException:
    return NotFoundException(f"Utility unit not found: {record_id}")


@utility_units_bp.get('')
@require_permission(UTILITY_VIEW)
def list_utility_units(user_context: UserContext):
    """List units ordered by location name, optionally filtered by ``type``."""
    filters = parse_query_params(UtilityUnitFilters)
    units = current_app.utility_unit_service.list_units(filters.type)
    body = hal_collection(
        units, COLLECTION_PATH, user_context, UTILITY_MANAGE,
        filters.model_dump(exclude_none=True)
    )
    return ResponseBuilder.hal(body)


@utility_units_bp.get('/<record_id>')
@require_permission(UTILITY_VIEW)
def get_utility_unit(user_context: UserContext, path: RecordPath):
    unit = current_app.utility_unit_service.get_unit(path.record_id)
    if unit is None:
        raise _not_found(path.record_id)
    return ResponseBuilder.hal(hal_record(unit, COLLECTION_PATH, user_context, UTILITY_MANAGE))


@utility_units_bp.post('')
@require_permission(UTILITY_MANAGE)
def create_utility_unit(user_context: UserContext):
    payload = parse_json_body(CreateUtilityUnitRequest)
    unit = current_app.utility_unit_service.create_unit(payload)
    return ResponseBuilder.hal(hal_record(unit, COLLECTION_PATH, user_context, UTILITY_MANAGE), 201)


@utility_units_bp.put('/<record_id>')
@require_permission(UTILITY_MANAGE)
def update_utility_unit(user_context: UserContext, path: RecordPath):
    payload = parse_json_body(UpdateUtilityUnitRequest)
    unit = current_app.utility_unit_service.update_unit(path.record_id, payload)
    if unit is None:
        raise _not_found(path.record_id)
    return ResponseBuilder.hal(hal_record(unit, COLLECTION_PATH, user_context, UTILITY_MANAGE))


@utility_units_bp.delete('/<record_id>')
@require_permission(UTILITY_MANAGE)
def delete_utility_unit(user_context: UserContext, path: RecordPath):
    if not current_app.utility_unit_service.delete_unit(path.record_id):
        raise _not_found(path.record_id)
    return ResponseBuilder.no_content()
