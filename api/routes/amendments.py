# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contract amendment (aditivo) endpoints.

Amendments are managed under the contracts permissions; each read carries
the parent contract identifier and, for term amendments, the projected end
date.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
import logging

from middleware.auth import require_permission
from middleware.error_handler import NotFoundException
from middleware.validation import parse_json_body, parse_query_params
from models.entities import UserContext
from models.requests import CreateAmendmentRequest, UpdateAmendmentRequest, AmendmentFilters, RecordPath
from routes.common import hal_record, hal_collection
from routes.contracts import CONTRACTS_VIEW, CONTRACTS_MANAGE
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

COLLECTION_PATH = '/api/amendments'

amendments_tag = Tag(name="Amendments", description="Contract amendment workflow")
amendments_bp = APIBlueprint(
    'amendments',
    __name__,
    url_prefix=COLLECTION_PATH,
    abp_tags=[amendments_tag]
)


@amendments_bp.get('')
@require_permission(CONTRACTS_VIEW)
def list_amendments(user_context: UserContext):
    """List amendments, newest first, optionally for one contract (``contractId``)."""
    filters = parse_query_params(AmendmentFilters)
    amendments = current_app.amendment_service.list_amendments(filters.contract_id)
    body = hal_collection(
        amendments, COLLECTION_PATH, user_context, CONTRACTS_MANAGE,
        filters.model_dump(by_alias=True, exclude_none=True)
    )
    return ResponseBuilder.hal(body)


@amendments_bp.get('/<record_id>')
@require_permission(CONTRACTS_VIEW)
def get_amendment(user_context: UserContext, path: RecordPath):
    amendment = current_app.amendment_service.get_amendment(path.record_id)
    if amendment is None:
        raise NotFoundException(f"Amendment not found: {path.record_id}")
    return ResponseBuilder.hal(hal_record(amendment, COLLECTION_PATH, user_context, CONTRACTS_MANAGE))


@amendments_bp.post('')
@require_permission(CONTRACTS_MANAGE)
def create_amendment(user_context: UserContext):
    payload = parse_json_body(CreateAmendmentRequest)
    amendment = current_app.amendment_service.create_amendment(payload, user_context)
    return ResponseBuilder.hal(hal_record(amendment, COLLECTION_PATH, user_context, CONTRACTS_MANAGE), 201)


@amendments_bp.put('/<record_id>')
@require_permission(CONTRACTS_MANAGE)
def update_amendment(user_context: UserContext, path: RecordPath):
    payload = parse_json_body(UpdateAmendmentRequest)
    amendment = current_app.amendment_service.update_amendment(path.record_id, payload, user_context)
    if amendment is None:
        raise NotFoundException(f"Amendment not found: {path.record_id}")
    return ResponseBuilder.hal(hal_record(amendment, COLLECTION_PATH, user_context, CONTRACTS_MANAGE))


@amendments_bp.delete('/<record_id>')
@require_permission(CONTRACTS_MANAGE)
def delete_amendment(user_context: UserContext, path: RecordPath):
    if not current_app.amendment_service.delete_amendment(path.record_id, user_context):
        raise NotFoundException(f"Amendment not found: {path.record_id}")
    return ResponseBuilder.no_content()
