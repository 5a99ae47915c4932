# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Audit log endpoints for querying the audit trail.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace

from middleware.auth import require_permission
from middleware.error_handler import NotFoundException
from middleware.validation import parse_query_params
from models.entities import UserContext
from models.requests import AuditLogFilters, RecordPath
from routes.common import hal_record, hal_collection
from routes.users import USERS_VIEW
from utils.request import ResponseBuilder

tracer = trace.get_tracer(__name__)

COLLECTION_PATH = '/api/audit-logs'

audit_tag = Tag(name="Audit Logs", description="Audit trail querying")
audit_bp = APIBlueprint(
    'audit',
    __name__,
    url_prefix=COLLECTION_PATH,
    abp_tags=[audit_tag]
)


@audit_bp.get('')
@require_permission(USERS_VIEW)
def list_audit_logs(user_context: UserContext):
    """
    List audit log entries, newest first.

    Supports ``action``, ``resourceType``, ``userEmail`` and free-text
    ``search`` filters. Entries are read-only.
    """
    filters = parse_query_params(AuditLogFilters)
    with tracer.start_as_current_span("audit.route.list") as span:
        span.set_attribute("user.id", user_context.user_id)
        logs = current_app.audit_service.list_logs(filters)
        body = hal_collection(
            logs, COLLECTION_PATH, user_context,
            filters=filters.model_dump(by_alias=True, exclude_none=True)
        )
        return ResponseBuilder.hal(body)


@audit_bp.get('/<record_id>')
@require_permission(USERS_VIEW)
def get_audit_log(user_context: UserContext, path: RecordPath):
    log = current_app.audit_service.get_log(path.record_id)
    if log is None:
        raise NotFoundException(f"Audit log not found: {path.record_id}")
    return ResponseBuilder.hal(hal_record(log, COLLECTION_PATH, user_context))
