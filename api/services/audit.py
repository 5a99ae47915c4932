# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Audit service for action logging with OpenTelemetry correlation.
"""

import logging
import re
from typing import Dict, List, Optional, Any, Union
from opentelemetry import trace

from .mongodb import MongoDBService
from domain.records import AUDIT_LOGS, row_to_record
from models.entities import AuditLog, UserContext
from models.enums import AuditAction, AuditResource
from models.requests import AuditLogFilters

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

UNKNOWN_USER = 'Sistema/Desconhecido'
DEFAULT_LIMIT = 500


def _contains(text: str) -> Dict[str, Any]:
    return {"$regex": re.escape(text), "$options": "i"}


def build_audit_query(filters: Optional[AuditLogFilters]) -> Dict[str, Any]:
    """Convert audit filters to a MongoDB query."""
    query: Dict[str, Any] = {}
    if filters is None:
        return query

    if filters.action:
        query["action"] = filters.action.upper()

    if filters.resource_type:
        query["resource_type"] = filters.resource_type.upper()

    if filters.user_email:
        query["user_email"] = _contains(filters.user_email.strip())

    if filters.search:
        term = _contains(filters.search.strip())
        query["$or"] = [{"details": term}, {"resource_id": term}, {"user_email": term}]

    return query


class AuditService:
    """Service for audit logging with MongoDB persistence."""

    def __init__(self, mongo_service: MongoDBService, limit: int = DEFAULT_LIMIT):
        """Initialize audit service with MongoDB dependency."""
        self.mongo_service = mongo_service
        self.collection_name = AUDIT_LOGS.collection
        self.limit = limit
        logger.info("Audit service initialized")

    def log_action(
        self,
        action: Union[AuditAction, str],
        resource_type: Union[AuditResource, str],
        resource_id: str,
        details: str = '',
        user_context: Optional[UserContext] = None
    ) -> AuditLog:
        """
        Log an audit trail entry with trace correlation and structured logging.

        Args:
            action: Action performed
            resource_type: Type of resource acted upon
            resource_id: Human identifier of the resource
            details: Human-readable description
            user_context: Authenticated user, if any

        Returns:
            AuditLog: The stored entry
        """
        action = AuditAction(action).value
        resource_type = AuditResource(resource_type).value
        user_email = (user_context.email if user_context else None) or UNKNOWN_USER

        with tracer.start_as_current_span("audit.log_action") as span:
            try:
                span_context = span.get_span_context()

                audit_entry = {
                    "user_email": user_email,
                    "action": action,
                    "resource_type": resource_type,
                    "resource_id": str(resource_id),
                    "details": details
                }

                if span_context.is_valid:
                    audit_entry["trace_id"] = format(span_context.trace_id, "032x")

                if user_context:
                    audit_entry.update({
                        "ip_address": user_context.ip_address,
                        "user_agent": user_context.user_agent
                    })

                span.set_attributes({
                    "audit.action": action,
                    "audit.resource_type": resource_type,
                    "audit.resource_id": str(resource_id)
                })

                stored = self.mongo_service.create(self.collection_name, audit_entry)

                logger.info(
                    "Audit trail entry created",
                    extra={
                        "audit_id": stored.get("id"),
                        "action": action,
                        "resource_type": resource_type,
                        "resource_id": resource_id,
                        "user_email": user_email,
                        "trace_id": audit_entry.get("trace_id"),
                        "audit_category": "business_action"
                    }
                )

                return row_to_record(AUDIT_LOGS, stored)

            except Exception as e:
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to create audit trail entry",
                    extra={
                        "action": action,
                        "resource_type": resource_type,
                        "resource_id": resource_id,
                        "error": str(e)
                    },
                    exc_info=True
                )
                raise

    def list_logs(self, filters: Optional[AuditLogFilters] = None) -> List[AuditLog]:
        """
        List audit logs newest first, capped at the configured limit.

        Args:
            filters: Optional action, resource type, user and text filters

        Returns:
            List[AuditLog]: Matching entries
        """
        with tracer.start_as_current_span("audit.list_logs") as span:
            query = build_audit_query(filters)
            span.set_attributes({
                "audit.query.filters_count": len(query),
                "audit.query.limit": self.limit
            })

            rows = self.mongo_service.find(
                self.collection_name,
                query,
                sort=AUDIT_LOGS.sort,
                limit=self.limit
            )

            logger.info(
                "Audit logs queried successfully",
                extra={"returned_items": len(rows), "filters_count": len(query)}
            )
            return [row_to_record(AUDIT_LOGS, row) for row in rows]

    def get_log(self, audit_id: str) -> Optional[AuditLog]:
        """Get a specific audit log entry by ID."""
        with tracer.start_as_current_span("audit.get_log") as span:
            span.set_attribute("audit.log_id", audit_id)
            row = self.mongo_service.find_one(self.collection_name, audit_id)
            if row is None:
                logger.debug(f"Audit log {audit_id} not found")
                return None
            return row_to_record(AUDIT_LOGS, row)
