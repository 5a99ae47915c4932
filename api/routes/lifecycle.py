# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Blueprint factory for lifecycle records (contracts and minutes).

Both record types expose the same CRUD surface; they differ only in the
service attached to the application, the permission module and the
request models, which are passed in as a ``LifecycleRoutes`` description.
"""

from dataclasses import dataclass
from typing import Type

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from domain.permissions import permission_name, VIEW, MANAGE
from middleware.auth import require_permission
from middleware.error_handler import NotFoundException
from middleware.validation import parse_json_body, parse_query_params
from models.base import BaseEntityCreate, BaseEntityUpdate
from models.entities import UserContext
from models.enums import PermissionModule
from models.requests import RecordFilters, RecordPath
from routes.common import hal_record, hal_collection
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class LifecycleRoutes:
    """Endpoint description of one lifecycle record type."""
    name: str
    label: str
    service_attr: str
    module: PermissionModule
    create_model: Type[BaseEntityCreate]
    update_model: Type[BaseEntityUpdate]
    tag: Tag

    @property
    def collection_path(self) -> str:
        return f'/api/{self.name}'


def build_lifecycle_blueprint(routes: LifecycleRoutes) -> APIBlueprint:
    """
    Build the list/get/create/update/delete endpoints for a record type.

    Reads require ``<module>:view`` and writes ``<module>:manage``. Every
    returned record carries the derived days remaining and status.
    """
    view_permission = permission_name(routes.module, VIEW)
    manage_permission = permission_name(routes.module, MANAGE)
    collection_path = routes.collection_path

    blueprint = APIBlueprint(
        routes.name,
        __name__,
        url_prefix=collection_path,
        abp_tags=[routes.tag]
    )

    def service():
        return getattr(current_app, routes.service_attr)

    def not_found(record_id: str) -> NotFoundException:
        return NotFoundException(f"{routes.label} not found: {record_id}")

    @blueprint.get('', operation_id=f'list_{routes.name}')
    @require_permission(view_permission)
    def list_records(user_context: UserContext):
        """
        List records, newest first.

        Supports ``status``, ``department`` and ``search`` query filters.
        """
        filters = parse_query_params(RecordFilters)
        with tracer.start_as_current_span(f"{routes.name}.route.list") as span:
            span.set_attribute("user.id", user_context.user_id)
            records = service().list_records(filters)
            body = hal_collection(
                records, collection_path, user_context, manage_permission,
                filters.model_dump(exclude_none=True)
            )
            return ResponseBuilder.hal(body)

    @blueprint.get('/<record_id>', operation_id=f'get_{routes.name}')
    @require_permission(view_permission)
    def get_record(user_context: UserContext, path: RecordPath):
        """Get a single record."""
        record = service().get_record(path.record_id)
        if record is None:
            raise not_found(path.record_id)
        return ResponseBuilder.hal(hal_record(record, collection_path, user_context, manage_permission))

    @blueprint.post('', operation_id=f'create_{routes.name}')
    @require_permission(manage_permission)
    def create_record(user_context: UserContext):
        """Register a record."""
        payload = parse_json_body(routes.create_model)
        record = service().create_record(payload, user_context)
        return ResponseBuilder.hal(hal_record(record, collection_path, user_context, manage_permission), 201)

    @blueprint.put('/<record_id>', operation_id=f'update_{routes.name}')
    @require_permission(manage_permission)
    def update_record(user_context: UserContext, path: RecordPath):
        """Update the fields sent in the body; the others are kept."""
        payload = parse_json_body(routes.update_model)
        record = service().update_record(path.record_id, payload, user_context)
        if record is None:
            raise not_found(path.record_id)
        return ResponseBuilder.hal(hal_record(record, collection_path, user_context, manage_permission))

    @blueprint.delete('/<record_id>', operation_id=f'delete_{routes.name}')
    @require_permission(manage_permission)
    def delete_record(user_context: UserContext, path: RecordPath):
        """Delete a record."""
        if not service().delete_record(path.record_id, user_context):
            raise not_found(path.record_id)
        logger.info(f"{routes.label} deleted", extra={"record_id": path.record_id, "user_id": user_context.user_id})
        return ResponseBuilder.no_content()

    return blueprint
