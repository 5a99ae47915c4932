# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Expiry alert endpoint: contracts and minutes whose days remaining hit one of
the notification thresholds today.
"""

from flask import current_app
from flask_openapi3 import APIBlueprint, Tag
import logging

from middleware.auth import require_permission
from middleware.validation import parse_query_params
from models.entities import UserContext
from models.requests import AlertQuery
from routes.contracts import CONTRACTS_VIEW
from utils.request import ResponseBuilder

logger = logging.getLogger(__name__)

COLLECTION_PATH = '/api/alerts'

alerts_tag = Tag(name="Alerts", description="Expiry alerts for contracts and minutes")
alerts_bp = APIBlueprint(
    'alerts',
    __name__,
    url_prefix=COLLECTION_PATH,
    abp_tags=[alerts_tag]
)


@alerts_bp.get('/pending')
@require_permission(CONTRACTS_VIEW)
def list_pending_alerts(user_context: UserContext):
    """
    List records due for an expiry alert, soonest first.

    With ``force=true`` every automatic record not yet expired is listed,
    regardless of thresholds.
    """
    query = parse_query_params(AlertQuery)
    alerts = current_app.alert_service.pending_alerts(force=query.force)

    body = current_app.hal_formatter.builder.build_collection_response(
        [alert.to_api() for alert in alerts],
        f"{COLLECTION_PATH}/pending",
        {"force": "true"} if query.force else None
    )
    body["thresholds"] = current_app.alert_service.get_thresholds()
    return ResponseBuilder.hal(body)
