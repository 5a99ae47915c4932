# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Health check endpoint with dependency monitoring.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag

health_tag = Tag(name="Health", description="System health and status")
health_bp = APIBlueprint(
    'health',
    __name__,
    url_prefix='/api',
    abp_tags=[health_tag]
)


@health_bp.get('/healthz')
def health_check():
    """
    Health check with dependency status and process metrics.

    Answers 200 when healthy or degraded (cache down) and 503 when storage
    is unhealthy.
    """
    health_data = current_app.health_service.get_comprehensive_health()
    status_code = 503 if health_data["status"] == "unhealthy" else 200

    health_response = current_app.hal_formatter.builder.build_resource_response(
        health_data,
        "/api",
        "healthz"
    )
    # Health has no collection of its own
    health_response["_links"].pop("collection", None)

    return jsonify(health_response), status_code
