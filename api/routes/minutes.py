# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Price registration minute (ata) endpoints.
"""

from flask_openapi3 import Tag

from models.enums import PermissionModule
from models.requests import CreateMinuteRequest, UpdateMinuteRequest
from routes.lifecycle import LifecycleRoutes, build_lifecycle_blueprint

minutes_tag = Tag(name="Minutes", description="Price registration minutes with derived lifecycle status")

minutes_bp = build_lifecycle_blueprint(LifecycleRoutes(
    name='minutes',
    label='Minute',
    service_attr='minute_service',
    module=PermissionModule.MINUTES,
    create_model=CreateMinuteRequest,
    update_model=UpdateMinuteRequest,
    tag=minutes_tag
))
