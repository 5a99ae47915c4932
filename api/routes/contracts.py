# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contract endpoints. Every read carries the derived days remaining and status.
"""

from flask_openapi3 import Tag

from domain.permissions import permission_name, VIEW, MANAGE
from models.enums import PermissionModule
from models.requests import CreateContractRequest, UpdateContractRequest
from routes.lifecycle import LifecycleRoutes, build_lifecycle_blueprint

CONTRACTS_VIEW = permission_name(PermissionModule.CONTRACTS, VIEW)
CONTRACTS_MANAGE = permission_name(PermissionModule.CONTRACTS, MANAGE)

contracts_tag = Tag(name="Contracts", description="Contract registry with derived lifecycle status")

contracts_bp = build_lifecycle_blueprint(LifecycleRoutes(
    name='contracts',
    label='Contract',
    service_attr='contract_service',
    module=PermissionModule.CONTRACTS,
    create_model=CreateContractRequest,
    update_model=UpdateContractRequest,
    tag=contracts_tag
))
