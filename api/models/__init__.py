# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the contracts back-office.
"""

# Base models
from .base import CamelModel, BaseEntity, BaseEntityCreate, BaseEntityUpdate

# Enumerations
from .enums import (
    LifecycleStatus,
    ManualStatus,
    FiscalizationPeriod,
    AmendmentType,
    DurationUnit,
    PgmDecision,
    UtilityType,
    UserRole,
    AuditAction,
    AuditResource,
    PermissionModule
)

# Core entities
from .entities import (
    LifecycleRecord,
    Contract,
    Minute,
    AmendmentChecklist,
    PgmAnalysis,
    ContractAmendment,
    UtilityUnit,
    ModulePermission,
    UserProfile,
    AuditLog,
    PendingAlert,
    UserContext
)

# Request models
from .requests import (
    CreateContractRequest,
    UpdateContractRequest,
    CreateMinuteRequest,
    UpdateMinuteRequest,
    CreateAmendmentRequest,
    UpdateAmendmentRequest,
    CreateUtilityUnitRequest,
    UpdateUtilityUnitRequest,
    CreateUserRequest,
    UpdateUserRequest,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RecordPath,
    RecordFilters,
    AmendmentFilters,
    UtilityUnitFilters,
    AlertQuery,
    AuditLogFilters
)

# Response models
from .responses import HalLink, AuthTokenResponse

__all__ = [
    # Base models
    "CamelModel",
    "BaseEntity",
    "BaseEntityCreate",
    "BaseEntityUpdate",

    # Enumerations
    "LifecycleStatus",
    "ManualStatus",
    "FiscalizationPeriod",
    "AmendmentType",
    "DurationUnit",
    "PgmDecision",
    "UtilityType",
    "UserRole",
    "AuditAction",
    "AuditResource",
    "PermissionModule",

    # Core entities
    "LifecycleRecord",
    "Contract",
    "Minute",
    "AmendmentChecklist",
    "PgmAnalysis",
    "ContractAmendment",
    "UtilityUnit",
    "ModulePermission",
    "UserProfile",
    "AuditLog",
    "PendingAlert",
    "UserContext",

    # Request models
    "CreateContractRequest",
    "UpdateContractRequest",
    "CreateMinuteRequest",
    "UpdateMinuteRequest",
    "CreateAmendmentRequest",
    "UpdateAmendmentRequest",
    "CreateUtilityUnitRequest",
    "UpdateUtilityUnitRequest",
    "CreateUserRequest",
    "UpdateUserRequest",
    "ChangePasswordRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "RecordPath",
    "RecordFilters",
    "AmendmentFilters",
    "UtilityUnitFilters",
    "AlertQuery",
    "AuditLogFilters",

    # Response models
    "HalLink",
    "AuthTokenResponse"
]
