# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import List, Optional, Dict
from pydantic import BaseModel, Field, field_validator

from .base import CamelModel, BaseEntityCreate, BaseEntityUpdate
from .entities import AmendmentChecklist, ModulePermission, PgmAnalysis
from .enums import (
    ManualStatus,
    FiscalizationPeriod,
    AmendmentType,
    DurationUnit,
    PgmDecision,
    UtilityType,
    UserRole
)


def _validate_email(v: str) -> str:
    import re
    email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    if not re.match(email_pattern, v.strip().lower()):
        raise ValueError('Invalid email format')
    return v.strip().lower()


def _validate_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError('Password must be at least 6 characters long')
    return v


class LifecycleRecordFields(BaseEntityCreate):
    """Fields shared by contract and minute payloads."""

    number: Optional[int] = Field(None, ge=0, description="Sequential number")
    year: Optional[int] = Field(None, ge=1900, le=2200, description="Year")
    department: Optional[str] = Field(None, description="Requesting department")
    object: Optional[str] = Field(None, description="Object")
    start_date: Optional[str] = Field(None, description="Start date (DD/MM/YYYY)")
    end_date: Optional[str] = Field(None, description="End date (DD/MM/YYYY)")
    notes: Optional[str] = Field(None, description="Notes")
    type: Optional[str] = Field(None, description="Record type")
    fiscalization_period: Optional[FiscalizationPeriod] = Field(None, description="Inspection period")
    renewal_info: Optional[str] = Field(None, description="Renewal possibility")
    process_number: Optional[str] = Field(None, description="Process number")
    manager: Optional[str] = Field(None, description="Manager")
    technical_fiscal: Optional[str] = Field(None, description="Technical inspector")
    administrative_fiscal: Optional[str] = Field(None, description="Administrative inspector")
    has_administrative_fiscal: Optional[bool] = Field(None, description="Administrative inspector required")
    manual_status: Optional[ManualStatus] = Field(None, description="Manual status override")


class CreateContractRequest(LifecycleRecordFields):
    """Request model for creating a contract."""

    number: int = Field(..., ge=0, description="Contract number")
    year: int = Field(..., ge=1900, le=2200, description="Contract year")
    contract_id: Optional[str] = Field(None, description="Contract identifier, defaults to number/year")
    supplier: Optional[str] = Field(None, description="Supplier")
    service_order_number: Optional[str] = Field(None, description="Service start order")
    is_emergency: Optional[bool] = Field(None, description="Emergency contracting")


class UpdateContractRequest(LifecycleRecordFields, BaseEntityUpdate):
    """Request model for updating a contract; only sent fields are written."""

    contract_id: Optional[str] = Field(None, description="Contract identifier")
    supplier: Optional[str] = Field(None, description="Supplier")
    service_order_number: Optional[str] = Field(None, description="Service start order")
    is_emergency: Optional[bool] = Field(None, description="Emergency contracting")


class CreateMinuteRequest(LifecycleRecordFields):
    """Request model for creating a minute."""

    number: int = Field(..., ge=0, description="Minute number")
    year: int = Field(..., ge=1900, le=2200, description="Minute year")
    minute_id: Optional[str] = Field(None, description="Minute identifier, defaults to number/year")


class UpdateMinuteRequest(LifecycleRecordFields, BaseEntityUpdate):
    """Request model for updating a minute; only sent fields are written."""

    minute_id: Optional[str] = Field(None, description="Minute identifier")


class CreateAmendmentRequest(BaseEntityCreate):
    """Request model for creating a contract amendment."""

    contract_id: str = Field(..., min_length=1, description="Parent contract storage id")
    type: AmendmentType = Field(..., description="Amendment type")
    duration: int = Field(default=0, description="Extension amount")
    duration_unit: DurationUnit = Field(default=DurationUnit.MES, description="Extension unit")
    event_name: Optional[str] = Field(None, description="Event name")
    entry_date: Optional[str] = Field(None, description="Entry date (DD/MM/YYYY)")
    status: str = Field(default='', description="Workflow status label")
    checklist: AmendmentChecklist = Field(default_factory=AmendmentChecklist, description="Workflow checklist")
    folder_link: Optional[str] = Field(None, description="Folder link")
    contracts_sector_notes: Optional[str] = Field(None, description="Notes for PGM")
    pgm_notes: Optional[str] = Field(None, description="PGM notes")
    pgm_decision: Optional[PgmDecision] = Field(None, description="PGM decision")
    pgm_history: List[PgmAnalysis] = Field(default_factory=list, description="PGM history")


class UpdateAmendmentRequest(BaseEntityUpdate):
    """Request model for updating a contract amendment."""

    type: Optional[AmendmentType] = Field(None, description="Amendment type")
    duration: Optional[int] = Field(None, description="Extension amount")
    duration_unit: Optional[DurationUnit] = Field(None, description="Extension unit")
    event_name: Optional[str] = Field(None, description="Event name")
    entry_date: Optional[str] = Field(None, description="Entry date (DD/MM/YYYY)")
    status: Optional[str] = Field(None, description="Workflow status label")
    checklist: Optional[AmendmentChecklist] = Field(None, description="Workflow checklist")
    folder_link: Optional[str] = Field(None, description="Folder link")
    contracts_sector_notes: Optional[str] = Field(None, description="Notes for PGM")
    pgm_notes: Optional[str] = Field(None, description="PGM notes")
    pgm_decision: Optional[PgmDecision] = Field(None, description="PGM decision")
    pgm_history: Optional[List[PgmAnalysis]] = Field(None, description="PGM history")


class CreateUtilityUnitRequest(BaseEntityCreate):
    """Request model for creating a utility unit."""

    consumer_unit: str = Field(..., min_length=1, description="Consumer unit number")
    local_name: str = Field(..., min_length=1, description="Location name")
    type: UtilityType = Field(..., description="Utility type")
    company: str = Field(default='', description="Utility company")
    department: Optional[str] = Field(None, description="Department")
    default_commitment_id: Optional[str] = Field(None, description="Default commitment")
    due_day: Optional[int] = Field(None, ge=1, le=31, description="Bill due day")


class UpdateUtilityUnitRequest(BaseEntityUpdate):
    """Request model for updating a utility unit."""

    consumer_unit: Optional[str] = Field(None, min_length=1, description="Consumer unit number")
    local_name: Optional[str] = Field(None, min_length=1, description="Location name")
    type: Optional[UtilityType] = Field(None, description="Utility type")
    company: Optional[str] = Field(None, description="Utility company")
    department: Optional[str] = Field(None, description="Department")
    default_commitment_id: Optional[str] = Field(None, description="Default commitment")
    due_day: Optional[int] = Field(None, ge=1, le=31, description="Bill due day")


class CreateUserRequest(BaseEntityCreate):
    """Request model for creating a console user."""

    email: str = Field(..., description="User email address")
    password: str = Field(..., description="Initial password")
    name: Optional[str] = Field(None, max_length=200, description="User full name")
    role: UserRole = Field(default=UserRole.USER, description="User role")
    department: str = Field(default='GABINETE', description="User department")
    permissions: Optional[Dict[str, ModulePermission]] = Field(None, description="Explicit module permissions")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        return _validate_email(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        """Validate password length."""
        return _validate_password(v)


class UpdateUserRequest(BaseEntityUpdate):
    """Request model for updating a user profile."""

    name: Optional[str] = Field(None, max_length=200, description="User full name")
    role: Optional[UserRole] = Field(None, description="User role")
    department: Optional[str] = Field(None, description="User department")
    permissions: Optional[Dict[str, ModulePermission]] = Field(None, description="Explicit module permissions")
    is_active: Optional[bool] = Field(None, description="Whether the account may log in")


class ChangePasswordRequest(BaseEntityCreate):
    """Request model for changing the current user's password."""

    new_password: str = Field(..., description="New password")

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        """Validate new password length."""
        return _validate_password(v)


class LoginRequest(BaseModel):
    """Request model for user authentication."""

    email: str = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        return _validate_email(v)


class RefreshTokenRequest(BaseModel):
    """Request model for token refresh."""

    refresh_token: str = Field(..., description="Refresh token")


class RecordPath(BaseModel):
    """Path parameters for single-record endpoints."""

    record_id: str = Field(..., description="Storage identifier")


class RecordFilters(BaseModel):
    """Filters for contract and minute listings."""

    status: Optional[str] = Field(None, description="Filter by derived status")
    department: Optional[str] = Field(None, description="Filter by department")
    search: Optional[str] = Field(None, description="Search identifier, object and supplier")


class AmendmentFilters(CamelModel):
    """Filters for amendment listings."""

    contract_id: Optional[str] = Field(None, description="Parent contract storage id")


class UtilityUnitFilters(CamelModel):
    """Filters for utility unit listings."""

    type: Optional[UtilityType] = Field(None, description="Filter by utility type")


class AlertQuery(BaseModel):
    """Query parameters for the pending alerts endpoint."""

    force: bool = Field(False, description="Include every record not yet expired")


class AuditLogFilters(CamelModel):
    """Filters for audit log queries."""

    action: Optional[str] = Field(None, description="Filter by action")
    resource_type: Optional[str] = Field(None, description="Filter by resource type")
    user_email: Optional[str] = Field(None, description="Filter by user email")
    search: Optional[str] = Field(None, description="Search in details and resource id")
