# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the contracts back-office.
"""

from datetime import date
from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, Field, field_validator, ConfigDict

from .base import BaseEntity, CamelModel
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
    AuditResource
)


class LifecycleRecord(BaseEntity):
    """
    Record whose validity is bounded by a start/end date pair.

    Dates are held in DD/MM/YYYY display format. ``days_remaining`` and
    ``status`` are derived from ``end_date`` and ``manual_status`` each time
    the record is loaded and are never written back to storage.
    """

    number: Optional[int] = Field(None, description="Sequential number")
    year: Optional[int] = Field(None, description="Year of the record")
    department: str = Field(default='', description="Requesting department (secretaria)")
    object: str = Field(default='', description="Object of the record")
    start_date: str = Field(default='', description="Start date (DD/MM/YYYY)")
    end_date: str = Field(default='', description="End date (DD/MM/YYYY)")
    notes: str = Field(default='', description="Free notes")
    type: str = Field(default='', description="Record type")
    fiscalization_period: Optional[FiscalizationPeriod] = Field(None, description="Inspection period")
    renewal_info: str = Field(default='', description="Renewal possibility")
    process_number: str = Field(default='', description="Administrative process number")
    manager: str = Field(default='', description="Manager (gestor)")
    technical_fiscal: str = Field(default='', description="Technical inspector")
    administrative_fiscal: str = Field(default='', description="Administrative inspector")
    has_administrative_fiscal: bool = Field(default=True, description="Whether an administrative inspector is required")
    manual_status: ManualStatus = Field(default=ManualStatus.AUTOMATIC, description="Manual status override")
    days_remaining: int = Field(default=0, description="Signed days until end date (derived)")
    status: LifecycleStatus = Field(default=LifecycleStatus.ACTIVE, description="Lifecycle status (derived)")

    @field_validator('manual_status', mode='before')
    @classmethod
    def validate_manual_status(cls, v):
        """Absent or unknown overrides mean automatic."""
        return ManualStatus.parse(v)

    def refresh_lifecycle(self, today: Optional[date] = None) -> None:
        """Recompute the derived day count and status against ``today``."""
        from domain.lifecycle import parse_to_day_count, resolve_status

        days = parse_to_day_count(self.end_date, today)
        self.days_remaining = days
        self.status = resolve_status(days, self.manual_status)


class Contract(LifecycleRecord):
    """Administrative contract."""

    contract_id: str = Field(default='', description="Human identifier, e.g. 80/2018")
    supplier: str = Field(default='', description="Contracted supplier")
    service_order_number: str = Field(default='', description="Service start order (works)")
    is_emergency: bool = Field(default=False, description="Emergency contracting")
    active_amendment_status: Optional[str] = Field(None, description="Status of an in-progress amendment")


class Minute(LifecycleRecord):
    """Price registration minute (ata de registro de preços)."""

    minute_id: str = Field(default='', description="Human identifier, e.g. 15/2024")


class SupplierSignature(CamelModel):
    """Supplier signature sub-step of an amendment checklist."""

    sent: bool = False
    received: bool = False


class ClosingSteps(CamelModel):
    """Closing registrations of an amendment checklist."""

    grp: bool = False
    attachments: bool = False
    licitacon: bool = False
    purchase_order: bool = False


class AmendmentChecklist(CamelModel):
    """Eight-step amendment workflow checklist."""

    step1: bool = Field(default=False, description="Created")
    step2: bool = Field(default=False, description="In progress")
    step3: bool = Field(default=False, description="Sent to PGM")
    step4: Optional[PgmDecision] = Field(None, description="Returned from PGM")
    step5: Union[SupplierSignature, bool] = Field(default=False, description="Supplier signature")
    step6: bool = Field(default=False, description="Mayor signature")
    step7: ClosingSteps = Field(default_factory=ClosingSteps, description="Closing registrations")
    step8: bool = Field(default=False, description="Witness signatures")


class PgmAnalysis(CamelModel):
    """One entry of the PGM analysis history."""

    date: str = Field(..., description="Analysis date")
    notes: str = Field(default='', description="Analysis notes")
    decision: str = Field(..., description="approved, rejected, approved_with_reservation or comment")
    analyst: Optional[str] = Field(None, description="Analyst name")

    @field_validator('decision')
    @classmethod
    def validate_decision(cls, v):
        """Validate decision value."""
        valid = {d.value for d in PgmDecision} | {'comment'}
        if v not in valid:
            raise ValueError(f'Invalid PGM decision: {v}')
        return v


class ContractAmendment(BaseEntity):
    """Contract amendment (aditivo) tracked through the PGM workflow."""

    contract_id: str = Field(..., description="Storage id of the parent contract")
    contract_identifier: str = Field(default='N/A', description="Parent contract identifier")
    type: AmendmentType = Field(..., description="Amendment type")
    duration: int = Field(default=0, description="Extension amount")
    duration_unit: DurationUnit = Field(default=DurationUnit.MES, description="Extension unit")
    event_name: str = Field(default='', description="Event name")
    entry_date: str = Field(default='', description="Entry date (DD/MM/YYYY)")
    status: str = Field(default='', description="Workflow status label")
    checklist: AmendmentChecklist = Field(default_factory=AmendmentChecklist, description="Workflow checklist")
    folder_link: str = Field(default='', description="Link to the contract folder")
    contracts_sector_notes: str = Field(default='', description="Contracts sector notes for PGM")
    pgm_notes: str = Field(default='', description="PGM analysis notes")
    pgm_decision: Optional[PgmDecision] = Field(None, description="PGM decision")
    pgm_history: List[PgmAnalysis] = Field(default_factory=list, description="PGM analysis history")
    projected_end_date: Optional[str] = Field(None, description="Parent end date after this extension (derived)")


class UtilityUnit(BaseEntity):
    """Utility consumer unit (water, light or phone)."""

    consumer_unit: str = Field(..., min_length=1, description="Consumer unit number")
    local_name: str = Field(..., min_length=1, description="Location name")
    type: UtilityType = Field(..., description="Utility type")
    company: str = Field(default='', description="Utility company")
    department: Optional[str] = Field(None, description="Responsible department")
    default_commitment_id: Optional[str] = Field(None, description="Default budget commitment")
    due_day: Optional[int] = Field(None, ge=1, le=31, description="Bill due day")


class ModulePermission(CamelModel):
    """View/manage flags for a console module."""

    view: bool = False
    manage: bool = False


class UserProfile(BaseEntity):
    """Console user profile."""

    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=200, description="User full name")
    role: UserRole = Field(default=UserRole.USER, description="User role")
    department: str = Field(default='GABINETE', description="User department")
    permissions: Optional[Dict[str, ModulePermission]] = Field(None, description="Explicit module permissions")
    is_active: bool = Field(default=True, description="Whether the account may log in")
    password_hash: Optional[str] = Field(None, exclude=True, description="Hashed password")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        import re
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v.strip().lower()):
            raise ValueError('Invalid email format')
        return v.strip().lower()


class AuditLog(BaseEntity):
    """Audit log entry for accountability."""

    user_email: str = Field(default='Sistema/Desconhecido', description="User who performed the action")
    action: AuditAction = Field(..., description="Action performed")
    resource_type: AuditResource = Field(..., description="Resource type")
    resource_id: str = Field(..., description="Resource identifier")
    details: str = Field(default='', description="Human-readable details")


class PendingAlert(CamelModel):
    """Record reaching one of the configured expiry thresholds."""

    identifier: str
    kind: str
    object: str = ''
    department: str = ''
    days_remaining: int
    alert_reason: str


class UserContext(BaseModel):
    """User context for request processing with authentication and authorization data."""

    user_id: str = Field(..., description="Authenticated user ID")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = Field(None, description="User display name")
    role: Optional[str] = Field(None, description="User role")
    department: Optional[str] = Field(None, description="User department")
    permissions: List[str] = Field(default_factory=list, description="User's effective permissions")
    token_payload: Optional[Dict[str, Any]] = Field(None, description="Original JWT payload")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")
    session_id: Optional[str] = Field(None, description="Session identifier")

    model_config = ConfigDict(
        use_enum_values=True
    )

    def has_permission(self, permission: str) -> bool:
        """Check if user has a specific permission."""
        return permission in self.permissions
