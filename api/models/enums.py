# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the contracts back-office.
"""

from enum import Enum
from typing import Optional, Union


class LifecycleStatus(str, Enum):
    """Derived status of a contract or minute."""
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"
    EXECUTED = "executed"
    RESCINDED = "rescinded"


class ManualStatus(str, Enum):
    """Administrator override of the date-based lifecycle status."""
    AUTOMATIC = "automatic"
    EXECUTED = "executed"
    RESCINDED = "rescinded"

    @classmethod
    def parse(cls, value: Union["ManualStatus", str, None]) -> "ManualStatus":
        """Map a stored value to a member; absent or unknown values mean automatic."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return cls.AUTOMATIC
        return cls.AUTOMATIC

    @property
    def storage_value(self) -> Optional[str]:
        """Value written to storage; automatic is stored as null."""
        return None if self is ManualStatus.AUTOMATIC else self.value


class FiscalizationPeriod(str, Enum):
    """How often a contract is inspected."""
    MONTHLY = "monthly"
    ON_DELIVERY = "on_delivery"


class AmendmentType(str, Enum):
    """Amendment kind: term extension or value change."""
    PRAZO = "prazo"
    VALOR = "valor"


class DurationUnit(str, Enum):
    """Unit of an amendment duration."""
    DIA = "dia"
    MES = "mes"
    ANO = "ano"


class PgmDecision(str, Enum):
    """Legal office (PGM) decision on an amendment."""
    APPROVED = "approved"
    APPROVED_WITH_RESERVATION = "approved_with_reservation"
    REJECTED = "rejected"


class UtilityType(str, Enum):
    """Utility consumer unit type."""
    WATER = "water"
    LIGHT = "light"
    PHONE = "phone"


class UserRole(str, Enum):
    """Console user roles."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MANAGER = "manager"
    PGM = "pgm"
    USER = "user"


class AuditAction(str, Enum):
    """Audit trail actions."""
    LOGIN = "LOGIN"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SIGN = "SIGN"


class AuditResource(str, Enum):
    """Audit trail resource types."""
    CONTRACT = "CONTRACT"
    MINUTE = "MINUTE"
    USER = "USER"
    SYSTEM = "SYSTEM"
    REPORT = "REPORT"


class PermissionModule(str, Enum):
    """Console modules that carry view/manage permissions."""
    DAILY_ALLOWANCE = "daily_allowance"
    PURCHASE_REQUEST = "purchase_request"
    CONTRACTS = "contracts"
    BIDDINGS = "biddings"
    MINUTES = "minutes"
    UTILITY_BILLS = "utility_bills"
    SUPPLEMENTATION = "supplementation"
    FISCALIZATION = "fiscalization"
    PGM_DISPATCH = "pgm_dispatch"
    USERS = "users"
    FUEL_MANAGEMENT = "fuel_management"
    VEHICLE_MAINTENANCE = "vehicle_maintenance"
