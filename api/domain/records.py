# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Declarative mapping between stored rows and domain records.

Each collection is described once by a ``RecordMapping``: which model a row
becomes, which fields hold dates, which text fields are normalized to upper
case and which fields are derived on read and must never be written back.
``row_to_record`` and ``record_to_row`` interpret those tables, so adding a
field to a record only means adding it to the model (and, where relevant, to
one of the tuples below).
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple, Type

from models.base import BaseEntity
from models.entities import Contract, Minute, ContractAmendment, UtilityUnit, UserProfile, AuditLog
from models.enums import AuditResource, ManualStatus
from domain.lifecycle import to_display, to_storage

# Fields that are never written by clients, whatever the collection.
SERVER_FIELDS = ('id', 'created_at', 'updated_at')


@dataclass(frozen=True)
class RecordMapping:
    """Storage description of one record type."""
    collection: str
    model: Type[BaseEntity]
    date_fields: Tuple[str, ...] = ()
    upper_fields: Tuple[str, ...] = ()
    derived_fields: Tuple[str, ...] = ()
    identifier_field: Optional[str] = None
    audit_resource: Optional[AuditResource] = None
    lifecycle: bool = False
    sort: Tuple[Tuple[str, int], ...] = field(default=(('_id', -1),))


_LIFECYCLE_UPPER = (
    'department', 'object', 'notes', 'type', 'renewal_info', 'process_number',
    'manager', 'technical_fiscal', 'administrative_fiscal'
)

CONTRACTS = RecordMapping(
    collection='contracts',
    model=Contract,
    date_fields=('start_date', 'end_date'),
    upper_fields=('contract_id', 'supplier', 'service_order_number') + _LIFECYCLE_UPPER,
    derived_fields=('days_remaining', 'status', 'active_amendment_status'),
    identifier_field='contract_id',
    audit_resource=AuditResource.CONTRACT,
    lifecycle=True
)

MINUTES = RecordMapping(
    collection='minutes',
    model=Minute,
    date_fields=('start_date', 'end_date'),
    upper_fields=('minute_id',) + _LIFECYCLE_UPPER,
    derived_fields=('days_remaining', 'status'),
    identifier_field='minute_id',
    audit_resource=AuditResource.MINUTE,
    lifecycle=True
)

AMENDMENTS = RecordMapping(
    collection='contract_amendments',
    model=ContractAmendment,
    date_fields=('entry_date',),
    upper_fields=('event_name',),
    derived_fields=('contract_identifier', 'projected_end_date'),
    audit_resource=AuditResource.SYSTEM,
    sort=(('created_at', -1),)
)

UTILITY_UNITS = RecordMapping(
    collection='utility_units',
    model=UtilityUnit,
    sort=(('local_name', 1),)
)

PROFILES = RecordMapping(
    collection='profiles',
    model=UserProfile,
    audit_resource=AuditResource.USER,
    sort=(('email', 1),)
)

AUDIT_LOGS = RecordMapping(
    collection='audit_logs',
    model=AuditLog,
    sort=(('created_at', -1),)
)


def fallback_identifier(row: Dict[str, Any]) -> str:
    """Identifier shown when a record has none: ``number/year``."""
    return f"{row.get('number')}/{row.get('year')}"


def row_to_record(mapping: RecordMapping, row: Dict[str, Any], today: Optional[date] = None) -> BaseEntity:
    """
    Build a domain record from a stored row.

    Null columns fall back to the model defaults, dates are converted to
    DD/MM/YYYY and, for lifecycle records, the day count and status are
    recomputed against ``today``.

    Args:
        mapping: Storage description of the record type
        row: Stored document (``_id`` or ``id`` key)
        today: Reference date for lifecycle derivation

    Returns:
        Instance of ``mapping.model``
    """
    data = {key: value for key, value in row.items() if value is not None and key != '_id'}
    if '_id' in row:
        data['id'] = str(row['_id'])

    for name in mapping.date_fields:
        data[name] = to_display(row.get(name))

    if mapping.identifier_field and not data.get(mapping.identifier_field):
        data[mapping.identifier_field] = fallback_identifier(row)

    record = mapping.model.model_validate(data)

    if mapping.lifecycle:
        record.refresh_lifecycle(today)

    return record


def record_to_row(mapping: RecordMapping, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the document written to storage from snake_case record fields.

    Derived and server-managed fields are dropped, dates are converted to
    YYYY-MM-DD (a malformed or empty date is left out of the write), text
    fields listed in ``upper_fields`` are trimmed and upper-cased and an
    automatic manual status is stored as null.
    """
    row: Dict[str, Any] = {}

    for name, value in payload.items():
        if name in SERVER_FIELDS or name in mapping.derived_fields:
            continue

        if name in mapping.date_fields:
            converted = to_storage(value)
            if converted is None:
                continue
            row[name] = converted
        elif name in mapping.upper_fields:
            row[name] = value.upper().strip() if isinstance(value, str) else value
        elif name == 'manual_status':
            row[name] = ManualStatus.parse(value).storage_value
        else:
            row[name] = value

    return row


def record_identifier(mapping: RecordMapping, record: BaseEntity) -> str:
    """Human identifier used in audit entries, falling back to the storage id."""
    if mapping.identifier_field:
        value = getattr(record, mapping.identifier_field, None)
        if value:
            return value
    return record.id or ''
