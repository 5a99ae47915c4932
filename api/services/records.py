# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contract and minute services.

Both record types share the same lifecycle: rows are mapped through the
declarative tables in ``domain.records``, the day count and status are derived
on every read and every write leaves an audit trail entry.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Any, Iterable
from opentelemetry import trace

from .mongodb import MongoDBService
from .audit import AuditService
from domain.records import (
    RecordMapping, CONTRACTS, MINUTES, AMENDMENTS,
    row_to_record, record_to_row, record_identifier
)
from models.base import BaseEntityCreate, BaseEntityUpdate
from models.entities import LifecycleRecord, Contract, UserContext
from models.enums import AuditAction
from models.requests import RecordFilters

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Amendment statuses that no longer count as in progress.
CLOSED_AMENDMENT_STATUSES = ('CONCLUÍDO', 'CANCELADO')

SEARCH_FIELDS = ('contract_id', 'minute_id', 'object', 'supplier', 'process_number', 'manager')


def matches_filters(record: LifecycleRecord, filters: Optional[RecordFilters]) -> bool:
    """Apply status, department and free-text filters to a derived record."""
    if filters is None:
        return True

    if filters.status and record.status != filters.status.lower():
        return False

    if filters.department and (record.department or '').upper() != filters.department.strip().upper():
        return False

    if filters.search:
        term = filters.search.strip().lower()
        haystack = ' '.join(str(getattr(record, name, '') or '') for name in SEARCH_FIELDS).lower()
        if term not in haystack:
            return False

    return True


class LifecycleRecordService:
    """CRUD operations for one lifecycle record type."""

    mapping: RecordMapping = None
    created_message = ''
    updated_message = ''
    deleted_message = ''

    def __init__(self, mongo_service: MongoDBService, audit_service: AuditService):
        self.mongo_service = mongo_service
        self.audit_service = audit_service

    @property
    def collection(self) -> str:
        return self.mapping.collection

    def _to_record(self, row: Dict[str, Any], today: Optional[date] = None) -> LifecycleRecord:
        return row_to_record(self.mapping, row, today)

    def _annotate(self, records: List[LifecycleRecord]) -> List[LifecycleRecord]:
        """Hook for record types that join extra data on read."""
        return records

    def list_rows(self) -> List[Dict[str, Any]]:
        """Raw stored rows, newest first."""
        return self.mongo_service.find(self.collection, sort=self.mapping.sort)

    def list_records(self, filters: Optional[RecordFilters] = None,
                     today: Optional[date] = None) -> List[LifecycleRecord]:
        """
        List records newest first with derived status.

        Args:
            filters: Optional status, department and search filters
            today: Reference date for the derived fields

        Returns:
            Matching records
        """
        with tracer.start_as_current_span(f"{self.collection}.list") as span:
            records = self._annotate([self._to_record(row, today) for row in self.list_rows()])
            selected = [record for record in records if matches_filters(record, filters)]

            span.set_attributes({
                "records.total": len(records),
                "records.returned": len(selected)
            })
            logger.debug(f"Listed {len(selected)} of {len(records)} {self.collection}")
            return selected

    def get_record(self, record_id: str, today: Optional[date] = None) -> Optional[LifecycleRecord]:
        """Get a record by storage id, None when missing."""
        with tracer.start_as_current_span(f"{self.collection}.get") as span:
            span.set_attribute("record.id", record_id)
            row = self.mongo_service.find_one(self.collection, record_id)
            if row is None:
                return None
            return self._annotate([self._to_record(row, today)])[0]

    def create_record(self, payload: BaseEntityCreate,
                      user_context: Optional[UserContext] = None) -> LifecycleRecord:
        """Store a new record and audit its creation."""
        with tracer.start_as_current_span(f"{self.collection}.create") as span:
            row = record_to_row(self.mapping, payload.model_dump(exclude_none=True))
            stored = self.mongo_service.create(self.collection, row)
            record = self._to_record(stored)

            identifier = record_identifier(self.mapping, record)
            span.set_attributes({"record.id": record.id, "record.identifier": identifier})

            self.audit_service.log_action(
                AuditAction.CREATE, self.mapping.audit_resource, identifier,
                self.created_message, user_context
            )
            logger.info(
                f"Created {self.collection} record",
                extra={"record_id": record.id, "identifier": identifier}
            )
            return record

    def update_record(self, record_id: str, payload: BaseEntityUpdate,
                      user_context: Optional[UserContext] = None) -> Optional[LifecycleRecord]:
        """Write the fields the client sent; None when the record is missing."""
        with tracer.start_as_current_span(f"{self.collection}.update") as span:
            span.set_attribute("record.id", record_id)

            row = record_to_row(self.mapping, payload.changed_fields())
            if row:
                stored = self.mongo_service.update(self.collection, record_id, row)
            else:
                stored = self.mongo_service.find_one(self.collection, record_id)
            if stored is None:
                return None

            record = self._annotate([self._to_record(stored)])[0]
            identifier = record_identifier(self.mapping, record)

            self.audit_service.log_action(
                AuditAction.UPDATE, self.mapping.audit_resource, identifier,
                self.updated_message, user_context
            )
            logger.info(
                f"Updated {self.collection} record",
                extra={"record_id": record_id, "changed_fields": sorted(row)}
            )
            return record

    def delete_record(self, record_id: str, user_context: Optional[UserContext] = None) -> bool:
        """Delete a record; False when it did not exist."""
        with tracer.start_as_current_span(f"{self.collection}.delete") as span:
            span.set_attribute("record.id", record_id)

            removed = self.mongo_service.delete(self.collection, record_id)
            if removed is None:
                return False

            identifier = removed.get(self.mapping.identifier_field) or record_id
            self.audit_service.log_action(
                AuditAction.DELETE, self.mapping.audit_resource, identifier,
                self.deleted_message, user_context
            )
            return True


class ContractService(LifecycleRecordService):
    """Contracts, annotated with the status of an in-progress amendment."""

    mapping = CONTRACTS
    created_message = 'Contrato criado.'
    updated_message = 'Contrato atualizado.'
    deleted_message = 'Contrato excluído.'

    def _open_amendment_statuses(self, contract_ids: Iterable[str]) -> Dict[str, str]:
        ids = [contract_id for contract_id in contract_ids if contract_id]
        if not ids:
            return {}

        rows = self.mongo_service.find(
            AMENDMENTS.collection,
            {"contract_id": {"$in": ids}, "status": {"$nin": list(CLOSED_AMENDMENT_STATUSES)}},
            sort=AMENDMENTS.sort
        )

        statuses: Dict[str, str] = {}
        for row in rows:
            statuses.setdefault(str(row.get("contract_id")), row.get("status"))
        return statuses

    def _annotate(self, records: List[Contract]) -> List[Contract]:
        statuses = self._open_amendment_statuses(record.id for record in records)
        for record in records:
            record.active_amendment_status = statuses.get(record.id)
        return records


class MinuteService(LifecycleRecordService):
    """Price registration minutes."""

    mapping = MINUTES
    created_message = 'Ata criada.'
    updated_message = 'Ata atualizada.'
    deleted_message = 'Ata excluída.'
