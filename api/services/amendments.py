# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contract amendment service.
"""

import logging
from typing import Dict, List, Optional, Any
from opentelemetry import trace

from .mongodb import MongoDBService
from .audit import AuditService
from domain.lifecycle import add_duration, to_display
from domain.records import AMENDMENTS, CONTRACTS, row_to_record, record_to_row
from models.entities import ContractAmendment, UserContext
from models.enums import AmendmentType, AuditAction
from models.requests import CreateAmendmentRequest, UpdateAmendmentRequest

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

MISSING_IDENTIFIER = 'N/A'


class AmendmentService:
    """CRUD for contract amendments joined with their parent contract."""

    def __init__(self, mongo_service: MongoDBService, audit_service: AuditService):
        self.mongo_service = mongo_service
        self.audit_service = audit_service
        self.collection_name = AMENDMENTS.collection

    def _join_parents(self, rows: List[Dict[str, Any]]) -> List[ContractAmendment]:
        """Map rows and fill the parent identifier and projected end date."""
        parents = self.mongo_service.find_by_ids(
            CONTRACTS.collection,
            [str(row.get('contract_id')) for row in rows if row.get('contract_id')]
        )

        amendments = []
        for row in rows:
            amendment = row_to_record(AMENDMENTS, row)
            parent = parents.get(amendment.contract_id)
            if parent:
                amendment.contract_identifier = parent.get('contract_id') or MISSING_IDENTIFIER
                if amendment.type == AmendmentType.PRAZO.value:
                    amendment.projected_end_date = add_duration(
                        to_display(parent.get('end_date')),
                        amendment.duration,
                        amendment.duration_unit
                    )
            else:
                amendment.contract_identifier = MISSING_IDENTIFIER
            amendments.append(amendment)
        return amendments

    def list_amendments(self, contract_id: Optional[str] = None) -> List[ContractAmendment]:
        """List amendments newest first, optionally for one contract."""
        with tracer.start_as_current_span("amendments.list") as span:
            query = {"contract_id": contract_id} if contract_id else {}
            rows = self.mongo_service.find(self.collection_name, query, sort=AMENDMENTS.sort)
            span.set_attribute("amendments.count", len(rows))
            return self._join_parents(rows)

    def get_amendment(self, amendment_id: str) -> Optional[ContractAmendment]:
        """Get an amendment by id, None when missing."""
        row = self.mongo_service.find_one(self.collection_name, amendment_id)
        if row is None:
            return None
        return self._join_parents([row])[0]

    def create_amendment(self, payload: CreateAmendmentRequest,
                         user_context: Optional[UserContext] = None) -> ContractAmendment:
        """Store a new amendment and audit it against the parent contract."""
        with tracer.start_as_current_span("amendments.create") as span:
            row = record_to_row(AMENDMENTS, payload.model_dump(exclude_none=True))
            stored = self.mongo_service.create(self.collection_name, row)
            amendment = self._join_parents([stored])[0]

            span.set_attributes({
                "amendment.id": amendment.id,
                "amendment.contract_id": amendment.contract_id
            })

            self.audit_service.log_action(
                AuditAction.CREATE, AMENDMENTS.audit_resource, amendment.id,
                f"Aditivo criado para contrato {amendment.contract_identifier}", user_context
            )
            logger.info(
                "Created contract amendment",
                extra={"amendment_id": amendment.id, "contract_id": amendment.contract_id}
            )
            return amendment

    def update_amendment(self, amendment_id: str, payload: UpdateAmendmentRequest,
                         user_context: Optional[UserContext] = None) -> Optional[ContractAmendment]:
        """Update the sent fields of an amendment; None when missing."""
        with tracer.start_as_current_span("amendments.update") as span:
            span.set_attribute("amendment.id", amendment_id)

            row = record_to_row(AMENDMENTS, payload.changed_fields())
            if row:
                stored = self.mongo_service.update(self.collection_name, amendment_id, row)
            else:
                stored = self.mongo_service.find_one(self.collection_name, amendment_id)
            if stored is None:
                return None

            amendment = self._join_parents([stored])[0]
            self.audit_service.log_action(
                AuditAction.UPDATE, AMENDMENTS.audit_resource, amendment.id,
                "Aditivo atualizado.", user_context
            )
            return amendment

    def delete_amendment(self, amendment_id: str, user_context: Optional[UserContext] = None) -> bool:
        """Delete an amendment; False when it did not exist."""
        with tracer.start_as_current_span("amendments.delete") as span:
            span.set_attribute("amendment.id", amendment_id)

            removed = self.mongo_service.delete(self.collection_name, amendment_id)
            if removed is None:
                return False

            self.audit_service.log_action(
                AuditAction.DELETE, AMENDMENTS.audit_resource, amendment_id,
                "Aditivo excluído.", user_context
            )
            return True
