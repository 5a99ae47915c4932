# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Utility consumer unit service.
"""

import logging
from typing import List, Optional

from .mongodb import MongoDBService
from domain.records import UTILITY_UNITS, row_to_record, record_to_row
from models.entities import UtilityUnit
from models.requests import CreateUtilityUnitRequest, UpdateUtilityUnitRequest

logger = logging.getLogger(__name__)


class UtilityUnitService:
    """CRUD for utility consumer units, listed by location name."""

    def __init__(self, mongo_service: MongoDBService):
        self.mongo_service = mongo_service
        self.collection_name = UTILITY_UNITS.collection

    def list_units(self, unit_type: Optional[str] = None) -> List[UtilityUnit]:
        query = {"type": unit_type} if unit_type else {}
        rows = self.mongo_service.find(self.collection_name, query, sort=UTILITY_UNITS.sort)
        return [row_to_record(UTILITY_UNITS, row) for row in rows]

    def get_unit(self, unit_id: str) -> Optional[UtilityUnit]:
        row = self.mongo_service.find_one(self.collection_name, unit_id)
        return row_to_record(UTILITY_UNITS, row) if row else None

    def create_unit(self, payload: CreateUtilityUnitRequest) -> UtilityUnit:
        row = record_to_row(UTILITY_UNITS, payload.model_dump())
        stored = self.mongo_service.create(self.collection_name, row)
        logger.info(f"Created utility unit {stored['id']}", extra={"consumer_unit": payload.consumer_unit})
        return row_to_record(UTILITY_UNITS, stored)

    def update_unit(self, unit_id: str, payload: UpdateUtilityUnitRequest) -> Optional[UtilityUnit]:
        row = record_to_row(UTILITY_UNITS, payload.changed_fields())
        if row:
            stored = self.mongo_service.update(self.collection_name, unit_id, row)
        else:
            stored = self.mongo_service.find_one(self.collection_name, unit_id)
        return row_to_record(UTILITY_UNITS, stored) if stored else None

    def delete_unit(self, unit_id: str) -> bool:
        return self.mongo_service.delete(self.collection_name, unit_id) is not None
