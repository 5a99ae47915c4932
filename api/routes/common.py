# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Helpers shared by the record endpoints: HAL formatting with
permission-dependent affordances.
"""

from flask import current_app
from typing import Any, Dict, List, Optional

from models.base import CamelModel
from models.entities import UserContext


def _manageable(user_context: UserContext, manage_permission: Optional[str]) -> bool:
    return bool(manage_permission) and user_context.has_permission(manage_permission)


def hal_record(record: CamelModel, collection_path: str, user_context: UserContext,
               manage_permission: Optional[str] = None) -> Dict[str, Any]:
    """Serialize a record with self/collection links, plus edit/delete when allowed."""
    return current_app.hal_formatter.format_resource(
        record.to_api(),
        collection_path,
        _manageable(user_context, manage_permission)
    )


def hal_collection(records: List[CamelModel], collection_path: str, user_context: UserContext,
                   manage_permission: Optional[str] = None,
                   filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Serialize a list of records as a HAL collection."""
    return current_app.hal_formatter.format_collection(
        [record.to_api() for record in records],
        collection_path,
        _manageable(user_context, manage_permission),
        filters
    )
