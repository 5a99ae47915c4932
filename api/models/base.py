# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models shared by domain records and request payloads.

Attributes are declared in snake_case, matching the stored rows, and are
serialized in camelCase for API clients through the alias generator.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model accepting both snake_case and camelCase keys, emitting camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True
    )

    def to_api(self) -> dict:
        """Serialize for an API response (camelCase keys)."""
        return self.model_dump(by_alias=True, mode='json')


class BaseEntity(CamelModel):
    """Base record with storage identifier and timestamps."""

    id: Optional[str] = Field(None, description="Storage identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class BaseEntityCreate(CamelModel):
    """Base model for record creation requests."""


class BaseEntityUpdate(CamelModel):
    """Base model for partial record updates; unset fields are left untouched."""

    def changed_fields(self) -> dict:
        """Return only the fields the client actually sent (snake_case keys)."""
        return self.model_dump(exclude_unset=True)
