# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import date, datetime, timezone
from typing import Dict, Any
from unittest.mock import MagicMock
from bson import ObjectId

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['MONGODB_DATABASE'] = 'contratos_test'

from app import create_app
from models.entities import UserProfile
from services.auth import AuthService

TODAY = date(2024, 6, 15)

TEST_CONFIG = {
    'ENVIRONMENT': 'test',
    'OTEL_ENABLED': False,
    'DOCS_ENABLED': False,
    'BASE_URL': 'http://localhost:5000',
    'AUDIT_LOG_LIMIT': 500,
    'ALERT_THRESHOLDS': '180,150,120,90,60,30,7'
}


def stored(document: Dict[str, Any], doc_id: str = None) -> Dict[str, Any]:
    """A document as returned by MongoDBService (normalized id and timestamps)."""
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    row = {"created_at": now, "updated_at": now}
    row.update(document)
    row["id"] = doc_id or str(ObjectId())
    return row


@pytest.fixture
def today():
    """Fixed reference date for lifecycle derivation."""
    return TODAY


@pytest.fixture
def mock_mongo():
    """MongoDBService double that echoes created documents."""
    mongo = MagicMock()
    mongo.find.return_value = []
    mongo.find_one.return_value = None
    mongo.find_one_by.return_value = None
    mongo.find_by_ids.return_value = {}
    mongo.create.side_effect = lambda collection, document: stored(document)
    mongo.health_check.return_value = {"status": "healthy", "database": "contratos_test"}
    return mongo


@pytest.fixture
def mock_redis():
    """RedisService double with an empty blocklist."""
    redis_service = MagicMock()
    redis_service.is_token_blocked.return_value = False
    redis_service.block_token.return_value = True
    redis_service.health_check.return_value = {"status": "healthy"}
    return redis_service


@pytest.fixture(scope="session")
def auth_service():
    """Auth service with a generated key pair and cheap bcrypt cost."""
    return AuthService(bcrypt_rounds=4)


@pytest.fixture
def app(mock_mongo, mock_redis, auth_service):
    """Application wired to mocked storage and cache."""
    application = create_app(
        config=TEST_CONFIG,
        mongodb_service=mock_mongo,
        redis_service=mock_redis,
        auth_service=auth_service
    )
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def admin_profile():
    """Super admin profile (every permission)."""
    return UserProfile(
        id=str(ObjectId()),
        email="admin@prefeitura.gov.br",
        name="Administrador",
        role="super_admin",
        department="GABINETE"
    )


@pytest.fixture
def viewer_profile():
    """Regular user with role default permissions (view only)."""
    return UserProfile(
        id=str(ObjectId()),
        email="servidor@prefeitura.gov.br",
        name="Servidor",
        role="user",
        department="SAUDE"
    )


def _headers(auth_service: AuthService, profile: UserProfile) -> Dict[str, str]:
    tokens = auth_service.generate_tokens(profile)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def admin_headers(auth_service, admin_profile):
    """Authorization headers for the super admin."""
    return _headers(auth_service, admin_profile)


@pytest.fixture
def viewer_headers(auth_service, viewer_profile):
    """Authorization headers for the view-only user."""
    return _headers(auth_service, viewer_profile)


@pytest.fixture
def contract_row():
    """Stored contract row (YYYY-MM-DD dates, upper-case text)."""
    return stored({
        "number": 80,
        "year": 2018,
        "contract_id": "80/2018",
        "department": "SAUDE",
        "object": "LOCAÇÃO DE VEÍCULOS",
        "supplier": "TRANSPORTES LTDA",
        "start_date": "2024-01-01",
        "end_date": "2024-12-31",
        "manual_status": None
    })


@pytest.fixture
def minute_row():
    """Stored minute row."""
    return stored({
        "number": 15,
        "year": 2024,
        "minute_id": "15/2024",
        "department": "EDUCACAO",
        "object": "MATERIAL ESCOLAR",
        "start_date": "2024-01-10",
        "end_date": "2024-07-15"
    })


@pytest.fixture
def make_row():
    """Factory for stored documents."""
    return stored
