# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for health check and expiry alert endpoints.

Health is public and reflects the storage and cache dependencies; alerts
list the records that reached a notification threshold.
"""

import json
from datetime import date, timedelta
from unittest.mock import patch

from services.health import HealthCheckService


class TestHealthCheckEndpoint:
    """Test cases for the /api/healthz endpoint."""

    def test_health_check_success_all_healthy(self, client):
        """Test health check when all dependencies are healthy."""
        response = client.get('/api/healthz')

        assert response.status_code == 200
        data = json.loads(response.data)

        # Check HAL structure
        assert '_links' in data
        assert data['_links']['self']['href'].endswith('/api/healthz')
        assert 'collection' not in data['_links']

        assert data['status'] == 'healthy'
        assert data['service'] == 'contratos-api'
        assert data['environment'] == 'test'
        assert data['dependencies']['mongodb']['status'] == 'healthy'
        assert data['dependencies']['redis']['status'] == 'healthy'
        assert 'system_metrics' in data

    def test_health_check_degraded_redis_unhealthy(self, client, mock_redis):
        """Redis only backs the blocklist, so its loss degrades the service."""
        mock_redis.health_check.return_value = {"status": "unhealthy"}

        response = client.get('/api/healthz')

        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'degraded'

    def test_health_check_unhealthy_mongodb(self, client, mock_mongo):
        """Test health check when MongoDB is down."""
        mock_mongo.health_check.return_value = {"status": "unhealthy", "error": "timeout"}

        response = client.get('/api/healthz')

        assert response.status_code == 503
        assert json.loads(response.data)['status'] == 'unhealthy'

    def test_health_check_needs_no_token(self, client):
        assert client.get('/api/healthz').status_code == 200


class TestHealthCheckService:
    """Status aggregation."""

    def test_overall_status(self):
        assert HealthCheckService._determine_overall_status("healthy", "healthy") == "healthy"
        assert HealthCheckService._determine_overall_status("healthy", "unavailable") == "degraded"
        assert HealthCheckService._determine_overall_status("unhealthy", "healthy") == "unhealthy"

    def test_without_redis(self, mock_mongo):
        health = HealthCheckService(mock_mongo, None, "test").get_comprehensive_health()

        assert health['dependencies']['redis']['status'] == 'unavailable'
        assert health['status'] == 'degraded'

    @patch('services.health.psutil.virtual_memory')
    def test_metrics_failure_is_reported(self, mock_memory, mock_mongo, mock_redis):
        mock_memory.side_effect = OSError("no /proc")

        health = HealthCheckService(mock_mongo, mock_redis).get_comprehensive_health()

        assert 'error' in health['system_metrics']


class TestPendingAlertsEndpoint:
    """Test cases for the /api/alerts/pending endpoint."""

    def test_requires_token(self, client):
        assert client.get('/api/alerts/pending').status_code == 401

    def test_lists_alerts_with_thresholds(self, client, mock_mongo, viewer_headers):
        due = (date.today() + timedelta(days=30)).isoformat()
        mock_mongo.find.side_effect = lambda collection, *args, **kwargs: (
            [{"id": "c1", "contract_id": "12/2023", "object": "MERENDA", "department": "EDUCACAO", "end_date": due}]
            if collection == "contracts" else []
        )

        response = client.get('/api/alerts/pending', headers=viewer_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['thresholds'] == [180, 150, 120, 90, 60, 30, 7]
        assert data['total'] == 1
        alert = data['_embedded']['items'][0]
        assert alert['identifier'] == '12/2023'
        assert alert['kind'] == 'CONTRATO'
        assert alert['daysRemaining'] == 30
        assert alert['alertReason'] == 'Alerta de 30 dias'

    def test_force_flag(self, client, mock_mongo, viewer_headers):
        due = (date.today() + timedelta(days=45)).isoformat()
        mock_mongo.find.return_value = [{"id": "m1", "minute_id": "3/2024", "end_date": due}]

        plain = json.loads(client.get('/api/alerts/pending', headers=viewer_headers).data)
        forced = json.loads(client.get('/api/alerts/pending?force=true', headers=viewer_headers).data)

        assert plain['total'] == 0
        # The same row is returned for both collections by the mock
        assert forced['total'] == 2
        assert forced['_links']['self']['href'].endswith('/api/alerts/pending?force=true')

    def test_stored_thresholds(self, client, mock_mongo, viewer_headers):
        mock_mongo.find_one_by.return_value = {"thresholds": "45,15"}

        data = json.loads(client.get('/api/alerts/pending', headers=viewer_headers).data)

        assert data['thresholds'] == [45, 15]
