# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the amendment and utility unit endpoints.
"""


class TestAmendmentEndpoints:
    """Amendments are governed by the contracts permissions."""

    def test_list_for_contract(self, client, mock_mongo, viewer_headers, contract_row, make_row):
        mock_mongo.find.return_value = [make_row({
            "contract_id": contract_row["id"], "type": "prazo", "duration": 6, "duration_unit": "mes",
            "status": "ENVIADO PARA PGM", "checklist": {"step1": True, "step3": True}
        })]
        mock_mongo.find_by_ids.return_value = {contract_row["id"]: contract_row}

        response = client.get(f'/api/amendments?contractId={contract_row["id"]}', headers=viewer_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["_links"]["self"]["href"].endswith(f"/api/amendments?contractId={contract_row['id']}")
        item = data["_embedded"]["items"][0]
        assert item["contractIdentifier"] == "80/2018"
        assert item["projectedEndDate"] == "30/06/2025"
        assert item["checklist"]["step3"] is True
        assert mock_mongo.find.call_args.args[1] == {"contract_id": contract_row["id"]}

    def test_create(self, client, mock_mongo, admin_headers):
        response = client.post('/api/amendments', headers=admin_headers, json={
            "contractId": "c1",
            "type": "valor",
            "eventName": "reajuste anual",
            "checklist": {"step1": True, "step5": {"sent": True}}
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["eventName"] == "REAJUSTE ANUAL"
        assert data["contractIdentifier"] == "N/A"
        assert data["checklist"]["step5"]["sent"] is True

    def test_create_invalid_type(self, client, admin_headers):
        response = client.post('/api/amendments', headers=admin_headers, json={"contractId": "c1", "type": "outro"})

        assert response.status_code == 400

    def test_create_forbidden_for_viewer(self, client, viewer_headers):
        response = client.post('/api/amendments', headers=viewer_headers, json={"contractId": "c1", "type": "valor"})

        assert response.status_code == 403

    def test_update_pgm_history(self, client, mock_mongo, admin_headers, make_row):
        mock_mongo.update.return_value = make_row({"contract_id": "c1", "type": "valor"}, "a1")

        response = client.put('/api/amendments/a1', headers=admin_headers, json={
            "pgmDecision": "approved",
            "pgmHistory": [{"date": "01/06/2024", "decision": "approved", "notes": "ok"}]
        })

        assert response.status_code == 200
        _, _, row = mock_mongo.update.call_args.args
        assert row["pgm_decision"] == "approved"
        assert row["pgm_history"][0]["decision"] == "approved"

    def test_get_not_found(self, client, viewer_headers):
        response = client.get('/api/amendments/a1', headers=viewer_headers)

        assert response.status_code == 404
        assert response.get_json()["detail"] == "Amendment not found: a1"

    def test_delete(self, client, mock_mongo, admin_headers):
        mock_mongo.delete.return_value = {"id": "a1"}

        assert client.delete('/api/amendments/a1', headers=admin_headers).status_code == 204


class TestUtilityUnitEndpoints:
    """Utility consumer units."""

    def test_list_by_type(self, client, mock_mongo, viewer_headers, make_row):
        mock_mongo.find.return_value = [make_row({
            "consumer_unit": "1234", "local_name": "ESCOLA CENTRAL", "type": "water", "company": "CORSAN"
        })]

        response = client.get('/api/utility-units?type=water', headers=viewer_headers)

        assert response.status_code == 200
        assert response.get_json()["_embedded"]["items"][0]["localName"] == "ESCOLA CENTRAL"
        assert mock_mongo.find.call_args.args[1] == {"type": "water"}

    def test_list_unknown_type(self, client, viewer_headers):
        assert client.get('/api/utility-units?type=gas', headers=viewer_headers).status_code == 400

    def test_create(self, client, admin_headers):
        response = client.post('/api/utility-units', headers=admin_headers, json={
            "consumerUnit": "998877", "localName": "POSTO DE SAÚDE", "type": "light", "dueDay": 15
        })

        assert response.status_code == 201
        assert response.get_json()["dueDay"] == 15

    def test_create_invalid_due_day(self, client, admin_headers):
        response = client.post('/api/utility-units', headers=admin_headers, json={
            "consumerUnit": "1", "localName": "X", "type": "phone", "dueDay": 40
        })

        assert response.status_code == 400

    def test_update_not_found(self, client, mock_mongo, admin_headers):
        mock_mongo.update.return_value = None

        response = client.put('/api/utility-units/u1', headers=admin_headers, json={"company": "CEEE"})

        assert response.status_code == 404
        assert response.get_json()["detail"] == "Utility unit not found: u1"

    def test_delete_forbidden_for_viewer(self, client, viewer_headers):
        assert client.delete('/api/utility-units/u1', headers=viewer_headers).status_code == 403
