# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for contract, minute, amendment and utility unit services.
"""

import pytest
from unittest.mock import MagicMock

from services.records import ContractService, MinuteService, matches_filters
from services.amendments import AmendmentService, MISSING_IDENTIFIER
from services.utility_units import UtilityUnitService
from models.entities import Contract, UserContext
from models.requests import (
    CreateContractRequest, UpdateContractRequest, CreateMinuteRequest,
    CreateAmendmentRequest, UpdateAmendmentRequest, CreateUtilityUnitRequest,
    RecordFilters
)


@pytest.fixture
def audit():
    return MagicMock()


@pytest.fixture
def user_context():
    return UserContext(user_id="u1", email="gestor@prefeitura.gov.br")


class TestMatchesFilters:
    """In-memory filtering of derived records."""

    def _contract(self, **values):
        return Contract(contract_id="80/2018", department="SAUDE", object="LOCAÇÃO", supplier="ACME", **values)

    def test_no_filters(self):
        assert matches_filters(self._contract(), None)

    def test_status(self):
        contract = self._contract(status="warning")
        assert matches_filters(contract, RecordFilters(status="WARNING"))
        assert not matches_filters(contract, RecordFilters(status="active"))

    def test_department_case_insensitive(self):
        assert matches_filters(self._contract(), RecordFilters(department=" saude "))
        assert not matches_filters(self._contract(), RecordFilters(department="OBRAS"))

    def test_search_across_fields(self):
        assert matches_filters(self._contract(), RecordFilters(search="acme"))
        assert matches_filters(self._contract(), RecordFilters(search="80/2018"))
        assert not matches_filters(self._contract(), RecordFilters(search="inexistente"))


class TestContractService:
    """Contract CRUD through the lifecycle record service."""

    def test_list_derives_status_and_amendment(self, mock_mongo, audit, contract_row, today):
        mock_mongo.find.side_effect = lambda collection, query=None, sort=None, **kwargs: (
            [contract_row] if collection == "contracts"
            else [{"contract_id": contract_row["id"], "status": "EM ANDAMENTO"}]
        )

        records = ContractService(mock_mongo, audit).list_records(today=today)

        assert len(records) == 1
        assert records[0].status == "active"
        assert records[0].days_remaining == 199
        assert records[0].active_amendment_status == "EM ANDAMENTO"

    def test_list_applies_filters(self, mock_mongo, audit, contract_row, today):
        mock_mongo.find.side_effect = lambda collection, query=None, sort=None, **kwargs: (
            [contract_row] if collection == "contracts" else []
        )

        records = ContractService(mock_mongo, audit).list_records(RecordFilters(status="expired"), today)

        assert records == []

    def test_create_normalizes_and_audits(self, mock_mongo, audit, user_context):
        payload = CreateContractRequest(
            number=12, year=2024, contract_id="12/2024", supplier="acme ltda",
            end_date="31/12/2024", manual_status="automatic"
        )

        contract = ContractService(mock_mongo, audit).create_record(payload, user_context)

        _, row = mock_mongo.create.call_args.args
        assert row["supplier"] == "ACME LTDA"
        assert row["end_date"] == "2024-12-31"
        assert row["manual_status"] is None
        assert contract.end_date == "31/12/2024"
        audit.log_action.assert_called_once()
        assert audit.log_action.call_args.args[2] == "12/2024"
        assert audit.log_action.call_args.args[4] is user_context

    def test_update_writes_only_changes(self, mock_mongo, audit, contract_row):
        mock_mongo.update.return_value = contract_row
        payload = UpdateContractRequest.model_validate({"notes": "renovado"})

        contract = ContractService(mock_mongo, audit).update_record(contract_row["id"], payload)

        mock_mongo.update.assert_called_once_with("contracts", contract_row["id"], {"notes": "RENOVADO"})
        assert contract.contract_id == "80/2018"

    def test_update_empty_payload_reads_record(self, mock_mongo, audit, contract_row):
        mock_mongo.find_one.return_value = contract_row

        ContractService(mock_mongo, audit).update_record(contract_row["id"], UpdateContractRequest())

        mock_mongo.update.assert_not_called()
        audit.log_action.assert_called_once()

    def test_update_missing(self, mock_mongo, audit):
        mock_mongo.update.return_value = None
        payload = UpdateContractRequest(notes="x")

        assert ContractService(mock_mongo, audit).update_record("missing", payload) is None
        audit.log_action.assert_not_called()

    def test_delete(self, mock_mongo, audit, contract_row):
        mock_mongo.delete.return_value = contract_row

        assert ContractService(mock_mongo, audit).delete_record(contract_row["id"]) is True
        assert audit.log_action.call_args.args[2] == "80/2018"

    def test_delete_missing(self, mock_mongo, audit):
        mock_mongo.delete.return_value = None
        assert ContractService(mock_mongo, audit).delete_record("missing") is False


class TestMinuteService:
    """Minutes share the lifecycle behaviour without amendment joins."""

    def test_get_record(self, mock_mongo, audit, minute_row, today):
        mock_mongo.find_one.return_value = minute_row

        minute = MinuteService(mock_mongo, audit).get_record(minute_row["id"], today)

        assert minute.minute_id == "15/2024"
        assert minute.days_remaining == 30
        assert minute.status == "warning"

    def test_get_missing(self, mock_mongo, audit):
        assert MinuteService(mock_mongo, audit).get_record("missing") is None

    def test_create_audits_minute(self, mock_mongo, audit):
        MinuteService(mock_mongo, audit).create_record(CreateMinuteRequest(number=3, year=2024))

        assert audit.log_action.call_args.args[1] == "MINUTE"
        assert audit.log_action.call_args.args[2] == "3/2024"


class TestAmendmentService:
    """Amendments joined with their parent contract."""

    def test_projected_end_date_for_term_extension(self, mock_mongo, audit, contract_row, make_row):
        mock_mongo.find.return_value = [make_row({
            "contract_id": contract_row["id"], "type": "prazo", "duration": 12, "duration_unit": "mes"
        })]
        mock_mongo.find_by_ids.return_value = {contract_row["id"]: contract_row}

        amendments = AmendmentService(mock_mongo, audit).list_amendments(contract_row["id"])

        assert mock_mongo.find.call_args.args[1] == {"contract_id": contract_row["id"]}
        assert amendments[0].contract_identifier == "80/2018"
        assert amendments[0].projected_end_date == "31/12/2025"

    def test_value_amendment_has_no_projection(self, mock_mongo, audit, contract_row, make_row):
        mock_mongo.find_one.return_value = make_row({"contract_id": contract_row["id"], "type": "valor"})
        mock_mongo.find_by_ids.return_value = {contract_row["id"]: contract_row}

        amendment = AmendmentService(mock_mongo, audit).get_amendment("a1")

        assert amendment.projected_end_date is None

    def test_orphan_amendment(self, mock_mongo, audit, make_row):
        mock_mongo.find_one.return_value = make_row({"contract_id": "gone", "type": "prazo", "duration": 1})

        amendment = AmendmentService(mock_mongo, audit).get_amendment("a1")

        assert amendment.contract_identifier == MISSING_IDENTIFIER
        assert amendment.projected_end_date is None

    def test_create(self, mock_mongo, audit):
        payload = CreateAmendmentRequest(contract_id="c1", type="valor", event_name="reajuste", entry_date="10/05/2024")

        amendment = AmendmentService(mock_mongo, audit).create_amendment(payload)

        _, row = mock_mongo.create.call_args.args
        assert row["event_name"] == "REAJUSTE"
        assert row["entry_date"] == "2024-05-10"
        assert amendment.entry_date == "10/05/2024"
        assert audit.log_action.call_args.args[1] == "SYSTEM"

    def test_update_missing(self, mock_mongo, audit):
        mock_mongo.update.return_value = None
        payload = UpdateAmendmentRequest(status="CONCLUÍDO")

        assert AmendmentService(mock_mongo, audit).update_amendment("missing", payload) is None

    def test_delete(self, mock_mongo, audit):
        mock_mongo.delete.return_value = {"id": "a1"}
        assert AmendmentService(mock_mongo, audit).delete_amendment("a1") is True


class TestUtilityUnitService:
    """Utility consumer units."""

    def test_list_by_type(self, mock_mongo):
        UtilityUnitService(mock_mongo).list_units("water")

        args, kwargs = mock_mongo.find.call_args
        assert args == ("utility_units", {"type": "water"})
        assert kwargs["sort"] == (("local_name", 1),)

    def test_create(self, mock_mongo):
        payload = CreateUtilityUnitRequest(consumer_unit="123", local_name="ESCOLA A", type="light", due_day=10)

        unit = UtilityUnitService(mock_mongo).create_unit(payload)

        assert unit.type == "light"
        assert unit.due_day == 10

    def test_delete_missing(self, mock_mongo):
        mock_mongo.delete.return_value = None
        assert UtilityUnitService(mock_mongo).delete_unit("missing") is False
