"""Tests for the employee exchange driver and its stale-token loop."""

from unittest.mock import MagicMock

import pytest

from tests.fixtures.verification_gateway import (
    company_result,
    employee_failure,
    employee_success,
)
from work_history_verification.domain.work_history import (
    CompanyCredentials,
    EmployeeVerificationRequest,
    InvalidInputError,
    ServiceSoftFailureError,
    TokenExpiredError,
)
from work_history_verification.io.connectors.gateway import GatewayTransportError

STALE = "Please Generate New Token"

CREDENTIALS = CompanyCredentials(
    establishment_id="EST001",
    verified_company_name="INFOSYS LIMITED",
    secret_token="secret-0",
    ts_transaction_id="ts-company-0",
)


def _request(**overrides):
    values = dict(
        tx_id="tx-initial",
        person_name="Asha Rao",
        verification_year="2020",
        candidate_id="cand-1",
        company_id=7,
        credentials=CREDENTIALS,
        employee_id="user-1",
        organization_id="org-1",
    )
    values.update(overrides)
    return EmployeeVerificationRequest(**values)


@pytest.mark.unit
class TestEmployeeVerifierSuccess:
    def test_success_persists_verified_record(self, employee_verifier, gateway, store):
        gateway.queue("employee", employee_success(ts="ts-emp-9"))

        result = employee_verifier.verify_employee(_request())

        assert result.attempts == 1
        assert result.employer_name == "Acme Corp"
        assert result.record.is_success
        assert result.record.start_date == "2020-01-01"
        assert result.record.ts_transaction_id == "ts-emp-9"

        current = store.query_current_employee_record("cand-1", 7, "user-1")
        assert current.is_success
        assert current.establishment_id == "EST001"
        assert current.employee_name == "Asha Rao"

    def test_record_keeps_establishment_confirmed_by_gateway(
        self, employee_verifier, gateway, store
    ):
        gateway.queue("employee", employee_success(est="EST001-BLR"))

        result = employee_verifier.verify_employee(_request())

        assert result.record.establishment_id == "EST001-BLR"
        current = store.query_current_employee_record("cand-1", 7, "user-1")
        assert current.establishment_id == "EST001-BLR"

    def test_encrypt_payload_carries_company_session(self, employee_verifier, gateway):
        gateway.queue("employee", employee_success())

        employee_verifier.verify_employee(_request())

        [payload] = gateway.payloads("employee-encrypt")
        assert payload == {
            "transID": "tx-initial",
            "docType": "106",
            "company_name": "INFOSYS LIMITED",
            "person_name": "Asha Rao",
            "verification_year": "2020",
            "tsTransactionID": "ts-company-0",
            "secretToken": "secret-0",
        }


@pytest.mark.unit
class TestStaleTokenRefresh:
    def test_refreshes_company_once_then_succeeds(
        self, employee_verifier, gateway, store, tx_ids
    ):
        gateway.queue("employee", employee_failure(STALE), employee_success(est="EST777"))
        gateway.queue(
            "company",
            company_result(("EST777", "INFOSYS LIMITED"), secret="secret-1", ts="ts-company-1"),
        )
        refreshed = MagicMock()

        result = employee_verifier.verify_employee(
            _request(), on_company_refreshed=refreshed
        )

        assert result.attempts == 2
        assert result.credentials.secret_token == "secret-1"
        assert result.record.establishment_id == "EST777"
        refreshed.assert_called_once()
        assert refreshed.call_args.args[0].primary.establishment_id == "EST777"

        first, second = gateway.payloads("employee-encrypt")
        assert first["transID"] == "tx-initial"
        assert second["transID"] != first["transID"]
        assert second["transID"] in tx_ids.issued
        assert second["secretToken"] == "secret-1"
        assert second["tsTransactionID"] == "ts-company-1"

        [company_payload] = gateway.payloads("company-encrypt")
        assert company_payload["transID"] in tx_ids.issued
        assert company_payload["companyName"] == "INFOSYS LIMITED"

        # Only the final outcome is persisted for the employee
        assert len(store.list_employee_records("cand-1", 7)) == 1
        retry_logs = [log for log in store.list_api_call_logs("cand-1") if log.is_retry]
        assert {log.endpoint_name for log in retry_logs} == {
            "company-encrypt",
            "company-verify",
            "company-decrypt",
            "employee-encrypt",
            "employee-verify",
            "employee-decrypt",
        }

    def test_repeated_stale_token_is_an_ordinary_failure(
        self, employee_verifier, gateway, store
    ):
        gateway.queue("employee", employee_failure(STALE), employee_failure(STALE))
        gateway.queue("company", company_result(("EST001", "INFOSYS LIMITED")))

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            employee_verifier.verify_employee(_request())

        assert not isinstance(exc_info.value, TokenExpiredError)
        assert exc_info.value.message == STALE
        assert gateway.endpoints().count("company-encrypt") == 1
        assert gateway.endpoints().count("employee-encrypt") == 2

        [record] = store.list_employee_records("cand-1", 7)
        assert record.verified_at is None
        assert record.verification_error == STALE

    def test_refresh_disabled_treats_first_stale_token_as_failure(
        self, gateway, store, company_verifier
    ):
        from work_history_verification.config.settings import Settings
        from work_history_verification.domain.work_history import EmployeeVerifier

        verifier = EmployeeVerifier(
            gateway,
            store,
            company_verifier,
            Settings(employee_token_refresh_max=0),
        )
        gateway.queue("employee", employee_failure(STALE))

        with pytest.raises(ServiceSoftFailureError):
            verifier.verify_employee(_request())
        assert "company-encrypt" not in gateway.endpoints()

    def test_failed_refresh_records_employee_failure(
        self, employee_verifier, gateway, store
    ):
        gateway.queue("employee", employee_failure(STALE))
        gateway.queue("company", {"status": 0, "msg": "Company session limit reached"})

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            employee_verifier.verify_employee(_request())

        assert exc_info.value.message == "Company session limit reached"
        [record] = store.list_employee_records("cand-1", 7)
        assert record.verification_error == "Company session limit reached"


@pytest.mark.unit
class TestEmployeeVerifierFailures:
    def test_declared_failure_is_persisted(self, employee_verifier, gateway, store):
        gateway.queue("employee", employee_failure("Employee not found in records"))

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            employee_verifier.verify_employee(_request())

        assert exc_info.value.message == "Employee not found in records"
        current = store.query_current_employee_record("cand-1", 7)
        assert current.verification_error == "Employee not found in records"
        assert current.verified_at is None

    def test_partial_success_body_is_a_failure(self, employee_verifier, gateway, store):
        body = employee_success()
        body["msg"]["status_code"] = 206
        body["msg"]["message"] = ""
        gateway.queue("employee", body)

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            employee_verifier.verify_employee(_request())

        assert exc_info.value.message == "Employee not found"
        assert store.query_current_employee_record("cand-1", 7).verification_error == (
            "Employee not found"
        )

    def test_transport_error_persists_one_failure_and_reraises(
        self, employee_verifier, gateway, store
    ):
        error = GatewayTransportError(
            "Network error or request timed out: Unable to reach the "
            "verification service (employee-verify)."
        )
        gateway.fail_on("employee-verify", error)

        with pytest.raises(GatewayTransportError) as exc_info:
            employee_verifier.verify_employee(_request())

        assert exc_info.value is error
        [record] = store.list_employee_records("cand-1", 7)
        assert record.verified_at is None
        assert record.verification_error == error.message

    @pytest.mark.parametrize("person_name", ["", "   "])
    def test_empty_person_name_fails_without_io(
        self, employee_verifier, gateway, store, person_name
    ):
        with pytest.raises(InvalidInputError):
            employee_verifier.verify_employee(_request(person_name=person_name))

        assert gateway.calls == []
        assert store.list_employee_records("cand-1") == []

    def test_missing_credentials_fail_without_io(self, employee_verifier, gateway):
        with pytest.raises(InvalidInputError) as exc_info:
            employee_verifier.verify_employee(_request(credentials=None))

        assert exc_info.value.message == (
            "Missing company verification details for employee verification"
        )
        assert gateway.calls == []

    def test_record_failure_falls_back_to_unknown_name(self, employee_verifier, store):
        record = employee_verifier.record_failure(
            _request(person_name="", credentials=None), "Invalid employee name provided"
        )

        assert record.employee_name == "Unknown"
        assert record.establishment_id is None
        assert record.verification_error == "Invalid employee name provided"
