"""Tests for the company exchange driver."""

import pytest

from tests.fixtures.verification_gateway import company_result
from work_history_verification.domain.work_history import (
    InvalidInputError,
    NoMatchError,
    ServiceSoftFailureError,
)
from work_history_verification.io.connectors.gateway import GatewayTransportError


def _verify(company_verifier, name="Infosys Ltd. (Bangalore)"):
    return company_verifier.verify_company(
        "tx-1", name, "cand-1", 7, "user-1", "org-1"
    )


@pytest.mark.unit
class TestCompanyVerifierSuccess:
    def test_two_matches_persist_two_rows_primary_first(
        self, company_verifier, gateway, store
    ):
        gateway.queue(
            "company",
            company_result(("EST001", "INFOSYS LIMITED"), ("EST002", "INFOSYS BPM LTD")),
        )

        result = _verify(company_verifier)

        assert result.primary.establishment_id == "EST001"
        assert result.primary.verified_company_name == "INFOSYS LIMITED"
        assert [m.establishment_id for m in result.matches] == ["EST001", "EST002"]
        assert result.primary_record.establishment_id == "EST001"

        stored = store.list_company_records("cand-1", 7)
        assert len(stored) == 2
        assert {r.establishment_id for r in stored} == {"EST001", "EST002"}
        assert all(r.secret_token == "secret-1" for r in stored)
        assert all(r.ts_transaction_id == "ts-company-1" for r in stored)

    def test_sends_canonical_name_in_three_steps(self, company_verifier, gateway):
        gateway.queue("company", company_result(("EST001", "INFOSYS LIMITED")))

        _verify(company_verifier)

        assert gateway.endpoints() == [
            "company-encrypt",
            "company-verify",
            "company-decrypt",
        ]
        [payload] = gateway.payloads("company-encrypt")
        assert payload == {
            "transID": "tx-1",
            "docType": 106,
            "companyName": "Infosys Ltd",
        }

    def test_audits_each_step_with_redacted_credentials(
        self, company_verifier, gateway, store
    ):
        gateway.queue("company", company_result(("EST001", "INFOSYS LIMITED")))

        _verify(company_verifier)

        logs = store.list_api_call_logs("cand-1", 7)
        assert [log.api_type for log in logs] == [
            "company_encrypt",
            "company_verify",
            "company_decrypt",
        ]
        assert all(log.success for log in logs)
        assert all(log.trans_id == "tx-1" for log in logs)
        decrypt_log = logs[-1]
        assert decrypt_log.response_body["secretToken"] == "[REDACTED]"
        assert decrypt_log.response_body["tsTransactionID"] == "[REDACTED]"


@pytest.mark.unit
class TestCompanyVerifierFailures:
    def test_empty_match_map_is_no_match(self, company_verifier, gateway, store):
        gateway.queue("company", company_result())

        with pytest.raises(NoMatchError):
            _verify(company_verifier)
        assert store.list_company_records("cand-1") == []

    def test_declared_failure_uses_gateway_message(
        self, company_verifier, gateway, store
    ):
        gateway.queue("company", {"status": 0, "msg": "Company not found"})

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            _verify(company_verifier)
        assert exc_info.value.message == "Company not found"
        assert store.list_company_records("cand-1") == []

    def test_declared_failure_without_message(self, company_verifier, gateway):
        gateway.queue("company", {"status": 2})

        with pytest.raises(ServiceSoftFailureError) as exc_info:
            _verify(company_verifier)
        assert exc_info.value.message == "Unknown verification error"

    def test_transport_error_propagates_and_is_audited(
        self, company_verifier, gateway, store
    ):
        gateway.fail_on(
            "company-verify", GatewayTransportError("Network error", status_code=None)
        )

        with pytest.raises(GatewayTransportError):
            _verify(company_verifier)

        logs = store.list_api_call_logs("cand-1")
        assert [(log.endpoint_name, log.success) for log in logs] == [
            ("company-encrypt", True),
            ("company-verify", False),
        ]
        assert logs[-1].error_message == "Network error"
        assert store.list_company_records("cand-1") == []

    def test_blank_name_fails_before_any_call(self, company_verifier, gateway):
        with pytest.raises(InvalidInputError):
            _verify(company_verifier, name=" (Branch) ")
        assert gateway.calls == []
