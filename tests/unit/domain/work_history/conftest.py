"""Fixtures wiring the verifiers to a scripted gateway and SQLite store."""

from __future__ import annotations

import pytest

from tests.fixtures.verification_gateway import ScriptedGateway, TxIds
from work_history_verification.config.settings import get_settings
from work_history_verification.domain.work_history import (
    CompanyVerifier,
    EmployeeVerifier,
)


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def tx_ids() -> TxIds:
    return TxIds()


@pytest.fixture
def company_verifier(gateway, store) -> CompanyVerifier:
    return CompanyVerifier(gateway, store, get_settings())


@pytest.fixture
def employee_verifier(gateway, store, company_verifier, tx_ids) -> EmployeeVerifier:
    return EmployeeVerifier(
        gateway, store, company_verifier, get_settings(), tx_id_factory=tx_ids
    )
