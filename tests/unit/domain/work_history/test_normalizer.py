"""Tests for company name canonicalization."""

import pytest

from work_history_verification.domain.work_history import clean_company_name

NAMES = [
    "Infosys Ltd. (Bangalore)",
    "Tata Consultancy Services | TCS",
    "Acme, Inc.",
    "  Wipro Technologies  ",
    "Foo (A) Bar (B)",
    "Nested (outer (inner) rest)",
    "Unclosed (paren",
    "...",
    "",
    "HCL (India) Pvt. Ltd., Noida",
]


@pytest.mark.unit
class TestCleanCompanyName:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Infosys Ltd. (Bangalore)", "Infosys Ltd"),
            ("Acme, Inc.", "Acme Inc"),
            ("Tata Consultancy Services | TCS", "Tata Consultancy Services  TCS"),
            ("  Wipro Technologies  ", "Wipro Technologies"),
            ("Foo (A) Bar (B)", "Foo Bar"),
            ("HCL (India) Pvt. Ltd., Noida", "HCL Pvt Ltd Noida"),
        ],
    )
    def test_cleans_known_shapes(self, raw, expected):
        assert clean_company_name(raw) == expected

    @pytest.mark.parametrize("raw", ["", None])
    def test_empty_input_returns_empty_string(self, raw):
        assert clean_company_name(raw) == ""

    @pytest.mark.parametrize("raw", NAMES)
    def test_is_idempotent(self, raw):
        once = clean_company_name(raw)
        assert clean_company_name(once) == once
