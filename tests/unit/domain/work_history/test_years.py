"""Tests for tenure text parsing."""

from datetime import date

import pytest

from work_history_verification.domain.work_history import (
    UnrecognizedDateFormatError,
    available_verification_years,
    parse_verification_year,
)
from work_history_verification.domain.work_history.years import split_tenure


@pytest.mark.unit
class TestParseVerificationYear:
    @pytest.mark.parametrize(
        "years_text, expected",
        [
            ("Jan 2020 - Mar 2022", "2020"),
            ("2019", "2019"),
            ("2019 - Present", "2019"),
            ("15/06/2017 to 01/01/2019", "2017"),
            ("03/2018 to 05/2021", "2018"),
            ("Jan/2016 - Dec/2018", "2016"),
            ("jan/ 2015 - feb/ 2016", "2015"),
            ("JULY 2014 TO JUNE 2016", "2014"),
        ],
    )
    def test_supported_formats(self, years_text, expected):
        assert parse_verification_year(years_text) == expected

    @pytest.mark.parametrize("years_text", ["not-a-date", "-", "", "Since last year"])
    def test_unrecognized_format_raises(self, years_text):
        with pytest.raises(UnrecognizedDateFormatError) as exc_info:
            parse_verification_year(years_text)
        assert exc_info.value.message == "Unrecognized date format in work history"
        assert exc_info.value.years_text == years_text

    def test_split_tenure_replaces_word_to_only(self):
        assert split_tenure("Toronto 2019 to 2020") == ["toronto 2019", "2020"]


@pytest.mark.unit
class TestAvailableVerificationYears:
    TODAY = date(2024, 6, 1)

    def test_closed_range_newest_first(self):
        years = available_verification_years("Jan 2019 - Mar 2021", today=self.TODAY)
        assert years == [2021, 2020, 2019]

    @pytest.mark.parametrize("end", ["Present", "current", "till date"])
    def test_open_ended_range_runs_to_current_year(self, end):
        years = available_verification_years(f"2022 - {end}", today=self.TODAY)
        assert years == [2024, 2023, 2022]

    def test_missing_end_runs_to_current_year(self):
        assert available_verification_years("2023", today=self.TODAY) == [2024, 2023]

    def test_inverted_range_returns_start_only(self):
        assert available_verification_years("2020 - 2018", today=self.TODAY) == [2020]

    def test_no_start_year_returns_empty(self):
        assert available_verification_years("-", today=self.TODAY) == []
