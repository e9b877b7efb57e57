"""
Tenure text parsing for employee verification.

Candidates describe tenure as free text ("Jan 2020 - Mar 2022",
"03/2018 to 05/2021", "2019 - Present"). The employee check needs one
verification year, taken from the start of the claimed range.
"""

import re
from datetime import date
from typing import Callable, List, Optional, Pattern, Tuple

from .exceptions import UnrecognizedDateFormatError

_TO_WORD = re.compile(r"\bto\b")
_YEAR = re.compile(r"\d{4}")
_OPEN_ENDED = re.compile(r"\b(present|current|now|till date)\b")

# Tried in order against the start segment; first match wins.
_START_PATTERNS: List[Tuple[Pattern[str], Callable[[re.Match[str]], str]]] = [
    # DD/MM/YYYY
    (re.compile(r"^\d{2}/\d{2}/(\d{4})$"), lambda m: m.group(1)),
    # MM/YYYY
    (re.compile(r"^\d{2}/(\d{4})$"), lambda m: m.group(1)),
    # "<month> YYYY"
    (re.compile(r"^[a-z]+\s(\d{4})$"), lambda m: m.group(1)),
    # "<month>/YYYY" or "<month>/ YYYY"
    (re.compile(r"^[a-z]+/\s?(\d{4})$"), lambda m: m.group(1)),
    # YYYY
    (re.compile(r"^(\d{4})$"), lambda m: m.group(1)),
]


def split_tenure(years_text: str) -> List[str]:
    """
    Normalize tenure text into trimmed range segments.

    Lowercases, turns the word "to" into "-", then splits on "-".

    Examples:
        >>> split_tenure("Jan 2020 To Mar 2022")
        ['jan 2020', 'mar 2022']
    """
    normalized = _TO_WORD.sub("-", (years_text or "").lower())
    return [segment.strip() for segment in normalized.split("-")]


def parse_verification_year(years_text: str) -> str:
    """
    Extract the verification year from claimed tenure text.

    Args:
        years_text: Free-text tenure, e.g. "Jan 2020 - Mar 2022".

    Returns:
        Four-digit start year as a string.

    Raises:
        UnrecognizedDateFormatError: When the start segment matches none of
            the supported formats.

    Examples:
        >>> parse_verification_year("Jan 2020 - Mar 2022")
        '2020'
        >>> parse_verification_year("15/06/2017 to 01/01/2019")
        '2017'
    """
    start = split_tenure(years_text)[0]

    for pattern, extract in _START_PATTERNS:
        match = pattern.match(start)
        if match:
            return extract(match)

    raise UnrecognizedDateFormatError(years_text)


def _first_year(segment: str) -> Optional[int]:
    match = _YEAR.search(segment)
    return int(match.group(0)) if match else None


def available_verification_years(
    years_text: str, today: Optional[date] = None
) -> List[int]:
    """
    List every year covered by the claimed tenure, newest first.

    Open-ended ranges ("present", "current") and ranges without a parseable
    end run to the current year. Returns an empty list when no start year
    can be found.

    Examples:
        >>> available_verification_years("2019 - 2021")
        [2021, 2020, 2019]
    """
    segments = split_tenure(years_text)
    start_year = _first_year(segments[0])
    if start_year is None:
        return []

    current_year = (today or date.today()).year
    end_year: Optional[int] = None
    if len(segments) > 1:
        last = segments[-1]
        if _OPEN_ENDED.search(last):
            end_year = current_year
        else:
            end_year = _first_year(last)

    end_year = end_year or current_year
    if end_year < start_year:
        return [start_year]
    return list(range(end_year, start_year - 1, -1))
