"""
Company name canonicalization for gateway lookups.

The gateway searches registered legal names, so free-text names taken from
resumes are reduced to the bare name before the company exchange:

1. Drop parenthetical qualifiers, e.g. ``Acme (India)`` -> ``Acme``
2. Drop stray commas, pipes and periods, e.g. ``Acme Pvt. Ltd.`` -> ``Acme Pvt Ltd``
3. Trim surrounding whitespace

The function is idempotent: ``clean_company_name(clean_company_name(x))``
always equals ``clean_company_name(x)``.
"""

import re

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")
_STRAY_PUNCTUATION = re.compile(r"[,|.]")


def clean_company_name(name: str) -> str:
    """
    Canonicalize a claimed company name for the company verification step.

    Args:
        name: Raw company name as typed by the candidate.

    Returns:
        Cleaned name; empty string for empty or None input.

    Examples:
        >>> clean_company_name("Infosys Ltd. (Bangalore)")
        'Infosys Ltd'
        >>> clean_company_name("Tata Consultancy Services | TCS")
        'Tata Consultancy Services  TCS'
    """
    if not name:
        return ""

    cleaned = _PARENTHETICAL.sub("", name)
    cleaned = _STRAY_PUNCTUATION.sub("", cleaned)
    return cleaned.strip()
