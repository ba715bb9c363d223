"""Postal code format checking.

Place validation only asks whether a postal code *looks* right for a
country; it never resolves it to a location.
"""

import re
from typing import Dict, Pattern, Protocol


class PostalCodeChecker(Protocol):
    """Anything able to tell whether a postal code fits a country's format."""

    def is_valid(self, postal_code: str, country_code: str) -> bool:
        ...


POSTAL_CODE_PATTERNS: Dict[str, str] = {
    "US": r"\d{5}(-\d{4})?",
    "CA": r"[ABCEGHJ-NPRSTVXY]\d[ABCEGHJ-NPRSTV-Z] ?\d[ABCEGHJ-NPRSTV-Z]\d",
    "MX": r"\d{5}",
    "GB": r"[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}",
    "IE": r"[AC-FHKNPRTV-Y]\d{2}|D6W ?[0-9AC-FHKNPRTV-Y]{4}|[AC-FHKNPRTV-Y]\d{2} ?[0-9AC-FHKNPRTV-Y]{4}",
    "DE": r"\d{5}",
    "FR": r"\d{5}",
    "IT": r"\d{5}",
    "ES": r"\d{5}",
    "PT": r"\d{4}-\d{3}",
    "NL": r"\d{4} ?[A-Z]{2}",
    "BE": r"\d{4}",
    "AT": r"\d{4}",
    "CH": r"\d{4}",
    "DK": r"\d{4}",
    "NO": r"\d{4}",
    "SE": r"\d{3} ?\d{2}",
    "FI": r"\d{5}",
    "PL": r"\d{2}-\d{3}",
    "CZ": r"\d{3} ?\d{2}",
    "RS": r"\d{5}",
    "RU": r"\d{6}",
    "UA": r"\d{5}",
    "IN": r"\d{6}",
    "CN": r"\d{6}",
    "JP": r"\d{3}-?\d{4}",
    "KR": r"\d{5}",
    "AU": r"\d{4}",
    "NZ": r"\d{4}",
    "BR": r"\d{5}-?\d{3}",
    "AR": r"([A-HJ-NP-Z])?\d{4}([A-Z]{3})?",
    "ZA": r"\d{4}",
}


class RegexPostalCodeChecker:
    """Checks postal codes against per-country regular expressions.

    Only countries listed in ``patterns`` get a format check. For any other
    country every non-blank code is accepted, so the default checker is a
    partial format check. Pass a stricter ``PostalCodeChecker`` to
    ``validate_place`` where full coverage matters.
    """

    def __init__(self, patterns: Dict[str, str] = POSTAL_CODE_PATTERNS):
        self.patterns: Dict[str, Pattern[str]] = {
            country.upper(): re.compile(pattern, re.IGNORECASE)
            for country, pattern in patterns.items()
        }

    def is_valid(self, postal_code: str, country_code: str) -> bool:
        postal_code = (postal_code or "").strip()
        if not postal_code:
            return False
        pattern = self.patterns.get((country_code or "").upper())
        if pattern is None:
            return True
        return pattern.fullmatch(postal_code) is not None


DEFAULT_POSTAL_CODE_CHECKER = RegexPostalCodeChecker()
