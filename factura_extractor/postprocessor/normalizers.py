"""
Data Normalizers Module.

This module provides normalization functions for:
    - Invoice text (search view + original-case lines)
    - Amounts written with ambiguous Argentine/international separators
    - Dates, including the Spanish long form ("5 de enero de 2025")

Every function here is pure: the same input always gives the same output.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Tuple

from dateutil import parser as date_parser

from factura_extractor.config import get_config
from factura_extractor.utils.helpers import strip_accents
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NormalizedText:
    """
    Read-only views of one invoice text.

    Attributes:
        original: The caller's text, untouched (empty string for bad input)
        text: Lower-cased, whitespace-collapsed search text
        lines: Original-case, stripped, non-empty lines
    """
    original: str
    text: str
    lines: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.text


class TextNormalizer:
    """
    Builds the NormalizedText view used by every extractor.

    Example:
        >>> view = TextNormalizer().normalize("TOTAL A PAGAR\\r\\n$ 1.234,56")
        >>> view.text
        "total a pagar $ 1.234.56"
        >>> view.lines
        ("TOTAL A PAGAR", "$ 1.234,56")
    """

    _DECIMAL_COMMA = re.compile(r'(?<=\d),(?=\d)')
    _DOUBLE_DOT = re.compile(r'\.{2,}')
    _WHITESPACE = re.compile(r'\s+')

    def normalize(self, text: Any) -> NormalizedText:
        """
        Normalize raw invoice text.

        Args:
            text: Raw OCR/PDF text. Anything that is not a string is
                  treated as empty input.

        Returns:
            NormalizedText view.
        """
        if not isinstance(text, str) or not text:
            return NormalizedText(original="", text="", lines=())

        unified = text.replace('\r\n', '\n').replace('\r', '\n').replace('\t', ' ')

        lines = tuple(line.strip() for line in unified.split('\n') if line.strip())

        search = unified.lower()
        search = self._WHITESPACE.sub(' ', search).strip()
        search = self._DECIMAL_COMMA.sub('.', search)
        search = self._DOUBLE_DOT.sub('.', search)

        return NormalizedText(original=text, text=search, lines=lines)


def parse_locale_number(value: Any) -> float:
    """
    Parse a number whose decimal separator may be "," or ".".

    Rules:
        - Exactly two digits after the last separator: that separator is
          the decimal point and every earlier "." or "," is grouping.
        - Both separators present: the later one is the decimal point
          (also with a single trailing digit).
        - Otherwise every separator is grouping and the value is an integer.

    Args:
        value: String such as "1.234,56", "$ 15.420,00" or "1,234.56".

    Returns:
        Parsed float, or NaN when no number can be read.

    Example:
        >>> parse_locale_number("32.644,98")
        32644.98
        >>> parse_locale_number("1.234.567")
        1234567.0
    """
    if value is None:
        return math.nan
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    cleaned = re.sub(r'[^\d.,]', '', str(value))
    if not re.search(r'\d', cleaned):
        return math.nan

    last_sep = max(cleaned.rfind('.'), cleaned.rfind(','))
    if last_sep == -1:
        return float(cleaned)

    head = cleaned[:last_sep]
    tail = cleaned[last_sep + 1:]
    has_both = '.' in cleaned and ',' in cleaned

    is_decimal = tail.isdigit() and (
        len(tail) == 2 or (has_both and len(tail) == 1)
    )

    if is_decimal:
        integer_part = re.sub(r'[.,]', '', head) or '0'
        return float(f"{integer_part}.{tail}")

    digits = re.sub(r'[.,]', '', cleaned)
    return float(digits) if digits else math.nan


class AmountNormalizer:
    """
    Converts raw amount strings to floats and checks the plausible range.

    Attributes:
        min_value: Smallest value accepted as an invoice amount
        max_value: Largest value accepted as an invoice amount
    """

    def __init__(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None
    ) -> None:
        self.min_value = min_value if min_value is not None else get_config(
            "extraction.amount.min_value", 10
        )
        self.max_value = max_value if max_value is not None else get_config(
            "extraction.amount.max_value", 1_000_000
        )

    def to_float(self, amount_str: Any) -> Optional[float]:
        """
        Convert an amount string to float.

        Returns:
            Float value, or None if it cannot be parsed.
        """
        value = parse_locale_number(amount_str)
        if math.isnan(value):
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return None
        return round(value, 2)

    def in_range(self, value: float) -> bool:
        """Check that a value is a plausible invoice total."""
        return self.min_value <= value <= self.max_value


SPANISH_MONTHS = {
    'enero': 1, 'febrero': 2, 'marzo': 3, 'abril': 4,
    'mayo': 5, 'junio': 6, 'julio': 7, 'agosto': 8,
    'septiembre': 9, 'setiembre': 9, 'octubre': 10,
    'noviembre': 11, 'diciembre': 12,
}


class DateNormalizer:
    """
    Normalizes date parts and free-form date strings to ISO format.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.to_iso(25, 1, 25)
        "2025-01-25"
        >>> normalizer.normalize("5 de febrero de 2025")
        "2025-02-05"
    """

    OUTPUT_FORMAT = "%Y-%m-%d"

    INPUT_FORMATS = (
        "%Y-%m-%d",
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%d/%m/%y",
        "%d-%m-%y",
        "%d.%m.%Y",
    )

    LONG_FORM = re.compile(
        r'(\d{1,2})\s+de\s+([a-z]+)\s+(?:de\s+|del\s+)?(\d{4})',
        re.IGNORECASE
    )

    def month_number(self, name: str) -> Optional[int]:
        """Map a Spanish month name (accents and case ignored) to 1-12."""
        return SPANISH_MONTHS.get(strip_accents(name).lower())

    def build_date(self, day: int, month: int, year: int) -> Optional[date]:
        """
        Build a calendar date from its parts.

        Two-digit years are read as 2000 + year. Returns None for
        impossible dates such as 31/02.
        """
        if year < 100:
            year += 2000
        try:
            return date(year, month, day)
        except ValueError:
            return None

    def to_iso(self, day: int, month: int, year: int) -> Optional[str]:
        built = self.build_date(day, month, year)
        return built.strftime(self.OUTPUT_FORMAT) if built else None

    def normalize(self, date_str: Any) -> Optional[str]:
        """
        Normalize a free-form date string (used for oracle answers).

        Args:
            date_str: Date in ISO, DD/MM/YYYY, Spanish long form or any
                      day-first form dateutil understands.

        Returns:
            ISO date string or None.
        """
        if not date_str or not isinstance(date_str, str):
            return None

        cleaned = ' '.join(date_str.split())

        for fmt in self.INPUT_FORMATS:
            try:
                return datetime.strptime(cleaned, fmt).strftime(self.OUTPUT_FORMAT)
            except ValueError:
                continue

        match = self.LONG_FORM.search(cleaned)
        if match:
            month = self.month_number(match.group(2))
            if month:
                return self.to_iso(int(match.group(1)), month, int(match.group(3)))

        try:
            parsed = date_parser.parse(cleaned, dayfirst=True, fuzzy=True)
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date: {date_str!r}")
            return None
        return parsed.strftime(self.OUTPUT_FORMAT)
