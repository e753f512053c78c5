"""
Value Normalizers Module.

The extraction service usually returns numbers, but scanned invoices
regularly come back with amounts and weights as printed text
("1.234,56 €", "500 kg") and dates in local formats. These normalizers
turn such values into floats and ISO dates before an Invoice is built.

Author: ML Engineering Team
"""

import math
import re
from datetime import datetime
from typing import Any, Optional

from dateutil import parser as date_parser

from config import get_config
from src.utils.logger import get_logger

logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date strings to the configured output format (ISO by default).

    French invoices print day first, so ambiguous dates such as 03/04/2026
    are read as 3 April.

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15/01/2026")
        "2026-01-15"
    """

    INPUT_FORMATS = [
        "%Y-%m-%d",
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%d.%m.%Y",
        "%d/%m/%y",
    ]

    def __init__(self) -> None:
        self.output_format = get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        logger.debug(f"DateNormalizer initialized (output: {self.output_format})")

    def normalize(self, date_str: Optional[str]) -> Optional[str]:
        """
        Normalize a date string.

        Args:
            date_str: Input date in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        if not date_str:
            return None

        date_str = ' '.join(str(date_str).split())
        date_str = re.sub(r'^(date|dated|le)\s*:?\s*', '', date_str, flags=re.IGNORECASE)

        parsed = self._try_explicit_formats(date_str)
        if parsed is None:
            parsed = self._try_dateutil_parser(date_str)

        if parsed is None:
            logger.debug(f"Could not parse date: {date_str}")
            return None

        return parsed.strftime(self.output_format)

    def _try_explicit_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.INPUT_FORMATS:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
        return None

    def _try_dateutil_parser(self, date_str: str) -> Optional[datetime]:
        try:
            return date_parser.parse(date_str, dayfirst=True, fuzzy=True)
        except (ValueError, OverflowError):
            return None


class AmountNormalizer:
    """
    Converts printed amounts and weights to floats.

    Handles currency symbols and codes, unit suffixes, thousands
    separators (comma, dot, space) and the European decimal comma.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_float("€ 1.234,56")
        1234.56
        >>> normalizer.to_float("1 250 kg")
        1250.0
        >>> normalizer.to_float(42)
        42.0
    """

    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹']
    CURRENCY_CODES = ['USD', 'EUR', 'GBP', 'MAD', 'DH', 'CNY', 'TRY', 'CHF']
    UNIT_SUFFIXES = ['kgs', 'kg', 'tonnes', 't']

    def to_float(self, value: Any) -> Optional[float]:
        """
        Convert a number or numeric text to a finite float.

        Args:
            value: int, float or string.

        Returns:
            Float value, or None when the value is empty or not numeric.
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
            return number if math.isfinite(number) else None

        text = self._clean_amount_string(str(value))
        if not text:
            return None

        text = self._handle_european_format(text)
        text = text.replace(',', '')

        try:
            number = float(text)
        except ValueError:
            logger.debug(f"Could not parse amount: {value!r}")
            return None

        return number if math.isfinite(number) else None

    def _clean_amount_string(self, amount_str: str) -> str:
        amount_str = amount_str.strip()

        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES + self.UNIT_SUFFIXES:
            amount_str = re.sub(rf'\b{code}\b', '', amount_str, flags=re.IGNORECASE)

        # Whitespace (no-break spaces included) and apostrophes group thousands
        amount_str = re.sub(r"[\s']", '', amount_str)

        # Keep only digits, comma, dot, and minus
        amount_str = re.sub(r'[^\d,.\-]', '', amount_str)

        return amount_str

    def _handle_european_format(self, amount_str: str) -> str:
        """
        Convert a comma decimal separator to a dot.

        "1.234,56" and "12,5" are European; "1,234.56" and "1,234" are not.
        """
        if amount_str.count('.') > 1 and ',' not in amount_str:
            return amount_str.replace('.', '')

        if amount_str.count(',') != 1:
            return amount_str

        comma_pos = amount_str.rfind(',')
        dot_pos = amount_str.rfind('.')
        after_comma = amount_str[comma_pos + 1:]

        if comma_pos > dot_pos and after_comma.isdigit() and len(after_comma) <= 2:
            amount_str = amount_str.replace('.', '').replace(',', '.')

        return amount_str
