"""
Main Input Handler Module.

Turns the structured output of the invoice extraction service (a JSON
document, or the equivalent dictionary) into a validated-shape Invoice
ready for the valuation engine, and resolves the exchange rate to use.

Usage:
    from src.input_handler import InvoiceLoader, resolve_exchange_rate

    loader = InvoiceLoader()
    invoice = loader.load("extractions/FAC-2026-014.json")
    rate = resolve_exchange_rate(None)   # configured fallback

Classes:
    InvoiceLoader: Loads and normalizes extracted invoices
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import validate_file_exists
from src.utils.exceptions import (
    ExchangeRateError,
    InvoiceFileNotFoundError,
    InvoiceFormatError,
)
from src.valuation.models import (
    INVOICE_FIELD_ALIASES,
    ITEM_FIELD_ALIASES,
    Invoice,
    InvoiceLineItem,
    TransportMethod,
    canonical_keys,
)

from .normalizers import AmountNormalizer, DateNormalizer

logger = get_logger(__name__)

# Documented EUR -> MAD fallback when no rate source is available
DEFAULT_EXCHANGE_RATE = 10.5


class InvoiceLoader:
    """
    Loads extracted invoices into Invoice objects.

    Accepts the camelCase shape produced by the extraction service as
    well as snake_case. Numeric fields may be numbers or printed text.
    Optional weights and packaging counts that cannot be read are
    dropped with a warning; unreadable required amounts are errors.

    Attributes:
        amount_normalizer: AmountNormalizer instance
        date_normalizer: DateNormalizer instance
        default_incoterm: Incoterm used when the extraction found none

    Example:
        >>> loader = InvoiceLoader()
        >>> invoice = loader.load_dict({
        ...     "invoiceNumber": "FAC-1", "currency": "EUR", "subtotal": 1000,
        ...     "fret": 100, "assurance": 0, "incoterm": "FOB",
        ...     "totalWeightBrut": 500,
        ...     "items": [{"description": "Tissu", "quantity": 1, "unitPrice": 1000,
        ...                "totalPrice": 1000, "regime": "023", "hsCode": "HS1",
        ...                "weightNet": 500}],
        ... })
        >>> invoice.items[0].net_weight
        500.0
    """

    REQUIRED_FIELDS = ['invoice_number', 'currency', 'items']
    INVOICE_AMOUNT_FIELDS = ['subtotal', 'freight', 'insurance', 'total_gross_weight']
    ITEM_AMOUNT_FIELDS = ['quantity', 'unit_price', 'total_price']
    ITEM_OPTIONAL_FIELDS = ['net_weight', 'packaging_boxes', 'packaging_pallets']

    def __init__(self) -> None:
        self.amount_normalizer = AmountNormalizer()
        self.date_normalizer = DateNormalizer()
        self.default_incoterm = get_config("input.default_incoterm", "FOB")
        self.supported_extensions = set(
            get_config("input.supported_extensions", [".json"])
        )

        logger.debug(f"InvoiceLoader initialized (default incoterm: {self.default_incoterm})")

    def load(self, filepath: Union[str, Path]) -> Invoice:
        """
        Load an invoice from a JSON file.

        Args:
            filepath: Path to the extraction JSON.

        Returns:
            Invoice instance.

        Raises:
            InvoiceFileNotFoundError: If the file does not exist.
            InvoiceFormatError: If the content is not a valid invoice.
        """
        filepath = Path(filepath)

        if not validate_file_exists(filepath):
            raise InvoiceFileNotFoundError(str(filepath))

        if filepath.suffix.lower() not in self.supported_extensions:
            raise InvoiceFormatError(
                "file",
                f"Unsupported file type '{filepath.suffix}', expected one of "
                f"{sorted(self.supported_extensions)}"
            )

        logger.info(f"Loading invoice: {filepath.name}")

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvoiceFormatError("file", f"Malformed JSON: {e}")

        return self.load_dict(data)

    def load_dict(self, data: Dict[str, Any]) -> Invoice:
        """
        Build an Invoice from an extraction dictionary.

        Args:
            data: Extraction output.

        Returns:
            Invoice instance.

        Raises:
            InvoiceFormatError: On missing required fields, empty item list
                or unreadable amounts.
        """
        if not isinstance(data, dict):
            raise InvoiceFormatError("invoice", "Extraction result is not a JSON object")

        fields = canonical_keys(data, INVOICE_FIELD_ALIASES)

        for name in self.REQUIRED_FIELDS:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise InvoiceFormatError(name, "Required field missing")

        raw_items = fields['items']
        if not isinstance(raw_items, list) or not raw_items:
            raise InvoiceFormatError("items", "Invoice has no line items")

        for name in self.INVOICE_AMOUNT_FIELDS:
            fields[name] = self._amount(fields.get(name), name, default=0.0)

        items = [self._load_item(raw, index) for index, raw in enumerate(raw_items)]

        incoterm = str(fields.get('incoterm') or '').strip()
        if not incoterm:
            logger.warning(f"No Incoterm on invoice, using {self.default_incoterm}")
            incoterm = self.default_incoterm

        invoice = Invoice(
            invoice_number=str(fields['invoice_number']).strip(),
            date=self._date(fields.get('date')),
            currency=str(fields['currency']).strip().upper(),
            subtotal=fields['subtotal'],
            freight=fields['freight'],
            insurance=fields['insurance'],
            incoterm=incoterm,
            total_gross_weight=fields['total_gross_weight'],
            transport_method=self._transport(fields.get('transport_method')),
            items=tuple(items),
            origin_country=fields.get('origin_country') or None,
        )

        logger.info(f"Loaded {invoice!r}")
        return invoice

    def _load_item(self, raw: Any, index: int) -> InvoiceLineItem:
        """
        Normalize one extracted line item.

        Args:
            raw: Item mapping.
            index: Position on the invoice, used in error messages.

        Returns:
            InvoiceLineItem instance.
        """
        if not isinstance(raw, dict):
            raise InvoiceFormatError(f"items[{index}]", "Line item is not a JSON object")

        fields = canonical_keys(raw, ITEM_FIELD_ALIASES)

        for name in self.ITEM_AMOUNT_FIELDS:
            fields[name] = self._amount(fields.get(name), f"items[{index}].{name}", default=0.0)

        for name in self.ITEM_OPTIONAL_FIELDS:
            value = fields.get(name)
            if value is None or value == "":
                fields[name] = None
                continue
            number = self.amount_normalizer.to_float(value)
            if number is None:
                logger.warning(f"Ignoring unreadable items[{index}].{name}: {value!r}")
            fields[name] = number

        hs_code = fields.get('hs_code')
        if hs_code is not None:
            hs_code = str(hs_code).strip() or None
        fields['hs_code'] = hs_code
        # Regime codes are three digits; JSON numbers lose the leading zero
        regime = str(fields.get('regime') or '').strip()
        if regime.isdigit():
            regime = regime.zfill(3)
        fields['regime'] = regime

        return InvoiceLineItem.from_dict(fields)

    def _amount(self, value: Any, name: str, default: float) -> float:
        """Parse a required numeric field; missing means ``default``, unreadable is an error."""
        if value is None or value == "":
            return default
        number = self.amount_normalizer.to_float(value)
        if number is None:
            raise InvoiceFormatError(name, f"Not a number: {value!r}")
        return number

    def _date(self, value: Any) -> Optional[str]:
        if not value:
            return None
        normalized = self.date_normalizer.normalize(str(value))
        if normalized is None:
            logger.warning(f"Could not normalize invoice date '{value}', keeping it as printed")
            return str(value)
        return normalized

    def _transport(self, value: Any) -> Optional[TransportMethod]:
        method = TransportMethod.parse(value)
        if value and method is None:
            logger.warning(f"Unknown transport method: {value!r}")
        return method

    def load_batch(self, directory: Union[str, Path]) -> List[Invoice]:
        """
        Load every supported invoice file of a directory.

        Files that fail to load are logged and skipped.

        Args:
            directory: Directory containing extraction JSON files.

        Returns:
            List of loaded invoices, sorted by filename.
        """
        directory = Path(directory)
        invoices = []

        files = sorted(
            path for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in self.supported_extensions
        )
        logger.info(f"Found {len(files)} invoice files in {directory}")

        for path in files:
            try:
                invoices.append(self.load(path))
            except InvoiceFormatError as e:
                logger.error(f"Skipping {path.name}: {e}")

        return invoices


def resolve_exchange_rate(rate: Optional[Any] = None) -> float:
    """
    Exchange rate to apply, invoice currency -> MAD.

    Args:
        rate: Rate entered by the user (number or text). None falls back
            to ``valuation.default_exchange_rate``.

    Returns:
        A finite, non-negative rate.

    Raises:
        ExchangeRateError: If the rate is unreadable, negative or infinite.
    """
    if rate is None:
        fallback = float(get_config("valuation.default_exchange_rate", DEFAULT_EXCHANGE_RATE))
        logger.warning(f"No exchange rate supplied, using fallback rate {fallback}")
        return fallback

    value = AmountNormalizer().to_float(rate)
    if value is None:
        raise ExchangeRateError(rate, "Not a finite number")
    if value < 0:
        raise ExchangeRateError(rate, "Rate cannot be negative")

    return value
