"""
Invoice Validators Module.

Consistency checks run on a loaded invoice before it is valued. They
never block the calculation: the engine accepts any structurally valid
invoice. Findings are reported so the declarant can spot extraction
mistakes that would silently change the VAD (a missing net weight under
CFR drops the freight, a zero gross weight zeroes freight and handling).

Author: ML Engineering Team
"""

import math
from typing import Any, Dict, List

from config import get_config
from src.utils.logger import get_logger
from src.valuation.incoterms import AllocationMode, is_known_incoterm, resolve_allocation_mode
from src.valuation.models import Invoice
from src.valuation.regimes import (
    REGIME_LABELS,
    REGIME_PACKAGING_FULL,
    REGIME_TEMPORARY_ADMISSION,
)

logger = get_logger(__name__)


class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        is_valid: False once any error was recorded
        errors: List of error messages
        warnings: List of warning messages
    """

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': self.errors,
            'warnings': self.warnings
        }


class InvoiceValidator:
    """
    Checks an Invoice for values that would distort its valuation.

    Checks for:
        - Negative or non-finite amounts and weights (errors)
        - Subtotal not matching the line totals
        - Zero declared gross weight
        - CFR invoice whose regime 023 lines carry no net weight
        - Regime 312 lines without box or pallet counts
        - Unknown regime codes, missing HS codes, unknown Incoterms

    Example:
        >>> validator = InvoiceValidator()
        >>> result = validator.validate(invoice)
        >>> result.is_valid
        True
        >>> result.warnings
        ['Regime 312 line 3 (Palettes bois) has no box or pallet count']
    """

    def __init__(self) -> None:
        self.subtotal_tolerance = float(get_config(
            "postprocessing.validation.subtotal_tolerance",
            0.01
        ))
        self.known_regimes = set(REGIME_LABELS) | set(
            get_config("valuation.regime_labels") or {}
        )
        logger.debug(f"InvoiceValidator initialized (subtotal tolerance: {self.subtotal_tolerance:.1%})")

    def validate(self, invoice: Invoice) -> ValidationResult:
        """
        Run every check on ``invoice``.

        Args:
            invoice: Invoice to check.

        Returns:
            ValidationResult with errors and warnings.
        """
        result = ValidationResult()

        self._check_amounts(invoice, result)
        self._check_subtotal(invoice, result)
        self._check_weights(invoice, result)
        self._check_codes(invoice, result)

        logger.info(
            f"Invoice validation: {len(result.errors)} errors, "
            f"{len(result.warnings)} warnings"
        )
        for error in result.errors:
            logger.warning(f"Validation error: {error}")
        for warning in result.warnings:
            logger.debug(f"Validation warning: {warning}")

        return result

    def _check_amounts(self, invoice: Invoice, result: ValidationResult) -> None:
        header = {
            'subtotal': invoice.subtotal,
            'freight': invoice.freight,
            'insurance': invoice.insurance,
            'total_gross_weight': invoice.total_gross_weight,
        }
        for name, value in header.items():
            if not math.isfinite(value):
                result.add_error(f"{name} is not a finite number")
            elif value < 0:
                result.add_error(f"{name} cannot be negative ({value})")

        for line, item in enumerate(invoice.items, 1):
            values = {
                'total_price': item.total_price,
                'net_weight': item.net_weight,
                'packaging_boxes': item.packaging_boxes,
                'packaging_pallets': item.packaging_pallets,
            }
            for name, value in values.items():
                if value is None:
                    continue
                if not math.isfinite(value):
                    result.add_error(f"Line {line} {name} is not a finite number")
                elif value < 0:
                    result.add_error(f"Line {line} {name} cannot be negative ({value})")

    def _check_subtotal(self, invoice: Invoice, result: ValidationResult) -> None:
        """Warn when the declared subtotal and the line totals disagree."""
        lines_total = sum(item.total_price for item in invoice.items)
        reference = max(abs(invoice.subtotal), abs(lines_total))
        if reference == 0:
            return
        if abs(invoice.subtotal - lines_total) / reference > self.subtotal_tolerance:
            result.add_warning(
                f"Subtotal {invoice.subtotal:.2f} {invoice.currency} differs from "
                f"the sum of line totals {lines_total:.2f} {invoice.currency}; "
                f"the VAD uses the line totals"
            )

    def _check_weights(self, invoice: Invoice, result: ValidationResult) -> None:
        mode = resolve_allocation_mode(invoice.incoterm)
        items_023 = [item for item in invoice.items if item.regime == REGIME_TEMPORARY_ADMISSION]
        net_weight_023 = sum(item.net_weight or 0 for item in items_023)

        if invoice.total_gross_weight <= 0:
            # CFR freight is spread over regime 023 net weight, not gross weight
            if mode is AllocationMode.CFR_LIKE and net_weight_023 > 0:
                result.add_warning(
                    f"Total gross weight is 0: handling will not be apportioned; "
                    f"freight is still carried by regime {REGIME_TEMPORARY_ADMISSION} "
                    f"goods by net weight"
                )
            else:
                result.add_warning(
                    "Total gross weight is 0: freight and handling will not be apportioned"
                )

        if mode is AllocationMode.CFR_LIKE and invoice.freight > 0:
            if not items_023:
                result.add_warning(
                    f"{invoice.incoterm} invoice has no regime {REGIME_TEMPORARY_ADMISSION} "
                    f"goods: freight is excluded from the VAD"
                )
            elif net_weight_023 <= 0:
                result.add_warning(
                    f"{invoice.incoterm} invoice has no net weight on regime "
                    f"{REGIME_TEMPORARY_ADMISSION} goods: freight is excluded from the VAD"
                )

        for line, item in enumerate(invoice.items, 1):
            if item.regime == REGIME_PACKAGING_FULL:
                if not (item.packaging_boxes or item.packaging_pallets):
                    result.add_warning(
                        f"Regime {REGIME_PACKAGING_FULL} line {line} ({item.description}) "
                        f"has no box or pallet count"
                    )
            elif item.net_weight is None:
                result.add_warning(
                    f"Line {line} ({item.description}) has no net weight"
                )

    def _check_codes(self, invoice: Invoice, result: ValidationResult) -> None:
        if not is_known_incoterm(invoice.incoterm):
            result.add_warning(
                f"Unrecognised Incoterm '{invoice.incoterm}', freight apportioned as FOB"
            )

        for line, item in enumerate(invoice.items, 1):
            if not item.regime:
                result.add_warning(f"Line {line} ({item.description}) has no regime code")
            elif item.regime not in self.known_regimes:
                result.add_warning(f"Line {line} uses unknown regime code '{item.regime}'")
            if not item.hs_code:
                result.add_warning(f"Line {line} ({item.description}) has no HS code")
