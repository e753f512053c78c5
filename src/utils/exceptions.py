"""
Custom Exceptions Module.

Exceptions raised by the glue around the valuation engine: loading the
extracted invoice, resolving the exchange rate and exporting reports.
The valuation core itself is total and raises none of these.

Exception Hierarchy:
    CustomsValuationError (base)
    ├── InputError
    │   ├── InvoiceFileNotFoundError
    │   ├── InvoiceFormatError
    │   └── ExchangeRateError
    └── OutputError
        ├── JsonExportError
        └── ExcelExportError
"""


class CustomsValuationError(Exception):
    """
    Base exception for all customs valuation errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(CustomsValuationError):
    """Base exception for invoice loading errors."""
    pass


class InvoiceFileNotFoundError(InputError):
    """Raised when the invoice file cannot be found."""

    def __init__(self, filepath: str):
        message = f"Invoice file not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class InvoiceFormatError(InputError):
    """
    Raised when extracted invoice data cannot be turned into an Invoice.

    Example:
        >>> raise InvoiceFormatError("items", "Invoice has no line items")
    """

    def __init__(self, field: str, reason: str = None):
        message = f"Invalid invoice data for field '{field}'"
        details = {"field": field, "reason": reason}
        super().__init__(message, details)


class ExchangeRateError(InputError):
    """Raised when an exchange rate is negative or not a finite number."""

    def __init__(self, rate, reason: str = None):
        message = f"Invalid exchange rate: {rate}"
        details = {"rate": rate, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(CustomsValuationError):
    """Base exception for report output errors."""
    pass


class JsonExportError(OutputError):
    """Raised when writing a JSON report fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to write JSON report: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class ExcelExportError(OutputError):
    """Raised when Excel export fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'CustomsValuationError',
    'InputError',
    'InvoiceFileNotFoundError',
    'InvoiceFormatError',
    'ExchangeRateError',
    'OutputError',
    'JsonExportError',
    'ExcelExportError',
]
