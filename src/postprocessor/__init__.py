"""
Post-Processing Module for the Customs Valuation System.

Consistency validation of loaded invoices before valuation.

Author: ML Engineering Team
"""

from .validators import InvoiceValidator, ValidationResult

__all__ = [
    'InvoiceValidator',
    'ValidationResult'
]
