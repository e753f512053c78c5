"""
Input Handler Module for the Customs Valuation System.

This module provides functionality for:
    - Loading extracted invoices (JSON) into Invoice objects
    - Normalizing printed amounts, weights and dates
    - Resolving the exchange rate to apply

Author: ML Engineering Team
"""

from .handler import InvoiceLoader, resolve_exchange_rate, DEFAULT_EXCHANGE_RATE
from .normalizers import AmountNormalizer, DateNormalizer

__all__ = [
    'InvoiceLoader',
    'resolve_exchange_rate',
    'DEFAULT_EXCHANGE_RATE',
    'AmountNormalizer',
    'DateNormalizer'
]
