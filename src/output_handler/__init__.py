"""
Output Handler Module for the Customs Valuation System.

This module provides functionality for:
    - JSON report files
    - Excel workbooks (summary, regimes, HS groups)
    - French-style amount formatting and the CLI text summary

Author: ML Engineering Team
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter
from .formatters import (
    format_mad_precision,
    format_mad_rounded,
    format_kg,
    render_summary,
)

__all__ = [
    'OutputHandler',
    'ExcelExporter',
    'format_mad_precision',
    'format_mad_rounded',
    'format_kg',
    'render_summary',
]
