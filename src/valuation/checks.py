"""
Report consistency checks.

Verifies that a ValuationReport is additive: every regime total equals
the sum of its HS groups and every report total equals the sum of its
regimes, within a floating-point tolerance.
"""

import math
from typing import List

from .models import ValuationReport

# (regime field, HS group field) pairs that must add up
_REGIME_FIELDS = [
    ('gross_weight', 'gross_weight'),
    ('fob_mad', 'fob_mad'),
    ('freight_mad', 'freight_for_valuation_mad'),
    ('insurance_mad', 'insurance_mad'),
    ('handling_mad', 'handling_mad'),
    ('total_valuation_mad', 'total_valuation_mad'),
]

# (report field, regime field) pairs that must add up
_REPORT_FIELDS = [
    ('total_fob_mad', 'fob_mad'),
    ('total_freight_mad', 'freight_mad'),
    ('total_insurance_mad', 'insurance_mad'),
    ('total_handling_mad', 'handling_mad'),
    ('total_valuation_mad', 'total_valuation_mad'),
]


def _close(a: float, b: float, tolerance: float) -> bool:
    return math.isclose(a, b, rel_tol=tolerance, abs_tol=tolerance)


def find_additivity_discrepancies(report: ValuationReport, tolerance: float = 1e-6) -> List[str]:
    """
    List every total that does not match the sum of its children.

    Args:
        report: Report to check.
        tolerance: Relative and absolute tolerance.

    Returns:
        Human-readable discrepancy messages, empty when the report is additive.
    """
    problems = []

    for regime in report.regimes:
        for regime_field, group_field in _REGIME_FIELDS:
            expected = sum(getattr(group, group_field) for group in regime.hs_groups)
            actual = getattr(regime, regime_field)
            if not _close(actual, expected, tolerance):
                problems.append(
                    f"Regime {regime.regime} {regime_field}={actual:.6f} "
                    f"but HS groups sum to {expected:.6f}"
                )

    for report_field, regime_field in _REPORT_FIELDS:
        expected = sum(getattr(regime, regime_field) for regime in report.regimes)
        actual = getattr(report, report_field)
        if not _close(actual, expected, tolerance):
            problems.append(
                f"Report {report_field}={actual:.6f} but regimes sum to {expected:.6f}"
            )

    return problems


def is_additive(report: ValuationReport, tolerance: float = 1e-6) -> bool:
    return not find_additivity_discrepancies(report, tolerance)
