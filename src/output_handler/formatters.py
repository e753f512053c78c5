"""
Report Formatters Module.

Moroccan/French number display for MAD amounts and weights, and the
plain-text summary printed by the CLI.

Author: ML Engineering Team
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List

from src.valuation.models import RegimeResult, ValuationReport

# fr-MA groups thousands with a narrow no-break space and uses a decimal comma
GROUP_SEPARATOR = "\u202f"
DECIMAL_SEPARATOR = ","


def _format_number(value: float, decimals: int, strip_zeros: bool = False) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)

    text = f"{rounded:,.{decimals}f}"
    if strip_zeros and '.' in text:
        text = text.rstrip('0').rstrip('.')

    return (
        text.replace(',', '\0')
        .replace('.', DECIMAL_SEPARATOR)
        .replace('\0', GROUP_SEPARATOR)
    )


def format_mad_precision(value: float) -> str:
    """
    MAD amount with exactly two decimals.

    Example:
        >>> format_mad_precision(12.5)
        '12,50'
    """
    return _format_number(value, 2)


def format_mad_rounded(value: float) -> str:
    """MAD amount rounded half-up to a whole dirham."""
    return _format_number(value, 0)


def format_kg(value: float) -> str:
    """Weight with at most two decimals, trailing zeros dropped."""
    return _format_number(value, 2, strip_zeros=True)


def _regime_lines(regime: RegimeResult) -> List[str]:
    lines = [
        f"  Régime {regime.regime} - {regime.label}",
        f"    Poids brut   : {format_kg(regime.gross_weight)} kg",
        f"    FOB          : {format_mad_precision(regime.fob_mad)} MAD",
        f"    Fret affiché : {format_mad_precision(regime.displayed_freight_mad)} MAD",
        f"    Fret valeur  : {format_mad_precision(regime.freight_mad)} MAD",
        f"    Assurance    : {format_mad_precision(regime.insurance_mad)} MAD",
        f"    Aconage      : {format_mad_precision(regime.handling_mad)} MAD",
        f"    VAD          : {format_mad_rounded(regime.total_valuation_mad)} MAD",
    ]
    for group in regime.hs_groups:
        lines.append(
            f"      SH {group.hs_code:<14} {format_kg(group.gross_weight):>12} kg"
            f"  VAD {format_mad_rounded(group.total_valuation_mad):>14} MAD"
        )
    return lines


def render_summary(report: ValuationReport) -> str:
    """
    Render a report as the text block printed at the end of a CLI run.

    Args:
        report: Computed valuation report.

    Returns:
        Multi-line summary.
    """
    separator = "=" * 60
    lines = [
        separator,
        f"VALEUR À DÉCLARER - Facture {report.invoice_number or '-'}",
        separator,
        f"Incoterm      : {report.incoterm} ({report.allocation_mode})",
        f"Taux de change: 1 {report.currency or 'DEV'} = {report.exchange_rate:.4f} MAD",
        f"Poids brut    : {format_kg(report.total_gross_weight)} kg",
        "",
    ]

    for regime in report.regimes:
        lines.extend(_regime_lines(regime))
        lines.append("")

    lines.extend([
        "-" * 60,
        f"Total FOB         : {format_mad_rounded(report.total_fob_mad)} MAD",
        f"Total fret valeur : {format_mad_rounded(report.total_freight_mad)} MAD",
        f"Total assurance   : {format_mad_rounded(report.total_insurance_mad)} MAD",
        f"Total aconage     : {format_mad_rounded(report.total_handling_mad)} MAD",
        f"TOTAL VAD         : {format_mad_rounded(report.total_valuation_mad)} MAD",
        separator,
    ])

    return "\n".join(lines)
