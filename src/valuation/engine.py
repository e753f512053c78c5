"""
Valuation Engine.

Runs the three stages of the VAD calculation:

    Invoice -> regime groups -> HS groups -> cost allocation
            -> regime rollups -> report rollup

``compute_valuation`` is a pure function: the same invoice, rate and
parameters always give the same report, nothing is read from disk and
nothing is kept between calls. ``ValuationEngine`` wraps it with the
parameters from settings.yaml and a log line per run.

Author: ML Engineering Team
"""

from typing import Optional

from src.utils.logger import get_logger
from .aggregation import aggregate_hs_groups
from .apportioner import CostApportioner, compute_ratios
from .grouping import group_by_regime
from .incoterms import resolve_allocation_mode
from .models import Invoice, ValuationReport
from .parameters import DEFAULT_PARAMETERS, ValuationParameters

logger = get_logger(__name__)


def compute_valuation(
    invoice: Invoice,
    exchange_rate: float,
    parameters: Optional[ValuationParameters] = None
) -> ValuationReport:
    """
    Build the VAD report of an invoice.

    Args:
        invoice: Structured invoice from the extraction step.
        exchange_rate: Invoice currency -> MAD rate, finite and >= 0.
        parameters: Calculation constants. Built-in defaults when None.

    Returns:
        ValuationReport with regime and HS-code breakdowns.

    Example:
        >>> report = compute_valuation(invoice, 11.0)
        >>> report.total_valuation_mad
        14460.5
    """
    parameters = parameters or DEFAULT_PARAMETERS

    ratios = compute_ratios(invoice, exchange_rate, parameters)
    mode = resolve_allocation_mode(invoice.incoterm)
    apportioner = CostApportioner(ratios, mode, parameters)

    regimes = []
    for regime, items in group_by_regime(invoice.items, parameters.fallback_regime_code).items():
        totals = aggregate_hs_groups(regime, items, exchange_rate, parameters)
        groups = apportioner.allocate_all(regime, totals)
        regimes.append(apportioner.rollup(regime, groups))

    return ValuationReport(
        exchange_rate=exchange_rate,
        incoterm=invoice.incoterm,
        allocation_mode=mode.value,
        total_fob_mad=sum(result.fob_mad for result in regimes),
        total_freight_mad=sum(result.freight_mad for result in regimes),
        total_insurance_mad=sum(result.insurance_mad for result in regimes),
        total_handling_mad=sum(result.handling_mad for result in regimes),
        total_gross_weight=invoice.total_gross_weight,
        total_valuation_mad=sum(result.total_valuation_mad for result in regimes),
        regimes=tuple(regimes),
        ratios=ratios,
        invoice_number=invoice.invoice_number,
        currency=invoice.currency,
    )


class ValuationEngine:
    """
    Configured entry point to the valuation calculation.

    Attributes:
        parameters: Constants used for every run

    Example:
        >>> engine = ValuationEngine()
        >>> report = engine.run(invoice, 10.85)
        >>> for regime in report.regimes:
        ...     print(regime.regime, regime.total_valuation_mad)
    """

    def __init__(self, parameters: Optional[ValuationParameters] = None) -> None:
        """
        Initialize the engine.

        Args:
            parameters: Calculation constants. Read from settings.yaml when None.
        """
        self.parameters = parameters or ValuationParameters.from_config()
        logger.debug(
            f"ValuationEngine initialized (handling={self.parameters.handling_total_mad} MAD, "
            f"insurance={self.parameters.insurance_rate:.2%})"
        )

    def run(self, invoice: Invoice, exchange_rate: float) -> ValuationReport:
        """
        Compute the report of ``invoice`` at ``exchange_rate``.

        Each call returns a new report; a rate edit simply means calling
        run() again and discarding the previous result.
        """
        logger.info(
            f"Computing VAD for invoice {invoice.invoice_number or 'N/A'} "
            f"({len(invoice.items)} items, {invoice.incoterm or 'no Incoterm'}, "
            f"1 {invoice.currency} = {exchange_rate:.4f} MAD)"
        )

        report = compute_valuation(invoice, exchange_rate, self.parameters)

        logger.info(
            f"VAD complete: {len(report.regimes)} regimes, "
            f"{sum(len(r.hs_groups) for r in report.regimes)} HS groups, "
            f"total={report.total_valuation_mad:.2f} MAD ({report.allocation_mode})"
        )
        return report
