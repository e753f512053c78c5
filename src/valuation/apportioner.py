"""
Cost Apportioner.

Distributes the shipment-level costs over HS groups and rolls the result
back up to regime level.

Rules:
    - Freight: gross weight x freight-per-kg, except under a CFR-like
      Incoterm where regime 023 groups carry the whole freight (pro rata
      their net weight) and other regimes contribute none to the VAD. The
      figure those groups would have carried is still displayed.
    - Handling ("aconage"): gross weight x handling-per-kg, always.
    - Insurance: (FOB + valuation freight) x insurance rate.
    - Group VAD: FOB + valuation freight + insurance + handling.

Every per-kg ratio is 0 when its weight denominator is 0.

Author: ML Engineering Team
"""

from typing import Iterable, Sequence, Tuple

from src.utils.logger import get_logger
from .aggregation import HSGroupTotals
from .incoterms import AllocationMode
from .models import CostRatios, HSGroupResult, Invoice, RegimeResult
from .parameters import DEFAULT_PARAMETERS, ValuationParameters
from .regimes import REGIME_TEMPORARY_ADMISSION, resolve_regime_label

logger = get_logger(__name__)


def safe_ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator``, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def compute_ratios(
    invoice: Invoice,
    exchange_rate: float,
    parameters: ValuationParameters = DEFAULT_PARAMETERS
) -> CostRatios:
    """
    Compute the per-kilogram ratios of a shipment.

    Args:
        invoice: Source invoice.
        exchange_rate: Invoice currency -> MAD rate.
        parameters: Handling total.

    Returns:
        CostRatios for the whole report.

    Example:
        >>> ratios = compute_ratios(invoice, 11.0)   # freight 100 EUR, 500 kg
        >>> ratios.freight_per_kg
        2.2
    """
    total_freight_mad = invoice.freight * exchange_rate
    total_gross_weight = invoice.total_gross_weight

    # The CFR ratio uses net weight because regime 023 gross weight is its net weight
    net_weight_023 = sum(
        item.net_weight or 0
        for item in invoice.items
        if item.regime == REGIME_TEMPORARY_ADMISSION
    )

    return CostRatios(
        freight_per_kg=safe_ratio(total_freight_mad, total_gross_weight),
        handling_per_kg=safe_ratio(parameters.handling_total_mad, total_gross_weight),
        cfr_freight_per_kg=safe_ratio(total_freight_mad, net_weight_023),
        total_freight_mad=total_freight_mad,
    )


class CostApportioner:
    """
    Applies the allocation rules of one report to its HS groups.

    Attributes:
        ratios: Per-kg ratios of the shipment
        mode: Allocation mode derived from the Incoterm
        parameters: Insurance rate and regime labels

    Example:
        >>> apportioner = CostApportioner(ratios, AllocationMode.FOB_LIKE)
        >>> group = apportioner.allocate("023", totals)
        >>> regime = apportioner.rollup("023", [group])
    """

    def __init__(
        self,
        ratios: CostRatios,
        mode: AllocationMode,
        parameters: ValuationParameters = DEFAULT_PARAMETERS
    ) -> None:
        self.ratios = ratios
        self.mode = mode
        self.parameters = parameters

    def freight_for(self, regime: str, gross_weight: float) -> Tuple[float, float]:
        """
        Freight of a group as (valuation freight, displayed freight).

        Args:
            regime: Regime code of the group.
            gross_weight: Gross weight of the group.

        Returns:
            Tuple of MAD amounts. Both are equal except for non-023 groups
            under a freight-concentrating mode, where valuation freight is 0.
        """
        if self.mode.concentrates_freight:
            if regime == REGIME_TEMPORARY_ADMISSION:
                freight = self.ratios.cfr_freight_per_kg * gross_weight
                return freight, freight
            return 0.0, self.ratios.freight_per_kg * gross_weight

        freight = self.ratios.freight_per_kg * gross_weight
        return freight, freight

    def allocate(self, regime: str, totals: HSGroupTotals) -> HSGroupResult:
        """
        Assign freight, insurance and handling to one HS group.

        Args:
            regime: Regime code of the group.
            totals: Aggregated group totals.

        Returns:
            HSGroupResult with its VAD.
        """
        valuation_freight, display_freight = self.freight_for(regime, totals.gross_weight)
        handling = self.ratios.handling_per_kg * totals.gross_weight
        insurance = (totals.fob_mad + valuation_freight) * self.parameters.insurance_rate
        total = totals.fob_mad + valuation_freight + insurance + handling

        logger.debug(
            f"Regime {regime} / HS {totals.hs_code}: "
            f"weight={totals.gross_weight:.2f} kg, fob={totals.fob_mad:.2f}, "
            f"freight={valuation_freight:.2f} (shown {display_freight:.2f}), "
            f"insurance={insurance:.2f}, handling={handling:.2f}"
        )

        return HSGroupResult(
            hs_code=totals.hs_code,
            description=totals.description,
            gross_weight=totals.gross_weight,
            net_weight=totals.net_weight,
            fob_mad=totals.fob_mad,
            freight_mad=display_freight,
            freight_for_valuation_mad=valuation_freight,
            insurance_mad=insurance,
            handling_mad=handling,
            total_valuation_mad=total,
            item_count=totals.item_count,
            packaging_boxes=totals.packaging_boxes,
            packaging_pallets=totals.packaging_pallets,
        )

    def allocate_all(self, regime: str, totals: Iterable[HSGroupTotals]) -> Tuple[HSGroupResult, ...]:
        return tuple(self.allocate(regime, group) for group in totals)

    def rollup(self, regime: str, groups: Sequence[HSGroupResult]) -> RegimeResult:
        """
        Sum a regime's HS groups.

        Freight sums the valuation freight, never the displayed figure, so
        the regime VAD equals the sum of its groups' VAD.
        """
        return RegimeResult(
            regime=regime,
            label=resolve_regime_label(regime, self.parameters.regime_labels),
            gross_weight=sum(group.gross_weight for group in groups),
            fob_mad=sum(group.fob_mad for group in groups),
            freight_mad=sum(group.freight_for_valuation_mad for group in groups),
            insurance_mad=sum(group.insurance_mad for group in groups),
            handling_mad=sum(group.handling_mad for group in groups),
            total_valuation_mad=sum(group.total_valuation_mad for group in groups),
            hs_groups=tuple(groups),
        )
