"""
HS-Code Aggregator.

Merges one regime's items sharing a tariff code into a single group and
computes the group totals the apportioner works from: FOB value in MAD,
net weight, packaging counts and the gross weight attributed to the
group.
"""

from dataclasses import dataclass
from typing import Iterable, List

from .grouping import group_by_hs_code
from .models import InvoiceLineItem
from .parameters import DEFAULT_PARAMETERS, ValuationParameters
from .regimes import REGIME_PACKAGING_FULL, REGIME_TEMPORARY_ADMISSION


@dataclass(frozen=True)
class HSGroupTotals:
    """
    Pre-allocation totals of one HS group.

    Attributes:
        hs_code: Tariff code (or the fallback bucket)
        description: Description of the first item of the group
        fob_source: Sum of item totals, invoice currency
        fob_mad: fob_source converted with the exchange rate
        net_weight: Sum of item net weights, missing weights count as 0
        gross_weight: Weight used to apportion freight and handling
        packaging_boxes: Sum of box counts
        packaging_pallets: Sum of pallet counts
        item_count: Number of merged invoice lines
    """
    hs_code: str
    description: str
    fob_source: float
    fob_mad: float
    net_weight: float
    gross_weight: float
    packaging_boxes: float
    packaging_pallets: float
    item_count: int


def gross_weight_for_regime(
    regime: str,
    net_weight: float,
    boxes: float,
    pallets: float,
    parameters: ValuationParameters = DEFAULT_PARAMETERS
) -> float:
    """
    Gross weight attributed to an HS group.

    Regime 312 declares packaging imported full, whose mass is never
    weighed: it is estimated per box and per pallet. Regime 023 and every
    other regime use the net weight.

    Args:
        regime: Regime code of the group.
        net_weight: Summed net weight of the group.
        boxes: Summed box count.
        pallets: Summed pallet count.
        parameters: Unit weights for the packaging estimate.

    Returns:
        Gross weight in kg.

    Example:
        >>> gross_weight_for_regime("312", 0, boxes=10, pallets=2)
        70.0
    """
    if regime == REGIME_PACKAGING_FULL:
        return boxes * parameters.box_weight_kg + pallets * parameters.pallet_weight_kg
    if regime == REGIME_TEMPORARY_ADMISSION:
        return net_weight
    return net_weight


def aggregate_hs_groups(
    regime: str,
    items: Iterable[InvoiceLineItem],
    exchange_rate: float,
    parameters: ValuationParameters = DEFAULT_PARAMETERS
) -> List[HSGroupTotals]:
    """
    Aggregate one regime's items by HS code.

    Args:
        regime: Regime code shared by ``items``.
        items: The regime's line items, invoice order.
        exchange_rate: Invoice currency -> MAD rate.
        parameters: Fallback HS code and packaging unit weights.

    Returns:
        One HSGroupTotals per HS code, in first-seen order.
    """
    groups = group_by_hs_code(items, parameters.fallback_hs_code)
    totals = []

    for hs_code, group_items in groups.items():
        fob_source = sum(item.total_price for item in group_items)
        net_weight = sum(item.net_weight or 0 for item in group_items)
        boxes = sum(item.packaging_boxes or 0 for item in group_items)
        pallets = sum(item.packaging_pallets or 0 for item in group_items)

        totals.append(HSGroupTotals(
            hs_code=hs_code,
            description=group_items[0].description,
            fob_source=fob_source,
            fob_mad=fob_source * exchange_rate,
            net_weight=net_weight,
            gross_weight=gross_weight_for_regime(regime, net_weight, boxes, pallets, parameters),
            packaging_boxes=boxes,
            packaging_pallets=pallets,
            item_count=len(group_items),
        ))

    return totals
