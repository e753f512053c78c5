"""
Valuation Module for the Customs Valuation System.

The VAD ("Valeur à Déclarer") calculation:
    - Regime grouping of invoice lines
    - HS-code aggregation within each regime
    - Freight, insurance and handling apportionment
    - Regime and report rollups

Everything in this package is pure and synchronous; it performs no I/O
and raises no errors for structurally valid input.
"""

from .models import (
    TransportMethod,
    InvoiceLineItem,
    Invoice,
    HSGroupResult,
    RegimeResult,
    CostRatios,
    ValuationReport,
)
from .grouping import OrderedGroups, group_by_regime, group_by_hs_code
from .aggregation import HSGroupTotals, aggregate_hs_groups, gross_weight_for_regime
from .incoterms import AllocationMode, resolve_allocation_mode
from .regimes import REGIME_LABELS, DEFAULT_REGIME_LABEL, resolve_regime_label
from .parameters import ValuationParameters, DEFAULT_PARAMETERS
from .apportioner import CostApportioner, compute_ratios, safe_ratio
from .engine import ValuationEngine, compute_valuation
from .checks import find_additivity_discrepancies, is_additive

__all__ = [
    'TransportMethod',
    'InvoiceLineItem',
    'Invoice',
    'HSGroupResult',
    'RegimeResult',
    'CostRatios',
    'ValuationReport',
    'OrderedGroups',
    'group_by_regime',
    'group_by_hs_code',
    'HSGroupTotals',
    'aggregate_hs_groups',
    'gross_weight_for_regime',
    'AllocationMode',
    'resolve_allocation_mode',
    'REGIME_LABELS',
    'DEFAULT_REGIME_LABEL',
    'resolve_regime_label',
    'ValuationParameters',
    'DEFAULT_PARAMETERS',
    'CostApportioner',
    'compute_ratios',
    'safe_ratio',
    'ValuationEngine',
    'compute_valuation',
    'find_additivity_discrepancies',
    'is_additive',
]
