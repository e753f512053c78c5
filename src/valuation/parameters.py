"""
Valuation Parameters.

Constants of the VAD calculation bundled in one immutable object so the
engine stays a pure function of (invoice, exchange rate, parameters).

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Mapping

from .regimes import REGIME_LABELS, build_regime_labels

# Flat port handling ("aconage") estimate in MAD for a whole shipment
HANDLING_TOTAL_MAD = 2300.0
INSURANCE_RATE = 0.005
BOX_WEIGHT_KG = 2.0
PALLET_WEIGHT_KG = 25.0
FALLBACK_CODE = "UNKNOWN"


@dataclass(frozen=True)
class ValuationParameters:
    """
    Tunable constants of the apportionment rules.

    Attributes:
        handling_total_mad: Handling cost spread over the shipment by weight
        insurance_rate: Rate applied to (FOB + valuation freight)
        box_weight_kg: Estimated mass of one box, regime 312
        pallet_weight_kg: Estimated mass of one pallet, regime 312
        fallback_hs_code: Bucket for items without HS code
        fallback_regime_code: Bucket for items without regime code
        regime_labels: Regime code -> label table

    Example:
        >>> params = ValuationParameters(handling_total_mad=0)
        >>> params.insurance_rate
        0.005
    """
    handling_total_mad: float = HANDLING_TOTAL_MAD
    insurance_rate: float = INSURANCE_RATE
    box_weight_kg: float = BOX_WEIGHT_KG
    pallet_weight_kg: float = PALLET_WEIGHT_KG
    fallback_hs_code: str = FALLBACK_CODE
    fallback_regime_code: str = FALLBACK_CODE
    regime_labels: Mapping[str, str] = field(default_factory=lambda: REGIME_LABELS)

    @classmethod
    def from_config(cls) -> 'ValuationParameters':
        """
        Read the ``valuation`` section of settings.yaml.

        Missing keys fall back to the built-in constants.
        """
        from config import get_config

        return cls(
            handling_total_mad=float(get_config("valuation.handling_total_mad", HANDLING_TOTAL_MAD)),
            insurance_rate=float(get_config("valuation.insurance_rate", INSURANCE_RATE)),
            box_weight_kg=float(get_config("valuation.box_weight_kg", BOX_WEIGHT_KG)),
            pallet_weight_kg=float(get_config("valuation.pallet_weight_kg", PALLET_WEIGHT_KG)),
            fallback_hs_code=str(get_config("valuation.fallback_hs_code", FALLBACK_CODE)),
            fallback_regime_code=str(get_config("valuation.fallback_regime_code", FALLBACK_CODE)),
            regime_labels=build_regime_labels(get_config("valuation.regime_labels") or {}),
        )


DEFAULT_PARAMETERS = ValuationParameters()
