"""
Customs regime labels.

Static table of the regime codes the declarant handles, with their
French descriptions as printed on the VAD certificate. Extra codes can
be added through ``valuation.regime_labels`` in settings.yaml without
touching the calculation modules.
"""

from types import MappingProxyType
from typing import Mapping, Optional

REGIME_RELEASE_FOR_CONSUMPTION = "010"
REGIME_TEMPORARY_ADMISSION_WITH_PAYMENT = "022"
REGIME_TEMPORARY_ADMISSION = "023"
REGIME_RELEASE_AFTER_ADMISSION = "040"
REGIME_PACKAGING_EMPTY = "311"
REGIME_PACKAGING_FULL = "312"

REGIME_LABELS: Mapping[str, str] = MappingProxyType({
    REGIME_RELEASE_FOR_CONSUMPTION: "Mise à la consommation directe",
    REGIME_TEMPORARY_ADMISSION: "ATPA sans paiement",
    REGIME_PACKAGING_FULL: "AT d'emballages et contenants importés pleins",
    REGIME_PACKAGING_EMPTY: "AT d'emballages et contenants importés vides",
    REGIME_TEMPORARY_ADMISSION_WITH_PAYMENT: "ATPA avec paiement",
    REGIME_RELEASE_AFTER_ADMISSION: "MAC en suite d'ATPA",
})

DEFAULT_REGIME_LABEL = "Régime Spécifique"


def build_regime_labels(overrides: Optional[Mapping[str, str]] = None) -> Mapping[str, str]:
    """
    Return a read-only label table extended with ``overrides``.

    Args:
        overrides: Extra or replacement code -> label entries.

    Returns:
        Immutable mapping; REGIME_LABELS itself when there is nothing to add.
    """
    if not overrides:
        return REGIME_LABELS
    labels = dict(REGIME_LABELS)
    labels.update({str(code): str(label) for code, label in overrides.items()})
    return MappingProxyType(labels)


def resolve_regime_label(code: str, labels: Mapping[str, str] = REGIME_LABELS) -> str:
    """
    Human-readable label for a regime code.

    Example:
        >>> resolve_regime_label("023")
        'ATPA sans paiement'
        >>> resolve_regime_label("999")
        'Régime Spécifique'
    """
    return labels.get(code, DEFAULT_REGIME_LABEL)
