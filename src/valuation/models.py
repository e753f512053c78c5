"""
Valuation Data Classes.

Input shapes (InvoiceLineItem, Invoice) as delivered by the extraction
step, and the derived report shapes (HSGroupResult, RegimeResult,
ValuationReport) produced by the engine. All classes are frozen: a new
report is built on every run and never patched afterwards.

Monetary fields suffixed ``_mad`` are in Moroccan dirhams; every other
amount is in the invoice currency.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class TransportMethod(str, Enum):
    """Transport mode declared on the invoice."""
    AIR = "AIR"
    SEA = "SEA"
    LAND = "LAND"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['TransportMethod']:
        """Return the matching member, or None for empty/unknown values."""
        if not value:
            return None
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


# camelCase keys emitted by the extraction service -> dataclass field names
ITEM_FIELD_ALIASES = {
    'unitPrice': 'unit_price',
    'totalPrice': 'total_price',
    'hsCode': 'hs_code',
    'weightNet': 'net_weight',
    'packagingCaisses': 'packaging_boxes',
    'packagingPalettes': 'packaging_pallets',
}

INVOICE_FIELD_ALIASES = {
    'invoiceNumber': 'invoice_number',
    'fret': 'freight',
    'assurance': 'insurance',
    'totalWeightBrut': 'total_gross_weight',
    'transportMethod': 'transport_method',
    'originCountry': 'origin_country',
}


def canonical_keys(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    """
    Rename aliased keys to their snake_case field names.

    Snake_case keys win when both spellings are present.

    Args:
        data: Raw mapping.
        aliases: Alias -> field name table.

    Returns:
        New dictionary keyed by field names.
    """
    result = {}
    for key, value in data.items():
        name = aliases.get(key, key)
        if name in result and key in aliases:
            continue
        result[name] = value
    return result


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class InvoiceLineItem:
    """
    One line of the commercial invoice.

    Attributes:
        description: Goods description as printed on the invoice
        quantity: Number of units
        unit_price: Price per unit (invoice currency)
        total_price: Line total (invoice currency), used as FOB value
        regime: Customs regime code, e.g. "023" or "312"
        hs_code: Harmonized System tariff code, None when not classified
        net_weight: Net weight in kg, used for regime 023 and fallback regimes
        packaging_boxes: Box ("caisse") count, used for regime 312
        packaging_pallets: Pallet count, used for regime 312
    """
    description: str
    quantity: float
    unit_price: float
    total_price: float
    regime: str
    hs_code: Optional[str] = None
    net_weight: Optional[float] = None
    packaging_boxes: Optional[float] = None
    packaging_pallets: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InvoiceLineItem':
        """
        Build a line item from a dictionary in either key style.

        Args:
            data: Mapping with snake_case or extraction camelCase keys.

        Returns:
            InvoiceLineItem instance.
        """
        data = canonical_keys(data, ITEM_FIELD_ALIASES)
        hs_code = data.get('hs_code')
        return cls(
            description=str(data.get('description') or ''),
            quantity=float(data.get('quantity') or 0),
            unit_price=float(data.get('unit_price') or 0),
            total_price=float(data.get('total_price') or 0),
            regime=str(data.get('regime') or '').strip(),
            hs_code=str(hs_code).strip() if hs_code else None,
            net_weight=_optional_float(data.get('net_weight')),
            packaging_boxes=_optional_float(data.get('packaging_boxes')),
            packaging_pallets=_optional_float(data.get('packaging_pallets')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total_price': self.total_price,
            'regime': self.regime,
            'hs_code': self.hs_code,
            'net_weight': self.net_weight,
            'packaging_boxes': self.packaging_boxes,
            'packaging_pallets': self.packaging_pallets,
        }


@dataclass(frozen=True)
class Invoice:
    """
    Structured commercial invoice.

    ``subtotal`` and ``freight`` are in the invoice's own currency; the
    engine multiplies them by the exchange rate to obtain MAD values.
    ``insurance`` is informational only: the engine computes insurance
    from a fixed rate instead.

    Attributes:
        invoice_number: Invoice identifier
        date: Invoice date (ISO string when it could be normalized)
        currency: ISO currency code of every amount on the invoice
        subtotal: Sum of the FOB line totals
        freight: Freight amount for the whole shipment
        insurance: Insurance amount printed on the invoice
        incoterm: Trade term, free text (FOB, CFR, CIF, EXW...)
        total_gross_weight: Declared gross weight of the shipment in kg
        transport_method: AIR, SEA or LAND when known
        items: Ordered line items
        origin_country: Country of origin when printed
    """
    invoice_number: str
    date: Optional[str]
    currency: str
    subtotal: float
    freight: float
    insurance: float
    incoterm: str
    total_gross_weight: float
    transport_method: Optional[TransportMethod] = None
    items: Tuple[InvoiceLineItem, ...] = ()
    origin_country: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Invoice':
        """
        Build an invoice from a dictionary in either key style.

        Args:
            data: Mapping shaped like the extraction output.

        Returns:
            Invoice instance.
        """
        data = canonical_keys(data, INVOICE_FIELD_ALIASES)
        transport = data.get('transport_method')
        if not isinstance(transport, TransportMethod):
            transport = TransportMethod.parse(transport)
        items = tuple(
            item if isinstance(item, InvoiceLineItem) else InvoiceLineItem.from_dict(item)
            for item in data.get('items') or []
        )
        return cls(
            invoice_number=str(data.get('invoice_number') or ''),
            date=data.get('date'),
            currency=str(data.get('currency') or '').upper(),
            subtotal=float(data.get('subtotal') or 0),
            freight=float(data.get('freight') or 0),
            insurance=float(data.get('insurance') or 0),
            incoterm=str(data.get('incoterm') or ''),
            total_gross_weight=float(data.get('total_gross_weight') or 0),
            transport_method=transport,
            items=items,
            origin_country=data.get('origin_country'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'invoice_number': self.invoice_number,
            'date': self.date,
            'currency': self.currency,
            'subtotal': self.subtotal,
            'freight': self.freight,
            'insurance': self.insurance,
            'incoterm': self.incoterm,
            'total_gross_weight': self.total_gross_weight,
            'transport_method': self.transport_method.value if self.transport_method else None,
            'origin_country': self.origin_country,
            'items': [item.to_dict() for item in self.items],
        }

    def __repr__(self) -> str:
        return (
            f"Invoice(number={self.invoice_number}, "
            f"incoterm={self.incoterm}, "
            f"items={len(self.items)}, "
            f"subtotal={self.subtotal} {self.currency})"
        )


@dataclass(frozen=True)
class HSGroupResult:
    """
    Valuation of all items of one regime sharing an HS code.

    ``freight_mad`` is the displayed freight. Under a CFR Incoterm it
    differs from ``freight_for_valuation_mad`` for regimes other than 023,
    and only the latter is part of ``total_valuation_mad``.
    """
    hs_code: str
    description: str
    gross_weight: float
    net_weight: float
    fob_mad: float
    freight_mad: float
    freight_for_valuation_mad: float
    insurance_mad: float
    handling_mad: float
    total_valuation_mad: float
    item_count: int = 0
    packaging_boxes: float = 0.0
    packaging_pallets: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hs_code': self.hs_code,
            'description': self.description,
            'gross_weight': self.gross_weight,
            'net_weight': self.net_weight,
            'fob_mad': self.fob_mad,
            'freight_mad': self.freight_mad,
            'freight_for_valuation_mad': self.freight_for_valuation_mad,
            'insurance_mad': self.insurance_mad,
            'handling_mad': self.handling_mad,
            'total_valuation_mad': self.total_valuation_mad,
            'item_count': self.item_count,
            'packaging_boxes': self.packaging_boxes,
            'packaging_pallets': self.packaging_pallets,
        }


@dataclass(frozen=True)
class RegimeResult:
    """
    Rollup of every HS group of one customs regime.

    ``freight_mad`` sums the valuation-contributing freight of the
    children so that regime totals stay additive.
    """
    regime: str
    label: str
    gross_weight: float
    fob_mad: float
    freight_mad: float
    insurance_mad: float
    handling_mad: float
    total_valuation_mad: float
    hs_groups: Tuple[HSGroupResult, ...] = ()

    @property
    def displayed_freight_mad(self) -> float:
        """Sum of the freight shown on each HS group card."""
        return sum(group.freight_mad for group in self.hs_groups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'regime': self.regime,
            'label': self.label,
            'gross_weight': self.gross_weight,
            'fob_mad': self.fob_mad,
            'freight_mad': self.freight_mad,
            'displayed_freight_mad': self.displayed_freight_mad,
            'insurance_mad': self.insurance_mad,
            'handling_mad': self.handling_mad,
            'total_valuation_mad': self.total_valuation_mad,
            'hs_groups': [group.to_dict() for group in self.hs_groups],
        }


@dataclass(frozen=True)
class CostRatios:
    """
    Per-kilogram ratios computed once per report.

    Attributes:
        freight_per_kg: Shipment freight (MAD) / total gross weight
        handling_per_kg: Handling total (MAD) / total gross weight
        cfr_freight_per_kg: Shipment freight (MAD) / regime 023 net weight
        total_freight_mad: Shipment freight converted to MAD
    """
    freight_per_kg: float
    handling_per_kg: float
    cfr_freight_per_kg: float
    total_freight_mad: float

    def to_dict(self) -> Dict[str, float]:
        return {
            'freight_per_kg': self.freight_per_kg,
            'handling_per_kg': self.handling_per_kg,
            'cfr_freight_per_kg': self.cfr_freight_per_kg,
            'total_freight_mad': self.total_freight_mad,
        }


@dataclass(frozen=True)
class ValuationReport:
    """
    Itemized customs value ("Valeur à Déclarer") of one invoice.

    Fully determined by the invoice and the exchange rate it was computed
    with. ``total_gross_weight`` is the declared shipment weight copied
    from the invoice, not the sum of allocated group weights.
    """
    exchange_rate: float
    incoterm: str
    allocation_mode: str
    total_fob_mad: float
    total_freight_mad: float
    total_insurance_mad: float
    total_handling_mad: float
    total_gross_weight: float
    total_valuation_mad: float
    regimes: Tuple[RegimeResult, ...] = ()
    ratios: Optional[CostRatios] = None
    invoice_number: str = ""
    currency: str = ""

    def regime(self, code: str) -> Optional[RegimeResult]:
        """Return the rollup for ``code``, or None when the regime is absent."""
        for result in self.regimes:
            if result.regime == code:
                return result
        return None

    @property
    def regime_codes(self) -> Tuple[str, ...]:
        return tuple(result.regime for result in self.regimes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'invoice_number': self.invoice_number,
            'currency': self.currency,
            'exchange_rate': self.exchange_rate,
            'incoterm': self.incoterm,
            'allocation_mode': self.allocation_mode,
            'total_fob_mad': self.total_fob_mad,
            'total_freight_mad': self.total_freight_mad,
            'total_insurance_mad': self.total_insurance_mad,
            'total_handling_mad': self.total_handling_mad,
            'total_gross_weight': self.total_gross_weight,
            'total_valuation_mad': self.total_valuation_mad,
            'ratios': self.ratios.to_dict() if self.ratios else None,
            'regimes': [result.to_dict() for result in self.regimes],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize the report; accented regime labels are kept as-is."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"ValuationReport(invoice={self.invoice_number}, "
            f"incoterm={self.incoterm}, "
            f"regimes={len(self.regimes)}, "
            f"vad={self.total_valuation_mad:.2f} MAD)"
        )
