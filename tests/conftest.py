"""Shared fixtures: invoice builders and a fresh configuration per test."""

import pytest

from config import ConfigurationManager
from src.valuation.models import Invoice, InvoiceLineItem


def make_item(**overrides) -> InvoiceLineItem:
    fields = {
        'description': 'Tissu coton',
        'quantity': 1,
        'unit_price': 1000.0,
        'total_price': 1000.0,
        'regime': '023',
        'hs_code': 'HS1',
        'net_weight': 500.0,
    }
    fields.update(overrides)
    return InvoiceLineItem(**fields)


def make_invoice(items=None, **overrides) -> Invoice:
    fields = {
        'invoice_number': 'FAC-2026-001',
        'date': '2026-01-15',
        'currency': 'EUR',
        'subtotal': 1000.0,
        'freight': 100.0,
        'insurance': 0.0,
        'incoterm': 'FOB',
        'total_gross_weight': 500.0,
        'items': tuple(items) if items is not None else (make_item(),),
    }
    fields.update(overrides)
    return Invoice(**fields)


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test reads settings.yaml again and leaves no shared instance behind."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def single_item_invoice():
    """One regime 023 line: 1000 EUR, 500 kg, freight 100 EUR."""
    return make_invoice()


@pytest.fixture
def mixed_invoice():
    """Regime 023 (400 kg) and regime 010 (600 kg) lines, freight 100 EUR, 1000 kg."""
    return make_invoice(
        items=[
            make_item(description='Fil polyester', total_price=1000.0, unit_price=1000.0,
                      regime='023', hs_code='5402', net_weight=400.0),
            make_item(description='Boutons', total_price=2000.0, unit_price=2000.0,
                      regime='010', hs_code='9606', net_weight=600.0),
        ],
        subtotal=3000.0,
        total_gross_weight=1000.0,
    )


@pytest.fixture
def extraction_payload():
    """Extraction service output, camelCase keys and printed values."""
    return {
        'invoiceNumber': 'FAC/2026/014',
        'date': '15/01/2026',
        'currency': 'eur',
        'subtotal': '1.500,00',
        'fret': 120,
        'assurance': 0,
        'incoterm': 'CFR',
        'totalWeightBrut': '870 kg',
        'transportMethod': 'sea',
        'originCountry': 'Turquie',
        'items': [
            {
                'description': 'Tissu denim',
                'quantity': 100,
                'unitPrice': 10,
                'totalPrice': 1000,
                'regime': 23,
                'hsCode': '5209.42',
                'weightNet': 800,
            },
            {
                'description': 'Palettes bois',
                'quantity': 1,
                'unitPrice': 500,
                'totalPrice': '500,00',
                'regime': '312',
                'hsCode': '4415.20',
                'packagingCaisses': 10,
                'packagingPalettes': 2,
            },
        ],
    }
