"""Tests for ratio computation and freight, insurance and handling allocation."""

import pytest

from src.valuation.aggregation import HSGroupTotals
from src.valuation.apportioner import CostApportioner, compute_ratios, safe_ratio
from src.valuation.incoterms import AllocationMode
from src.valuation.models import CostRatios

from tests.conftest import make_invoice, make_item


def make_totals(**overrides) -> HSGroupTotals:
    fields = {
        'hs_code': 'HS1',
        'description': 'Tissu',
        'fob_source': 1000.0,
        'fob_mad': 10000.0,
        'net_weight': 100.0,
        'gross_weight': 100.0,
        'packaging_boxes': 0.0,
        'packaging_pallets': 0.0,
        'item_count': 1,
    }
    fields.update(overrides)
    return HSGroupTotals(**fields)


RATIOS = CostRatios(
    freight_per_kg=1.0,
    handling_per_kg=2.3,
    cfr_freight_per_kg=2.5,
    total_freight_mad=1000.0,
)


class TestSafeRatio:

    def test_divides(self):
        assert safe_ratio(1100, 500) == pytest.approx(2.2)

    @pytest.mark.parametrize("denominator", [0, 0.0, -5])
    def test_non_positive_denominator_gives_zero(self, denominator):
        assert safe_ratio(100, denominator) == 0.0


class TestComputeRatios:

    def test_end_to_end_ratios(self, single_item_invoice):
        ratios = compute_ratios(single_item_invoice, 11.0)
        assert ratios.total_freight_mad == pytest.approx(1100.0)
        assert ratios.freight_per_kg == pytest.approx(2.2)
        assert ratios.handling_per_kg == pytest.approx(4.6)
        assert ratios.cfr_freight_per_kg == pytest.approx(2.2)

    def test_cfr_ratio_uses_regime_023_net_weight_only(self, mixed_invoice):
        ratios = compute_ratios(mixed_invoice, 10.0)
        assert ratios.freight_per_kg == pytest.approx(1.0)
        assert ratios.cfr_freight_per_kg == pytest.approx(2.5)

    def test_zero_gross_weight(self):
        ratios = compute_ratios(make_invoice(total_gross_weight=0.0), 11.0)
        assert ratios.freight_per_kg == 0.0
        assert ratios.handling_per_kg == 0.0

    def test_no_023_weight(self):
        invoice = make_invoice(items=[make_item(regime='010')])
        assert compute_ratios(invoice, 11.0).cfr_freight_per_kg == 0.0


class TestFreightFor:

    def test_fob_like_display_equals_valuation(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        assert apportioner.freight_for('010', 600.0) == (600.0, 600.0)
        assert apportioner.freight_for('023', 400.0) == (400.0, 400.0)

    def test_cfr_concentrates_on_regime_023(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.CFR_LIKE)
        assert apportioner.freight_for('023', 400.0) == (pytest.approx(1000.0), pytest.approx(1000.0))

    def test_cfr_other_regimes_display_only(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.CFR_LIKE)
        valuation, display = apportioner.freight_for('312', 70.0)
        assert valuation == 0.0
        assert display == pytest.approx(70.0)

    def test_cif_apportioned_like_fob(self):
        cif = CostApportioner(RATIOS, AllocationMode.CIF_LIKE)
        fob = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        for regime in ('023', '010', '312'):
            assert cif.freight_for(regime, 250.0) == fob.freight_for(regime, 250.0)


class TestAllocate:

    def test_group_amounts(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        group = apportioner.allocate('023', make_totals(fob_mad=10000.0, gross_weight=500.0))

        assert group.freight_mad == pytest.approx(500.0)
        assert group.freight_for_valuation_mad == pytest.approx(500.0)
        assert group.insurance_mad == pytest.approx(52.5)
        assert group.handling_mad == pytest.approx(1150.0)
        assert group.total_valuation_mad == pytest.approx(10000 + 500 + 52.5 + 1150)

    def test_insurance_excludes_display_only_freight(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.CFR_LIKE)
        group = apportioner.allocate('010', make_totals(fob_mad=20000.0, gross_weight=600.0))

        assert group.freight_mad == pytest.approx(600.0)
        assert group.freight_for_valuation_mad == 0.0
        assert group.insurance_mad == pytest.approx(100.0)
        assert group.total_valuation_mad == pytest.approx(20000 + 100 + 1380)

    def test_handling_independent_of_incoterm(self):
        totals = make_totals(gross_weight=70.0)
        for mode in AllocationMode:
            group = CostApportioner(RATIOS, mode).allocate('312', totals)
            assert group.handling_mad == pytest.approx(161.0)

    def test_carries_group_metadata(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        totals = make_totals(item_count=3, packaging_boxes=10, packaging_pallets=2)
        group = apportioner.allocate('312', totals)
        assert group.item_count == 3
        assert group.packaging_boxes == 10
        assert group.packaging_pallets == 2
        assert group.hs_code == 'HS1'


class TestRollup:

    def test_sums_children(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        groups = apportioner.allocate_all('023', [
            make_totals(hs_code='A', gross_weight=100.0, fob_mad=1000.0),
            make_totals(hs_code='B', gross_weight=300.0, fob_mad=3000.0),
        ])
        regime = apportioner.rollup('023', groups)

        assert regime.label == 'ATPA sans paiement'
        assert regime.gross_weight == pytest.approx(400.0)
        assert regime.fob_mad == pytest.approx(4000.0)
        assert regime.freight_mad == pytest.approx(400.0)
        assert regime.total_valuation_mad == pytest.approx(
            sum(group.total_valuation_mad for group in groups)
        )
        assert [group.hs_code for group in regime.hs_groups] == ['A', 'B']

    def test_cfr_regime_freight_sums_valuation_freight(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.CFR_LIKE)
        groups = apportioner.allocate_all('010', [make_totals(gross_weight=600.0)])
        regime = apportioner.rollup('010', groups)

        assert regime.freight_mad == 0.0
        assert regime.displayed_freight_mad == pytest.approx(600.0)

    def test_unknown_regime_label(self):
        apportioner = CostApportioner(RATIOS, AllocationMode.FOB_LIKE)
        regime = apportioner.rollup('999', [])
        assert regime.label == 'Régime Spécifique'
        assert regime.total_valuation_mad == 0
