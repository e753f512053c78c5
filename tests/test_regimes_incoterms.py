"""Tests for regime labels, Incoterm modes and valuation parameters."""

import pytest

from config import ConfigurationManager
from src.valuation.incoterms import (
    AllocationMode,
    is_known_incoterm,
    normalize_incoterm,
    resolve_allocation_mode,
)
from src.valuation.parameters import DEFAULT_PARAMETERS, ValuationParameters
from src.valuation.regimes import (
    DEFAULT_REGIME_LABEL,
    REGIME_LABELS,
    build_regime_labels,
    resolve_regime_label,
)


class TestRegimeLabels:

    @pytest.mark.parametrize("code,label", [
        ("010", "Mise à la consommation directe"),
        ("023", "ATPA sans paiement"),
        ("312", "AT d'emballages et contenants importés pleins"),
        ("311", "AT d'emballages et contenants importés vides"),
        ("022", "ATPA avec paiement"),
        ("040", "MAC en suite d'ATPA"),
    ])
    def test_known_codes(self, code, label):
        assert resolve_regime_label(code) == label

    def test_unknown_code(self):
        assert resolve_regime_label("999") == DEFAULT_REGIME_LABEL == "Régime Spécifique"

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            REGIME_LABELS["999"] = "Autre"

    def test_overrides_extend_table(self):
        labels = build_regime_labels({"300": "Entrepôt de stockage", "023": "ATPA"})

        assert resolve_regime_label("300", labels) == "Entrepôt de stockage"
        assert resolve_regime_label("023", labels) == "ATPA"
        assert resolve_regime_label("010", labels) == REGIME_LABELS["010"]
        assert "300" not in REGIME_LABELS

    def test_no_overrides_returns_base_table(self):
        assert build_regime_labels(None) is REGIME_LABELS
        assert build_regime_labels({}) is REGIME_LABELS


class TestIncoterms:

    @pytest.mark.parametrize("incoterm,mode", [
        ("CFR", AllocationMode.CFR_LIKE),
        ("C&F", AllocationMode.CFR_LIKE),
        ("cnf", AllocationMode.CFR_LIKE),
        ("CIF", AllocationMode.CIF_LIKE),
        ("FOB", AllocationMode.FOB_LIKE),
        ("EXW", AllocationMode.FOB_LIKE),
        ("DDP", AllocationMode.FOB_LIKE),
        ("", AllocationMode.FOB_LIKE),
        (None, AllocationMode.FOB_LIKE),
        ("CFR Casablanca", AllocationMode.FOB_LIKE),
    ])
    def test_resolve(self, incoterm, mode):
        assert resolve_allocation_mode(incoterm) is mode

    def test_only_cfr_concentrates_freight(self):
        assert AllocationMode.CFR_LIKE.concentrates_freight
        assert not AllocationMode.CIF_LIKE.concentrates_freight
        assert not AllocationMode.FOB_LIKE.concentrates_freight

    def test_normalize(self):
        assert normalize_incoterm("  cif ") == "CIF"
        assert normalize_incoterm(None) == ""

    def test_known(self):
        assert is_known_incoterm("fca")
        assert not is_known_incoterm("Franco")


class TestValuationParameters:

    def test_defaults(self):
        assert DEFAULT_PARAMETERS.handling_total_mad == 2300.0
        assert DEFAULT_PARAMETERS.insurance_rate == 0.005
        assert DEFAULT_PARAMETERS.box_weight_kg == 2.0
        assert DEFAULT_PARAMETERS.pallet_weight_kg == 25.0
        assert DEFAULT_PARAMETERS.fallback_hs_code == "UNKNOWN"

    def test_from_config_matches_defaults(self):
        assert ValuationParameters.from_config() == DEFAULT_PARAMETERS

    def test_from_custom_config(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text(
            "valuation:\n"
            "  handling_total_mad: 3000\n"
            "  regime_labels:\n"
            "    '300': Entrepôt de stockage\n",
            encoding="utf-8",
        )
        ConfigurationManager(str(settings))

        params = ValuationParameters.from_config()
        assert params.handling_total_mad == 3000.0
        assert params.insurance_rate == 0.005
        assert params.regime_labels["300"] == "Entrepôt de stockage"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_PARAMETERS.insurance_rate = 0.01
