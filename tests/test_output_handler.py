"""Tests for report formatting, JSON output and Excel export."""

import json

import pytest
from openpyxl import load_workbook

from src.output_handler import (
    ExcelExporter,
    OutputHandler,
    format_kg,
    format_mad_precision,
    format_mad_rounded,
    render_summary,
)
from src.output_handler.formatters import GROUP_SEPARATOR
from src.utils.exceptions import ExcelExportError, JsonExportError
from src.valuation.engine import compute_valuation

from tests.conftest import make_invoice, make_item


@pytest.fixture
def report(mixed_invoice):
    return compute_valuation(mixed_invoice, 10.0)


@pytest.fixture
def cfr_report():
    invoice = make_invoice(
        invoice_number='FAC/2026/014',
        items=[
            make_item(regime='023', hs_code='5209', description='Tissu denim', net_weight=800.0),
            make_item(regime='312', hs_code='4415', description='Palettes bois',
                      net_weight=None, total_price=500.0, packaging_boxes=10, packaging_pallets=2),
        ],
        incoterm='CFR',
        freight=120.0,
        subtotal=1500.0,
        total_gross_weight=870.0,
    )
    return compute_valuation(invoice, 10.0)


class TestFormatters:

    def test_precision(self):
        assert format_mad_precision(1234.5) == f"1{GROUP_SEPARATOR}234,50"
        assert format_mad_precision(0) == "0,00"
        assert format_mad_precision(1234567.891) == (
            f"1{GROUP_SEPARATOR}234{GROUP_SEPARATOR}567,89"
        )

    def test_rounded_half_up(self):
        assert format_mad_rounded(14460.5) == f"14{GROUP_SEPARATOR}461"
        assert format_mad_rounded(2.5) == "3"
        assert format_mad_rounded(999.4) == "999"

    def test_kg_drops_trailing_zeros(self):
        assert format_kg(70.0) == "70"
        assert format_kg(12.5) == "12,5"
        assert format_kg(1250.456) == f"1{GROUP_SEPARATOR}250,46"

    def test_negative_zero(self):
        assert format_mad_precision(-0.001) == "0,00"

    def test_summary(self, cfr_report):
        text = render_summary(cfr_report)

        assert 'FAC/2026/014' in text
        assert 'CFR (CFR_LIKE)' in text
        assert 'Régime 023 - ATPA sans paiement' in text
        assert "Régime 312 - AT d'emballages et contenants importés pleins" in text
        assert 'TOTAL VAD' in text
        assert format_mad_rounded(cfr_report.total_valuation_mad) in text

    def test_summary_shows_both_freight_figures(self, cfr_report):
        text = render_summary(cfr_report)
        regime_312 = cfr_report.regime('312')

        assert f"Fret affiché : {format_mad_precision(regime_312.displayed_freight_mad)} MAD" in text
        assert f"Fret valeur  : {format_mad_precision(0.0)} MAD" in text
        assert (
            f"Total fret valeur : {format_mad_rounded(cfr_report.total_freight_mad)} MAD" in text
        )


class TestJsonOutput:

    def test_to_json(self, tmp_path, report):
        path = OutputHandler().to_json(report, tmp_path / 'vad.json')

        with open(path, encoding='utf-8') as f:
            data = json.load(f)
        assert data['invoice_number'] == 'FAC-2026-001'
        assert data['total_valuation_mad'] == pytest.approx(report.total_valuation_mad)
        assert data['regimes'][1]['label'] == 'Mise à la consommation directe'

    def test_keeps_accents(self, tmp_path, report):
        path = OutputHandler().to_json(report, tmp_path / 'vad.json')
        assert 'Mise à la consommation' in (tmp_path / 'vad.json').read_text(encoding='utf-8')
        assert path.endswith('vad.json')

    def test_default_path_in_output_dir(self, tmp_path, cfr_report):
        handler = OutputHandler()
        handler.output_dir = tmp_path
        path = handler.to_json(cfr_report)

        assert path.startswith(str(tmp_path))
        assert 'rapport_vad_FAC_2026_014_' in path

    def test_unwritable_path(self, tmp_path, report):
        blocker = tmp_path / 'fichier'
        blocker.write_text('x', encoding='utf-8')
        with pytest.raises(JsonExportError):
            OutputHandler().to_json(report, blocker / 'vad.json')


class TestExcelExporter:

    def test_sheets(self, tmp_path, cfr_report):
        path = ExcelExporter().export(cfr_report, 'vad.xlsx', str(tmp_path))
        workbook = load_workbook(path)
        assert workbook.sheetnames == ['Synthese', 'Regimes', 'Codes SH']

    def test_summary_sheet(self, tmp_path, cfr_report):
        path = ExcelExporter().export(cfr_report, 'vad.xlsx', str(tmp_path))
        sheet = load_workbook(path)['Synthese']

        values = {
            sheet.cell(row=row, column=1).value: sheet.cell(row=row, column=2).value
            for row in range(2, sheet.max_row + 1)
        }
        assert values['Facture'] == 'FAC/2026/014'
        assert values['Incoterm'] == 'CFR'
        assert values['TOTAL VAD (MAD)'] == pytest.approx(cfr_report.total_valuation_mad)

    def test_regime_and_hs_rows(self, tmp_path, cfr_report):
        path = ExcelExporter().export(cfr_report, 'vad.xlsx', str(tmp_path))
        workbook = load_workbook(path)

        regimes = workbook['Regimes']
        assert regimes.max_row == 3
        assert regimes.cell(row=2, column=1).value == '023'
        assert regimes.cell(row=3, column=1).value == '312'
        assert regimes.cell(row=3, column=6).value == 0

        groups = workbook['Codes SH']
        assert groups.cell(row=3, column=2).value == '4415'
        assert groups.cell(row=3, column=6).value == pytest.approx(70.0)

    def test_control_characters_removed(self, tmp_path):
        invoice = make_invoice(
            invoice_number='FAC\x0c001',
            items=[make_item(hs_code='5209', description='Tissu\x0bdenim')],
        )
        report = compute_valuation(invoice, 10.0)

        path = ExcelExporter().export(report, 'vad.xlsx', str(tmp_path))
        workbook = load_workbook(path)

        assert workbook['Codes SH'].cell(row=2, column=3).value == 'Tissudenim'
        assert workbook['Synthese'].cell(row=2, column=2).value == 'FAC001'

    def test_unwritable_directory(self, tmp_path, cfr_report):
        blocker = tmp_path / 'fichier'
        blocker.write_text('x', encoding='utf-8')
        with pytest.raises(ExcelExportError):
            ExcelExporter().export(cfr_report, 'vad.xlsx', str(blocker / 'rapports'))

    def test_default_filename(self, tmp_path, cfr_report):
        path = ExcelExporter().export(cfr_report, output_dir=str(tmp_path))
        assert 'rapport_vad_FAC_2026_014_' in path
        assert path.endswith('.xlsx')


class TestOutputHandler:

    def test_save_all(self, tmp_path, report):
        handler = OutputHandler()
        handler.output_dir = tmp_path
        handler.excel_exporter.output_dir = tmp_path

        info = handler.save(report, json_path=tmp_path / 'vad.json', excel_filename='vad.xlsx')

        assert info['json_path'] == str(tmp_path / 'vad.json')
        assert info['excel_path'] == str(tmp_path / 'vad.xlsx')

    def test_disabled_outputs(self, tmp_path, report):
        handler = OutputHandler(json_enabled=False, excel_enabled=False)
        assert handler.save(report) == {'json_path': None, 'excel_path': None}

    def test_failed_output_does_not_stop_others(self, tmp_path, report):
        blocker = tmp_path / 'fichier'
        blocker.write_text('x', encoding='utf-8')
        handler = OutputHandler()
        handler.excel_exporter.output_dir = tmp_path

        info = handler.save(report, json_path=blocker / 'vad.json', excel_filename='vad.xlsx')

        assert info['json_path'] is None
        assert info['excel_path'] == str(tmp_path / 'vad.xlsx')
