"""
Excel Exporter Module.

This module writes valuation reports to Excel using openpyxl, in the
layout declarants paste from when filing the DUM.

Sheets:
    - Synthese: invoice header, exchange rate and report totals
    - Regimes: one row per customs regime
    - Codes SH: one row per HS group, under its regime

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import ensure_directory, generate_timestamp, safe_filename
from src.utils.exceptions import ExcelExportError
from src.valuation.models import ValuationReport

logger = get_logger(__name__)

MAD_FORMAT = '#,##0.00'
KG_FORMAT = '#,##0.##'
RATE_FORMAT = '0.0000'


class ExcelExporter:
    """
    Exports valuation reports to Excel format.

    Attributes:
        output_dir: Directory for output files

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(report)
        >>> print(f"Saved to: {filepath}")
    """

    REGIME_COLUMNS = [
        ('Régime', 'regime'),
        ('Libellé', 'label'),
        ('Poids brut (kg)', 'gross_weight'),
        ('FOB (MAD)', 'fob_mad'),
        ('Fret affiché (MAD)', 'displayed_freight_mad'),
        ('Fret valeur (MAD)', 'freight_mad'),
        ('Assurance (MAD)', 'insurance_mad'),
        ('Aconage (MAD)', 'handling_mad'),
        ('VAD (MAD)', 'total_valuation_mad'),
    ]

    HS_COLUMNS = [
        ('Régime', None),
        ('Code SH', 'hs_code'),
        ('Désignation', 'description'),
        ('Articles', 'item_count'),
        ('Poids net (kg)', 'net_weight'),
        ('Poids brut (kg)', 'gross_weight'),
        ('FOB (MAD)', 'fob_mad'),
        ('Fret affiché (MAD)', 'freight_mad'),
        ('Fret valeur (MAD)', 'freight_for_valuation_mad'),
        ('Assurance (MAD)', 'insurance_mad'),
        ('Aconage (MAD)', 'handling_mad'),
        ('VAD (MAD)', 'total_valuation_mad'),
    ]

    WEIGHT_FIELDS = {'gross_weight', 'net_weight'}
    TEXT_FIELDS = {'regime', 'label', 'hs_code', 'description', 'item_count', None}

    def __init__(self) -> None:
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        report: ValuationReport,
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export a valuation report to an Excel file.

        Args:
            report: Report to export.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If export fails.
        """
        out_dir = Path(output_dir) if output_dir else self.output_dir

        if filename is None:
            filename = self.get_default_filename(report)

        filepath = out_dir / filename

        try:
            ensure_directory(out_dir)
            workbook = openpyxl.Workbook()

            self._create_summary_sheet(workbook, report)
            self._create_regime_sheet(workbook, report)
            self._create_hs_sheet(workbook, report)

            workbook.save(filepath)
        except (OSError, ValueError, TypeError, IllegalCharacterError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

        logger.info(f"Excel file saved: {filepath} ({len(report.regimes)} regimes)")
        return str(filepath)

    def _write_header(self, sheet, headers: Sequence[str], color: str) -> None:
        fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        for col, header_name in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = self.header_font
            cell.fill = fill
            cell.alignment = self.header_alignment
            cell.border = self.thin_border

    @staticmethod
    def _clean(value: Any) -> Any:
        # Extracted text may carry control characters openpyxl refuses
        if isinstance(value, str):
            return ILLEGAL_CHARACTERS_RE.sub('', value)
        return value

    def _write_cell(self, sheet, row: int, col: int, field_name: Optional[str], value: Any):
        cell = sheet.cell(row=row, column=col, value=self._clean(value))
        cell.border = self.thin_border
        if field_name in self.WEIGHT_FIELDS:
            cell.number_format = KG_FORMAT
        elif field_name not in self.TEXT_FIELDS:
            cell.number_format = MAD_FORMAT
        return cell

    def _autosize(self, sheet, widths: List[int]) -> None:
        for col, width in enumerate(widths, 1):
            sheet.column_dimensions[get_column_letter(col)].width = min(width + 2, 50)

    def _create_summary_sheet(self, workbook, report: ValuationReport) -> None:
        """Key/value sheet with the invoice header and the report totals."""
        sheet = workbook.active
        sheet.title = "Synthese"

        rows: List[Tuple[str, Any, Optional[str]]] = [
            ('Facture', report.invoice_number, None),
            ('Devise', report.currency, None),
            ('Taux de change (MAD)', report.exchange_rate, RATE_FORMAT),
            ('Incoterm', report.incoterm, None),
            ('Mode de répartition', report.allocation_mode, None),
            ('Poids brut total (kg)', report.total_gross_weight, KG_FORMAT),
            ('Total FOB (MAD)', report.total_fob_mad, MAD_FORMAT),
            ('Total fret (MAD)', report.total_freight_mad, MAD_FORMAT),
            ('Total assurance (MAD)', report.total_insurance_mad, MAD_FORMAT),
            ('Total aconage (MAD)', report.total_handling_mad, MAD_FORMAT),
            ('TOTAL VAD (MAD)', report.total_valuation_mad, MAD_FORMAT),
        ]

        self._write_header(sheet, ['Rubrique', 'Valeur'], "4472C4")

        for row_num, (label, value, number_format) in enumerate(rows, 2):
            sheet.cell(row=row_num, column=1, value=label).border = self.thin_border
            cell = sheet.cell(row=row_num, column=2, value=self._clean(value))
            cell.border = self.thin_border
            if number_format:
                cell.number_format = number_format

        # Last row is the VAD total
        for col in (1, 2):
            sheet.cell(row=len(rows) + 1, column=col).font = Font(bold=True)

        self._autosize(sheet, [max(len(label) for label, _, _ in rows), 20])
        sheet.freeze_panes = 'A2'

    def _create_regime_sheet(self, workbook, report: ValuationReport) -> None:
        sheet = workbook.create_sheet(title="Regimes")
        headers = [name for name, _ in self.REGIME_COLUMNS]
        self._write_header(sheet, headers, "548235")

        for row_num, regime in enumerate(report.regimes, 2):
            for col, (_, field_name) in enumerate(self.REGIME_COLUMNS, 1):
                self._write_cell(sheet, row_num, col, field_name, getattr(regime, field_name))

        widths = [len(header) for header in headers]
        widths[1] = max([widths[1]] + [len(regime.label) for regime in report.regimes])
        self._autosize(sheet, widths)
        sheet.freeze_panes = 'A2'

    def _create_hs_sheet(self, workbook, report: ValuationReport) -> None:
        """One row per HS group; the regime code is repeated on each row."""
        sheet = workbook.create_sheet(title="Codes SH")
        headers = [name for name, _ in self.HS_COLUMNS]
        self._write_header(sheet, headers, "C65911")

        row_num = 2
        for regime in report.regimes:
            for group in regime.hs_groups:
                for col, (_, field_name) in enumerate(self.HS_COLUMNS, 1):
                    value = regime.regime if field_name is None else getattr(group, field_name)
                    self._write_cell(sheet, row_num, col, field_name, value)
                row_num += 1

        widths = [len(header) for header in headers]
        descriptions = [
            len(group.description)
            for regime in report.regimes
            for group in regime.hs_groups
        ]
        widths[2] = max([widths[2]] + descriptions)
        self._autosize(sheet, widths)
        sheet.freeze_panes = 'A2'

    def get_default_filename(self, report: ValuationReport) -> str:
        """
        Generate a default filename from the invoice number and a timestamp.

        Returns:
            Default filename string.
        """
        timestamp = generate_timestamp()
        pattern = get_config(
            "output.excel.filename_pattern",
            "rapport_vad_{invoice}_{timestamp}.xlsx"
        )
        invoice = safe_filename(report.invoice_number or "facture")
        return pattern.format(invoice=invoice, timestamp=timestamp)
