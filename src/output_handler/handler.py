"""
Main Output Handler Module.

This module provides the unified OutputHandler class that coordinates
all report outputs (JSON and Excel).

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from src.utils.logger import get_logger
from src.utils.helpers import ensure_directory, generate_timestamp, safe_filename
from src.utils.exceptions import JsonExportError, OutputError
from src.valuation.models import ValuationReport
from .excel_exporter import ExcelExporter

logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for valuation reports.

    Writes the report as JSON and as an Excel workbook. Each output can
    be enabled or disabled in configuration or per instance.

    Attributes:
        json_enabled: Whether JSON output is enabled
        excel_enabled: Whether Excel export is enabled
        excel_exporter: ExcelExporter instance

    Example:
        >>> handler = OutputHandler()
        >>> handler.save(report)  # Saves to both JSON and Excel
        >>>
        >>> # Or save to specific outputs
        >>> handler.to_json(report, "rapport.json")
        >>> handler.to_excel(report, "rapport.xlsx")
    """

    def __init__(
        self,
        json_enabled: Optional[bool] = None,
        excel_enabled: Optional[bool] = None
    ) -> None:
        """
        Initialize the output handler.

        Args:
            json_enabled: Override config for JSON output.
            excel_enabled: Override config for Excel output.
        """
        self.json_enabled = json_enabled if json_enabled is not None else \
            get_config("output.json.enabled", True)
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", True)
        self.json_indent = int(get_config("output.json.indent", 2))
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))

        self._excel_exporter = None

        logger.info(
            f"OutputHandler initialized "
            f"(json={self.json_enabled}, excel={self.excel_enabled})"
        )

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    def save(
        self,
        report: ValuationReport,
        json_path: Optional[Union[str, Path]] = None,
        excel_filename: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Save a report to all enabled outputs.

        A failing output is logged and does not prevent the others.

        Args:
            report: Report to save.
            json_path: Custom JSON path (optional).
            excel_filename: Custom Excel filename (optional).

        Returns:
            Dictionary with output details:
            {
                'json_path': 'path/to/report.json',
                'excel_path': 'path/to/report.xlsx'
            }
        """
        output_info = {
            'json_path': None,
            'excel_path': None
        }

        if self.json_enabled:
            try:
                output_info['json_path'] = self.to_json(report, json_path)
            except OutputError as e:
                logger.error(f"JSON export failed: {e}")

        if self.excel_enabled:
            try:
                output_info['excel_path'] = self.to_excel(report, excel_filename)
            except OutputError as e:
                logger.error(f"Excel export failed: {e}")

        return output_info

    def to_json(
        self,
        report: ValuationReport,
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Write a report as UTF-8 JSON.

        Args:
            report: Report to write.
            filepath: Output path. If None, generated in the output directory.

        Returns:
            Path to the written file.

        Raises:
            JsonExportError: If the file cannot be written.
        """
        if filepath is None:
            invoice = safe_filename(report.invoice_number or "facture")
            filepath = self.output_dir / f"rapport_vad_{invoice}_{generate_timestamp()}.json"

        filepath = Path(filepath)

        try:
            ensure_directory(filepath.parent)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(report.to_json(indent=self.json_indent))
        except OSError as e:
            raise JsonExportError(str(filepath), str(e))

        logger.info(f"JSON report saved: {filepath}")
        return str(filepath)

    def to_excel(
        self,
        report: ValuationReport,
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export a report to an Excel file.

        Args:
            report: Report to export.
            filename: Output filename.
            output_dir: Output directory.

        Returns:
            Path to created Excel file.
        """
        return self.excel_exporter.export(report, filename, output_dir)
