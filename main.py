#!/usr/bin/env python3
"""
Customs Valuation (VAD) Engine - Main Entry Point.

Computes the "Valeur à Déclarer" of an extracted commercial invoice for
a Moroccan customs declaration: FOB, freight, insurance and handling in
MAD, per customs regime and HS code.

Usage:
    Command Line:
        python main.py --input extraction.json --rate 10.85
        python main.py --input extraction.json --output ./rapports/ --json vad.json

    Python:
        from main import run_valuation
        report = run_valuation("extraction.json", rate=10.85)

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from src.utils.logger import ROOT_LOGGER_NAME, setup_logger_from_config, get_logger
from src.utils.exceptions import CustomsValuationError


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; defaults to ``sys.argv[1:]``.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Customs Valuation (VAD) Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Value an invoice at a given EUR/MAD rate:
        python main.py --input extraction.json --rate 10.85

    Choose where reports are written:
        python main.py --input extraction.json --output rapports/vad.xlsx --json rapports/vad.json
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Extracted invoice JSON file"
    )

    parser.add_argument(
        "--rate", "-r",
        type=str,
        default=None,
        help="Exchange rate, invoice currency -> MAD (default: configured fallback)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory, or .xlsx file for the Excel report (default: outputs/)"
    )

    parser.add_argument(
        "--json",
        type=str,
        default=None,
        help="Path of the JSON report (default: generated in the output directory)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--no-excel",
        action="store_true",
        help="Disable Excel output"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress the console summary"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the valuation system with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)

    logger.info("=" * 60)
    logger.info("CUSTOMS VALUATION (VAD) ENGINE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_valuation(
    input_path: str,
    rate: Optional[str] = None,
    output_path: Optional[str] = None,
    config_path: Optional[str] = None,
    enable_excel: bool = True,
    json_path: Optional[str] = None,
    quiet: bool = True
):
    """
    Run the valuation pipeline on one extracted invoice.

    Loads the invoice, checks it, computes the report, writes the
    enabled outputs and optionally prints the summary.

    Args:
        input_path: Extracted invoice JSON file.
        rate: Exchange rate as entered; None uses the configured fallback.
        output_path: Output directory, or an .xlsx path for the Excel report.
        config_path: Optional custom configuration file path.
        enable_excel: Whether to generate Excel output.
        json_path: Explicit path for the JSON report.
        quiet: Do not print the text summary.

    Returns:
        The computed ValuationReport.

    Raises:
        CustomsValuationError: If the invoice or the rate cannot be used.

    Example:
        >>> report = run_valuation("extraction.json", rate="10.85")
        >>> report.total_valuation_mad
        14460.5
    """
    logger = get_logger(__name__)

    ConfigurationManager(config_path)

    from src.input_handler import InvoiceLoader, resolve_exchange_rate
    from src.postprocessor import InvoiceValidator
    from src.valuation import ValuationEngine, find_additivity_discrepancies
    from src.output_handler import OutputHandler, render_summary

    invoice = InvoiceLoader().load(input_path)
    exchange_rate = resolve_exchange_rate(rate)

    validation = InvoiceValidator().validate(invoice)
    if not validation.is_valid:
        logger.warning(
            f"Invoice {invoice.invoice_number} has {len(validation.errors)} "
            f"validation errors; the VAD may be wrong"
        )

    report = ValuationEngine().run(invoice, exchange_rate)

    for problem in find_additivity_discrepancies(report):
        logger.error(problem)

    output_handler = OutputHandler(excel_enabled=enable_excel)

    excel_filename = None
    if output_path:
        output_p = Path(output_path)
        if output_p.suffix.lower() == '.xlsx':
            excel_filename = output_p.name
            output_handler.output_dir = output_p.parent
        else:
            output_handler.output_dir = output_p
        output_handler.excel_exporter.output_dir = output_handler.output_dir

    output_info = output_handler.save(
        report,
        json_path=json_path,
        excel_filename=excel_filename
    )

    if output_info.get('json_path'):
        logger.info(f"JSON output: {output_info['json_path']}")
    if output_info.get('excel_path'):
        logger.info(f"Excel output: {output_info['excel_path']}")

    if not quiet:
        print(render_summary(report))

    return report


def main(argv: Optional[list] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)

        initialize_system(args)
        logger = get_logger(__name__)

        report = run_valuation(
            input_path=args.input,
            rate=args.rate,
            output_path=args.output,
            config_path=args.config,
            enable_excel=not args.no_excel,
            json_path=args.json,
            quiet=args.quiet
        )

        logger.info("=" * 60)
        logger.info(f"Valuation complete: {report!r}")
        logger.info("=" * 60)

        return 0

    except CustomsValuationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
