"""Tests for configuration loading, logging setup and error types."""

import logging
from pathlib import Path

import pytest

from config import ConfigurationManager, get_config
from src.utils.exceptions import (
    CustomsValuationError,
    ExcelExportError,
    InputError,
    InvoiceFormatError,
    OutputError,
)
from src.utils.helpers import safe_filename
from src.utils.logger import ROOT_LOGGER_NAME, ColoredFormatter, get_logger, setup_logger


class TestConfigurationManager:

    def test_singleton(self):
        assert ConfigurationManager() is ConfigurationManager()

    def test_dot_notation(self):
        assert get_config("valuation.handling_total_mad") == 2300
        assert get_config("valuation.insurance_rate") == 0.005
        assert get_config("input.default_incoterm") == "FOB"

    def test_default_for_missing_key(self):
        assert get_config("valuation.missing", 42) == 42
        assert get_config("valuation.insurance_rate.deeper", "x") == "x"

    def test_paths_resolved_against_project_root(self):
        output_dir = Path(get_config("paths.output_dir"))
        assert output_dir.is_absolute()
        assert output_dir.name == "outputs"

    def test_custom_file(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("valuation:\n  insurance_rate: 0.01\n", encoding="utf-8")

        config = ConfigurationManager(str(settings))
        assert config.get("valuation.insurance_rate") == 0.01
        assert config.get("valuation.handling_total_mad") is None

    def test_empty_file(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("", encoding="utf-8")
        assert ConfigurationManager(str(settings)).get_all() == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "absent.yaml"))

    def test_reset(self):
        first = ConfigurationManager()
        ConfigurationManager.reset()
        assert ConfigurationManager() is not first


class TestLogger:

    def test_namespaced(self):
        assert get_logger("src.valuation.engine").name == f"{ROOT_LOGGER_NAME}.src.valuation.engine"
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME

    def test_setup_replaces_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "vad.log"
        setup_logger(level="DEBUG")
        logger = setup_logger(level="WARNING", log_file=str(log_file), colorize=False)

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        logger.warning("fret manquant")
        for handler in logger.handlers:
            handler.flush()
        assert "fret manquant" in log_file.read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_colored_formatter(self):
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "erreur", None, None)
        output = ColoredFormatter("%(message)s").format(record)
        assert "erreur" in output
        assert output != "erreur"


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(InvoiceFormatError, InputError)
        assert issubclass(InputError, CustomsValuationError)
        assert issubclass(ExcelExportError, OutputError)

    def test_details_in_message(self):
        error = InvoiceFormatError("items", "Invoice has no line items")
        assert error.details == {"field": "items", "reason": "Invoice has no line items"}
        assert "items" in str(error)


class TestHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("FAC/2026:014.xlsx", "FAC_2026_014.xlsx"),
        ("  ", "unnamed"),
        ("rapport", "rapport"),
    ])
    def test_safe_filename(self, name, expected):
        assert safe_filename(name) == expected
