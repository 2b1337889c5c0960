import logging

import pytest

from factura_extractor.config import ConfigurationManager, get_config
from factura_extractor.utils.exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvoiceExtractionError,
    OracleError,
    OracleUnavailableError,
)
from factura_extractor.utils.helpers import (
    format_currency_ars,
    format_date_ar,
    line_window,
    preceding_context,
    strip_accents,
)
from factura_extractor.utils.logger import ColoredFormatter, get_logger, setup_logger


class TestConfiguration:

    def test_packaged_settings(self):
        assert get_config("extraction.amount.threshold") == 40
        assert get_config("extraction.barcode.threshold") == 30
        assert get_config("cross_validation.amount_windows") == [[19, 8], [20, 8], [32, 8]]
        assert get_config("oracle.confidence") == 95

    def test_missing_key_default(self):
        assert get_config("extraction.nothing.here", "fallback") == "fallback"

    def test_singleton(self):
        assert ConfigurationManager() is ConfigurationManager()

    def test_custom_file(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("extraction:\n  amount:\n    threshold: 55\n", encoding="utf-8")
        ConfigurationManager(str(settings))
        assert get_config("extraction.amount.threshold") == 55

    def test_custom_threshold_reaches_extractor(self, tmp_path):
        from factura_extractor.extraction.amount import AmountExtractor
        settings = tmp_path / "settings.yaml"
        settings.write_text("extraction:\n  amount:\n    threshold: 55\n", encoding="utf-8")
        ConfigurationManager(str(settings))
        assert AmountExtractor().threshold == 55
        assert AmountExtractor().latter_half_bonus == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("extraction: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationManager(str(settings))
        assert "reason" in exc_info.value.details


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, InvoiceExtractionError)
        assert issubclass(InvalidInputError, InvoiceExtractionError)
        assert issubclass(OracleUnavailableError, OracleError)

    def test_details_in_message(self):
        error = OracleUnavailableError("groq", "timeout")
        assert error.details == {"backend": "groq", "reason": "timeout"}
        assert "groq" in str(error)


class TestHelpers:

    def test_strip_accents(self):
        assert strip_accents("Emisión Año") == "Emision Ano"

    def test_preceding_context_same_line(self):
        text = "Vencimiento: 25/01/2025"
        assert preceding_context(text, 13) == "vencimiento: "

    def test_preceding_context_previous_line(self):
        text = "Total a pagar\n$ 1.234,56"
        assert preceding_context(text, text.index("1.234")) == "total a pagar\n$ "

    def test_line_window_stays_on_line(self):
        text = "CUIT 30-11111111-1\nTotal $ 1.234,56\nDNI"
        start = text.index("1.234")
        assert line_window(text, start, start + 8) == "total $ 1.234,56"

    @pytest.mark.parametrize("amount, formatted", [
        (15420.5, "$ 15.420,50"),
        (1234567.891, "$ 1.234.567,89"),
        (10, "$ 10,00"),
        (None, None),
    ])
    def test_format_currency_ars(self, amount, formatted):
        assert format_currency_ars(amount) == formatted

    def test_format_date_ar(self):
        assert format_date_ar("2025-01-25") == "25/01/2025"
        assert format_date_ar(None) is None
        assert format_date_ar("25/01/2025") is None


class TestLogger:

    def test_namespaced(self):
        assert get_logger("tests.module").name == "factura_extractor.tests.module"
        assert get_logger("factura_extractor.extraction").name == "factura_extractor.extraction"

    def test_setup_logger(self, tmp_path):
        log_file = tmp_path / "logs" / "extractor.log"
        logger = setup_logger(level="DEBUG", log_file=str(log_file))
        try:
            assert logger.level == logging.DEBUG
            assert isinstance(logger.handlers[0].formatter, ColoredFormatter)
            assert log_file.exists()
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
