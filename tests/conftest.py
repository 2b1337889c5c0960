"""Shared fixtures for the extraction engine tests."""

from datetime import date

import pytest

from factura_extractor.config import ConfigurationManager
from factura_extractor.extraction import DebugTrace, InvoiceExtractor
from factura_extractor.postprocessor import TextNormalizer

EDENOR_INVOICE = (
    "EDENOR\n"
    "Titular: Juan Perez\n"
    "TOTAL A PAGAR: $ 15.420,50\n"
    "Vencimiento: 25/01/2025\n"
    "Código de barras: 01234567890123456789012345678901234567890123\n"
)


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the packaged settings.yaml."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def reference_date():
    return date(2025, 1, 1)


@pytest.fixture
def normalize():
    return TextNormalizer().normalize


@pytest.fixture
def trace():
    return DebugTrace()


@pytest.fixture
def extractor():
    return InvoiceExtractor()


@pytest.fixture
def edenor_invoice():
    return EDENOR_INVOICE
