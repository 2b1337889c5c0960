"""
Heuristic Extraction Module for Argentine Utility Invoices.

This module turns raw OCR/PDF text into structured invoice fields using
regex candidate generation, context scoring and threshold selection.

Features:
    - Provider detection from an ordered keyword table
    - Total amount, due date, customer name and payment barcode extraction
    - Per-field confidence and ranked alternatives
    - Ordered debug trace of every decision

Fields:
    - amount (float, pesos)
    - dueDate (YYYY-MM-DD)
    - barcode (digits only)
    - provider ({id, name, type})
    - customerName (upper case)
"""

from .extractor import InvoiceExtractor, parse_invoice
from .extraction_result import ExtractionResult, FIELD_NAMES
from .providers import (
    ProviderRecord,
    ProviderMatch,
    ProviderDetector,
    DEFAULT_PROVIDERS,
    load_providers,
)
from .selector import Selection, deduplicate, select_best
from .trace import DebugTrace

__all__ = [
    'InvoiceExtractor',
    'parse_invoice',
    'ExtractionResult',
    'FIELD_NAMES',
    'ProviderRecord',
    'ProviderMatch',
    'ProviderDetector',
    'DEFAULT_PROVIDERS',
    'load_providers',
    'Selection',
    'deduplicate',
    'select_best',
    'DebugTrace',
]
