"""
Invoice Field Extraction Engine - Source Package.

This package turns raw OCR/PDF text of Argentine utility invoices into
structured fields (total amount, due date, payment barcode, provider and
customer name), each with a confidence and ranked alternatives.

Modules:
    - config: YAML configuration
    - postprocessor: Normalization, validation and cross-validation
    - extraction: Heuristic candidate extraction, scoring and selection
    - oracle: Optional external extractor merge
    - utils: Logging, exceptions and helpers

Architecture:
    Text -> Normalize -> Extract -> Score -> Select -> Cross-validate
                                                          |
                                               Oracle merge (optional)
"""

__version__ = "1.0.0"

from factura_extractor.extraction import ExtractionResult, InvoiceExtractor, parse_invoice
from factura_extractor.oracle import merge_oracle_result
from factura_extractor.pipeline import process_invoice_text

__all__ = [
    'ExtractionResult',
    'InvoiceExtractor',
    'parse_invoice',
    'merge_oracle_result',
    'process_invoice_text',
]
