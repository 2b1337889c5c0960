"""
Normalization, Validation and Post-Processing Module.

This module provides functionality for:
    - Text normalization and locale-ambiguous number parsing
    - Date normalization, including Spanish long-form dates
    - Due-date, barcode and customer-name validation
    - Barcode/amount cross-validation
"""

from .normalizers import (
    NormalizedText,
    TextNormalizer,
    AmountNormalizer,
    DateNormalizer,
    parse_locale_number,
)
from .validators import (
    DateValidator,
    NameValidator,
    BarcodeValidation,
    validate_barcode,
    classify_barcode_length,
    BARCODE_TIERS,
)
from .processor import CrossValidator

__all__ = [
    'NormalizedText',
    'TextNormalizer',
    'AmountNormalizer',
    'DateNormalizer',
    'parse_locale_number',
    'DateValidator',
    'NameValidator',
    'BarcodeValidation',
    'validate_barcode',
    'classify_barcode_length',
    'BARCODE_TIERS',
    'CrossValidator',
]
