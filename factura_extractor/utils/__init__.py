"""
Utility Module for the Invoice Field Extraction Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Custom exceptions
    - Text and formatting helpers
"""

from .logger import setup_logger, get_logger
from .helpers import (
    strip_accents,
    digits_only,
    preceding_context,
    line_window,
    clamp_confidence,
    format_currency_ars,
    format_date_ar,
)

__all__ = [
    'setup_logger',
    'get_logger',
    'strip_accents',
    'digits_only',
    'preceding_context',
    'line_window',
    'clamp_confidence',
    'format_currency_ars',
    'format_date_ar',
]
