"""
Helper Utilities Module.

This module provides small text and formatting helpers shared by the
extractors. Functions here are pure and reusable across modules.

Functions:
    - strip_accents: Remove diacritics for keyword matching
    - digits_only: Keep only the digits of a string
    - preceding_context: Label text that precedes a match
    - line_window: Same-line window around a match
    - clamp_confidence: Clamp a raw score into the 0-100 range
    - format_currency_ars: Render an amount the Argentine way
    - format_date_ar: Render an ISO date as DD/MM/YYYY
"""

import re
import unicodedata
from typing import Optional, Union

_LETTER_RE = re.compile(r'[^\W\d_]')


def strip_accents(text: str) -> str:
    """
    Remove diacritics so "emisión" and "emision" compare equal.

    Args:
        text: Input text.

    Returns:
        Text without combining marks. "ñ" becomes "n".

    Example:
        >>> strip_accents("Emisión")
        "Emision"
    """
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def digits_only(text: Optional[str]) -> str:
    """
    Keep only the digit characters of a string.

    Example:
        >>> digits_only("0123 4567-89")
        "0123456789"
    """
    if not text:
        return ""
    return re.sub(r'\D', '', str(text))


def _line_bounds(text: str, index: int):
    start = text.rfind('\n', 0, index) + 1
    end = text.find('\n', index)
    if end == -1:
        end = len(text)
    return start, end


def preceding_context(text: str, index: int, max_chars: int = 50) -> str:
    """
    Return the label text that precedes position ``index``.

    The window stays on the match's own line. When that part of the line has
    no letters (e.g. only "$ "), the label is assumed to sit on the previous
    line, which is then included. Both pieces are capped at ``max_chars``.

    Args:
        text: Full text being scanned.
        index: Character offset of the match.
        max_chars: Maximum number of characters per line piece.

    Returns:
        Lower-cased context string.

    Example:
        >>> preceding_context("Vencimiento: 25/01/2025", 13)
        "vencimiento: "
    """
    line_start, _ = _line_bounds(text, index)
    context = text[max(line_start, index - max_chars):index]

    if not _LETTER_RE.search(context) and line_start > 0:
        prev_start, _ = _line_bounds(text, line_start - 1)
        previous = text[max(prev_start, line_start - 1 - max_chars):line_start - 1]
        context = f"{previous}\n{context}"

    return context.lower()


def line_window(text: str, start: int, end: int, radius: int = 50) -> str:
    """
    Return up to ``radius`` characters on each side of a match,
    clipped to the line that contains it.

    Args:
        text: Full text being scanned.
        start: Match start offset.
        end: Match end offset.
        radius: Characters to include before and after.

    Returns:
        Lower-cased window including the match itself.
    """
    line_start, line_end = _line_bounds(text, start)
    return text[max(line_start, start - radius):min(line_end, end + radius)].lower()


def clamp_confidence(score: Union[int, float], low: int = 0, high: int = 100) -> int:
    """Clamp a raw score into an integer confidence."""
    return int(max(low, min(high, round(score))))


def format_currency_ars(amount: Optional[float]) -> Optional[str]:
    """
    Format an amount with Argentine separators.

    Args:
        amount: Numeric amount or None.

    Returns:
        Formatted string or None.

    Example:
        >>> format_currency_ars(15420.5)
        "$ 15.420,50"
    """
    if amount is None:
        return None
    formatted = f"{amount:,.2f}"
    formatted = formatted.replace(',', '_').replace('.', ',').replace('_', '.')
    return f"$ {formatted}"


def format_date_ar(iso_date: Optional[str]) -> Optional[str]:
    """
    Convert an ISO date (YYYY-MM-DD) into DD/MM/YYYY.

    Example:
        >>> format_date_ar("2025-01-25")
        "25/01/2025"
    """
    if not iso_date:
        return None
    parts = iso_date.split('-')
    if len(parts) != 3:
        return None
    return '/'.join(reversed(parts))
