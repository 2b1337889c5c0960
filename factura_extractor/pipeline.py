"""
Invoice Processing Pipeline.

Entry point that ties the heuristic engine to the optional oracle:

    text -> InvoiceExtractor.parse() -> query_oracles() -> OracleMerger.merge()

Usage:
    from factura_extractor import process_invoice_text
    result = process_invoice_text(text)
    print(result.to_json(include_formatted=True))
"""

from datetime import date
from typing import Any, Optional

from factura_extractor.config import get_config
from factura_extractor.extraction import ExtractionResult, InvoiceExtractor
from factura_extractor.oracle import OracleMerger, query_oracles
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)

_default_extractor: Optional[InvoiceExtractor] = None


def get_extractor() -> InvoiceExtractor:
    """Shared default extractor; it holds only read-only tables."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = InvoiceExtractor()
    return _default_extractor


def process_invoice_text(
    text: Any,
    oracle: Any = None,
    use_oracle: Optional[bool] = None,
    reference_date: Optional[date] = None,
    extractor: Optional[InvoiceExtractor] = None
) -> ExtractionResult:
    """
    Extract invoice fields, merging an oracle answer when one is available.

    Never raises for bad input or oracle failure: the worst case is the
    heuristic result, and for unusable text an all-empty result.

    Args:
        text: Raw OCR or PDF text.
        oracle: Object with ``extract(text)`` or a callable returning a
                field mapping, or a list of them tried in order until
                one answers. Optional.
        use_oracle: Force the oracle on or off. Defaults to
                    ``oracle.enabled`` in settings.yaml.
        reference_date: Anchor for the due-date year window.
        extractor: Engine instance. Defaults to a shared one.

    Returns:
        ExtractionResult with ``sources`` telling where each field came from.
    """
    extractor = extractor or get_extractor()
    result = extractor.parse(text, reference_date=reference_date)

    if use_oracle is None:
        use_oracle = get_config("oracle.enabled", True)

    if not use_oracle or oracle is None or not isinstance(text, str) or not text.strip():
        return result

    oracles = list(oracle) if isinstance(oracle, (list, tuple)) else [oracle]
    answer = query_oracles(oracles, text)
    if answer is None:
        result.log("Oracle: unavailable, heuristic result kept")
        return result

    return OracleMerger(provider_detector=extractor.provider_detector).merge(result, answer)
