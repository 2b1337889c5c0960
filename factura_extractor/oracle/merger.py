"""
Oracle Merge Module.

Merges an oracle answer over a heuristic ExtractionResult, field by field.
An oracle value wins whenever it is present and can be normalized; the
field then reports the fixed oracle confidence. Otherwise the heuristic
value and its own confidence are kept. One output can mix both sources.
"""

import copy
import math
import re
from typing import Any, Dict, Optional

from factura_extractor.config import get_config
from factura_extractor.extraction.extraction_result import ExtractionResult
from factura_extractor.extraction.providers import ProviderDetector
from factura_extractor.postprocessor.normalizers import DateNormalizer, parse_locale_number
from factura_extractor.utils.helpers import digits_only
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)

_date_normalizer = DateNormalizer()

# Oracle answers are machine-written: "15420.5" is a decimal, not a thousands group
_MACHINE_NUMBER = re.compile(r"^\d+\.\d{1,2}$")


def _normalize_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str) and _MACHINE_NUMBER.match(value.strip()):
        amount = float(value.strip())
    else:
        amount = parse_locale_number(value)
    if math.isnan(amount) or amount <= 0:
        return None
    return round(amount, 2)


def _normalize_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = ' '.join(value.split())
    return cleaned or None


def _normalize_name(value: Any) -> Optional[str]:
    cleaned = _normalize_text(value)
    return cleaned.upper() if cleaned else None


def _normalize_barcode(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    return digits_only(str(value)) or None


class OracleMerger:
    """
    Per-field merge of oracle answers into heuristic results.

    Attributes:
        confidence: Confidence reported for oracle-sourced fields
        provider_detector: Maps free-form provider names onto the table

    Example:
        >>> merger = OracleMerger()
        >>> merged = merger.merge(result, {"amount": "32.644,98"})
        >>> merged.amount, merged.sources["amount"]
        (32644.98, "oracle")
    """

    def __init__(
        self,
        confidence: Optional[int] = None,
        provider_detector: Optional[ProviderDetector] = None
    ) -> None:
        self.confidence = confidence if confidence is not None else get_config(
            "oracle.confidence", 95
        )
        self.provider_detector = provider_detector or ProviderDetector()

        # result attribute, confidence key, oracle key, normalizer
        self.fields = (
            ('amount', 'amount', 'amount', _normalize_amount),
            ('due_date', 'date', 'dueDate', _date_normalizer.normalize),
            ('barcode', 'barcode', 'barcode', _normalize_barcode),
            ('provider', 'provider', 'provider', self._normalize_provider),
            ('customer_name', 'customerName', 'customerName', _normalize_name),
        )

    def _normalize_provider(self, value: Any) -> Optional[Dict[str, Any]]:
        if isinstance(value, dict):
            value = value.get('name') or value.get('id')
        name = _normalize_text(value)
        if not name:
            return None
        record = self.provider_detector.find_by_name(name)
        if record:
            return record.to_dict()
        return {'id': None, 'name': name, 'type': None}

    def merge(self, heuristic: ExtractionResult,
              oracle: Optional[Dict[str, Any]]) -> ExtractionResult:
        """
        Merge an oracle answer over a heuristic result.

        The heuristic result is not modified.

        Args:
            heuristic: Result from InvoiceExtractor.parse().
            oracle: Oracle field mapping, or None when unavailable.

        Returns:
            New ExtractionResult.
        """
        merged = copy.deepcopy(heuristic)
        if not oracle:
            return merged

        taken = []
        for attribute, confidence_key, oracle_key, normalize in self.fields:
            raw = oracle.get(oracle_key)
            value = normalize(raw) if raw not in (None, "") else None
            if value is None:
                if raw not in (None, ""):
                    merged.log(f"Oracle: ignored unusable {oracle_key} {raw!r}")
                continue
            setattr(merged, attribute, value)
            merged.confidence[confidence_key] = self.confidence
            merged.sources[confidence_key] = 'oracle'
            taken.append(oracle_key)

        merged.log(
            f"Oracle: merged {', '.join(taken) if taken else 'no fields'} "
            f"(confidence {self.confidence})"
        )
        logger.debug(f"Oracle fields taken: {taken}")
        return merged


def merge_oracle_result(
    heuristic: ExtractionResult,
    oracle: Optional[Dict[str, Any]],
    confidence: Optional[int] = None
) -> ExtractionResult:
    """
    Convenience function: merge with a default OracleMerger.

    Args:
        heuristic: Heuristic ExtractionResult.
        oracle: Oracle field mapping, or None.
        confidence: Confidence for oracle-sourced fields (default 95).

    Returns:
        Merged ExtractionResult.
    """
    return OracleMerger(confidence=confidence).merge(heuristic, oracle)
