"""
Invoice Extractor Module.

This module provides the InvoiceExtractor class, the heuristic engine that
turns one invoice text into an ExtractionResult.

Pipeline:
    normalize -> detect provider -> extract candidates (amount, due date,
    customer name, barcode) -> score -> select -> cross-validate -> assemble

The extractor holds only read-only configuration. Every parse() call
builds its own candidates, trace and result, so one instance can serve
concurrent callers.
"""

import time
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from factura_extractor.config import get_config
from factura_extractor.postprocessor.normalizers import NormalizedText, TextNormalizer
from factura_extractor.postprocessor.processor import CrossValidator
from factura_extractor.utils.exceptions import ExtractionError, InvalidInputError
from factura_extractor.utils.helpers import clamp_confidence
from factura_extractor.utils.logger import get_logger
from .amount import AmountExtractor
from .barcode import BarcodeExtractor
from .candidates import Candidate
from .customer import CustomerNameExtractor
from .dates import DueDateExtractor
from .extraction_result import ExtractionResult
from .providers import ProviderDetector, ProviderRecord
from .selector import Selection, deduplicate, select_best
from .trace import DebugTrace

logger = get_logger(__name__)


class InvoiceExtractor:
    """
    Heuristic invoice field extractor for Argentine utility bills.

    Attributes:
        normalizer: TextNormalizer instance
        provider_detector: ProviderDetector with the provider table
        amount_extractor: AmountExtractor instance
        date_extractor: DueDateExtractor instance
        name_extractor: CustomerNameExtractor instance
        barcode_extractor: BarcodeExtractor instance
        cross_validator: CrossValidator instance
        max_alternatives: Cap on runner-ups per field

    Example:
        >>> extractor = InvoiceExtractor()
        >>> result = extractor.parse(ocr_text)
        >>> print(result.amount, result.due_date)
        >>> print(result.confidence)
    """

    def __init__(
        self,
        providers: Optional[Sequence[ProviderRecord]] = None,
        max_alternatives: Optional[int] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            providers: Provider table, in match order. Defaults to the
                       table in settings.yaml.
            max_alternatives: Runner-ups kept per field (default 5).
        """
        self.normalizer = TextNormalizer()
        self.provider_detector = ProviderDetector(providers)
        self.amount_extractor = AmountExtractor()
        self.date_extractor = DueDateExtractor()
        self.name_extractor = CustomerNameExtractor()
        self.barcode_extractor = BarcodeExtractor()
        self.cross_validator = CrossValidator()
        self.max_alternatives = max_alternatives or get_config(
            "extraction.alternatives.max_entries", 5
        )

        logger.info(
            f"InvoiceExtractor initialized with {len(self.provider_detector.providers)} providers"
        )

    def parse(self, text: Any, reference_date: Optional[date] = None) -> ExtractionResult:
        """
        Extract all fields from one invoice text.

        Never raises for content problems: empty or non-string input gives a
        result with every field None and every confidence 0.

        Args:
            text: Raw OCR or PDF text.
            reference_date: Anchor for the due-date year window.
                            Defaults to today.

        Returns:
            ExtractionResult.
        """
        start_time = time.time()
        trace = DebugTrace()
        result = ExtractionResult()

        normalized = self.normalizer.normalize(text)
        if normalized.is_empty:
            trace.log("Empty or non-text input; nothing to extract")
            result.debug = trace.messages
            return result

        trace.log(f"Parsing {len(normalized.original)} characters, {len(normalized.lines)} lines")

        provider = self._detect_provider(normalized, result, trace)
        self._extract_customer_name(normalized, result, trace)
        self._extract_amount(normalized, result, trace)
        self._extract_due_date(normalized, result, trace, reference_date)
        self._extract_barcode(normalized, result, trace, provider)

        for name in ('amount', 'date', 'barcode', 'provider', 'customerName'):
            if result.fields[name] is not None:
                result.sources[name] = 'heuristic'

        result.debug = trace.messages
        self.cross_validator.process(result)

        logger.debug(
            f"Parsed invoice in {time.time() - start_time:.3f}s: "
            f"missing={result.missing_fields}"
        )
        return result

    def parse_strict(self, text: Any, reference_date: Optional[date] = None) -> ExtractionResult:
        """
        Like parse(), but rejects input that cannot be an invoice text.

        Missing fields are still reported in the result, not raised.

        Raises:
            InvalidInputError: If text is not a string.
            ExtractionError: If text is empty or whitespace only.
        """
        if not isinstance(text, str):
            raise InvalidInputError(type(text).__name__)
        if not text.strip():
            raise ExtractionError("Invoice text is empty", {"length": len(text)})
        return self.parse(text, reference_date=reference_date)

    # -------------------------------------------------------------------------
    # Field steps
    # -------------------------------------------------------------------------

    def _detect_provider(self, normalized: NormalizedText, result: ExtractionResult,
                         trace: DebugTrace) -> Optional[ProviderRecord]:
        match = self.provider_detector.detect(normalized)
        result.issuer_cuit = self.provider_detector.find_issuer_cuit(normalized.original)

        if match is None:
            trace.log("Provider: not identified")
            return None

        result.provider = match.provider.to_dict()
        result.confidence['provider'] = match.confidence
        trace.log(
            f"Provider: {match.provider.name} via '{match.pattern}' "
            f"(confidence {match.confidence})"
        )
        return match.provider

    def _extract_customer_name(self, normalized: NormalizedText, result: ExtractionResult,
                               trace: DebugTrace) -> None:
        candidate = self.name_extractor.extract(normalized, trace)
        if candidate:
            result.customer_name = candidate.value
            result.confidence['customerName'] = clamp_confidence(candidate.score)

    def _extract_amount(self, normalized: NormalizedText, result: ExtractionResult,
                        trace: DebugTrace) -> None:
        extractor = self.amount_extractor
        candidates = extractor.extract(normalized, trace)
        extractor.score(candidates)
        candidates = deduplicate(candidates)

        selection = select_best(candidates, extractor.threshold, self.max_alternatives)
        result.alternatives['amounts'] = self._alternatives(selection, extractor.confidence)

        if selection.selected is None:
            self._log_unselected('Amount', selection, extractor.threshold, trace)
            return

        chosen = selection.selected
        result.amount = chosen.value
        result.confidence['amount'] = extractor.confidence(chosen)
        trace.log(
            f"Amount: selected {chosen.value} [{chosen.tier}] score {chosen.score:g} "
            f"({', '.join(chosen.reasons)})"
        )

    def _extract_due_date(self, normalized: NormalizedText, result: ExtractionResult,
                          trace: DebugTrace, reference_date: Optional[date]) -> None:
        extractor = self.date_extractor
        candidates = extractor.extract(normalized, trace, reference_date)
        extractor.score(candidates)
        candidates = deduplicate(candidates)

        selection = select_best(candidates, extractor.threshold, self.max_alternatives)
        result.alternatives['dates'] = self._alternatives(selection, extractor.confidence)

        if selection.selected is None:
            self._log_unselected('Due date', selection, extractor.threshold, trace)
            return

        chosen = selection.selected
        result.due_date = chosen.value
        result.confidence['date'] = extractor.confidence(chosen)
        trace.log(
            f"Due date: selected {chosen.value} score {chosen.score:g} "
            f"({', '.join(chosen.reasons)})"
        )

    def _extract_barcode(self, normalized: NormalizedText, result: ExtractionResult,
                         trace: DebugTrace, provider: Optional[ProviderRecord]) -> None:
        extractor = self.barcode_extractor
        candidates = extractor.extract(normalized, trace)
        extractor.score(candidates, provider)
        candidates = deduplicate(candidates, score=lambda c: c.rank_key)

        selection = select_best(
            candidates,
            extractor.threshold,
            self.max_alternatives,
            rank=lambda c: c.rank_key
        )
        result.alternatives['barcodes'] = self._alternatives(selection, extractor.confidence)

        if selection.selected is None:
            self._log_unselected('Barcode', selection, extractor.threshold, trace)
            return

        chosen = selection.selected
        result.barcode = chosen.value
        result.confidence['barcode'] = extractor.confidence(chosen)
        trace.log(
            f"Barcode: selected {chosen.length} digits [{chosen.type}] "
            f"{chosen.value[:15]}... score {chosen.score:g}"
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _alternatives(selection: Selection, confidence) -> List[Dict[str, Any]]:
        alternatives = []
        for candidate in selection.alternatives:
            entry = candidate.to_dict()
            entry['confidence'] = confidence(candidate)
            alternatives.append(entry)
        return alternatives

    @staticmethod
    def _log_unselected(label: str, selection: Selection, threshold: float,
                        trace: DebugTrace) -> None:
        if not selection.ranked:
            trace.log(f"{label}: no candidates found")
            return
        top: Candidate = selection.ranked[0]
        trace.log(
            f"{label}: best candidate {top.value} scored {top.score:g}, "
            f"below threshold {threshold}; left empty"
        )


def parse_invoice(
    text: Any,
    reference_date: Optional[date] = None,
    strict: bool = False
) -> ExtractionResult:
    """
    Convenience function: parse one invoice text with a default extractor.

    Args:
        text: Raw invoice text.
        reference_date: Anchor for the due-date year window.
        strict: Raise for non-string or empty input instead of returning
                an empty result.

    Returns:
        ExtractionResult.
    """
    extractor = InvoiceExtractor()
    if strict:
        return extractor.parse_strict(text, reference_date=reference_date)
    return extractor.parse(text, reference_date=reference_date)
