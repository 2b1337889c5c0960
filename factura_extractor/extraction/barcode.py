"""
Barcode Extraction Module.

Recovers the long numeric payment code printed under the invoice barcode.
Length decides almost everything: a 40-60 digit interbank code (PMC /
Interbanking) always beats a shorter service code, whatever the context
says, because short codes cannot be used for electronic payment.

Candidate sources:
    - maximal digit runs of 15-60 digits
    - space-separated groups of 4-8 digits (5+ groups) glued back together,
      since OCR often breaks long codes apart
"""

import re
from typing import List, Optional

from factura_extractor.config import get_config
from factura_extractor.postprocessor.normalizers import NormalizedText
from factura_extractor.postprocessor.validators import validate_barcode
from factura_extractor.utils.helpers import preceding_context, strip_accents
from .candidates import BarcodeCandidate
from .providers import ProviderRecord
from .trace import DebugTrace

DIGIT_RUN = re.compile(r'(?<!\d)\d{15,60}(?!\d)')
DIGIT_GROUPS = re.compile(r'(?<!\d)\d{4,8}(?:[ \t]+\d{4,8}){4,}(?!\d)')

# (regex over accent-free lower-case context, points)
CONTEXT_KEYWORDS = (
    (r'\bcodigo|\bcod\b|\bcod\.', 30),
    (r'\bbarras?\b', 25),
    (r'\bpago\b|\bpagar\b', 20),
    (r'interbanking|\bpmc\b|pagomiscuentas|pago mis cuentas|link pagos|red link', 30),
)

NEGATIVE_CONTEXT = re.compile(
    r'\bcuenta\b|\bcliente\b|\bcbu\b|\bcuit\b|\bcuil\b|\bsocio\b|\bmedidor\b'
)
NEGATIVE_POINTS = -40
PROVIDER_POINTS = 10


class BarcodeExtractor:
    """
    Extracts, classifies and ranks barcode candidates.

    Example:
        >>> extractor = BarcodeExtractor()
        >>> view = TextNormalizer().normalize("Codigo de barras: " + "1" * 44)
        >>> found = extractor.extract(view, DebugTrace())
        >>> found[0].type, found[0].length
        ("interbank", 44)
    """

    def __init__(self) -> None:
        self.threshold = get_config("extraction.barcode.threshold", 30)
        self.context_window = get_config("extraction.barcode.context_window", 60)

    def extract(self, normalized: NormalizedText, trace: DebugTrace) -> List[BarcodeCandidate]:
        """Collect digit runs and regrouped digit blocks from the original text."""
        text = normalized.original
        candidates: List[BarcodeCandidate] = []

        for pattern, source in ((DIGIT_RUN, 'digit run'), (DIGIT_GROUPS, 'grouped digits')):
            for match in pattern.finditer(text):
                context = preceding_context(text, match.start(), self.context_window)
                validation = validate_barcode(match.group(0), context)
                if not validation.valid:
                    trace.log(
                        f"Barcode: dropped {source} of {validation.length} digits ({validation.reason})"
                    )
                    continue
                candidates.append(BarcodeCandidate(
                    raw=match.group(0),
                    value=validation.cleaned,
                    position=match.start(),
                    context=context,
                    relative_position=match.start() / max(len(text), 1),
                    length=validation.length,
                    type=validation.type,
                    priority=validation.priority,
                ))

        return candidates

    def score(
        self,
        candidates: List[BarcodeCandidate],
        provider: Optional[ProviderRecord] = None
    ) -> None:
        """
        Score candidates in place: tier priority plus context points.

        Args:
            candidates: Candidates from extract().
            provider: Detected provider; its patterns near a code add points.
        """
        for candidate in candidates:
            candidate.score = candidate.priority
            candidate.reasons = [f"{candidate.type} tier ({candidate.priority})"]
            candidate.context_score = 0
            context = ' '.join(strip_accents(candidate.context).split())

            for pattern, points in CONTEXT_KEYWORDS:
                if re.search(pattern, context):
                    candidate.add(points, pattern)
                    candidate.context_score += points

            if NEGATIVE_CONTEXT.search(context):
                candidate.add(NEGATIVE_POINTS, "account/id context")
                candidate.context_score += NEGATIVE_POINTS

            if provider and any(strip_accents(p) in context for p in provider.patterns):
                candidate.add(PROVIDER_POINTS, f"{provider.name} context")
                candidate.context_score += PROVIDER_POINTS

    def confidence(self, candidate: BarcodeCandidate) -> int:
        return int(max(0, min(100, round(candidate.score or 0))))
