"""
Amount Extraction Module.

Finds the total to pay. Extraction rules are declarative
``(name, pattern, tier)`` tuples applied cumulatively over the original
text; the scoring tables below are plain data so each rule can be tested
on its own.

Tiers:
    high      "total a pagar", "importe a pagar", ... followed by a number
    mid       "total", "importe", "monto", ... followed by a number
    currency  any "$"-prefixed number
    fallback  any two-decimal number, only when no keyword-anchored match
              produced a candidate
"""

import re
from typing import List, NamedTuple, Optional, Pattern, Tuple

from factura_extractor.config import get_config
from factura_extractor.postprocessor.normalizers import AmountNormalizer, NormalizedText
from factura_extractor.utils.helpers import line_window, preceding_context, strip_accents
from .candidates import AmountCandidate
from .trace import DebugTrace

# Number with exactly two decimals, grouped ("15.420,50") or plain ("1234,56")
NUMBER_2DEC = r'(?<![\d.,])(?P<number>\d{1,3}(?:[.,]\d{3})+[.,]\d{2}|\d+[.,]\d{2})(?![\d]|[.,]\d)'

# Short label-to-number gap: no digits, no line break
GAP = r'[^\d\n]{0,20}?'

HIGH_LABELS = (
    r'total\s+a\s+pagar', r'importe\s+a\s+pagar', r'monto\s+a\s+pagar',
    r'saldo\s+a\s+pagar', r'debe\s+abonar', r'total\s+factura',
    r'total\s+de\s+la\s+factura', r'importe\s+total', r'monto\s+total',
    r'total\s+vencimiento', r'total\s+liquidaci[oó]n',
)

MID_LABELS = (r'total', r'importe', r'monto', r'saldo', r'pagar', r'vencimiento')


class AmountRule(NamedTuple):
    name: str
    pattern: Pattern
    tier: str


AMOUNT_RULES: Tuple[AmountRule, ...] = (
    AmountRule(
        'high_priority_label',
        re.compile(r'(?:' + '|'.join(HIGH_LABELS) + r')' + GAP + NUMBER_2DEC, re.IGNORECASE),
        'high'
    ),
    AmountRule(
        'generic_label',
        re.compile(r'\b(?:' + '|'.join(MID_LABELS) + r')' + GAP + NUMBER_2DEC, re.IGNORECASE),
        'mid'
    ),
    AmountRule(
        'currency_symbol',
        re.compile(r'\$\s*' + NUMBER_2DEC),
        'currency'
    ),
)

FALLBACK_RULE = AmountRule('largest_number', re.compile(NUMBER_2DEC), 'fallback')

ANCHORED_TIERS = ('high', 'mid')

# (regex over accent-free lower-case context, points)
HIGH_KEYWORDS = (
    (r'total a pagar', 100),
    (r'importe a pagar', 100),
    (r'monto a pagar', 95),
    (r'saldo a pagar', 95),
    (r'debe abonar', 95),
    (r'importe total', 95),
    (r'monto total', 95),
    (r'total (?:de la )?factura', 95),
    (r'total vencimiento', 95),
    (r'total liquidacion', 95),
)

GENERIC_KEYWORDS = (
    (r'\btotal\b', 70),
    (r'\bimporte\b', 55),
    (r'\bmonto\b', 50),
    (r'\bpagar\b', 45),
    (r'\babonar\b', 45),
    (r'\bsaldo\b', 35),
    (r'\bvencimiento\b', 35),
)

NEGATIVE_KEYWORDS = (
    (r'sub\s?total', -70),
    (r'\biva\b', -60),
    (r'\bdescuento', -50),
    (r'\bbonificaci', -50),
    (r'saldo anterior', -90),
    (r'deuda anterior', -90),
    (r'periodo anterior', -60),
    (r'\bimpuesto', -40),
    (r'\bpercepci', -50),
    (r'\bcuenta\b', -70),
    (r'\bcliente\b', -70),
    (r'\bkwh\b', -60),
    (r'\bm3\b', -60),
    (r'\bconsumo\b', -40),
)

# Same-line markers meaning "this number is an id, not money"
REJECTION_MARKERS = re.compile(
    r'\bcuit\b|\bcuil\b|\bdni\b|\btel\b|\btel\.|\btelefono|\bcelular|\bwhatsapp|\bcbu\b'
    r'|\bn(?:ro|um|o|[°º])?\.?\s*(?:de\s+)?(?:cuenta|cliente|socio)\b'
    r'|\b(?:cuenta|cliente|socio)\s*n(?:ro|um|o|[°º])'
)


def _flatten(context: str) -> str:
    return ' '.join(strip_accents(context).split())


def _best(patterns, context: str, pick=max) -> Optional[Tuple[str, int]]:
    hits = [(p, points) for p, points in patterns if re.search(p, context)]
    if not hits:
        return None
    return pick(hits, key=lambda hit: hit[1])


class AmountExtractor:
    """
    Extracts and scores amount candidates.

    Example:
        >>> extractor = AmountExtractor()
        >>> view = TextNormalizer().normalize("TOTAL A PAGAR: $ 15.420,50")
        >>> candidates = extractor.extract(view, DebugTrace())
        >>> extractor.score(candidates)
        >>> candidates[0].value
        15420.5
    """

    BASE_SCORE = 50

    def __init__(self, normalizer: Optional[AmountNormalizer] = None) -> None:
        self.normalizer = normalizer or AmountNormalizer()
        self.threshold = get_config("extraction.amount.threshold", 40)
        self.typical_range = tuple(get_config("extraction.amount.typical_range", [1000, 50000]))
        self.typical_range_bonus = get_config("extraction.amount.typical_range_bonus", 15)
        self.latter_half_bonus = get_config("extraction.amount.latter_half_bonus", 10)
        self.round_value_limit = get_config("extraction.amount.round_value_limit", 5000)
        self.round_value_penalty = get_config("extraction.amount.round_value_penalty", 15)
        self.fallback_largest_bonus = get_config("extraction.amount.fallback_largest_bonus", 10)
        self.fallback_confidence = tuple(get_config("extraction.amount.fallback_confidence", [40, 50]))
        self.rejection_window = get_config("extraction.amount.rejection_window", 50)

    # -------------------------------------------------------------------------
    # Extraction
    # -------------------------------------------------------------------------

    def extract(self, normalized: NormalizedText, trace: DebugTrace) -> List[AmountCandidate]:
        """
        Run every rule over the original text.

        Returns:
            Unscored candidates in discovery order (duplicates included).
        """
        text = normalized.original
        candidates: List[AmountCandidate] = []

        for rule in AMOUNT_RULES:
            for match in rule.pattern.finditer(text):
                candidate = self._build(text, match, rule, trace)
                if candidate:
                    candidates.append(candidate)

        if not any(self._is_anchored(c) for c in candidates):
            trace.log("Amount: no keyword-anchored match, scanning for the largest number")
            for match in FALLBACK_RULE.pattern.finditer(text):
                candidate = self._build(text, match, FALLBACK_RULE, trace)
                if candidate:
                    candidates.append(candidate)

        return candidates

    @staticmethod
    def _is_anchored(candidate: AmountCandidate) -> bool:
        """Label-rule match, or a currency match with a keyword in its context."""
        if candidate.tier in ANCHORED_TIERS:
            return True
        context = _flatten(candidate.context)
        return _best(HIGH_KEYWORDS + GENERIC_KEYWORDS, context) is not None

    def _build(self, text, match, rule: AmountRule, trace: DebugTrace) -> Optional[AmountCandidate]:
        raw = match.group('number')
        start, end = match.start('number'), match.end('number')

        value = self.normalizer.to_float(raw)
        if value is None:
            trace.log(f"Amount: dropped unparseable '{raw}'")
            return None
        if not self.normalizer.in_range(value):
            trace.log(f"Amount: dropped {value} (outside plausible range)")
            return None

        window = strip_accents(line_window(text, start, end, self.rejection_window))
        marker = REJECTION_MARKERS.search(window)
        if marker:
            trace.log(f"Amount: rejected {value} near '{marker.group(0).strip()}'")
            return None

        return AmountCandidate(
            raw=raw,
            value=value,
            position=start,
            context=preceding_context(text, start, 60),
            relative_position=start / max(len(text), 1),
            tier=rule.tier,
        )

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def score(self, candidates: List[AmountCandidate]) -> None:
        """Assign a score to every candidate in place."""
        fallback_values = [c.value for c in candidates if c.is_fallback]
        largest_fallback = max(fallback_values) if fallback_values else None

        for candidate in candidates:
            candidate.score = self.BASE_SCORE
            candidate.reasons = [f"base ({self.BASE_SCORE})"]
            context = _flatten(candidate.context)

            high = _best(HIGH_KEYWORDS, context)
            if high:
                candidate.add(high[1], f"'{high[0]}'")
            else:
                generic = _best(GENERIC_KEYWORDS, context)
                if generic:
                    candidate.add(generic[1], f"'{generic[0]}'")

            negative = _best(NEGATIVE_KEYWORDS, context, pick=min)
            if negative:
                candidate.add(negative[1], f"'{negative[0]}'")

            low, high_limit = self.typical_range
            if low <= candidate.value <= high_limit:
                candidate.add(self.typical_range_bonus, "typical bill range")

            if candidate.relative_position >= 0.5:
                candidate.add(self.latter_half_bonus, "latter half")

            if candidate.value < self.round_value_limit and candidate.value % 100 == 0:
                candidate.add(-self.round_value_penalty, "round value")

            if candidate.is_fallback and candidate.value == largest_fallback:
                candidate.add(self.fallback_largest_bonus, "largest number")

    def confidence(self, candidate: AmountCandidate) -> int:
        """Report fallback-only picks inside the low-confidence band."""
        score = candidate.score or 0
        if candidate.is_fallback:
            low, high = self.fallback_confidence
            return int(max(low, min(high, round(score))))
        return int(max(0, min(100, round(score))))
