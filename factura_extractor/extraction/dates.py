"""
Due-Date Extraction Module.

Finds every date in the invoice, keeps those inside the rolling validity
window and scores them by the label that precedes them. Camuzzi prints the
real payable-until date as "¿Hasta cuándo puedo pagar?", which outranks the
nominal "vencimiento" printed elsewhere on the same bill.
"""

import re
from datetime import date
from typing import List, NamedTuple, Optional, Pattern, Tuple

from factura_extractor.config import get_config
from factura_extractor.postprocessor.normalizers import DateNormalizer, NormalizedText
from factura_extractor.postprocessor.validators import DateValidator
from factura_extractor.utils.helpers import preceding_context, strip_accents
from .candidates import DateCandidate
from .trace import DebugTrace


class DateRule(NamedTuple):
    name: str
    pattern: Pattern


DATE_RULES: Tuple[DateRule, ...] = (
    DateRule(
        'numeric',
        re.compile(
            r'(?<!\d)(?P<day>\d{1,2})(?P<sep>[/\-])(?P<month>\d{1,2})(?P=sep)'
            r'(?P<year>\d{4}|\d{2})(?!\d)'
        )
    ),
    DateRule(
        'dotted',
        re.compile(
            r'(?<![\d.,])(?P<day>\d{1,2})\.(?P<month>\d{1,2})\.(?P<year>\d{4})(?![\d]|[.,]\d)'
        )
    ),
    DateRule(
        'long_form',
        re.compile(
            r'(?<!\d)(?P<day>\d{1,2})\s+de\s+(?P<month_name>[a-záéíóú]+)\s+'
            r'(?:de\s+|del\s+)?(?P<year>\d{4})(?!\d)',
            re.IGNORECASE
        )
    ),
    DateRule(
        'iso',
        re.compile(r'(?<!\d)(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})(?!\d)')
    ),
)

# Regexes run over accent-free, lower-case label text
PAY_UNTIL_KEYWORDS = (r'pago hasta', r'pagar hasta', r'hasta cuando', r'abonar hasta')
DUE_KEYWORDS = (r'vencimiento', r'\bvto\b', r'\bvence', r'\bvenc\b')
NEXT_KEYWORDS = (r'proximo',)
ISSUE_KEYWORDS = (r'emision', r'fecha de factura', r'\bemitid[oa]')
PERIOD_KEYWORDS = (r'periodo', r'lectura', r'\bdesde\b')

PAY_UNTIL_BONUS = 150
DUE_BONUS = 100
NEXT_BONUS = 80
ISSUE_PENALTY = -90
PERIOD_PENALTY = -40


def _any(patterns, text: str) -> bool:
    return any(re.search(p, text) for p in patterns)


class DueDateExtractor:
    """
    Extracts and scores due-date candidates.

    Example:
        >>> extractor = DueDateExtractor()
        >>> view = TextNormalizer().normalize("Vencimiento: 25/01/2025")
        >>> found = extractor.extract(view, DebugTrace(), reference=date(2025, 1, 1))
        >>> found[0].value
        "2025-01-25"
    """

    BASE_SCORE = 50

    def __init__(
        self,
        normalizer: Optional[DateNormalizer] = None,
        validator: Optional[DateValidator] = None
    ) -> None:
        self.normalizer = normalizer or DateNormalizer()
        self.validator = validator or DateValidator()
        self.threshold = get_config("extraction.dates.threshold", 40)
        self.context_window = get_config("extraction.dates.context_window", 50)
        self.first_half_bonus = get_config("extraction.dates.first_half_bonus", 10)

    def extract(
        self,
        normalized: NormalizedText,
        trace: DebugTrace,
        reference: Optional[date] = None
    ) -> List[DateCandidate]:
        """
        Find valid dates in the original text.

        Args:
            normalized: Text views.
            trace: Debug trace.
            reference: Anchor of the year window (defaults to today).

        Returns:
            Unscored candidates.
        """
        text = normalized.original
        candidates: List[DateCandidate] = []

        for rule in DATE_RULES:
            for match in rule.pattern.finditer(text):
                candidate = self._build(text, match, rule, trace, reference)
                if candidate:
                    candidates.append(candidate)

        return candidates

    def _build(self, text, match, rule: DateRule, trace, reference) -> Optional[DateCandidate]:
        raw = match.group(0)
        day = int(match.group('day'))
        year = int(match.group('year'))

        if 'month_name' in match.groupdict():
            month = self.normalizer.month_number(match.group('month_name'))
            if month is None:
                trace.log(f"Date: '{raw}' has no recognizable month")
                return None
        else:
            month = int(match.group('month'))

        if not (1 <= day <= 31 and 1 <= month <= 12):
            trace.log(f"Date: dropped '{raw}' (day/month out of range)")
            return None

        built = self.normalizer.build_date(day, month, year)
        valid, reason = self.validator.validate(built, reference)
        if not valid:
            trace.log(f"Date: dropped '{raw}' ({reason})")
            return None

        return DateCandidate(
            raw=raw,
            value=built.strftime(DateNormalizer.OUTPUT_FORMAT),
            position=match.start(),
            context=preceding_context(text, match.start(), self.context_window),
            relative_position=match.start() / max(len(text), 1),
            pattern=rule.name,
        )

    def score(self, candidates: List[DateCandidate]) -> None:
        """Assign a score to every candidate in place."""
        for candidate in candidates:
            candidate.score = self.BASE_SCORE
            candidate.reasons = [f"base ({self.BASE_SCORE})"]
            context = ' '.join(strip_accents(candidate.context).split())

            if _any(PAY_UNTIL_KEYWORDS, context):
                candidate.add(PAY_UNTIL_BONUS, "pay-until label")
            elif _any(NEXT_KEYWORDS, context):
                candidate.add(NEXT_BONUS, "next-period label")
            elif _any(DUE_KEYWORDS, context):
                candidate.add(DUE_BONUS, "due-date label")

            if _any(ISSUE_KEYWORDS, context):
                candidate.add(ISSUE_PENALTY, "issue-date label")
            elif _any(PERIOD_KEYWORDS, context):
                candidate.add(PERIOD_PENALTY, "billing-period label")

            if candidate.relative_position < 0.5:
                candidate.add(self.first_half_bonus, "first half")

    def confidence(self, candidate: DateCandidate) -> int:
        return int(max(0, min(100, round(candidate.score or 0))))
