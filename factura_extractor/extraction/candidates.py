"""
Candidate Data Classes.

A candidate is one possible value for a field, found by an extractor and
scored afterwards. Candidates live for a single parse() call.

Classes:
    Candidate: Shared fields (raw match, value, position, context, score)
    AmountCandidate: Amount in pesos (float)
    DateCandidate: ISO date string
    NameCandidate: Upper-case customer name
    BarcodeCandidate: Digits-only barcode with its priority tier
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Candidate:
    """
    One possible value for a field.

    Attributes:
        raw: Substring that matched
        value: Parsed value
        position: Character offset of the match in the scanned text
        context: Text around the match used for scoring
        score: Context score, None until scored
        relative_position: position / len(text), in [0, 1]
        reasons: Scoring notes, copied into the debug trace
    """
    raw: str
    value: Any
    position: int
    context: str = ""
    score: Optional[float] = None
    relative_position: float = 0.0
    reasons: List[str] = field(default_factory=list)

    def add(self, points: float, reason: str) -> None:
        """Add points to the score and remember why."""
        self.score = (self.score or 0) + points
        self.reasons.append(f"{reason} ({points:+g})")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'score': self.score,
            'raw': self.raw,
        }


@dataclass
class AmountCandidate(Candidate):
    """
    Amount candidate.

    Attributes:
        tier: Extraction rule family ("high", "mid", "currency", "fallback")
    """
    tier: str = "currency"

    @property
    def is_fallback(self) -> bool:
        return self.tier == "fallback"


@dataclass
class DateCandidate(Candidate):
    """Due-date candidate; value is an ISO date string."""
    pattern: str = "numeric"


@dataclass
class NameCandidate(Candidate):
    """
    Customer-name candidate.

    Attributes:
        strategy: Strategy that produced it ("label", "geographic", "shape")
    """
    strategy: str = "label"


@dataclass
class BarcodeCandidate(Candidate):
    """
    Barcode candidate.

    Attributes:
        length: Number of digits
        type: Priority tier name
        priority: Tier priority
        context_score: Points earned from surrounding keywords only
    """
    length: int = 0
    type: str = "numeric_code"
    priority: int = 0
    context_score: float = 0.0

    @property
    def rank_key(self):
        """Sort key: tier first, then length, then context."""
        return (self.priority, self.length, self.context_score)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'length': self.length, 'type': self.type})
        return data
