"""
Candidate Selection Module.

Collapses duplicate candidates, ranks them and picks the winner for a
field when it clears the field's acceptance threshold. Runner-ups are kept
as alternatives so callers can offer them for manual correction.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from .candidates import Candidate


@dataclass
class Selection:
    """
    Outcome of select_best().

    Attributes:
        selected: Winning candidate, or None if nothing cleared the threshold
        alternatives: Ranked runner-ups (capped)
        ranked: Every deduplicated candidate in rank order
    """
    selected: Optional[Candidate] = None
    alternatives: List[Candidate] = field(default_factory=list)
    ranked: List[Candidate] = field(default_factory=list)


def deduplicate(
    candidates: Iterable[Candidate],
    key: Callable[[Candidate], Any] = lambda c: c.value,
    score: Callable[[Candidate], Any] = lambda c: c.score or 0
) -> List[Candidate]:
    """
    Collapse candidates with equal values.

    The highest-scored duplicate wins; on a tie the first one seen is kept.
    Order of first appearance is preserved.
    """
    best = {}
    order = []
    for candidate in candidates:
        k = key(candidate)
        if k not in best:
            best[k] = candidate
            order.append(k)
        elif score(candidate) > score(best[k]):
            best[k] = candidate
    return [best[k] for k in order]


def select_best(
    candidates: Iterable[Candidate],
    threshold: float,
    max_alternatives: int = 5,
    rank: Optional[Callable[[Candidate], Any]] = None,
    accept: Optional[Callable[[Candidate], float]] = None
) -> Selection:
    """
    Rank candidates and pick the best one above ``threshold``.

    Args:
        candidates: Scored, deduplicated candidates.
        threshold: Minimum acceptance score.
        max_alternatives: Cap on runner-ups returned.
        rank: Sort key, highest first. Defaults to the score; ties keep
              document order.
        accept: Value compared with the threshold. Defaults to the score.

    Returns:
        Selection.
    """
    rank = rank or (lambda c: c.score or 0)
    accept = accept or (lambda c: c.score or 0)

    ranked = sorted(candidates, key=rank, reverse=True)
    if not ranked:
        return Selection()

    top = ranked[0]
    if accept(top) >= threshold:
        return Selection(
            selected=top,
            alternatives=ranked[1:1 + max_alternatives],
            ranked=ranked
        )

    return Selection(
        selected=None,
        alternatives=ranked[:max_alternatives],
        ranked=ranked
    )
