"""
Scoring functions for amount candidates.

Scores are additive and unbounded; the highest-scoring candidate is
selected as the final amount.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from ..locales import LocaleConfig

__all__ = [
    'AmountCandidate', 'ScoringContext',
    'score_amount_candidate', 'rank_candidates', 'select_best_candidate',
]

# Context window around a match, in characters
WINDOW_BEFORE = 150
WINDOW_AFTER = 80
# A currency symbol this close to the number counts as attached to it
SYMBOL_REACH = 10

TOTAL_KEYWORD_BONUS = 50.0
CURRENCY_SYMBOL_BONUS = 25.0
CURRENCY_CODE_BONUS = 15.0
MAX_POSITION_BONUS = 15.0
BELOW_ONE_PENALTY = 20.0
BELOW_FIVE_PENALTY = 10.0
MAX_MAGNITUDE_BONUS = 8.0


@dataclass
class AmountCandidate:
    """A number found in the text that might be the invoice total."""
    value: Decimal
    matched_span: str
    position: int
    family: str = "comma_decimal"
    score: float = 0.0


@dataclass
class ScoringContext:
    """Text surrounding a candidate, cut out once so scoring stays pure."""
    window: str
    lead_in: str
    trail: str
    relative_position: float
    total_keywords: Sequence[str]
    currency_symbols: Sequence[str]
    currency_codes: Sequence[str]

    @classmethod
    def from_text(cls, text: str, candidate: AmountCandidate, locale: LocaleConfig) -> "ScoringContext":
        """Cut the scoring windows for ``candidate`` out of ``text``."""
        start = candidate.position
        end = start + len(candidate.matched_span)
        return cls(
            window=text[max(0, start - WINDOW_BEFORE):min(len(text), end + WINDOW_AFTER)].lower(),
            lead_in=text[max(0, start - SYMBOL_REACH):start],
            trail=text[end:end + SYMBOL_REACH],
            relative_position=start / max(len(text), 1),
            total_keywords=locale.total_keywords,
            currency_symbols=locale.currency_symbols,
            currency_codes=locale.currency_codes,
        )

    def has_total_keyword(self) -> bool:
        return any(keyword in self.window for keyword in self.total_keywords)

    def has_currency_code(self) -> bool:
        return any(re.search(rf'\b{re.escape(code)}\b', self.window) for code in self.currency_codes)

    def symbol_near(self, matched_span: str) -> bool:
        nearby = f"{self.lead_in}{matched_span}{self.trail}"
        return any(symbol in nearby for symbol in self.currency_symbols)


def score_amount_candidate(candidate: AmountCandidate, context: ScoringContext) -> float:
    """
    Score an amount candidate from its surrounding text.

    Scoring factors:
    - +50 if a total keyword appears in the window (counted once)
    - +25 if a currency symbol is attached to the number
    - +15 if a currency code appears in the window
    - up to +15 for appearing late in the document
    - -20 below 1 unit, -10 below 5 units
    - up to +8 for magnitude (capped at 800 units)

    Args:
        candidate: AmountCandidate to score
        context: Pre-cut context windows for the candidate

    Returns:
        Score, higher is better
    """
    score = 0.0

    if context.has_total_keyword():
        score += TOTAL_KEYWORD_BONUS

    if context.symbol_near(candidate.matched_span):
        score += CURRENCY_SYMBOL_BONUS

    if context.has_currency_code():
        score += CURRENCY_CODE_BONUS

    score += context.relative_position * MAX_POSITION_BONUS

    value = float(candidate.value)
    if value < 1:
        score -= BELOW_ONE_PENALTY
    elif value < 5:
        score -= BELOW_FIVE_PENALTY

    score += min(value / 100.0, MAX_MAGNITUDE_BONUS)

    return score


def _ranking_key(candidate: AmountCandidate) -> Tuple[float, Decimal, int]:
    # Higher score, then larger amount, then earlier position
    return (candidate.score, candidate.value, -candidate.position)


def rank_candidates(candidates: List[AmountCandidate]) -> List[AmountCandidate]:
    """Return candidates best-first."""
    return sorted(candidates, key=_ranking_key, reverse=True)


def select_best_candidate(candidates: List[AmountCandidate]) -> Optional[AmountCandidate]:
    """Pick the winning candidate, or None for an empty list."""
    if not candidates:
        return None
    return max(candidates, key=_ranking_key)
