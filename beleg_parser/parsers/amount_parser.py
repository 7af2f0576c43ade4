"""Amount parsing with context scoring over European number formats."""

import re
import logging
from decimal import Decimal
from typing import Optional, List, Tuple, Pattern
from .base import BaseParser, ParseResult, DocumentContext
from .primitives import parse_decimal, is_plausible_amount
from .scoring import (
    AmountCandidate, ScoringContext, score_amount_candidate, rank_candidates
)
from ..locales import LocaleConfig, DE_AT

logger = logging.getLogger(__name__)

TOP_CANDIDATES_LOGGED = 5


class AmountParser(BaseParser):
    """Specialized parser for extracting the invoice total."""

    def __init__(self, locale: LocaleConfig = DE_AT):
        super().__init__(locale)

        symbols = "|".join(re.escape(s) for s in locale.currency_symbols)
        codes = "|".join(re.escape(c) for c in locale.currency_codes)
        dec = re.escape(locale.decimal_separator)
        thou = re.escape(locale.thousands_separator)
        # Not glued to another number on either side
        lead = r'(?<![\d.,])'
        tail = r'(?![.,]?\d)'

        # Families in priority order; later ones only run if earlier ones found nothing
        self.families: List[Tuple[str, Pattern, str, str]] = [
            (
                'comma_decimal',
                re.compile(
                    rf'(?:(?:{symbols})\s*)?{lead}((?:\d{{1,3}}(?:{thou}\d{{3}})+|\d+){dec}\d{{2}}){tail}'
                    rf'(?:\s*(?:{symbols}))?'
                ),
                locale.decimal_separator, locale.thousands_separator,
            ),
            (
                'dot_decimal',
                re.compile(rf'(?:(?:{symbols})\s*)?{lead}(\d+\.\d{{2}}){tail}(?:\s*(?:{symbols}))?'),
                '.', '',
            ),
            (
                'whole_currency',
                re.compile(
                    rf'(?:{symbols})\s*{lead}(\d{{1,3}}(?:{thou}\d{{3}})+|\d{{2,6}}){tail}'
                    rf'|{lead}(\d{{1,3}}(?:{thou}\d{{3}})+|\d{{2,6}}){tail}\s*(?:{symbols})'
                    rf'|\b(?:{codes})\s*{lead}(\d{{1,3}}(?:{thou}\d{{3}})+|\d{{2,6}}){tail}'
                    rf'|{lead}(\d{{1,3}}(?:{thou}\d{{3}})+|\d{{2,6}}){tail}\s*(?:{codes})\b',
                    re.IGNORECASE,
                ),
                locale.decimal_separator, locale.thousands_separator,
            ),
        ]

        # Last resort when no family yields a candidate
        self.fallback_pattern = re.compile(r'(\d{2,})[,.](\d{2})\b')

    def parse(self, context: DocumentContext) -> Optional[ParseResult]:
        """
        Extract the total amount from invoice text.

        Args:
            context: Document context with full text

        Returns:
            ParseResult with a Decimal amount in (0, 1,000,000), or None
        """
        if context.is_blank:
            return None

        candidates: List[AmountCandidate] = []
        for family, pattern, decimal_sep, thousands_sep in self.families:
            candidates = self._collect_candidates(context.full_text, family, pattern, decimal_sep, thousands_sep)
            if candidates:
                break

        if candidates:
            ranked = rank_candidates(candidates)
            self._log_candidates(ranked)
            best = ranked[0]
            result = ParseResult(
                value=best.value,
                confidence=min(0.95, max(0.05, best.score / 100.0)),
                source_text=best.matched_span.strip(),
                metadata={
                    'type': 'scored',
                    'family': best.family,
                    'score': round(best.score, 2),
                    'position': best.position,
                    'candidates': [
                        (str(c.value), round(c.score, 2), c.matched_span.strip())
                        for c in ranked[:TOP_CANDIDATES_LOGGED]
                    ],
                }
            )
            self._log_result(result, context)
            return result

        result = self._find_fallback_amount(context.full_text)
        self._log_result(result, context)
        return result

    def score_candidates(self, text: str) -> List[AmountCandidate]:
        """Return every candidate of the first productive family, best-first."""
        for family, pattern, decimal_sep, thousands_sep in self.families:
            candidates = self._collect_candidates(text, family, pattern, decimal_sep, thousands_sep)
            if candidates:
                return rank_candidates(candidates)
        return []

    def _collect_candidates(self, text: str, family: str, pattern: Pattern,
                            decimal_sep: str, thousands_sep: str) -> List[AmountCandidate]:
        """Match one pattern family and score every valid hit."""
        candidates = []

        for match in pattern.finditer(text):
            raw = next((group for group in match.groups() if group), None)
            if raw is None:
                continue

            value = parse_decimal(raw, decimal_sep, thousands_sep)
            if not is_plausible_amount(value):
                continue

            candidate = AmountCandidate(
                value=value,
                matched_span=match.group(),
                position=match.start(),
                family=family,
            )
            candidate.score = score_amount_candidate(
                candidate, ScoringContext.from_text(text, candidate, self.locale)
            )
            candidates.append(candidate)

        return candidates

    def _find_fallback_amount(self, text: str) -> Optional[ParseResult]:
        """Accept the first money-looking number, unscored."""
        match = self.fallback_pattern.search(text)
        if not match:
            return None

        value = Decimal(f"{match.group(1)}.{match.group(2)}")
        if not is_plausible_amount(value):
            self.logger.debug(f"Fallback amount {value} out of range")
            return None

        self.logger.info(f"Using fallback amount: {value}")
        return ParseResult(
            value=value,
            confidence=0.2,
            source_text=match.group(),
            metadata={'type': 'fallback', 'position': match.start()}
        )

    def _log_candidates(self, ranked: List[AmountCandidate]):
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        for candidate in ranked[:TOP_CANDIDATES_LOGGED]:
            self.logger.debug(
                f"Amount candidate {candidate.value} (score: {candidate.score:.0f}, "
                f"family: {candidate.family}, match: {candidate.matched_span.strip()!r})"
            )
