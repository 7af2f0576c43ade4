"""Date parsing anchored on invoice-date keywords."""

import re
import logging
from typing import Optional, List, Tuple, Pattern
from datetime import datetime
from .base import BaseParser, ParseResult, DocumentContext
from .primitives import normalize_date
from ..locales import LocaleConfig, DE_AT

logger = logging.getLogger(__name__)

# Characters after a keyword that are searched for its date
KEYWORD_WINDOW = 80


class DateParser(BaseParser):
    """Specialized parser for extracting the issue date from invoices."""

    def __init__(self, locale: LocaleConfig = DE_AT):
        super().__init__(locale)

        seps = "".join(re.escape(c) for c in locale.date_separators)

        # D.M.YYYY with 1-2 digit day/month, separators may be mixed
        self.day_first_pattern = re.compile(
            rf'(?<!\d)(\d{{1,2}})[{seps}](\d{{1,2}})[{seps}](\d{{4}})(?!\d)'
        )
        # YYYY-M-D
        self.year_first_pattern = re.compile(
            rf'(?<!\d)(\d{{4}})[{seps}](\d{{1,2}})[{seps}](\d{{1,2}})(?!\d)'
        )

        # Ordered; the first keyword with a valid date in its window wins
        self.keyword_patterns: List[Tuple[str, Pattern]] = [
            (keyword, re.compile(re.escape(keyword), re.IGNORECASE))
            for keyword in locale.date_keywords
        ]

    def parse(self, context: DocumentContext) -> Optional[ParseResult]:
        """
        Extract and normalize the invoice date.

        Args:
            context: Document context with full text

        Returns:
            ParseResult with an ISO date string, or None
        """
        if context.is_blank:
            return None

        result = self._search(context.full_text)
        self._log_result(result, context)
        return result

    def _search(self, text: str) -> Optional[ParseResult]:
        max_year = datetime.now().year + 1

        # First pass: dates right after a date keyword
        for keyword, keyword_pattern in self.keyword_patterns:
            keyword_match = keyword_pattern.search(text)
            if not keyword_match:
                continue

            start = keyword_match.start()
            window = text[start:start + KEYWORD_WINDOW]
            found = self._first_valid(self.day_first_pattern, window, max_year)
            if found:
                iso_date, raw = found
                self.logger.debug(f"Date found near keyword '{keyword}': {raw}")
                return self._build_result(iso_date, raw, 'keyword', 0.9, keyword=keyword)

        # Second pass: first day-first date anywhere
        found = self._first_valid(self.day_first_pattern, text, max_year)
        if found:
            return self._build_result(found[0], found[1], 'day_first', 0.7)

        # Third pass: ISO-style year-first date
        found = self._first_valid(self.year_first_pattern, text, max_year)
        if found:
            return self._build_result(found[0], found[1], 'year_first', 0.6)

        return None

    def _first_valid(self, pattern: Pattern, text: str, max_year: int) -> Optional[Tuple[str, str]]:
        """Return (iso_date, raw_match) for the first match passing validation."""
        for match in pattern.finditer(text):
            iso_date = normalize_date(match.groups(), self.locale.min_year, max_year)
            if iso_date:
                return iso_date, match.group()
            self.logger.debug(f"Rejected invalid date: {match.group()}")
        return None

    def _build_result(self, iso_date: str, raw: str, pattern_type: str,
                      confidence: float, keyword: Optional[str] = None) -> ParseResult:
        metadata = {'pattern_type': pattern_type, 'original_match': raw}
        if keyword:
            metadata['keyword'] = keyword

        return ParseResult(
            value=iso_date,
            confidence=confidence,
            source_text=raw,
            metadata=metadata
        )
