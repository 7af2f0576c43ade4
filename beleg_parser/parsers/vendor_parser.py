"""Vendor/company name extraction from invoice headers."""

import re
import logging
from typing import Optional, List
from .base import BaseParser, ParseResult, DocumentContext
from ..locales import LocaleConfig, DE_AT

logger = logging.getLogger(__name__)

MIN_LINE_LENGTH = 3
MAX_LINE_LENGTH = 120
MAX_VENDOR_LENGTH = 100
HEADER_LINES = 5


class VendorParser(BaseParser):
    """Specialized parser for extracting vendor/company names from invoices."""

    def __init__(self, locale: LocaleConfig = DE_AT):
        super().__init__(locale)

        self.line_splitter = re.compile(r'[\r\n]+')

        # Company legal form indicators, whole words only
        self.legal_form_pattern = re.compile(
            r'(?<!\w)(?:' + '|'.join(locale.legal_forms) + r')(?!\w)',
            re.IGNORECASE
        )

        # Lines that are definitely NOT vendor names
        self.non_name_pattern = re.compile(
            r'^(?:' + '|'.join(locale.non_name_prefixes) + ')',
            re.IGNORECASE
        )
        self.numeric_pattern = re.compile(r'^\d+$')
        symbols = ''.join(re.escape(s) for s in locale.currency_symbols)
        self.symbol_only_pattern = re.compile(rf'^[\d\s.,:;/\\\-+*#()%{symbols}]+$')

    def parse(self, context: DocumentContext) -> Optional[ParseResult]:
        """
        Extract vendor name from invoice text.

        Args:
            context: Document context with full text

        Returns:
            ParseResult with vendor name (max 100 characters), or None
        """
        candidates = self.candidate_lines(context.full_text)
        if not candidates:
            self._log_result(None, context)
            return None

        self.logger.debug(f"Potential vendor names: {candidates[:HEADER_LINES]}")

        # First pass: a line carrying a company legal form
        for line_idx, line in enumerate(candidates):
            if self.legal_form_pattern.search(line):
                result = ParseResult(
                    value=line[:MAX_VENDOR_LENGTH],
                    confidence=0.85,
                    source_text=line,
                    metadata={'type': 'legal_form', 'line_idx': line_idx}
                )
                self._log_result(result, context)
                return result

        # Second pass: longest line in the header area
        header = candidates[:HEADER_LINES]
        best = max(header, key=len)
        result = ParseResult(
            value=best[:MAX_VENDOR_LENGTH],
            confidence=0.5,
            source_text=best,
            metadata={'type': 'header', 'line_idx': header.index(best)}
        )
        self._log_result(result, context)
        return result

    def candidate_lines(self, text: str) -> List[str]:
        """Trimmed lines that could plausibly be a company name, in document order."""
        if not text:
            return []

        lines = (line.strip() for line in self.line_splitter.split(text))
        return [
            line for line in lines
            if MIN_LINE_LENGTH <= len(line) <= MAX_LINE_LENGTH and not self.is_not_a_name(line)
        ]

    def is_not_a_name(self, line: str) -> bool:
        """True for numbers, symbol runs and labelled metadata lines."""
        return bool(
            self.numeric_pattern.match(line)
            or self.symbol_only_pattern.match(line)
            or self.non_name_pattern.match(line)
        )
