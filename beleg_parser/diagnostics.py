"""Diagnostic summary of recognized text, for debugging extraction misses."""

import re
import logging
from typing import Dict, Any

from .locales import LocaleConfig, DE_AT
from .parsers.base import DocumentContext

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 500


def analyze_text(text: str, locale: LocaleConfig = DE_AT) -> Dict[str, Any]:
    """
    Summarize what a piece of OCR text contains before any extraction.

    Args:
        text: Raw OCR text
        locale: Locale whose separators and currency symbols to look for

    Returns:
        Dictionary with lengths, a preview and the raw amount/date substrings
    """
    context = DocumentContext(full_text=text or "")
    dec = re.escape(locale.decimal_separator)
    thou = re.escape(locale.thousands_separator)
    seps = "".join(re.escape(c) for c in locale.date_separators)

    report = {
        'length': len(context.full_text),
        'line_count': len(context.lines),
        'non_empty_lines': sum(1 for line in context.lines if line.strip()),
        'preview': context.full_text[:PREVIEW_LENGTH],
        'comma_amounts': re.findall(rf'\d{{1,3}}(?:{thou}\d{{3}})*{dec}\d{{2}}', context.full_text),
        'dot_amounts': re.findall(r'\d+\.\d{2}', context.full_text),
        'dates': re.findall(rf'\d{{1,2}}[{seps}]\d{{1,2}}[{seps}]\d{{4}}', context.full_text),
        'currency_symbols': sum(context.full_text.count(symbol) for symbol in locale.currency_symbols),
    }

    logger.debug(
        f"Text analysis: {report['length']} chars, {report['line_count']} lines, "
        f"{len(report['comma_amounts'])} comma amounts, {len(report['dates'])} dates"
    )
    return report
