"""Base classes for invoice field parsers."""

import re
from abc import ABC, abstractmethod
from typing import Optional, Any, Dict, List
from dataclasses import dataclass
import logging

from ..locales import LocaleConfig, DE_AT

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r'\r\n|\r|\n')


@dataclass
class ParseResult:
    """Result of a parsing operation with confidence and metadata."""
    value: Any
    confidence: float
    source_text: str = ""
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


@dataclass
class DocumentContext:
    """The recognized text of one document, shared read-only by all parsers."""
    full_text: str
    lines: List[str] = None

    def __post_init__(self):
        if self.full_text is None:
            self.full_text = ""
        if self.lines is None:
            self.lines = _LINE_BREAKS.split(self.full_text) if self.full_text else []

    @property
    def is_blank(self) -> bool:
        return not self.full_text.strip()


class BaseParser(ABC):
    """Base class for all field parsers."""

    def __init__(self, locale: LocaleConfig = DE_AT):
        self.locale = locale
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, context: DocumentContext) -> Optional[ParseResult]:
        """
        Parse the specific field from document context.

        Args:
            context: Document context with the recognized text

        Returns:
            ParseResult with value and confidence, or None if nothing was found
        """
        pass

    def _log_result(self, result: Optional[ParseResult], context: DocumentContext):
        """Log parsing result for debugging."""
        if result:
            self.logger.info(f"Parsed: {result.value} (confidence: {result.confidence:.2f})")
        else:
            self.logger.debug(f"Nothing found in {len(context.full_text)} characters")
