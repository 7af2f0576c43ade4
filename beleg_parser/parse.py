"""Invoice parsing: runs the field parsers and assembles the result record."""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any, List

from .classify import CategoryClassifier
from .locales import LocaleConfig, DE_AT
from .parsers import DateParser, AmountParser, VendorParser
from .parsers.base import DocumentContext

logger = logging.getLogger(__name__)

DESCRIPTION_LINES = 3
MAX_DESCRIPTION_LENGTH = 200


@dataclass
class ParsedInvoice:
    """Fields extracted from one invoice. Every field may be missing on its own."""
    vendor_name: Optional[str] = None
    invoice_date: Optional[date] = None
    amount: Optional[Decimal] = None
    currency: str = DE_AT.currency

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-friendly representation."""
        return {
            'vendor_name': self.vendor_name,
            'invoice_date': self.invoice_date.isoformat() if self.invoice_date else None,
            'amount': float(self.amount) if self.amount is not None else None,
            'currency': self.currency,
        }


@dataclass
class ExpenseDraft:
    """Pre-filled expense entry handed to a human for confirmation."""
    vendor_name: str
    invoice_date: date
    amount: Decimal
    currency: str
    description: str
    category_hint: str
    raw_text: str = ""
    missing_fields: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def to_dict(self, include_raw_text: bool = False) -> Dict[str, Any]:
        data = {
            'vendor_name': self.vendor_name,
            'invoice_date': self.invoice_date.isoformat(),
            'amount': float(self.amount),
            'currency': self.currency,
            'description': self.description,
            'category_hint': self.category_hint,
            'missing_fields': list(self.missing_fields),
        }
        if include_raw_text:
            data['raw_text'] = self.raw_text
        return data


class InvoiceParser:
    """
    Invoice parser built from independent field parsers.

    The amount, date and vendor parsers never see each other's results;
    only category suggestion depends on the extracted vendor name.
    """

    def __init__(self, locale: LocaleConfig = DE_AT, rules_path: Optional[Path] = None):
        """Initialize field parsers and the category classifier for a locale."""
        self.locale = locale
        self.date_parser = DateParser(locale)
        self.amount_parser = AmountParser(locale)
        self.vendor_parser = VendorParser(locale)
        self.classifier = CategoryClassifier(rules_path or locale.rules_path)

        logger.debug(f"Initialized invoice parser for locale {locale.name}")

    def parse_invoice(self, text: Optional[str]) -> ParsedInvoice:
        """
        Parse invoice text into a ParsedInvoice.

        Args:
            text: Raw OCR text of one invoice

        Returns:
            ParsedInvoice; fields that could not be found are None
        """
        return self.analyze(text)['invoice']

    def analyze(self, text: Optional[str]) -> Dict[str, Any]:
        """
        Parse invoice text and keep per-field confidence and metadata.

        Args:
            text: Raw OCR text of one invoice

        Returns:
            Dictionary with the ParsedInvoice plus confidence scores and metadata
        """
        context = DocumentContext(full_text=text or "")

        if context.is_blank:
            logger.info("Empty text input")
            return {
                'invoice': ParsedInvoice(currency=self.locale.currency),
                'confidence_scores': {'date': 0.0, 'amount': 0.0, 'vendor': 0.0},
                'metadata': {'date_meta': {}, 'amount_meta': {}, 'vendor_meta': {}},
            }

        date_result = self.date_parser.parse(context)
        amount_result = self.amount_parser.parse(context)
        vendor_result = self.vendor_parser.parse(context)

        invoice = ParsedInvoice(
            vendor_name=vendor_result.value if vendor_result else None,
            invoice_date=date.fromisoformat(date_result.value) if date_result else None,
            amount=amount_result.value if amount_result else None,
            currency=self.locale.currency,
        )

        logger.info(
            f"Parsed invoice: date={invoice.invoice_date}, amount={invoice.amount} {invoice.currency}, "
            f"vendor={invoice.vendor_name}"
        )

        return {
            'invoice': invoice,
            'confidence_scores': {
                'date': date_result.confidence if date_result else 0.0,
                'amount': amount_result.confidence if amount_result else 0.0,
                'vendor': vendor_result.confidence if vendor_result else 0.0,
            },
            'metadata': {
                'date_meta': date_result.metadata if date_result else {},
                'amount_meta': amount_result.metadata if amount_result else {},
                'vendor_meta': vendor_result.metadata if vendor_result else {},
            }
        }

    def parse_date(self, text: str) -> Optional[str]:
        """ISO date string of the invoice date, or None."""
        result = self.date_parser.parse(DocumentContext(full_text=text or ""))
        return result.value if result else None

    def parse_amount(self, text: str) -> Optional[Decimal]:
        """Invoice total in (0, 1,000,000), or None."""
        result = self.amount_parser.parse(DocumentContext(full_text=text or ""))
        return result.value if result else None

    def parse_vendor(self, text: str) -> Optional[str]:
        """Vendor name (max 100 characters), or None."""
        result = self.vendor_parser.parse(DocumentContext(full_text=text or ""))
        return result.value if result else None

    def suggest_category(self, vendor_name: Optional[str], text: Optional[str]) -> str:
        return self.classifier.suggest_category(vendor_name, text)

    def draft_expense(self, text: Optional[str], today: Optional[date] = None) -> ExpenseDraft:
        """
        Build an expense entry with display defaults for missing fields.

        Missing vendor becomes the locale's "unknown vendor" label, a missing
        date becomes ``today`` and a missing amount becomes 0; the names of
        the defaulted fields are listed in ``missing_fields``.
        """
        text = text or ""
        invoice = self.parse_invoice(text)
        category = self.suggest_category(invoice.vendor_name or '', text)

        missing = []
        if invoice.vendor_name is None:
            missing.append('vendor_name')
        if invoice.invoice_date is None:
            missing.append('invoice_date')
        if invoice.amount is None:
            missing.append('amount')

        return ExpenseDraft(
            vendor_name=invoice.vendor_name or self.locale.unknown_vendor,
            invoice_date=invoice.invoice_date or today or date.today(),
            amount=invoice.amount if invoice.amount is not None else Decimal("0"),
            currency=invoice.currency,
            description=summarize_text(text),
            category_hint=category,
            raw_text=text,
            missing_fields=missing,
        )


def summarize_text(text: str) -> str:
    """First non-empty lines of the text joined into a short description."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return ' '.join(lines[:DESCRIPTION_LINES])[:MAX_DESCRIPTION_LENGTH]


@lru_cache(maxsize=None)
def get_default_parser() -> InvoiceParser:
    """Shared parser for the default locale; it holds no per-call state."""
    return InvoiceParser()


def extract_amount(text: str) -> Optional[Decimal]:
    return get_default_parser().parse_amount(text)


def extract_date(text: str) -> Optional[str]:
    return get_default_parser().parse_date(text)


def extract_vendor_name(text: str) -> Optional[str]:
    return get_default_parser().parse_vendor(text)


def suggest_category(vendor_name: Optional[str], text: str) -> str:
    return get_default_parser().suggest_category(vendor_name, text)


def parse_invoice_text(text: str) -> ParsedInvoice:
    return get_default_parser().parse_invoice(text)
