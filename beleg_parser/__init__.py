"""Beleg parser - extract vendor, date, amount and category from OCR invoice text."""

__version__ = "1.0.0"

from .locales import LocaleConfig, DE_AT, get_locale
from .parse import (
    InvoiceParser,
    ParsedInvoice,
    ExpenseDraft,
    extract_amount,
    extract_date,
    extract_vendor_name,
    suggest_category,
    parse_invoice_text,
)
from .classify import CategoryClassifier
from .diagnostics import analyze_text
from .review import ReviewQueue, ReviewItem
from .export import ExcelExporter

__all__ = [
    'LocaleConfig',
    'DE_AT',
    'get_locale',
    'InvoiceParser',
    'ParsedInvoice',
    'ExpenseDraft',
    'extract_amount',
    'extract_date',
    'extract_vendor_name',
    'suggest_category',
    'parse_invoice_text',
    'CategoryClassifier',
    'analyze_text',
    'ReviewQueue',
    'ReviewItem',
    'ExcelExporter',
]
