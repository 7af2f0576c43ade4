"""Locale configuration for number, date and vocabulary handling."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

RULES_DIR = Path(__file__).parent / "rules"


@dataclass(frozen=True)
class LocaleConfig:
    """
    Everything the extractors need to know about a document locale.

    The scoring and selection algorithms only read from this structure, so a
    new locale is a new instance rather than a code change.
    """
    name: str
    currency: str
    currency_symbols: Tuple[str, ...]
    currency_codes: Tuple[str, ...]
    decimal_separator: str
    thousands_separator: str
    # Substrings that mark a total/amount line (lowercase, first match counts)
    total_keywords: Tuple[str, ...]
    # Searched in order, the first keyword with a valid date nearby wins
    date_keywords: Tuple[str, ...]
    date_separators: str
    min_year: int
    # Regex fragments, matched as whole words, case-insensitive
    legal_forms: Tuple[str, ...]
    # Regex fragments anchored at the start of a line, case-insensitive
    non_name_prefixes: Tuple[str, ...]
    unknown_vendor: str
    rules_path: Path


DE_AT = LocaleConfig(
    name="de_AT",
    currency="EUR",
    currency_symbols=("€",),
    currency_codes=("eur",),
    decimal_separator=",",
    thousands_separator=".",
    total_keywords=(
        'endsumme', 'gesamtbetrag', 'gesamtsumme', 'rechnungsbetrag',
        'zahlbetrag', 'zu zahlen', 'total', 'summe', 'gesamt',
        'brutto', 'bruttobetrag', 'endbetrag', 'fällig', 'netto',
        'gesamtpreis', 'rechnungssumme', 'zwischensumme', 'betrag',
        'amount', 'balance due', 'inkl', 'incl',
    ),
    date_keywords=(
        'rechnungsdatum', 'datum', 'ausstellungsdatum', 'date',
        'invoice date', 'issued', 'ausgestellt', 'vom', 'rechnungstag',
        'belegdatum', 'leistungsdatum',
    ),
    date_separators="./-",
    min_year=1990,
    legal_forms=(
        r'gmbh', r'mbh', r'g\.\s?m\.\s?b\.\s?h\.?', r'ges\.?\s?m\.?\s?b\.?\s?h\.?',
        r'ag', r'e\.\s?u\.?', r'og', r'kg', r'ohg', r'gesellschaft',
        r'verein', r'stiftung', r'e\.\s?v\.?', r'ltd\.?', r'inc\.?', r'corp\.?', r'llc',
    ),
    non_name_prefixes=(
        r'rechnung', r'invoice', r'datum', r'date\b', r'betrag', r'amount',
        r'summe', r'total', r'page\b', r'seite\b', r'tel\b', r'telefon',
        r'fax\b', r'www\.', r'http', r'@', r'e-?mail\b', r'mwst', r'ust\b', r'uid\b',
        r'steuernummer', r'iban', r'bic\b', r'blz\b', r'konto', r'nr\.', r'art\.?\s*nr',
        r'pos\.', r'menge', r'preis', r'stück', r'stk\b', r'netto', r'brutto',
        r'zwischensumme', r'kundennummer', r'bestellnummer', r'lieferschein',
        r'€', r'eur\b', r'\d{2,}[.,/-]\d',
    ),
    unknown_vendor="Unbekannter Anbieter",
    rules_path=RULES_DIR / "categories.yml",
)

LOCALES: Dict[str, LocaleConfig] = {
    DE_AT.name: DE_AT,
}


def get_locale(name: str) -> LocaleConfig:
    """Look up a registered locale by name (e.g. ``de_AT``)."""
    try:
        return LOCALES[name]
    except KeyError:
        raise KeyError(f"Unknown locale '{name}'. Available: {', '.join(sorted(LOCALES))}")
