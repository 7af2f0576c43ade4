"""Tests for the review queue."""

from datetime import date
from decimal import Decimal

from beleg_parser.parse import ExpenseDraft
from beleg_parser.review import ReviewQueue, make_snippet

FALLBACK = "Sonstige Betriebsausgaben"


def make_draft(**overrides):
    fields = dict(
        vendor_name="Labor Wien GmbH",
        invoice_date=date(2024, 3, 15),
        amount=Decimal("89.00"),
        currency="EUR",
        description="Labor Wien GmbH Befund",
        category_hint="Medizinischer Bedarf",
        raw_text="Labor Wien GmbH\nBefund\nSumme € 89,00",
        missing_fields=[],
    )
    fields.update(overrides)
    return ExpenseDraft(**fields)


class TestReviewQueue:
    """Test suite for ReviewQueue."""

    def setup_method(self):
        """Set up test fixtures."""
        self.queue = ReviewQueue(fallback_category=FALLBACK)

    def test_complete_draft_is_not_queued(self):
        assert not self.queue.add_from_draft("in/labor.txt", make_draft())
        assert self.queue.items == []

    def test_missing_fields_are_queued(self):
        """Test that defaulted fields send a draft to review."""
        draft = make_draft(amount=Decimal("0"), missing_fields=['invoice_date', 'amount'])

        assert self.queue.add_from_draft("in/labor.txt", draft)

        item = self.queue.items[0]
        assert item.file_path == "in/labor.txt"
        assert item.reason == "missing date; missing amount"
        assert item.suggested_date is None
        assert item.suggested_amount is None
        assert item.suggested_category == "Medizinischer Bedarf"
        assert item.raw_snippet.startswith("Labor Wien GmbH Befund")

    def test_fallback_category_is_queued(self):
        draft = make_draft(category_hint=FALLBACK)

        assert self.queue.add_from_draft("in/labor.txt", draft)
        assert self.queue.items[0].reason == "category could not be determined"
        assert self.queue.items[0].suggested_amount == Decimal("89.00")
        assert self.queue.items[0].suggested_date == "2024-03-15"

    def test_without_fallback_category(self):
        """Test a queue that only checks for missing fields."""
        queue = ReviewQueue()

        assert not queue.add_from_draft("in/labor.txt", make_draft(category_hint=FALLBACK))

    def test_summary(self):
        self.queue.add_from_draft("a.txt", make_draft(missing_fields=['vendor_name']))
        self.queue.add_from_draft("b.txt", make_draft(missing_fields=['amount'], category_hint=FALLBACK))
        self.queue.add_item("c.txt", "Processing failed: unreadable")

        summary = self.queue.get_summary()

        assert summary['total'] == 3
        assert summary['missing_data'] == 2
        assert summary['reason_breakdown']['missing vendor'] == 1
        assert summary['reason_breakdown']['missing amount'] == 1
        assert summary['reason_breakdown']['category could not be determined'] == 1
        assert summary['reason_breakdown']['Processing failed: unreadable'] == 1

    def test_empty_summary_and_clear(self):
        assert self.queue.get_summary() == {"total": 0}

        self.queue.add_item("a.txt", "missing date")
        self.queue.clear()

        assert self.queue.items == []


class TestMakeSnippet:
    """Test suite for raw text snippets."""

    def test_short_text(self):
        assert make_snippet("Zeile 1\nZeile 2") == "Zeile 1 Zeile 2"

    def test_truncation(self):
        snippet = make_snippet("x" * 250)

        assert snippet == "x" * 200 + "..."

    def test_control_characters_removed(self):
        assert make_snippet("Summe\x0c 12,00\x07") == "Summe 12,00"
