"""Review queue for expense drafts that need a human look."""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from .parse import ExpenseDraft

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200

FIELD_REASONS = {
    'vendor_name': "missing vendor",
    'invoice_date': "missing date",
    'amount': "missing amount",
}


@dataclass
class ReviewItem:
    """Represents a draft that needs manual review."""
    file_path: str
    reason: str
    suggested_date: Optional[str] = None
    suggested_amount: Optional[Decimal] = None
    suggested_category: Optional[str] = None
    raw_snippet: str = ""


class ReviewQueue:
    """Collects drafts with defaulted fields or an undetermined category."""

    def __init__(self, fallback_category: Optional[str] = None):
        """
        Initialize review queue.

        Args:
            fallback_category: Category label that means "nothing matched"
        """
        self.items: List[ReviewItem] = []
        self.fallback_category = fallback_category

    def review_reasons(self, draft: ExpenseDraft) -> List[str]:
        """List why a draft should be reviewed; empty if it looks complete."""
        reasons = [FIELD_REASONS[name] for name in draft.missing_fields if name in FIELD_REASONS]

        if self.fallback_category and draft.category_hint == self.fallback_category:
            reasons.append("category could not be determined")

        return reasons

    def add_item(self,
                 file_path: str,
                 reason: str,
                 suggested_date: Optional[str] = None,
                 suggested_amount: Optional[Decimal] = None,
                 suggested_category: Optional[str] = None,
                 raw_snippet: str = ""):
        """Add an item to the review queue."""
        item = ReviewItem(
            file_path=file_path,
            reason=reason,
            suggested_date=suggested_date,
            suggested_amount=suggested_amount,
            suggested_category=suggested_category,
            raw_snippet=raw_snippet,
        )

        self.items.append(item)
        logger.debug(f"Added to review queue: {Path(file_path).name} - {reason}")

    def add_from_draft(self, file_path: str, draft: ExpenseDraft) -> bool:
        """
        Queue a draft if it has review reasons.

        Args:
            file_path: Source text file of the draft
            draft: Expense draft produced by the parser

        Returns:
            True if the draft was queued
        """
        reasons = self.review_reasons(draft)
        if not reasons:
            return False

        reason = "; ".join(reasons)
        logger.info(f"Sending {Path(file_path).name} to review: {reason}")

        self.add_item(
            file_path=file_path,
            reason=reason,
            suggested_date=None if 'invoice_date' in draft.missing_fields else draft.invoice_date.isoformat(),
            suggested_amount=None if 'amount' in draft.missing_fields else draft.amount,
            suggested_category=draft.category_hint,
            raw_snippet=make_snippet(draft.raw_text),
        )
        return True

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the review queue."""
        if not self.items:
            return {"total": 0}

        reason_counts: Dict[str, int] = {}
        missing_data = 0

        for item in self.items:
            for reason in item.reason.split(';'):
                reason = reason.strip()
                reason_counts[reason] = reason_counts.get(reason, 0) + 1

            if 'missing' in item.reason:
                missing_data += 1

        return {
            "total": len(self.items),
            "missing_data": missing_data,
            "reason_breakdown": reason_counts,
        }

    def clear(self):
        """Clear all items from the review queue."""
        self.items.clear()


def make_snippet(raw_text: str) -> str:
    """Single-line excerpt of the raw text, safe to put in a spreadsheet cell."""
    snippet = ' '.join(raw_text.split())[:SNIPPET_LENGTH]
    # Control characters are rejected by openpyxl
    snippet = ''.join(char for char in snippet if ord(char) >= 32)
    if len(raw_text) > SNIPPET_LENGTH:
        snippet += "..."
    return snippet
