"""Excel export of parsed expense drafts and their review status."""

import logging
from typing import List, Dict, Any
from pathlib import Path
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from .parse import ExpenseDraft
from .review import ReviewItem

logger = logging.getLogger(__name__)

HEADERS = ["File Name", "Date", "Vendor", "Amount", "Currency", "Category",
           "Description", "Review Status", "Review Reason"]
COLUMN_WIDTHS = [25, 12, 35, 12, 10, 28, 50, 14, 40]


class ExcelExporter:
    """Export expense drafts and review data to Excel."""

    def __init__(self, output_path: Path):
        """
        Initialize Excel exporter.

        Args:
            output_path: Path for the output Excel file
        """
        self.output_path = Path(output_path)
        self.workbook = Workbook()

    def export_drafts(self,
                      rows: List[Dict[str, Any]],
                      review_items: List[ReviewItem],
                      include_summary: bool = False):
        """
        Export drafts and review data to a single consolidated Excel sheet.

        Args:
            rows: Row dictionaries from create_row()
            review_items: Items needing review, matched to rows by file path
            include_summary: Whether to put a summary section above the rows
        """
        try:
            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            self._create_consolidated_sheet(rows, review_items, include_summary)

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(str(self.output_path))

            logger.info(f"Excel file exported to: {self.output_path}")

        except Exception as e:
            logger.error(f"Failed to export Excel file: {e}")
            raise

    def _create_consolidated_sheet(self, rows: List[Dict[str, Any]],
                                   review_items: List[ReviewItem], include_summary: bool):
        """Create one sheet: optional summary, then OK rows, then REVIEW rows."""
        ws = self.workbook.create_sheet("Belege")

        current_row = 1

        if include_summary:
            current_row = self._add_summary_section(ws, rows, current_row)
            current_row += 2

        # Same file names can occur in different folders, so match on the full path
        review_lookup = {item.file_path: item for item in review_items}
        row_paths = {row.get('file_path', '') for row in rows}

        ws.cell(row=current_row, column=1, value="ALLE BELEGE").font = Font(bold=True, size=14)
        current_row += 2

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=current_row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6E6E6", end_color="E6E6E6", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
        current_row += 1

        ok_rows = [row for row in rows if row.get('file_path', '') not in review_lookup]
        review_rows = [row for row in rows if row.get('file_path', '') in review_lookup]
        # Files that produced no draft at all, e.g. unreadable input
        failed_items = [item for item in review_items if item.file_path not in row_paths]

        for row in ok_rows:
            self._write_row(ws, current_row, row, "OK", "")
            current_row += 1

        for row in review_rows:
            self._write_row(ws, current_row, row, "REVIEW", review_lookup[row['file_path']].reason)
            current_row += 1

        for item in failed_items:
            self._write_row(ws, current_row, self.create_failed_row(item.file_path), "REVIEW", item.reason)
            current_row += 1

        for i, width in enumerate(COLUMN_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(i)].width = width

        logger.info(f"Created consolidated sheet with {len(rows)} rows and "
                    f"{len(review_rows) + len(failed_items)} review items")

    @staticmethod
    def _write_row(ws, row_idx: int, row: Dict[str, Any], status: str, reason: str):
        values = [
            row.get('file_name', ''),
            row.get('date', ''),
            row.get('vendor', ''),
            row.get('amount', 0.0),
            row.get('currency', ''),
            row.get('category', ''),
            row.get('description', ''),
            status,
            reason,
        ]
        for col, value in enumerate(values, 1):
            ws.cell(row=row_idx, column=col, value=value)
        ws.cell(row=row_idx, column=4).number_format = '#,##0.00'

    def _add_summary_section(self, ws, rows: List[Dict[str, Any]], start_row: int) -> int:
        """Add summary statistics to the top of the consolidated sheet."""
        if not rows:
            ws.cell(row=start_row, column=1, value="No drafts to summarize")
            return start_row + 1

        df = pd.DataFrame(rows)

        ws.cell(row=start_row, column=1, value="ZUSAMMENFASSUNG").font = Font(bold=True, size=14)
        current_row = start_row + 2

        ws.cell(row=current_row, column=1, value="Belege:").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=len(rows))

        total_amount = float(df['amount'].sum())
        ws.cell(row=current_row, column=4, value="Summe:").font = Font(bold=True)
        ws.cell(row=current_row, column=5, value=f"€ {total_amount:,.2f}")

        current_row += 2

        ws.cell(row=current_row, column=1, value="Nach Kategorie:").font = Font(bold=True)
        current_row += 1

        category_summary = df.groupby('category')['amount'].agg(['count', 'sum'])
        category_summary = category_summary.sort_values('sum', ascending=False)

        ws.cell(row=current_row, column=1, value="Kategorie").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value="Anzahl").font = Font(bold=True)
        ws.cell(row=current_row, column=3, value="Betrag").font = Font(bold=True)
        current_row += 1

        for category, data in category_summary.iterrows():
            ws.cell(row=current_row, column=1, value=category)
            ws.cell(row=current_row, column=2, value=int(data['count']))
            ws.cell(row=current_row, column=3, value=f"€ {float(data['sum']):,.2f}")
            current_row += 1

        return current_row

    @staticmethod
    def create_row(draft: ExpenseDraft, file_path: str = "") -> Dict[str, Any]:
        """
        Flatten a draft into a row dictionary.

        Args:
            draft: Expense draft
            file_path: Source file path; the name is shown, the full path identifies the row

        Returns:
            Row dictionary
        """
        return {
            'file_path': file_path,
            'file_name': Path(file_path).name if file_path else '',
            'date': draft.invoice_date.isoformat(),
            'vendor': draft.vendor_name,
            'amount': float(draft.amount),
            'currency': draft.currency,
            'category': draft.category_hint,
            'description': draft.description,
        }

    @staticmethod
    def create_failed_row(file_path: str) -> Dict[str, Any]:
        """Row for a file that produced no draft; only the file is known."""
        return {
            'file_path': file_path,
            'file_name': Path(file_path).name if file_path else '',
            'date': None,
            'vendor': None,
            'amount': None,
            'currency': None,
            'category': None,
            'description': None,
        }
