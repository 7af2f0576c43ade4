"""Tests for Excel export."""

from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from beleg_parser.export import ExcelExporter, HEADERS
from beleg_parser.parse import ExpenseDraft
from beleg_parser.review import ReviewItem


def make_draft(vendor, amount, category):
    return ExpenseDraft(
        vendor_name=vendor,
        invoice_date=date(2024, 3, 15),
        amount=Decimal(amount),
        currency="EUR",
        description=f"{vendor} Rechnung",
        category_hint=category,
    )


class TestExcelExporter:
    """Test suite for ExcelExporter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.rows = [
            ExcelExporter.create_row(make_draft("Labor Wien GmbH", "89.00", "Medizinischer Bedarf"), "in/b_labor.txt"),
            ExcelExporter.create_row(make_draft("Unbekannter Anbieter", "0", "Sonstige Betriebsausgaben"), "in/a_scan.txt"),
            ExcelExporter.create_row(make_draft("Wien Energie GmbH", "120.50", "Räumlichkeiten"), "in/c_strom.txt"),
        ]
        self.review_items = [ReviewItem(file_path="in/a_scan.txt", reason="missing vendor; missing amount")]

    def test_create_row(self):
        row = self.rows[0]

        assert row == {
            'file_path': "in/b_labor.txt",
            'file_name': "b_labor.txt",
            'date': "2024-03-15",
            'vendor': "Labor Wien GmbH",
            'amount': 89.0,
            'currency': "EUR",
            'category': "Medizinischer Bedarf",
            'description': "Labor Wien GmbH Rechnung",
        }

    def test_export_without_summary(self, tmp_path):
        """Test the consolidated sheet: title, headers, OK rows before REVIEW rows."""
        output = tmp_path / "out" / "belege.xlsx"

        ExcelExporter(output).export_drafts(self.rows, self.review_items)

        assert output.exists()
        wb = load_workbook(output)
        assert wb.sheetnames == ["Belege"]
        ws = wb["Belege"]

        assert ws.cell(row=1, column=1).value == "ALLE BELEGE"
        assert [ws.cell(row=3, column=col).value for col in range(1, len(HEADERS) + 1)] == HEADERS

        data = [
            [ws.cell(row=r, column=c).value for c in range(1, len(HEADERS) + 1)]
            for r in range(4, 7)
        ]
        assert [row[0] for row in data] == ["b_labor.txt", "c_strom.txt", "a_scan.txt"]
        assert [row[7] for row in data] == ["OK", "OK", "REVIEW"]
        assert data[2][8] == "missing vendor; missing amount"
        assert data[1][3] == 120.5

    def test_file_without_draft_gets_review_row(self, tmp_path):
        """Test that a review item with no draft still shows up with its reason."""
        output = tmp_path / "belege.xlsx"
        review_items = self.review_items + [
            ReviewItem(file_path="in/kaputt.txt", reason="Processing failed: Is a directory"),
        ]

        ExcelExporter(output).export_drafts(self.rows, review_items)

        ws = load_workbook(output)["Belege"]
        last = [ws.cell(row=7, column=c).value for c in range(1, len(HEADERS) + 1)]
        assert last[0] == "kaputt.txt"
        assert last[3] is None
        assert last[7] == "REVIEW"
        assert last[8] == "Processing failed: Is a directory"

    def test_same_file_name_in_different_folders(self, tmp_path):
        """Test that review status follows the full path, not the file name."""
        output = tmp_path / "belege.xlsx"
        rows = [
            ExcelExporter.create_row(make_draft("Labor Wien GmbH", "89.00", "Medizinischer Bedarf"), "a/x.txt"),
            ExcelExporter.create_row(make_draft("Unbekannter Anbieter", "0", "Sonstige Betriebsausgaben"), "b/x.txt"),
        ]
        review_items = [ReviewItem(file_path="b/x.txt", reason="missing amount")]

        ExcelExporter(output).export_drafts(rows, review_items)

        ws = load_workbook(output)["Belege"]
        data = [
            [ws.cell(row=r, column=c).value for c in range(1, len(HEADERS) + 1)]
            for r in range(4, 6)
        ]
        assert [(row[0], row[2], row[7]) for row in data] == [
            ("x.txt", "Labor Wien GmbH", "OK"),
            ("x.txt", "Unbekannter Anbieter", "REVIEW"),
        ]
        assert ws.cell(row=6, column=1).value is None

    def test_export_with_summary(self, tmp_path):
        """Test the summary section with per-category totals."""
        output = tmp_path / "belege.xlsx"

        ExcelExporter(output).export_drafts(self.rows, self.review_items, include_summary=True)

        ws = load_workbook(output)["Belege"]
        values = [cell.value for row in ws.iter_rows() for cell in row if cell.value is not None]

        assert ws.cell(row=1, column=1).value == "ZUSAMMENFASSUNG"
        assert "€ 209.50" in values
        assert "Räumlichkeiten" in values
        assert "ALLE BELEGE" in values

    def test_export_empty(self, tmp_path):
        output = tmp_path / "leer.xlsx"

        ExcelExporter(output).export_drafts([], [], include_summary=True)

        ws = load_workbook(output)["Belege"]
        assert ws.cell(row=1, column=1).value == "No drafts to summarize"
