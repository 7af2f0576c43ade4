"""Command-line interface for invoice text parsing."""

import logging
import click
from pathlib import Path
from typing import List, Dict, Any, Optional
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from tqdm import tqdm
import sys
from collections import Counter

from .diagnostics import analyze_text
from .export import ExcelExporter
from .locales import get_locale
from .parse import InvoiceParser, ExpenseDraft
from .review import ReviewQueue

# Set up logging; stdout is reserved for command output
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger(__name__)


def determine_period(drafts: List[ExpenseDraft]) -> str:
    """
    Determine the dominant month of a batch from its draft dates.

    Drafts whose date was defaulted (not found in the text) do not count.

    Args:
        drafts: Expense drafts of the batch

    Returns:
        "YYYY-MM" if one month covers more than half the dated drafts,
        otherwise "mixed", or "unknown" when no draft has a found date
    """
    months = [
        draft.invoice_date.strftime('%Y-%m')
        for draft in drafts
        if 'invoice_date' not in draft.missing_fields
    ]

    if not months:
        return "unknown"

    month, count = Counter(months).most_common(1)[0]
    if count / len(months) > 0.5:
        return month
    return "mixed"


class BatchProcessor:
    """Parse a folder of OCR text files into expense drafts."""

    def __init__(self,
                 locale_name: str = "de_AT",
                 rules_path: Optional[Path] = None,
                 max_workers: int = 4,
                 encoding: str = "utf-8"):
        """
        Initialize the batch processor.

        Args:
            locale_name: Registered locale of the documents
            rules_path: Category rules file, defaults to the bundled rules
            max_workers: Number of parallel workers
            encoding: Encoding of the input text files
        """
        self.max_workers = max_workers
        self.encoding = encoding
        self.parser = InvoiceParser(get_locale(locale_name), rules_path)
        self.review_queue = ReviewQueue(fallback_category=self.parser.classifier.fallback)

        self.stats = {
            'total_files': 0,
            'processed': 0,
            'failed': 0,
            'review_items': 0,
        }

    def find_text_files(self, input_dir: Path) -> List[Path]:
        """Find all OCR text files below the input directory."""
        text_files = sorted(set(input_dir.glob('**/*.txt')) | set(input_dir.glob('**/*.TXT')))
        logger.info(f"Found {len(text_files)} text files in {input_dir}")
        return text_files

    def process_single_file(self, text_path: Path) -> Dict[str, Any]:
        """
        Parse one text file.

        Args:
            text_path: Path to an OCR text file

        Returns:
            Dictionary with the file path and its draft (or the error)
        """
        try:
            text = text_path.read_text(encoding=self.encoding, errors='replace')
            draft = self.parser.draft_expense(text)
            return {'file_path': str(text_path), 'draft': draft}
        except OSError as e:
            logger.error(f"Failed to read {text_path}: {e}")
            return {'file_path': str(text_path), 'draft': None, 'error': str(e)}

    def process_batch(self, input_dir: Path) -> List[Dict[str, Any]]:
        """
        Parse every text file in the input directory.

        Args:
            input_dir: Directory containing OCR text files

        Returns:
            List of per-file results in file order
        """
        text_files = self.find_text_files(input_dir)
        self.stats['total_files'] = len(text_files)

        if not text_files:
            logger.warning("No text files found!")
            return []

        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self.process_single_file, text_file): text_file
                for text_file in text_files
            }

            with tqdm(total=len(text_files), desc="Parsing invoices", file=sys.stderr) as pbar:
                for future in as_completed(future_to_file):
                    result = future.result()
                    results.append(result)

                    if result['draft'] is None:
                        self.stats['failed'] += 1
                        self.review_queue.add_item(
                            file_path=result['file_path'],
                            reason=f"Processing failed: {result['error']}",
                        )
                    else:
                        self.stats['processed'] += 1
                        self.review_queue.add_from_draft(result['file_path'], result['draft'])

                    pbar.update(1)
                    pbar.set_postfix({
                        'processed': self.stats['processed'],
                        'failed': self.stats['failed']
                    })

        self.stats['review_items'] = len(self.review_queue.items)
        logger.info(f"Batch processing complete. Processed: {self.stats['processed']}, "
                    f"Failed: {self.stats['failed']}, Review items: {self.stats['review_items']}")

        return sorted(results, key=lambda r: r['file_path'])


def _read_text(path: Path, encoding: str) -> str:
    return path.read_text(encoding=encoding, errors='replace')


def _set_debug(debug: bool):
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


def analysis_report(text: str, locale) -> Dict[str, Any]:
    # The preview repeats the input file; inspect prints only the findings
    report = analyze_text(text, locale)
    report.pop('preview', None)
    return report


@click.group()
def cli():
    """Beleg parser - extract vendor, date, amount and category from OCR invoice text."""
    pass


@cli.command()
@click.argument('text_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help='Path to category rules file')
@click.option('--locale', 'locale_name', default='de_AT', help='Document locale')
@click.option('--encoding', default='utf-8', help='Encoding of the text file')
@click.option('--with-text', is_flag=True, help='Include the raw text in the output')
@click.option('--debug', is_flag=True, help='Enable debug output')
def parse(text_file: Path, rules: Optional[Path], locale_name: str, encoding: str,
          with_text: bool, debug: bool):
    """
    Parse one OCR text file and print the expense draft as JSON.

    Example:
        beleg parse ./ocr/rechnung_0815.txt
    """
    _set_debug(debug)
    try:
        parser = InvoiceParser(get_locale(locale_name), rules)
        draft = parser.draft_expense(_read_text(text_file, encoding))
    except (OSError, KeyError, ValueError) as e:
        logger.error(f"Parsing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(draft.to_dict(include_raw_text=with_text), ensure_ascii=False, indent=2))


@cli.command()
@click.argument('text_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--locale', 'locale_name', default='de_AT', help='Document locale')
@click.option('--encoding', default='utf-8', help='Encoding of the text file')
def inspect(text_file: Path, locale_name: str, encoding: str):
    """
    Show what the parser sees in a text file: raw patterns, top amount
    candidates and per-field metadata.
    """
    try:
        locale = get_locale(locale_name)
        text = _read_text(text_file, encoding)
        parser = InvoiceParser(locale)
    except (OSError, KeyError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    analysis = parser.analyze(text)
    report = {
        'text': analysis_report(text, locale),
        'invoice': analysis['invoice'].to_dict(),
        'confidence_scores': analysis['confidence_scores'],
        'amount_candidates': [
            {'amount': str(c.value), 'score': round(c.score, 2), 'family': c.family,
             'match': c.matched_span.strip()}
            for c in parser.amount_parser.score_candidates(text)[:5]
        ],
        'category': parser.classifier.explain(analysis['invoice'].vendor_name, text).label,
        'category_suggestions': parser.classifier.get_category_suggestions(text),
    }
    click.echo(json.dumps(report, ensure_ascii=False, indent=2, default=str))


@cli.command()
@click.option('--in', 'input_dir', required=True, type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Input directory containing OCR text files')
@click.option('--out', 'output_dir', required=True, type=click.Path(path_type=Path),
              help='Output .xlsx file or directory for it')
@click.option('--rules', type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help='Path to category rules file')
@click.option('--locale', 'locale_name', default='de_AT', help='Document locale')
@click.option('--max-workers', default=4, type=int, help='Maximum number of parallel workers')
@click.option('--encoding', default='utf-8', help='Encoding of the text files')
@click.option('--summary', is_flag=True, help='Include summary section in Excel output')
@click.option('--debug', is_flag=True, help='Enable debug output')
def batch(input_dir: Path, output_dir: Path, rules: Optional[Path], locale_name: str,
          max_workers: int, encoding: str, summary: bool, debug: bool):
    """
    Parse a folder of OCR text files and export the drafts to Excel.

    Example:
        beleg batch --in ./ocr --out ./out --summary
    """
    _set_debug(debug)
    try:
        processor = BatchProcessor(
            locale_name=locale_name,
            rules_path=rules,
            max_workers=max_workers,
            encoding=encoding,
        )

        results = processor.process_batch(input_dir)
        if not results:
            click.echo("No text files found.", err=True)
            return

        drafts = [result['draft'] for result in results if result['draft'] is not None]
        rows = [
            ExcelExporter.create_row(result['draft'], result['file_path'])
            for result in results if result['draft'] is not None
        ]

        if output_dir.suffix.lower() == '.xlsx':
            excel_path = output_dir
        else:
            excel_path = output_dir / f"belege_{determine_period(drafts)}.xlsx"
        ExcelExporter(excel_path).export_drafts(
            rows=rows,
            review_items=processor.review_queue.items,
            include_summary=summary,
        )
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("=" * 50)
    click.echo("PROCESSING SUMMARY")
    click.echo("=" * 50)
    click.echo(f"Total files found: {processor.stats['total_files']}")
    click.echo(f"Successfully parsed: {processor.stats['processed']}")
    click.echo(f"Failed: {processor.stats['failed']}")
    click.echo(f"Items needing review: {processor.stats['review_items']}")
    click.echo(f"Excel: {excel_path}")


if __name__ == '__main__':
    cli()
