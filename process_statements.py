"""
process_statements.py
---------------------

Turn statement exports (CSV, OFX or QFX) into statement drafts: the
period totals, balances and dates the app stores for each imported
statement.

CSV files go through tokenizing, column mapping and row
reconstruction; OFX/QFX files go through the tag extractor.  Both end
in the same aggregation step.  Files the pipeline cannot read (PDF,
images) still get an empty draft so they can be filled in by hand.

Usage:

    python process_statements.py statements/*.csv [--currency INR] [--currency-symbol ₹] \
        [--template auto] [--output summary.csv]
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

import config
from aggregation import Clock, aggregate_transactions, classify_typed, empty_statement_draft
from column_mapping import resolve_csv_mapping
from csv_parser import parse_csv
from models import (
    CsvMapping,
    CsvTransaction,
    ImportOutcome,
    ImportResult,
    ParseMethod,
    StatementFileDraft,
)
from normalizers import parse_date, parse_number
from ofx_parser import build_statement_from_ofx
from statement_templates import TemplateRegistry, load_registry

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "heic"]
DEFAULT_OFX_SOURCE_NAME = "Bank Statement"


def detect_parse_method(file_name: Optional[str], mime_type: Optional[str] = None) -> ParseMethod:
    extension = file_name.rsplit(".", 1)[-1].lower() if file_name else None
    mime_type = mime_type or ""
    if "csv" in mime_type or extension == "csv":
        return "csv"
    if extension in ("ofx", "qfx") or "ofx" in mime_type:
        return "qfx" if extension == "qfx" else "ofx"
    if "pdf" in mime_type or extension == "pdf":
        return "pdf"
    if mime_type.startswith("image/") or extension in IMAGE_EXTENSIONS:
        return "image"
    return "unknown"


def build_transactions_from_csv(
    headers: Sequence[str], rows: Sequence[Sequence[str]], mapping: CsvMapping
) -> List[CsvTransaction]:
    """Rebuild one transaction per row.

    With both credit and debit columns mapped the amount is
    ``credit - debit`` and any amount column is ignored.  Missing
    cells count as empty.
    """
    header_index = {header: index for index, header in enumerate(headers)}

    def get_value(row: Sequence[str], header: Optional[str]) -> Optional[str]:
        if not header:
            return None
        index = header_index.get(header)
        if index is None or index >= len(row):
            return None
        return row[index]

    use_credit_debit = bool(mapping.credit and mapping.debit)
    transactions = []
    for row in rows:
        if use_credit_debit:
            credit = parse_number(get_value(row, mapping.credit))
            amount = credit - parse_number(get_value(row, mapping.debit))
        else:
            amount = parse_number(get_value(row, mapping.amount))
        type_value = get_value(row, mapping.type)
        transactions.append(
            CsvTransaction(
                amount=amount,
                balance=parse_number(get_value(row, mapping.balance)),
                date=parse_date(get_value(row, mapping.date)),
                description=get_value(row, mapping.description),
                type=type_value.lower() if type_value is not None else None,
            )
        )
    return transactions


def build_statement_from_csv(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    mapping: CsvMapping,
    currency: str,
    currency_symbol: str,
    clock: Clock = datetime.now,
) -> ImportResult:
    transactions = build_transactions_from_csv(headers, rows, mapping)
    return aggregate_transactions(
        transactions, currency, currency_symbol, classify=classify_typed, clock=clock
    )


def _decode(content: Union[str, bytes]) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8-sig", errors="replace")
    return content


def import_statement(
    file_name: str,
    content: Union[str, bytes],
    currency: str,
    currency_symbol: str,
    mime_type: Optional[str] = None,
    file_size: Optional[int] = None,
    file_uri: str = "",
    template_id: Optional[str] = "auto",
    registry: Optional[TemplateRegistry] = None,
    clock: Clock = datetime.now,
) -> ImportOutcome:
    """Import one statement file end to end.

    Never raises on bad content: unreadable or unsupported files come
    back as an empty draft with ``parse_status == "partial"``.
    """
    parse_method = detect_parse_method(file_name, mime_type)
    text = _decode(content)
    if file_size is None:
        file_size = len(content.encode("utf-8")) if isinstance(content, str) else len(content)

    statement = empty_statement_draft(currency, currency_symbol, clock)
    parse_status = "partial"
    transaction_count = 0
    used_template = None

    if parse_method == "csv":
        parsed = parse_csv(text)
        if parsed:
            headers, rows = parsed[0], parsed[1:]
            resolution = resolve_csv_mapping(headers, template_id, registry)
            result = build_statement_from_csv(headers, rows, resolution.mapping, currency, currency_symbol, clock)
            statement = result.statement.model_copy(
                update={
                    "source_name": resolution.source_name or result.statement.source_name,
                    "source_type": resolution.source_type,
                }
            )
            transaction_count = result.transaction_count
            used_template = resolution.template_id
            parse_status = "success" if rows else "partial"
        else:
            logger.info("No rows found in %s", file_name)
    elif parse_method in ("ofx", "qfx"):
        result = build_statement_from_ofx(text, currency, currency_symbol, clock)
        statement = result.statement.model_copy(
            update={
                "source_name": result.statement.source_name or DEFAULT_OFX_SOURCE_NAME,
                "source_type": "bank",
            }
        )
        transaction_count = result.transaction_count
        parse_status = "success" if transaction_count > 0 else "partial"
    else:
        logger.info("%s is a %s file; attaching without parsing", file_name, parse_method)

    file_draft = StatementFileDraft(
        file_name=file_name or "statement",
        file_size=file_size,
        file_uri=file_uri,
        mime_type=mime_type,
        parse_method=parse_method,
        parse_status=parse_status,
    )
    return ImportOutcome(
        statement=statement,
        file=file_draft,
        transaction_count=transaction_count,
        template_id=used_template,
    )


def import_file(
    path: Path,
    currency: str,
    currency_symbol: str,
    template_id: Optional[str] = "auto",
    registry: Optional[TemplateRegistry] = None,
    clock: Clock = datetime.now,
) -> ImportOutcome:
    """Read ``path`` from disk and import it.  Read errors give a ``failed`` outcome."""
    try:
        content = path.read_bytes()
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        return ImportOutcome(
            statement=empty_statement_draft(currency, currency_symbol, clock),
            file=StatementFileDraft(
                file_name=path.name,
                file_uri=str(path),
                parse_method=detect_parse_method(path.name),
                parse_status="failed",
            ),
        )
    return import_statement(
        path.name,
        content,
        currency,
        currency_symbol,
        file_uri=str(path),
        template_id=template_id,
        registry=registry,
        clock=clock,
    )


def outcomes_to_frame(outcomes: Sequence[ImportOutcome]) -> pd.DataFrame:
    """One row per imported file, sorted by period end."""
    if not outcomes:
        return pd.DataFrame()
    records = []
    for outcome in outcomes:
        record = outcome.statement.model_dump(by_alias=True)
        record.update(
            fileName=outcome.file.file_name,
            parseMethod=outcome.file.parse_method,
            parseStatus=outcome.file.parse_status,
            transactionCount=outcome.transaction_count,
            templateId=outcome.template_id,
        )
        records.append(record)
    return pd.DataFrame(records).sort_values("periodEnd", kind="stable").reset_index(drop=True)


def process_files(
    files: Sequence[Path],
    currency: str,
    currency_symbol: str,
    template_id: Optional[str] = "auto",
    registry: Optional[TemplateRegistry] = None,
) -> pd.DataFrame:
    """Import a list of files and return their drafts as a DataFrame."""
    outcomes = []
    for file in files:
        outcome = import_file(file, currency, currency_symbol, template_id, registry)
        logger.info(
            "%s: %s/%s, %d transactions, net %.2f",
            file.name,
            outcome.file.parse_method,
            outcome.file.parse_status,
            outcome.transaction_count,
            outcome.statement.net_profit,
        )
        outcomes.append(outcome)
    return outcomes_to_frame(outcomes)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Summarize bank and broker statement exports")
    parser.add_argument("files", nargs="+", type=Path, help="CSV, OFX or QFX statement files")
    parser.add_argument("--currency", default=config.DEFAULT_CURRENCY)
    parser.add_argument("--currency-symbol", default=config.DEFAULT_CURRENCY_SYMBOL)
    parser.add_argument(
        "--template",
        default="auto",
        help="Template id for CSV files, or 'auto' to detect it from the header row",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write the summaries to this CSV file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    args = parse_args(argv)
    registry = load_registry(config.TEMPLATES_PATH)
    summary = process_files(args.files, args.currency, args.currency_symbol, args.template, registry)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(args.output, index=False)
        logger.info("Wrote %d statement summaries to %s", len(summary), args.output)
    else:
        print(summary.to_string(index=False))


if __name__ == "__main__":
    main()
