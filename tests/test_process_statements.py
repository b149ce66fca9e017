from datetime import datetime

import pandas as pd
import pytest

from models import CsvMapping
from process_statements import (
    build_statement_from_csv,
    build_transactions_from_csv,
    detect_parse_method,
    import_file,
    import_statement,
    main,
    process_files,
)

from conftest import FIXED_NOW


@pytest.mark.parametrize(
    "file_name, mime_type, expected",
    [
        ("statement.csv", None, "csv"),
        ("STATEMENT.CSV", None, "csv"),
        ("export.txt", "text/csv", "csv"),
        ("bank.ofx", None, "ofx"),
        ("bank.QFX", None, "qfx"),
        ("download", "application/x-ofx", "ofx"),
        ("scan.pdf", None, "pdf"),
        ("photo.HEIC", None, "image"),
        ("upload", "image/png", "image"),
        ("notes.txt", None, "unknown"),
        (None, None, "unknown"),
    ],
)
def test_detect_parse_method(file_name, mime_type, expected):
    assert detect_parse_method(file_name, mime_type) == expected


def test_credit_debit_takes_priority_over_amount():
    headers = ["Date", "Amount", "Credit", "Debit"]
    mapping = CsvMapping(date="Date", amount="Amount", credit="Credit", debit="Debit")
    (txn,) = build_transactions_from_csv(headers, [["2024-01-01", "100", "50", "20"]], mapping)
    assert txn.amount == 30.0


def test_amount_column_used_without_both_credit_and_debit():
    headers = ["Date", "Amount", "Credit"]
    mapping = CsvMapping(date="Date", amount="Amount", credit="Credit")
    (txn,) = build_transactions_from_csv(headers, [["2024-01-01", "100", "50"]], mapping)
    assert txn.amount == 100.0


def test_row_fields():
    headers = ["Date", "Details", "Amount", "Type", "Balance"]
    mapping = CsvMapping(date="Date", description="Details", amount="Amount", type="Type", balance="Balance")
    (txn,) = build_transactions_from_csv(headers, [["2024-02-03", " ATM ", "-500", "DR", "₹1,000"]], mapping)
    assert txn.date == datetime(2024, 2, 3)
    assert txn.description == " ATM "
    assert txn.amount == -500.0
    assert txn.type == "dr"
    assert txn.balance == 1000.0


def test_short_and_unparsable_rows_still_count(clock):
    headers = ["Date", "Amount", "Balance"]
    mapping = CsvMapping(date="Date", amount="Amount", balance="Balance")
    rows = [["2024-01-01", "10"], ["junk", "n/a", "x"], ["2024-01-03"]]
    transactions = build_transactions_from_csv(headers, rows, mapping)
    assert [t.amount for t in transactions] == [10.0, 0.0, 0.0]
    assert [t.balance for t in transactions] == [0.0, 0.0, 0.0]
    assert transactions[1].date is None
    assert transactions[1].type is None

    result = build_statement_from_csv(headers, rows, mapping, "INR", "₹", clock)
    assert result.transaction_count == 3
    assert result.statement.opening_balance is None
    assert result.statement.period_end == datetime(2024, 1, 3)


def test_build_statement_from_hdfc_csv(hdfc_csv, clock):
    outcome = import_statement("hdfc.csv", hdfc_csv, "INR", "₹", clock=clock)
    statement = outcome.statement

    assert outcome.transaction_count == 3
    assert outcome.template_id == "hdfc"
    assert outcome.file.parse_method == "csv"
    assert outcome.file.parse_status == "success"
    assert statement.source_name == "HDFC Bank"
    assert statement.source_type == "bank"
    assert statement.gross_income == 50000.0
    assert statement.gross_expense == 20250.0
    assert statement.net_profit == 29750.0
    assert statement.opening_balance == 150000.0
    assert statement.closing_balance == 129750.0
    assert statement.period_start == datetime(2024, 1, 1)
    assert statement.period_end == datetime(2024, 1, 20)


def test_named_template_sets_source(hdfc_csv, clock):
    outcome = import_statement("hdfc.csv", hdfc_csv, "INR", "₹", template_id="groww", clock=clock)
    assert outcome.statement.source_name == "Groww"
    assert outcome.statement.source_type == "broker"
    assert outcome.statement.net_profit == 29750.0


def test_header_only_csv_is_partial(clock):
    outcome = import_statement("empty.csv", "Date,Amount\n", "INR", "₹", clock=clock)
    assert outcome.file.parse_status == "partial"
    assert outcome.transaction_count == 0
    assert outcome.statement.period_start == FIXED_NOW


def test_blank_csv_is_partial(clock):
    outcome = import_statement("blank.csv", "\n\n", "INR", "₹", clock=clock)
    assert outcome.file.parse_status == "partial"
    assert outcome.statement.source_type == "import"


def test_bytes_content_with_bom(clock):
    content = "\ufeffDate,Amount\n2024-01-01,10\n".encode("utf-8")
    outcome = import_statement("plain.csv", content, "INR", "₹", clock=clock)
    assert outcome.file.file_size == len(content)
    assert outcome.statement.net_profit == 10.0
    assert outcome.statement.period_start == datetime(2024, 1, 1)


def test_ofx_import(bank_ofx, clock):
    outcome = import_statement("bank.qfx", bank_ofx, "USD", "$", clock=clock)
    assert outcome.file.parse_method == "qfx"
    assert outcome.file.parse_status == "success"
    assert outcome.statement.source_name == "Bank Statement"
    assert outcome.statement.source_type == "bank"
    assert outcome.transaction_count == 2


def test_ofx_without_transactions_is_partial(clock):
    outcome = import_statement("bank.ofx", "<OFX></OFX>", "USD", "$", clock=clock)
    assert outcome.file.parse_status == "partial"
    assert outcome.transaction_count == 0
    assert outcome.statement.period_end == FIXED_NOW


def test_pdf_gets_empty_draft(clock):
    outcome = import_statement("scan.pdf", b"%PDF-1.4", "INR", "₹", mime_type="application/pdf", clock=clock)
    assert outcome.file.parse_method == "pdf"
    assert outcome.file.parse_status == "partial"
    assert outcome.statement.gross_income == 0.0
    assert outcome.statement.period_start == FIXED_NOW


def test_import_missing_file_fails(tmp_path, clock):
    outcome = import_file(tmp_path / "missing.csv", "INR", "₹", clock=clock)
    assert outcome.file.parse_status == "failed"
    assert outcome.file.parse_method == "csv"
    assert outcome.transaction_count == 0


def test_process_files_sorted_by_period_end(tmp_path, hdfc_csv, bank_ofx):
    csv_path = tmp_path / "hdfc.csv"
    csv_path.write_text(hdfc_csv, encoding="utf-8")
    ofx_path = tmp_path / "bank.ofx"
    ofx_path.write_text(bank_ofx, encoding="utf-8")

    summary = process_files([csv_path, ofx_path], "INR", "₹")
    assert summary["fileName"].tolist() == ["bank.ofx", "hdfc.csv"]
    assert summary["parseStatus"].tolist() == ["success", "success"]
    assert summary["transactionCount"].tolist() == [2, 3]


def test_main_writes_summary_csv(tmp_path, hdfc_csv):
    csv_path = tmp_path / "hdfc.csv"
    csv_path.write_text(hdfc_csv, encoding="utf-8")
    output = tmp_path / "out" / "summary.csv"

    main([str(csv_path), "--output", str(output), "--currency", "INR", "--currency-symbol", "₹"])

    written = pd.read_csv(output)
    assert written.loc[0, "sourceName"] == "HDFC Bank"
    assert written.loc[0, "netProfit"] == 29750.0
