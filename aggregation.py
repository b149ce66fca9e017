"""
aggregation.py
--------------

Reduce a list of reconstructed transactions to period totals.

The CSV and OFX paths share the reduction but not the income/expense
classifier: CSV rows may carry a type column ("DR", "Debit" ...) that
forces a row into expense, while OFX amounts are classified by sign
alone.  Each path passes its own classifier.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from models import CsvTransaction, ImportResult, StatementDraft

Clock = Callable[[], datetime]
# (amount, lowercased type) -> (income contribution, expense contribution)
Classifier = Callable[[float, str], Tuple[float, float]]


def classify_typed(amount: float, txn_type: str) -> Tuple[float, float]:
    """Type-aware split used for CSV rows.

    A type containing "dr" or "debit" always routes the row to expense
    as ``abs(amount)``, whatever its sign; otherwise the sign decides.
    """
    is_debit = "dr" in txn_type or "debit" in txn_type
    income = amount if amount >= 0 and not is_debit else 0.0
    expense = abs(amount) if amount < 0 or is_debit else 0.0
    return income, expense


def classify_signed(amount: float, txn_type: str = "") -> Tuple[float, float]:
    """Sign-only split used for OFX transactions; ``txn_type`` is ignored."""
    if amount >= 0:
        return amount, 0.0
    return 0.0, abs(amount)


def empty_statement_draft(currency: str, currency_symbol: str, clock: Clock = datetime.now) -> StatementDraft:
    now = clock()
    return StatementDraft(
        period_start=now,
        period_end=now,
        currency=currency,
        currency_symbol=currency_symbol,
    )


def aggregate_transactions(
    transactions: Iterable[CsvTransaction],
    currency: str,
    currency_symbol: str,
    classify: Classifier = classify_typed,
    clock: Clock = datetime.now,
) -> ImportResult:
    """Single pass over ``transactions`` in document order.

    ``net_profit`` is the plain signed sum and is not derived from the
    gross figures.  Opening/closing balance are the first/last non-zero
    balances seen.  The period falls back to ``clock()`` when no row
    has a date.
    """
    gross_income = 0.0
    gross_expense = 0.0
    net_profit = 0.0
    opening_balance: Optional[float] = None
    closing_balance: Optional[float] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    count = 0

    for txn in transactions:
        count += 1
        amount = txn.amount or 0.0
        income, expense = classify(amount, txn.type or "")
        gross_income += income
        gross_expense += expense
        net_profit += amount

        if txn.balance and not math.isnan(txn.balance):
            if opening_balance is None:
                opening_balance = txn.balance
            closing_balance = txn.balance

        if txn.date:
            if period_start is None or txn.date < period_start:
                period_start = txn.date
            if period_end is None or txn.date > period_end:
                period_end = txn.date

    now = clock()
    statement = StatementDraft(
        source_type="import",
        period_start=period_start or now,
        period_end=period_end or now,
        gross_income=gross_income,
        gross_expense=gross_expense,
        net_profit=net_profit,
        opening_balance=opening_balance,
        closing_balance=closing_balance,
        currency=currency,
        currency_symbol=currency_symbol,
    )
    return ImportResult(statement=statement, transaction_count=count)
