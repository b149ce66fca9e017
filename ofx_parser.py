"""
ofx_parser.py
-------------

Read OFX/QFX exports with a handful of regular expressions.

OFX 1.x is SGML: leaf elements such as ``<TRNAMT>-45.00`` usually have
no closing tag, so a value runs until the next ``<`` or line break.
Only ``<STMTTRN>`` blocks and the ``<LEDGERBAL>`` block are read.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from aggregation import Clock, aggregate_transactions, classify_signed
from models import CsvTransaction, ImportResult
from normalizers import parse_number, parse_ofx_date

logger = logging.getLogger(__name__)

STMTTRN_RX = re.compile(r"<STMTTRN>([\s\S]*?)</STMTTRN>", re.IGNORECASE)
LEDGERBAL_RX = re.compile(r"<LEDGERBAL>([\s\S]*?)</LEDGERBAL>", re.IGNORECASE)


@lru_cache(maxsize=None)
def _tag_rx(tag: str) -> re.Pattern:
    return re.compile(rf"<{re.escape(tag)}>([^<\n\r]*)", re.IGNORECASE)


def extract_tag_value(block: str, tag: str) -> Optional[str]:
    """Trimmed value of the first ``<TAG>`` in ``block``, or ``None``."""
    match = _tag_rx(tag).search(block)
    return match.group(1).strip() if match else None


def parse_ofx_transactions(text: str) -> List[CsvTransaction]:
    transactions = []
    for match in STMTTRN_RX.finditer(text):
        block = match.group(1)
        transactions.append(
            CsvTransaction(
                amount=parse_number(extract_tag_value(block, "TRNAMT")),
                date=parse_ofx_date(extract_tag_value(block, "DTPOSTED")),
                description=extract_tag_value(block, "MEMO") or extract_tag_value(block, "NAME"),
                # Kept as written in the file; OFX totals never look at it.
                type=extract_tag_value(block, "TRNTYPE"),
            )
        )
    return transactions


def extract_ledger_balance(text: str) -> Optional[float]:
    """``BALAMT`` of the ``<LEDGERBAL>`` block; 0.0 if the block has none, ``None`` without a block."""
    block = LEDGERBAL_RX.search(text)
    if not block:
        return None
    return parse_number(extract_tag_value(block.group(1), "BALAMT"))


def build_statement_from_ofx(
    text: str,
    currency: str,
    currency_symbol: str,
    clock: Clock = datetime.now,
) -> ImportResult:
    """Aggregate an OFX/QFX document into a statement draft.

    Income and expense are split by amount sign only.  OFX carries no
    opening balance; the closing balance is the ledger balance.
    """
    transactions = parse_ofx_transactions(text)
    result = aggregate_transactions(
        transactions, currency, currency_symbol, classify=classify_signed, clock=clock
    )
    statement = result.statement.model_copy(
        update={"opening_balance": None, "closing_balance": extract_ledger_balance(text)}
    )
    logger.debug("Parsed %d OFX transactions", result.transaction_count)
    return ImportResult(statement=statement, transaction_count=result.transaction_count)
