"""
statement_templates.py
----------------------

Bank and broker export profiles.  Each template lists, per semantic
field, the normalized header names that bank uses for it.  The
registry is built once at startup (from the built-in list or from the
JSON file named by ``FINANCE_TEMPLATES_PATH``) and passed to the
mapping engine; nothing mutates it afterwards.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from pydantic import TypeAdapter

from models import StatementTemplate

logger = logging.getLogger(__name__)

AMOUNT_ALIASES = ("amount", "transaction_amount", "txn_amount")

DEFAULT_TEMPLATES: Tuple[StatementTemplate, ...] = (
    StatementTemplate(
        id="hdfc",
        name="HDFC Bank",
        source_name="HDFC Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("closing_balance", "balance", "running_balance"),
            "credit": ("deposit_amt", "deposit_amount", "credit", "credit_amount"),
            "date": ("date", "value_dt", "value_date"),
            "debit": ("withdrawal_amt", "withdrawal_amount", "debit", "debit_amount"),
            "description": ("narration", "description", "particulars", "details"),
        },
    ),
    StatementTemplate(
        id="icici",
        name="ICICI Bank",
        source_name="ICICI Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("deposit", "deposits", "credit", "credit_amount"),
            "date": ("transaction_date", "date"),
            "debit": ("withdrawal", "withdrawals", "debit", "debit_amount"),
            "description": ("transaction_remarks", "remarks", "description", "narration"),
        },
    ),
    StatementTemplate(
        id="sbi",
        name="SBI Bank",
        source_name="SBI Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("credit", "deposit", "cr", "credit_amount"),
            "date": ("txn_date", "transaction_date", "date"),
            "debit": ("debit", "withdrawal", "dr", "debit_amount"),
            "description": ("description", "narration", "particulars", "details"),
        },
    ),
    StatementTemplate(
        id="axis",
        name="Axis Bank",
        source_name="Axis Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("credit", "deposit", "cr", "credit_amount"),
            "date": ("tran_date", "transaction_date", "date"),
            "debit": ("debit", "withdrawal", "dr", "debit_amount"),
            "description": ("transaction_remarks", "remarks", "description", "narration"),
        },
    ),
    StatementTemplate(
        id="kotak",
        name="Kotak Bank",
        source_name="Kotak Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("deposit", "credit", "cr", "credit_amount"),
            "date": ("transaction_date", "date"),
            "debit": ("withdrawal", "debit", "dr", "debit_amount"),
            "description": ("narration", "description", "remarks", "particulars"),
        },
    ),
    StatementTemplate(
        id="yes",
        name="Yes Bank",
        source_name="Yes Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("credit", "deposit", "cr", "credit_amount"),
            "date": ("transaction_date", "date"),
            "debit": ("debit", "withdrawal", "dr", "debit_amount"),
            "description": ("description", "narration", "transaction_description", "remarks"),
        },
    ),
    StatementTemplate(
        id="canara",
        name="Canara Bank",
        source_name="Canara Bank",
        source_type="bank",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("credit", "deposit", "cr", "credit_amount"),
            "date": ("transaction_date", "date"),
            "debit": ("debit", "withdrawal", "dr", "debit_amount"),
            "description": ("description", "narration", "remarks", "particulars"),
        },
    ),
    StatementTemplate(
        id="groww",
        name="Groww",
        source_name="Groww",
        source_type="broker",
        aliases={
            "amount": AMOUNT_ALIASES,
            "balance": ("balance", "closing_balance", "running_balance"),
            "credit": ("credit", "deposit", "cr", "credit_amount"),
            "date": ("date", "transaction_date", "trade_date", "value_date"),
            "debit": ("debit", "withdrawal", "dr", "debit_amount"),
            "description": ("narration", "description", "remarks", "details", "particulars"),
        },
    ),
)


class TemplateRegistry:
    """Immutable, ordered collection of statement templates.

    Order matters: auto-detection keeps the first template on score ties.
    """

    def __init__(self, templates: Iterable[StatementTemplate]):
        self._templates: Tuple[StatementTemplate, ...] = tuple(templates)

    def __iter__(self) -> Iterator[StatementTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def templates(self) -> Tuple[StatementTemplate, ...]:
        return self._templates

    def get(self, template_id: Optional[str]) -> Optional[StatementTemplate]:
        for template in self._templates:
            if template.id == template_id:
                return template
        return None


_TEMPLATE_LIST = TypeAdapter(Tuple[StatementTemplate, ...])


def load_registry(path: str | Path | None = None) -> TemplateRegistry:
    """Build the registry from a JSON file, or from the built-in list when ``path`` is empty.

    The file must look like ``{"templates": [{"id": ..., "name": ...,
    "sourceName": ..., "sourceType": "bank", "aliases": {...}}]}``.
    Invalid entries raise ``ValueError``.
    """
    if not path:
        return TemplateRegistry(DEFAULT_TEMPLATES)

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict) or "templates" not in payload:
        raise ValueError(f"Template file {path} must contain a 'templates' list")

    templates = _TEMPLATE_LIST.validate_python(payload["templates"])
    logger.info("Loaded %d statement templates from %s", len(templates), path)
    return TemplateRegistry(templates)


DEFAULT_REGISTRY = TemplateRegistry(DEFAULT_TEMPLATES)


def get_statement_templates(registry: Optional[TemplateRegistry] = None) -> Tuple[StatementTemplate, ...]:
    return (registry if registry is not None else DEFAULT_REGISTRY).templates
