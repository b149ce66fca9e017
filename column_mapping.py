"""
column_mapping.py
-----------------

Map a statement's header row to semantic transaction fields.

Headers are compared by exact equality of their normalized form (see
``normalizers.normalize_header``); there is no fuzzy or substring
matching.  When two raw headers normalize to the same key the earlier
column wins.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from models import (
    CsvMapping,
    MappingResolution,
    StatementTemplate,
    TemplateChoice,
    TemplateMapping,
    TemplateMatch,
)
from normalizers import normalize_header
from statement_templates import DEFAULT_REGISTRY, TemplateRegistry

logger = logging.getLogger(__name__)

# Candidates used when no template applies.
AMOUNT_PATTERNS = ["amount", "amt", "transactionamount"]
BALANCE_PATTERNS = ["balance", "closingbalance", "runningbalance"]
CREDIT_PATTERNS = ["credit", "cr", "deposit"]
DATE_PATTERNS = ["date", "transactiondate", "postingdate", "valuedate"]
DEBIT_PATTERNS = ["debit", "dr", "withdrawal"]
DESCRIPTION_PATTERNS = ["description", "narration", "details", "remark", "memo"]
TYPE_PATTERNS = ["type", "transactiontype", "drcr", "debitcredit"]

GENERIC_PATTERNS: Dict[str, List[str]] = {
    "amount": AMOUNT_PATTERNS,
    "balance": BALANCE_PATTERNS,
    "credit": CREDIT_PATTERNS,
    "date": DATE_PATTERNS,
    "debit": DEBIT_PATTERNS,
    "description": DESCRIPTION_PATTERNS,
    "type": TYPE_PATTERNS,
}


def find_header(headers: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    """Return the first header (by column order) whose normalized form is a candidate."""
    for header in headers:
        if normalize_header(header) in candidates:
            return header
    return None


def infer_csv_mapping(headers: Sequence[str]) -> CsvMapping:
    return CsvMapping(**{field: find_header(headers, patterns) for field, patterns in GENERIC_PATTERNS.items()})


def has_minimum_columns(mapping: CsvMapping) -> bool:
    """A mapping is usable with a date column and either an amount or a credit/debit column."""
    has_amount = bool(mapping.amount)
    has_credit_debit = bool(mapping.credit or mapping.debit)
    return bool(mapping.date) and (has_amount or has_credit_debit)


def build_template_mapping(headers: Sequence[str], template: StatementTemplate) -> TemplateMapping:
    """Map ``headers`` with one template's aliases.

    ``total`` counts the fields the template declares aliases for and
    ``matched`` the ones found in ``headers``.
    """
    found: Dict[str, str] = {}
    matched = 0
    total = 0
    for field, aliases in template.aliases.items():
        if not aliases:
            continue
        total += 1
        header = find_header(headers, aliases)
        if header:
            found[field] = header
            matched += 1
    return TemplateMapping(mapping=CsvMapping(**found), matched=matched, total=total)


def detect_statement_template(
    headers: Sequence[str], registry: Optional[TemplateRegistry] = None
) -> Optional[TemplateMatch]:
    """Pick the template matching the most columns among those that pass the gate.

    The first template wins ties.  Returns ``None`` when no template
    yields a usable mapping.
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    best: Optional[TemplateMatch] = None
    best_score = -1
    for template in registry:
        result = build_template_mapping(headers, template)
        if not has_minimum_columns(result.mapping):
            continue
        if result.matched > best_score:
            best_score = result.matched
            best = TemplateMatch(template=template, mapping=result.mapping)

    if best is None:
        logger.debug("No statement template matched headers %s", list(headers))
    else:
        logger.debug("Detected template %s (%d columns)", best.template.id, best_score)
    return best


def rank_template_choices(
    headers: Sequence[str], registry: Optional[TemplateRegistry] = None
) -> List[TemplateChoice]:
    """Score every template against ``headers``, best first."""
    registry = registry if registry is not None else DEFAULT_REGISTRY
    choices = []
    for template in registry:
        result = build_template_mapping(headers, template)
        choices.append(
            TemplateChoice(
                id=template.id,
                label=template.name,
                mapping_score=f"{result.matched}/{result.total} columns",
                matched=result.matched,
                total=result.total,
                source_name=template.source_name,
                source_type=template.source_type,
            )
        )
    return sorted(choices, key=lambda c: c.matched, reverse=True)


def resolve_csv_mapping(
    headers: Sequence[str],
    template_id: Optional[str] = "auto",
    registry: Optional[TemplateRegistry] = None,
) -> MappingResolution:
    """Choose the mapping used to build a statement.

    ``"auto"`` uses the detected template when there is one.  A named
    template supplies the source name/type, but its mapping is only used
    when it passes ``has_minimum_columns``.  Everything else falls back
    to generic inference.
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    resolution = MappingResolution(mapping=infer_csv_mapping(headers))

    if template_id == "auto":
        detected = detect_statement_template(headers, registry)
        if detected:
            return MappingResolution(
                mapping=detected.mapping,
                source_name=detected.template.source_name,
                source_type=detected.template.source_type,
                template_id=detected.template.id,
            )
        return resolution

    template = registry.get(template_id)
    if template is None:
        logger.debug("Unknown template %r, using inferred columns", template_id)
        return resolution

    built = build_template_mapping(headers, template)
    mapping = built.mapping if has_minimum_columns(built.mapping) else resolution.mapping
    return MappingResolution(
        mapping=mapping,
        source_name=template.source_name,
        source_type=template.source_type,
        template_id=template.id,
    )
