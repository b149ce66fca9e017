"""Data records produced by statement ingestion.

Boundary records are pydantic models; their JSON form uses camelCase
aliases (``periodStart``, ``grossIncome`` ...) so drafts can be handed
straight to the app's persistence layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

SourceType = Literal["bank", "broker", "manual", "import"]
TemplateSourceType = Literal["bank", "broker"]
ParseMethod = Literal["csv", "ofx", "qfx", "pdf", "image", "manual", "unknown"]
ParseStatus = Literal["success", "partial", "failed"]

MappingField = Literal["amount", "balance", "credit", "date", "debit", "description", "type"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatementDraft(CamelModel):
    source_type: SourceType = "import"
    source_name: Optional[str] = None
    period_start: datetime
    period_end: datetime
    gross_income: float = 0.0
    gross_expense: float = 0.0
    net_profit: float = 0.0
    fees: float = 0.0
    taxes: float = 0.0
    opening_balance: Optional[float] = None
    closing_balance: Optional[float] = None
    currency: str
    currency_symbol: str
    notes: Optional[str] = ""
    account_label: Optional[str] = None

    @field_validator("period_start", "period_end")
    @classmethod
    def _drop_timezone(cls, value: datetime) -> datetime:
        # Statement dates are local calendar dates; offsets are discarded, not applied.
        return value.replace(tzinfo=None)


class StatementFileDraft(CamelModel):
    file_name: str
    file_size: int = 0
    file_uri: str = ""
    mime_type: Optional[str] = None
    parse_method: ParseMethod
    parse_status: ParseStatus


class CsvMapping(CamelModel):
    """Semantic field -> source header name.  Unmapped fields are ``None``."""

    amount: Optional[str] = None
    balance: Optional[str] = None
    credit: Optional[str] = None
    date: Optional[str] = None
    debit: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None


class StatementTemplate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    source_name: str
    source_type: TemplateSourceType
    # Semantic field -> acceptable normalized headers, in priority order.
    aliases: Dict[MappingField, Tuple[str, ...]]


class TemplateMapping(CamelModel):
    mapping: CsvMapping
    matched: int
    total: int


class TemplateMatch(CamelModel):
    template: StatementTemplate
    mapping: CsvMapping


class TemplateChoice(CamelModel):
    id: str
    label: str
    mapping_score: str
    matched: int
    total: int
    source_name: str
    source_type: TemplateSourceType


class MappingResolution(CamelModel):
    mapping: CsvMapping
    source_name: Optional[str] = None
    source_type: SourceType = "import"
    template_id: Optional[str] = None


class ImportResult(CamelModel):
    statement: StatementDraft
    transaction_count: int


class ImportOutcome(CamelModel):
    statement: StatementDraft
    file: StatementFileDraft
    transaction_count: int = 0
    template_id: Optional[str] = None


class GrowthPoint(CamelModel):
    x: datetime
    y: float
    net: float


@dataclass
class CsvTransaction:
    """One reconstructed statement row.  Lives only until aggregation."""

    amount: float
    date: Optional[datetime] = None
    description: Optional[str] = None
    balance: Optional[float] = None
    type: Optional[str] = None


__all__ = [
    "CamelModel",
    "CsvMapping",
    "CsvTransaction",
    "GrowthPoint",
    "ImportOutcome",
    "ImportResult",
    "MappingField",
    "MappingResolution",
    "ParseMethod",
    "ParseStatus",
    "SourceType",
    "StatementDraft",
    "StatementFileDraft",
    "StatementTemplate",
    "TemplateChoice",
    "TemplateMapping",
    "TemplateMatch",
]
